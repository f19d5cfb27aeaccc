"""anyio byte-stream transport that wires a socket to a JsonRpcClient."""

from __future__ import annotations

import math
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from pathlib import Path

import anyio
import structlog
from anyio.abc import ByteStream, TaskStatus
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from .client import JsonRpcClient
from .config import ConnectionConfig
from .errors import ClientConfigurationError, ParseError

logger = structlog.get_logger(__name__)

READ_SIZE = 65536


class StreamTransport:
    """Newline-framed writes and raw reads over an anyio byte stream.

    ``write`` is synchronous so it can serve as the client's ``write_out``;
    lines are queued and a writer task sends them in order.
    """

    def __init__(self, stream: ByteStream, client: JsonRpcClient) -> None:
        self._stream = stream
        self.client = client
        self._outbox_send: MemoryObjectSendStream[bytes]
        self._outbox_receive: MemoryObjectReceiveStream[bytes]
        self._outbox_send, self._outbox_receive = anyio.create_memory_object_stream(math.inf)
        self._reader_scope: anyio.CancelScope | None = None
        self.closed = anyio.Event()
        client.write_out = self.write

    def write(self, message: str) -> None:
        self._outbox_send.send_nowait((message + "\n").encode("utf-8"))

    @asynccontextmanager
    async def running(self) -> AsyncIterator[StreamTransport]:
        async with self._stream:
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._write_loop)
                await tg.start(self._read_loop)
                try:
                    yield self
                finally:
                    # let queued lines drain, then stop reading
                    self._outbox_send.close()
                    if self._reader_scope is not None:
                        self._reader_scope.cancel()

    async def _write_loop(self) -> None:
        async with self._outbox_receive:
            async for data in self._outbox_receive:
                await self._stream.send(data)

    async def _read_loop(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        with anyio.CancelScope() as scope:
            self._reader_scope = scope
            task_status.started()
            try:
                while True:
                    try:
                        chunk = await self._stream.receive(READ_SIZE)
                    except (anyio.EndOfStream, anyio.ClosedResourceError, anyio.BrokenResourceError):
                        break
                    try:
                        self.client.on_bytes_received(chunk)
                    except ParseError as exc:
                        logger.warning("inbound_chunk_rejected", error=str(exc))
            finally:
                logger.info("transport_closed", pending=self.client.pending_count)
                self.closed.set()


@asynccontextmanager
async def connect_unix(path: str | Path, client: JsonRpcClient) -> AsyncIterator[StreamTransport]:
    stream = await anyio.connect_unix(str(path))
    logger.info("transport_connected", socket_path=str(path))
    async with StreamTransport(stream, client).running() as transport:
        yield transport


@asynccontextmanager
async def connect_tcp(host: str, port: int, client: JsonRpcClient) -> AsyncIterator[StreamTransport]:
    stream = await anyio.connect_tcp(host, port)
    logger.info("transport_connected", host=host, port=port)
    async with StreamTransport(stream, client).running() as transport:
        yield transport


def open_transport(
    connection: ConnectionConfig, client: JsonRpcClient
) -> AbstractAsyncContextManager[StreamTransport]:
    """Pick unix or TCP from the connection config."""
    if connection.socket_path is not None:
        return connect_unix(connection.socket_path, client)
    if connection.host and connection.port:
        return connect_tcp(connection.host, connection.port, client)
    raise ClientConfigurationError("Set JSONRPC_SOCKET or JSONRPC_HOST and JSONRPC_PORT")


__all__ = ["StreamTransport", "connect_unix", "connect_tcp", "open_transport"]
