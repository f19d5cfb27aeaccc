"""JSON-RPC 2.0 client bound to an injected byte-stream writer."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import structlog

from .builder import CallBuilder, OutboundCall
from .config import ClientConfig
from .dispatcher import Dispatcher, DispatchOutcome
from .errors import ClientConfigurationError
from .models import Params, encode_message
from .pending import PendingCallTable
from .stream import StreamDecoder

logger = structlog.get_logger(__name__)

WriteOut = Callable[[str], Any]


class JsonRpcClient:
    """Client side of a JSON-RPC 2.0 connection.

    Every instance owns its id counter and pending-call table. The embedding
    transport assigns ``write_out`` (called with each serialized message) and
    calls ``on_bytes_received`` with whatever bytes arrive.
    """

    def __init__(
        self,
        write_out: WriteOut | None = None,
        config: ClientConfig | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.write_out = write_out
        self._table = PendingCallTable(loop=loop)
        self._builder = CallBuilder(self._table, loop=loop)
        self._dispatcher = Dispatcher(
            self._table,
            StreamDecoder(max_buffer_size=self.config.max_buffer_size),
            reply=self._send_reply,
            reply_to_invalid=self.config.reply_to_invalid_messages,
        )

    @property
    def pending_count(self) -> int:
        return len(self._table)

    @property
    def pending_table(self) -> PendingCallTable:
        return self._table

    def call(self, method: str, params: Params | None = None) -> asyncio.Future[Any]:
        """Send a request and return the future its reply settles."""
        writer = self._require_writer()
        outbound = self._builder.call(method, params)
        self._transmit(writer, outbound)
        logger.debug("call_sent", method=method, id=outbound.id, pending=len(self._table))
        return outbound.future

    def notify(self, method: str, params: Params | None = None) -> asyncio.Future[Any]:
        """Send a notification; the returned future is already resolved with None."""
        writer = self._require_writer()
        outbound = self._builder.notify(method, params)
        self._transmit(writer, outbound)
        logger.debug("notification_sent", method=method)
        return outbound.future

    def on_bytes_received(self, chunk: bytes | bytearray | str) -> None:
        self.dispatch(chunk)

    def dispatch(self, chunk: bytes | bytearray | str) -> list[DispatchOutcome]:
        """Like ``on_bytes_received`` but returns what happened to each document."""
        return self._dispatcher.on_chunk(chunk)

    def _require_writer(self) -> WriteOut:
        if self.write_out is None:
            raise ClientConfigurationError("write_out must be set before calls are placed")
        return self.write_out

    def _transmit(self, writer: WriteOut, outbound: OutboundCall) -> None:
        try:
            writer(encode_message(outbound.message.to_dict()))
        except Exception as exc:
            if outbound.id is not None:
                self._table.discard(outbound.id)
            logger.error("send_failed", method=outbound.message.method, id=outbound.id, error=str(exc))
            raise

    def _send_reply(self, payload: dict[str, Any]) -> None:
        if self.write_out is None:
            logger.warning("reply_dropped", reason="no writer", error=payload.get("error"))
            return
        self.write_out(encode_message(payload))


__all__ = ["JsonRpcClient", "WriteOut"]
