import json
import math

import anyio
import pytest
from anyio.abc import ByteStream


class EchoServerStream(ByteStream):
    """In-memory peer: echoes ``echo_params``, never answers ``silent`` and rejects the rest."""

    def __init__(self) -> None:
        self.received: list[dict] = []
        self._replies_send, self._replies_receive = anyio.create_memory_object_stream(math.inf)
        self._pending = b""

    async def send(self, item: bytes) -> None:
        self._pending += item
        *lines, self._pending = self._pending.split(b"\n")
        for line in lines:
            request = json.loads(line)
            self.received.append(request)
            if "id" not in request or request["method"] == "silent":
                continue
            if request["method"] == "echo_params":
                reply = {"jsonrpc": "2.0", "result": request.get("params"), "id": request["id"]}
            else:
                reply = {
                    "jsonrpc": "2.0",
                    "error": {"code": -32601, "message": "Method not found."},
                    "id": request["id"],
                }
            await self._replies_send.send(json.dumps(reply).encode())

    async def receive(self, max_bytes: int = 65536) -> bytes:
        return await self._replies_receive.receive()

    async def send_eof(self) -> None:
        pass

    async def hang_up(self) -> None:
        self._replies_send.close()

    async def aclose(self) -> None:
        self._replies_send.close()
        self._replies_receive.close()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def echo_stream():
    return EchoServerStream()
