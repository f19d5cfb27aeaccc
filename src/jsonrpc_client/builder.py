"""Construction of outbound requests and notifications."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass
from typing import Any

from .models import Params, Request
from .pending import PendingCallTable


@dataclass(slots=True)
class OutboundCall:
    message: Request
    future: asyncio.Future[Any]

    @property
    def id(self) -> int | None:
        return self.message.id


class CallBuilder:
    """Allocate ids and register calls in the pending table."""

    def __init__(self, table: PendingCallTable, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._table = table
        self._loop = loop
        self._ids = itertools.count(1)

    def call(self, method: str, params: Params | None = None) -> OutboundCall:
        template = Request(method=method, params=params)
        call_id = next(self._ids)
        message = template.model_copy(update={"id": call_id})
        future = self._table.register(call_id)
        return OutboundCall(message=message, future=future)

    def notify(self, method: str, params: Params | None = None) -> OutboundCall:
        message = Request(method=method, params=params)
        loop = self._loop or asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        future.set_result(None)
        return OutboundCall(message=message, future=future)


__all__ = ["CallBuilder", "OutboundCall"]
