"""Table of in-flight calls keyed by request id."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def normalize_id(value: Any) -> int | None:
    """Return the integer id carried by a reply, or None if it cannot match a call."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class PendingCallTable:
    """Map each outstanding call id to the future its caller awaits.

    An entry lives from ``register`` until exactly one of ``resolve`` or
    ``reject`` settles it, or until its caller cancels the future; it is
    removed at that point.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._calls: dict[int, asyncio.Future[Any]] = {}

    def __len__(self) -> int:
        return len(self._calls)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._calls

    def pending_ids(self) -> list[int]:
        return sorted(self._calls)

    def register(self, call_id: int) -> asyncio.Future[Any]:
        if normalize_id(call_id) is None:
            raise TypeError(f"call id must be an integer, got {call_id!r}")
        if call_id in self._calls:
            raise ValueError(f"call id {call_id} is already pending")
        loop = self._loop or asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        future.add_done_callback(lambda done: self._forget_cancelled(call_id, done))
        self._calls[call_id] = future
        logger.debug("pending_call_registered", id=call_id, pending=len(self._calls))
        return future

    def resolve(self, call_id: Any, result: Any) -> bool:
        future = self._take(call_id, "response")
        if future is None:
            return False
        future.set_result(result)
        logger.debug("pending_call_resolved", id=call_id, pending=len(self._calls))
        return True

    def reject(self, call_id: Any, error: BaseException) -> bool:
        future = self._take(call_id, "error_response")
        if future is None:
            return False
        future.set_exception(error)
        logger.debug("pending_call_rejected", id=call_id, pending=len(self._calls))
        return True

    def discard(self, call_id: int) -> None:
        """Drop an entry whose request never made it onto the wire."""
        future = self._calls.pop(call_id, None)
        if future is not None and not future.done():
            future.cancel()

    def _forget_cancelled(self, call_id: int, future: asyncio.Future[Any]) -> None:
        if future.cancelled() and self._calls.get(call_id) is future:
            del self._calls[call_id]
            logger.info("pending_call_cancelled", id=call_id, pending=len(self._calls))

    def _take(self, call_id: Any, kind: str) -> asyncio.Future[Any] | None:
        key = normalize_id(call_id)
        future = self._calls.pop(key, None) if key is not None else None
        if future is None:
            logger.warning("unmatched_response", id=call_id, kind=kind, pending=len(self._calls))
            return None
        if future.done():
            # caller gave up on it (e.g. cancelled while waiting)
            logger.info("pending_call_abandoned", id=call_id, kind=kind)
            return None
        return future


__all__ = ["PendingCallTable", "normalize_id"]
