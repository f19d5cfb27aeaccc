"""Route decoded inbound documents to the pending calls they answer."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from .classifier import Classification, MessageClassifier, MessageKind
from .errors import ErrorKind, ParseError
from .models import JSONRPC_VERSION
from .pending import PendingCallTable
from .stream import DecodeFailure, StreamDecoder

logger = structlog.get_logger(__name__)

Reply = Callable[[dict[str, Any]], None]


class OutcomeKind(str, Enum):
    resolved = "resolved"
    rejected = "rejected"
    unmatched = "unmatched"
    ignored_request = "ignored_request"
    invalid = "invalid"
    decode_error = "decode_error"
    failed = "failed"


@dataclass(slots=True)
class DispatchOutcome:
    kind: OutcomeKind
    id: Any = None
    detail: str | None = None
    reply: dict[str, Any] | None = None


def parse_error_reply() -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "error": ErrorKind.PARSE_ERROR.to_dict(), "id": None}


def _preview(text: str, limit: int = 120) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class Dispatcher:
    def __init__(
        self,
        table: PendingCallTable,
        decoder: StreamDecoder | None = None,
        classifier: MessageClassifier | None = None,
        *,
        reply: Reply | None = None,
        reply_to_invalid: bool = False,
    ) -> None:
        self._table = table
        self._decoder = decoder or StreamDecoder()
        self._classifier = classifier or MessageClassifier()
        self._reply = reply
        self.reply_to_invalid = reply_to_invalid

    def on_chunk(self, chunk: Any) -> list[DispatchOutcome]:
        """Decode ``chunk`` and settle every pending call it answers.

        Problems with single documents are logged and reported in the returned
        outcomes; invalid UTF-8 only spoils the document it lands in. Only a
        chunk that is neither bytes nor text raises ``ParseError``, after a
        PARSE_ERROR reply has been sent.
        """
        try:
            values = self._decoder.feed(chunk)
        except TypeError as exc:
            logger.error("malformed_inbound_chunk", error=str(exc), chunk_type=type(chunk).__name__)
            self._send_reply(parse_error_reply())
            raise ParseError(f"Malformed inbound chunk: {exc}") from exc

        outcomes: list[DispatchOutcome] = []
        for value in values:
            if isinstance(value, DecodeFailure):
                logger.warning("decode_failure", reason=value.reason, fragment=_preview(value.fragment))
                outcomes.append(DispatchOutcome(kind=OutcomeKind.decode_error, detail=value.reason))
                continue
            for classification in self._classifier.classify_all(value):
                outcomes.append(self._apply(classification))
        return outcomes

    def _apply(self, classification: Classification) -> DispatchOutcome:
        try:
            return self._route(classification)
        except Exception as exc:
            logger.exception("dispatch_failed", kind=classification.kind.value, id=classification.id)
            return DispatchOutcome(kind=OutcomeKind.failed, id=classification.id, detail=str(exc))

    def _route(self, classification: Classification) -> DispatchOutcome:
        kind = classification.kind
        call_id = classification.id
        if kind is MessageKind.error_response:
            settled = self._table.reject(call_id, classification.error)
            return DispatchOutcome(
                kind=OutcomeKind.rejected if settled else OutcomeKind.unmatched,
                id=call_id,
                detail=str(classification.error),
            )
        if kind is MessageKind.response:
            settled = self._table.resolve(call_id, classification.result)
            return DispatchOutcome(kind=OutcomeKind.resolved if settled else OutcomeKind.unmatched, id=call_id)
        if kind is MessageKind.inbound_request:
            logger.info("inbound_request_ignored", method=classification.method, id=call_id)
            return DispatchOutcome(kind=OutcomeKind.ignored_request, id=call_id, detail=classification.method)
        if kind is MessageKind.unrecognized:
            logger.warning(
                "unrecognized_message",
                reason=classification.reason,
                replying=self.reply_to_invalid,
            )
            if self.reply_to_invalid and classification.reply is not None:
                self._send_reply(classification.reply)
            return DispatchOutcome(
                kind=OutcomeKind.invalid,
                detail=classification.reason,
                reply=classification.reply,
            )
        return DispatchOutcome(kind=OutcomeKind.failed, id=call_id, detail=classification.reason)

    def _send_reply(self, payload: dict[str, Any]) -> None:
        if self._reply is None:
            logger.warning("reply_dropped", reason="no writer", error=payload.get("error"))
            return
        self._reply(payload)


__all__ = ["Dispatcher", "DispatchOutcome", "OutcomeKind", "parse_error_reply"]
