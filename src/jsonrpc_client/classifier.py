"""Classifier for decoded inbound JSON-RPC documents."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog
from pydantic import ValidationError

from .errors import ErrorKind, JsonRpcError
from .models import ErrorObject, ErrorResponseMessage, InboundRequest, ResponseMessage

logger = structlog.get_logger(__name__)

MALFORMED_ERROR_MESSAGE = "Malformed error object in response."


class MessageKind(str, Enum):
    response = "response"
    error_response = "error_response"
    inbound_request = "inbound_request"
    unrecognized = "unrecognized"
    failed = "failed"


@dataclass(slots=True)
class Classification:
    kind: MessageKind
    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None
    method: str | None = None
    reply: dict[str, Any] | None = None
    reason: str | None = None


def _is_truthy(value: Any) -> bool:
    # objects and arrays count as set, even when empty
    if value is None:
        return False
    if isinstance(value, (bool, int, float, str)):
        return bool(value)
    return True


def invalid_request_reply() -> dict[str, Any]:
    error = ErrorObject.model_validate(ErrorKind.INVALID_REQUEST.to_dict())
    return ErrorResponseMessage(error=error, id=None).to_dict()


class MessageClassifier:
    """Tag a decoded value as a response, an error response or something else.

    First match wins: a set ``error`` field, then the presence of both
    ``result`` and ``id``, then a ``method`` field. Anything else is
    unrecognized and carries a synthesized INVALID_REQUEST reply.
    """

    def classify(self, value: Any) -> Classification:
        try:
            return self._classify(value)
        except Exception as exc:
            logger.exception("classification_failed", error=str(exc))
            return Classification(kind=MessageKind.failed, reason=str(exc))

    def classify_all(self, value: Any) -> list[Classification]:
        """Classify a single document or every member of a batch array."""
        if isinstance(value, list) and value:
            return [self.classify(item) for item in value]
        return [self.classify(value)]

    def _classify(self, value: Any) -> Classification:
        if not isinstance(value, dict):
            return self._unrecognized(f"expected object, got {type(value).__name__}")

        if _is_truthy(value.get("error")):
            return self._error_response(value)

        try:
            response = ResponseMessage.model_validate(value)
        except ValidationError:
            pass
        else:
            return Classification(kind=MessageKind.response, id=response.id, result=response.result)

        if "method" in value:
            request = InboundRequest.model_validate(value)
            method = request.method if isinstance(request.method, str) else repr(request.method)
            return Classification(kind=MessageKind.inbound_request, id=request.id, method=method)

        return self._unrecognized("neither a response nor an error response")

    def _error_response(self, value: dict[str, Any]) -> Classification:
        raw_error = value["error"]
        try:
            message = ErrorResponseMessage.model_validate(value)
        except ValidationError:
            error = JsonRpcError(
                ErrorKind.INTERNAL_ERROR.code,
                MALFORMED_ERROR_MESSAGE,
                data=raw_error,
                raw=raw_error,
            )
            return Classification(kind=MessageKind.error_response, id=value.get("id"), error=error)
        error = JsonRpcError(
            message.error.code,
            message.error.message,
            data=message.error.data,
            raw=raw_error,
        )
        return Classification(kind=MessageKind.error_response, id=message.id, error=error)

    def _unrecognized(self, reason: str) -> Classification:
        return Classification(kind=MessageKind.unrecognized, reply=invalid_request_reply(), reason=reason)


__all__ = ["MessageKind", "Classification", "MessageClassifier", "invalid_request_reply"]
