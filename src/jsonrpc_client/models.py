"""Pydantic models for JSON-RPC 2.0 messages."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

JSONRPC_VERSION = "2.0"

Params = list[Any] | dict[str, Any]


class Request(BaseModel):
    """Outbound call or notification (no ``id``)."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: StrictStr = Field(min_length=1)
    params: Params | None = None
    id: StrictInt | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict[str, Any]:
        # id goes last so it is present even when params are omitted
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            d["params"] = self.params
        if self.id is not None:
            d["id"] = self.id
        return d


class ErrorObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: StrictInt
    message: StrictStr
    data: Any | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d


class ResponseMessage(BaseModel):
    """Success reply. Both ``result`` and ``id`` must be present, ``null`` allowed."""

    jsonrpc: Any = None
    result: Any
    id: Any


class ErrorResponseMessage(BaseModel):
    jsonrpc: Any = JSONRPC_VERSION
    error: ErrorObject
    id: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "error": self.error.to_dict(), "id": self.id}


class InboundRequest(BaseModel):
    """Request or notification sent to us by the remote side."""

    jsonrpc: Any = None
    method: Any
    params: Any | None = None
    id: Any = None


def encode_message(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


__all__ = [
    "JSONRPC_VERSION",
    "Params",
    "Request",
    "ErrorObject",
    "ResponseMessage",
    "ErrorResponseMessage",
    "InboundRequest",
    "encode_message",
]
