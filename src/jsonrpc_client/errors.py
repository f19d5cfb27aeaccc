"""JSON-RPC 2.0 error catalog and client exceptions."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    PARSE_ERROR = (
        -32700,
        "Invalid JSON was received by the server. "
        "An error occurred on the server while parsing the JSON text.",
    )
    INVALID_REQUEST = (-32600, "Invalid Request. The JSON sent is not a valid Request object.")
    METHOD_NOT_FOUND = (-32601, "Method not found. The method does not exist / is not available.")
    INVALID_PARAMS = (-32602, "Invalid params. Invalid method parameter(s).")
    INTERNAL_ERROR = (-32603, "Internal error. Internal JSON-RPC error.")

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}

    @classmethod
    def from_code(cls, code: int) -> ErrorKind | None:
        for kind in cls:
            if kind.code == code:
                return kind
        return None


class JsonRpcClientError(Exception):
    """Base class for errors raised by the client."""


class ClientConfigurationError(JsonRpcClientError):
    """The client was used before it was wired to a transport."""


class ParseError(JsonRpcClientError):
    """Inbound input could not be handled as a byte or text chunk at all."""


class JsonRpcError(JsonRpcClientError):
    """Error payload returned by the remote side for one call."""

    def __init__(self, code: int, message: str, data: Any | None = None, *, raw: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
        self.raw = raw if raw is not None else self.to_dict()

    @property
    def kind(self) -> ErrorKind | None:
        return ErrorKind.from_code(self.code)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d

    def __str__(self) -> str:
        return f"JSON-RPC error {self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"JsonRpcError(code={self.code!r}, message={self.message!r}, data={self.data!r})"


__all__ = [
    "ErrorKind",
    "JsonRpcClientError",
    "ClientConfigurationError",
    "ParseError",
    "JsonRpcError",
]
