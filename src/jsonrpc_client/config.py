"""Configuration loading for the JSON-RPC client."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ClientConfigurationError
from .jsonstream import DEFAULT_MAX_BUFFER_SIZE

TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class ClientConfig:
    """Behaviour of one client instance."""

    reply_to_invalid_messages: bool = False
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE


@dataclass(slots=True)
class ConnectionConfig:
    """Where the transport connects to."""

    socket_path: Path | None = None
    host: str | None = None
    port: int | None = None
    timeout: float | None = 10.0


@dataclass(slots=True)
class Settings:
    """Top level configuration for the command line client."""

    client: ClientConfig = field(default_factory=ClientConfig)
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    log_level: str = "INFO"


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ClientConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def _as_timeout(value: Any) -> float | None:
    if value is None or str(value).strip().lower() in {"", "none", "0"}:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ClientConfigurationError(f"timeout must be a number, got {value!r}") from exc


def load_from_env(env: Mapping[str, str]) -> Settings:
    client = ClientConfig(
        reply_to_invalid_messages=_as_bool(env.get("JSONRPC_REPLY_INVALID", "false")),
        max_buffer_size=(
            _as_int("JSONRPC_MAX_BUFFER", env["JSONRPC_MAX_BUFFER"])
            if env.get("JSONRPC_MAX_BUFFER")
            else DEFAULT_MAX_BUFFER_SIZE
        ),
    )
    connection = ConnectionConfig(
        socket_path=Path(env["JSONRPC_SOCKET"]) if env.get("JSONRPC_SOCKET") else None,
        host=env.get("JSONRPC_HOST") or None,
        port=_as_int("JSONRPC_PORT", env["JSONRPC_PORT"]) if env.get("JSONRPC_PORT") else None,
        timeout=_as_timeout(env["JSONRPC_TIMEOUT"]) if "JSONRPC_TIMEOUT" in env else 10.0,
    )
    return Settings(client=client, connection=connection, log_level=env.get("LOG_LEVEL", "INFO"))


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a plain mapping of overrides."""
    data = yaml.safe_load(path.read_text()) if path.exists() else {}
    if data is None:
        return {}
    if not isinstance(data, MutableMapping):
        raise ClientConfigurationError(f"Config file {path} must contain a mapping")
    return dict(data)


def merge_config(base: Settings, override: Mapping[str, Any] | None) -> Settings:
    """Layer YAML overrides (``client``, ``connection``, ``log_level``) over ``base``."""
    if not override:
        return base
    client = base.client
    client_data = override.get("client") or {}
    if "reply_to_invalid_messages" in client_data:
        client = replace(client, reply_to_invalid_messages=_as_bool(client_data["reply_to_invalid_messages"]))
    if "max_buffer_size" in client_data:
        client = replace(
            client, max_buffer_size=_as_int("max_buffer_size", client_data["max_buffer_size"])
        )

    connection = base.connection
    connection_data = override.get("connection") or {}
    if connection_data.get("socket_path"):
        connection = replace(connection, socket_path=Path(connection_data["socket_path"]))
    if connection_data.get("host"):
        connection = replace(connection, host=str(connection_data["host"]))
    if "port" in connection_data:
        connection = replace(connection, port=_as_int("port", connection_data["port"]))
    if "timeout" in connection_data:
        connection = replace(connection, timeout=_as_timeout(connection_data["timeout"]))

    log_level = str(override.get("log_level") or base.log_level)
    return Settings(client=client, connection=connection, log_level=log_level)


__all__ = [
    "ClientConfig",
    "ConnectionConfig",
    "Settings",
    "load_from_env",
    "load_config_file",
    "merge_config",
]
