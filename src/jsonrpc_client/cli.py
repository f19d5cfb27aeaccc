"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio
import structlog
from pydantic import ValidationError

from .client import JsonRpcClient
from .config import Settings, load_config_file, load_from_env, merge_config
from .errors import JsonRpcError
from .logging_config import configure_logging
from .models import Request
from .transport import open_transport

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class PlannedCall:
    method: str
    params: Any = None
    notify: bool = False


DEMO_CALLS = [
    PlannedCall("echo_params", [1, 2, 3, "vier", 5.1]),
    PlannedCall("echo_params", {"bla": "frupp"}),
]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="jsonrpc-client", description="Place JSON-RPC 2.0 calls over a socket.")
    parser.add_argument("method", nargs="?", help="method to call; runs the demo calls when omitted")
    parser.add_argument("params", nargs="?", help="params as a JSON array or object")
    parser.add_argument("--notify", action="store_true", help="send a notification instead of a call")
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    args = parser.parse_args(argv)
    if args.method is not None:
        try:
            params = json.loads(args.params) if args.params else None
            Request(method=args.method, params=params)
        except json.JSONDecodeError as exc:
            parser.error(f"params are not valid JSON: {exc.msg}")
        except ValidationError as exc:
            parser.error(f"invalid call: {exc.errors()[0]['msg']}")
        args.params = params
    return args


def load_settings(args: argparse.Namespace, env: dict[str, str]) -> Settings:
    settings = load_from_env(env)
    config_path = args.config or (Path(env["JSONRPC_CONFIG"]) if env.get("JSONRPC_CONFIG") else None)
    if config_path is not None:
        settings = merge_config(settings, load_config_file(config_path))
    return settings


def planned_calls(args: argparse.Namespace) -> list[PlannedCall]:
    if not args.method:
        return list(DEMO_CALLS)
    return [PlannedCall(args.method, args.params, notify=args.notify)]


async def run(settings: Settings, calls: Sequence[PlannedCall]) -> int:
    client = JsonRpcClient(config=settings.client)
    timeout = settings.connection.timeout
    exit_code = 0
    async with open_transport(settings.connection, client):
        for planned in calls:
            if planned.notify:
                await client.notify(planned.method, planned.params)
                print(json.dumps({"method": planned.method, "notified": True}))
                continue
            try:
                with anyio.fail_after(timeout):
                    result = await client.call(planned.method, planned.params)
            except JsonRpcError as exc:
                print(json.dumps({"method": planned.method, "error": exc.raw}))
                exit_code = 1
            except TimeoutError:
                logger.error("call_timed_out", method=planned.method, timeout=timeout)
                print(json.dumps({"method": planned.method, "error": "timeout"}))
                exit_code = 1
            else:
                print(json.dumps({"method": planned.method, "result": result}))
    return exit_code


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    settings = load_settings(args, dict(os.environ))
    configure_logging(settings.log_level)
    sys.exit(asyncio.run(run(settings, planned_calls(args))))


if __name__ == "__main__":
    main()
