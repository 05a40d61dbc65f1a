"""
Command-line entry point: run the server, create the schema, or run retention once.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

import uvicorn

from .config import configure_logging, get_settings
from .server.service_container import (
    ServiceConfig,
    ServiceContainer,
    ServiceInitializationError,
)


def _serve(args: argparse.Namespace) -> int:
    settings = get_settings()
    uvicorn.run(
        "chatarchive.server.main:create_app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        factory=True,
        log_level=settings.log_level.lower(),
    )
    return 0


async def _migrate() -> int:
    container = ServiceContainer(ServiceConfig.from_settings(get_settings()))
    try:
        await container.initialize(migrate=True)
    except ServiceInitializationError as e:
        print(f"migrate failed: {e}", file=sys.stderr)
        return 1
    await container.cleanup()
    print("schema ready")
    return 0


async def _cleanup() -> int:
    container = ServiceContainer(ServiceConfig.from_settings(get_settings()))
    try:
        await container.initialize(migrate=False)
    except ServiceInitializationError as e:
        print(f"cleanup failed: {e}", file=sys.stderr)
        return 1

    try:
        result = await container.retention_service.run_cleanup()
    finally:
        await container.cleanup()

    if result.is_failure():
        print(json.dumps(result.to_dict(), default=str), file=sys.stderr)
        return 1

    print(json.dumps(result.unwrap()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatarchive",
        description="Chat message and attachment archive.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: CHATARCHIVE_HOST or 0.0.0.0)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: CHATARCHIVE_PORT or 8000)",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (default: off)",
    )

    subparsers.add_parser("migrate", help="Create tables and indexes, then exit")
    subparsers.add_parser("cleanup", help="Delete expired rows once, then exit")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        return _serve(args)

    configure_logging(level=get_settings().log_level)

    if args.command == "migrate":
        return asyncio.run(_migrate())
    return asyncio.run(_cleanup())


if __name__ == "__main__":
    sys.exit(main())
