"""CLI: show resolved configuration and check connectivity."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from vector_storage.errors import VectorStoreError
from vector_storage.resolver import resolve_backend_config, resolve_workspace_backend_config
from vector_storage.settings import ResolutionContext
from vector_storage.telemetry import redact_config


def _context(args: argparse.Namespace) -> ResolutionContext:
    return ResolutionContext.from_env(dimension_override=args.dimension, env_file=args.env_file)


def cmd_config(args: argparse.Namespace) -> int:
    """Print resolved (redacted) configs as JSON."""
    context = _context(args)
    try:
        knowledge = resolve_backend_config(context)
        workspace = resolve_workspace_backend_config(context) if context.workspace_enabled else None
    except VectorStoreError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    out = {
        "knowledge": redact_config(knowledge),
        "reflection_collection": context.reflection_collection,
        "workspace_enabled": context.workspace_enabled,
        "workspace": redact_config(workspace) if workspace is not None else None,
    }
    print(json.dumps(out, indent=2))
    return 0


async def _health(context: ResolutionContext) -> bool:
    from vector_storage.provider import VectorStoreProvider

    provider = VectorStoreProvider()
    stores = await provider.create_multi_collection_vector_store_from_env(context)
    try:
        return stores.manager.is_connected()
    finally:
        await stores.manager.disconnect()


def cmd_health(args: argparse.Namespace) -> int:
    """Connect every configured collection, then disconnect."""
    try:
        ok = asyncio.run(_health(_context(args)))
    except VectorStoreError as e:
        print(f"FAIL ({e.code}): {e}", file=sys.stderr)
        ok = False
    print("OK" if ok else "FAIL")
    return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="vector-storage")
    parser.add_argument("--env-file", default=".env", help="dotenv file to read (default: .env)")
    parser.add_argument("--dimension", type=int, default=None, help="Embedding dimension override")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    config_p = sub.add_parser("config", help="Print resolved configuration")
    config_p.set_defaults(func=cmd_config)

    health_p = sub.add_parser("health", help="Check connectivity of configured collections")
    health_p.set_defaults(func=cmd_health)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
