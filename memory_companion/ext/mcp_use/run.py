#!/usr/bin/env python
# pyright: reportMissingImports=false
"""Serve the people roster and transcript search over MCP.

Usage::

    python -m memory_companion.ext.mcp_use.run
    python -m memory_companion.ext.mcp_use.run --transport stdio -v
    python -m memory_companion.ext.mcp_use.run --host 127.0.0.1 --port 3000

Uses the ``memory-companion`` CLI config.  The tools only read, but
``search_conversations`` embeds the query, so an API key is required
alongside PostgreSQL.
"""

from __future__ import annotations

import argparse
import sys

from memory_companion.cli import output as out
from memory_companion.cli.app import (
    _build_companion,
    _configure_logging,
    _require_api_key,
)
from memory_companion.cli.config import config_path_display, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m memory_companion.ext.mcp_use.run",
        description="Expose remembered people and conversations as MCP tools.",
    )
    parser.add_argument(
        "--transport",
        choices=["streamable-http", "stdio"],
        default="streamable-http",
    )
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    cfg = load_config()
    if not cfg.uses_postgres:
        # An in-memory roster would be empty for every MCP session.
        out.error(f"The MCP server needs PostgreSQL (config: {config_path_display()}).")
        out.next_step("memory-companion config set-store postgres")
        sys.exit(1)
    _require_api_key(cfg)

    from memory_companion.ext.mcp_use.server import create_server

    server = create_server(_build_companion(cfg))

    kwargs: dict = {"transport": args.transport}
    if args.transport == "streamable-http":
        kwargs.update(host=args.host, port=args.port)
    server.run(**kwargs)


if __name__ == "__main__":
    main()
