#!/usr/bin/env python3
"""Command-line entry point for the jq MCP Server."""

import argparse
import asyncio
import sys

from jq_mcp_server.config import load_config
from jq_mcp_server.core.executor import run_health_check
from jq_mcp_server.core.server import setup_logging, start_server
from jq_mcp_server.exceptions import JqUnavailableError
from jq_mcp_server.utils import get_logger

logger = get_logger("jq_mcp_server.server_runner")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Start the jq MCP Server (stdio or SSE mode)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--transport-mode",
        choices=["stdio", "sse"],
        default=None,
        help="Transport mode: 'stdio' for CLI/pipe, 'sse' for HTTP SSE server (overrides config)"
    )
    parser.add_argument("--host", default=None, help="Host to bind to (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (overrides config)")
    parser.add_argument("--log-level", default=None, help="Log level (overrides config)")
    parser.add_argument("--config", default=None, help="Path to a YAML or JSON config file")
    parser.add_argument("--include-tools", nargs="+", default=None, help="Only register these tools")
    parser.add_argument("--exclude-tools", nargs="+", default=None, help="Do not register these tools")
    return parser


def ensure_jq_available() -> None:
    """Run the startup probe and raise if jq cannot be used."""
    health = asyncio.run(run_health_check())
    if not health.available:
        raise JqUnavailableError(health.binary, health.error)
    logger.info(f"Using {health.version}", emoji_key="available", binary=health.binary)


def main(argv=None):
    """
    Run the jq MCP Server.

    Examples:
        # Start in stdio mode (default)
        $ jq-mcp-server

        # Start in SSE mode on a specific host/port
        $ jq-mcp-server --transport-mode sse --host 0.0.0.0 --port 8080

        # Start with verbose logging
        $ jq-mcp-server --log-level debug
    """
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(config_file_path=args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Could not load configuration: {e}", emoji_key="config")
        sys.exit(1)
    setup_logging(args.log_level or cfg.logging.level)

    try:
        ensure_jq_available()
    except JqUnavailableError as e:
        logger.critical(f"{e.message}. Install jq (https://jqlang.github.io/jq/) and make sure it is on PATH.")
        sys.exit(1)

    start_server(
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        transport_mode=args.transport_mode,
        include_tools=args.include_tools,
        exclude_tools=args.exclude_tools,
    )


if __name__ == "__main__":
    main()
