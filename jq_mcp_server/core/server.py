"""Main server implementation for the jq MCP Server."""
import copy
import logging
import logging.config
import sys
import time
from contextlib import asynccontextmanager
from dataclasses import asdict
from functools import wraps
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

import jq_mcp_server
from jq_mcp_server import prompts
from jq_mcp_server.config import get_config
from jq_mcp_server.constants import TransportMode
from jq_mcp_server.core.executor import run_health_check
from jq_mcp_server.resources import COOKBOOK_URI, JQ_COOKBOOK, JQ_PATTERNS, PATTERNS_URI
from jq_mcp_server.tools import get_tool_metrics, register_all_tools
from jq_mcp_server.utils import get_logger

LOGGING_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s',
        },
        "file": {
            "format": "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "access": {
            "formatter": "access",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
        },
        "rich_console": {
            "()": "jq_mcp_server.utils.logging.formatter.create_rich_console_handler",
            "show_time": True,
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["rich_console"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"level": "INFO", "propagate": True},
        "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
        "jq_mcp_server": {
            "handlers": ["rich_console"],
            "level": "INFO",
            "propagate": False,
        },
        "jq_mcp_server.tools": {
            "level": "INFO",
            "propagate": True,
        },
    },
    "root": {
        "level": "WARNING",
        "handlers": ["rich_console"],
    },
}

tools_logger = get_logger("jq_mcp_server.tools")

SYSTEM_INSTRUCTIONS = """This server processes JSON with jq.

Pass JSON documents as strings in the `input` parameter. Use `apply-filter` for arbitrary
jq programs, `extract-path` for a single path, `filter-data` to select array elements and
the typed `*-operations` tools for common array, object, string and math tasks.
`validate-json` checks and pretty-prints a document. The `patterns://jq` and
`cookbook://jq` resources list common jq idioms."""


def build_logging_config(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    show_timestamps: Optional[bool] = None,
) -> Dict[str, Any]:
    """Return a copy of ``LOGGING_CONFIG`` adjusted for the given level and file."""
    cfg = get_config()
    level = (log_level or cfg.logging.level).upper()
    log_file = log_file or cfg.logging.file
    if show_timestamps is None:
        show_timestamps = cfg.logging.show_timestamps

    config = copy.deepcopy(LOGGING_CONFIG)
    config["handlers"]["rich_console"]["show_time"] = show_timestamps
    config["loggers"]["jq_mcp_server"]["level"] = level
    config["loggers"]["jq_mcp_server.tools"]["level"] = level
    config["loggers"]["uvicorn.access"]["level"] = level

    uvicorn_base_level = "DEBUG" if level == "DEBUG" else "INFO"
    config["loggers"]["uvicorn"]["level"] = uvicorn_base_level
    config["loggers"]["uvicorn.error"]["level"] = uvicorn_base_level

    if log_file:
        config["handlers"]["file"] = {
            "formatter": "file",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 2 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }
        config["loggers"]["jq_mcp_server"]["handlers"].append("file")
        config["root"]["handlers"].append("file")
    return config


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> Dict[str, Any]:
    """Apply the logging configuration and return it."""
    config = build_logging_config(log_level=log_level, log_file=log_file)
    logging.config.dictConfig(config)
    return config


class Gateway:
    """Owns the FastMCP instance and registers tools, resources and prompts on it."""

    def __init__(
        self,
        name: Optional[str] = None,
        register_tools: bool = True,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ):
        cfg = get_config()
        self.name = name or cfg.server.name
        self.logger = get_logger("jq_mcp_server.core.server")
        self.registered_tools: Dict[str, Any] = {}

        self.mcp = FastMCP(
            self.name,
            instructions=SYSTEM_INSTRUCTIONS,
            lifespan=self._server_lifespan,
            host=host or cfg.server.host,
            port=port or cfg.server.port,
        )

        if register_tools:
            self._register_tools()
        self._register_resources()
        self._register_prompts()

        self.logger.info(f"jq MCP Server '{self.name}' initialized", emoji_key="server")

    def log_tool_calls(self, func):
        """Wrap a tool so every call is logged with its parameters, duration and outcome."""
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            tool_name = func.__name__

            params_str = ", ".join(f"{k}={v!r}" for k, v in kwargs.items() if k != "ctx")
            tools_logger.info(f"TOOL CALL: {tool_name}({params_str})", emoji_key="tool")

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                processing_time = time.time() - start_time
                tools_logger.error(
                    f"TOOL ERROR: {tool_name} failed after {processing_time:.2f}s: {e}", emoji_key="error"
                )
                raise

            processing_time = time.time() - start_time
            result_str = str(result)
            result_summary = (result_str[:100] + '...') if len(result_str) > 100 else result_str
            tools_logger.info(
                f"TOOL SUCCESS: {tool_name} completed in {processing_time:.2f}s - Result: {result_summary}",
                emoji_key="success",
            )
            return result
        return wrapper

    @asynccontextmanager
    async def _server_lifespan(self, server: FastMCP):
        """Probe jq when the server starts and share the result with request handlers."""
        self.logger.info(f"Starting jq MCP Server '{self.name}'", emoji_key="start")
        health = await run_health_check()
        if health.available:
            self.logger.success(f"jq available: {health.version}", emoji_key="available", binary=health.binary)
        else:
            self.logger.error(f"jq unavailable: {health.error}", emoji_key="unavailable", binary=health.binary)
        try:
            yield {"jq_health": health}
        finally:
            self.logger.info(f"Shutting down jq MCP Server '{self.name}'", emoji_key="server")

    def _register_tools(self) -> None:
        self.registered_tools = register_all_tools(self.mcp, tool_wrapper=self.log_tool_calls)

    def _register_resources(self) -> None:
        """Register the jq reference documents and the server info resource."""

        @self.mcp.resource(PATTERNS_URI, name="jq-patterns", description="Common jq patterns and examples")
        def get_jq_patterns() -> str:
            return JQ_PATTERNS

        @self.mcp.resource(COOKBOOK_URI, name="jq-cookbook", description="jq cookbook for common tasks")
        def get_jq_cookbook() -> str:
            return JQ_COOKBOOK

        @self.mcp.resource("info://server", name="server-info", description="Server details and tool metrics")
        def get_server_info() -> Dict[str, Any]:
            return {
                "name": self.name,
                "version": jq_mcp_server.__version__,
                "jq_binary": get_config().jq.binary,
                "tools": sorted(self.registered_tools),
                "metrics": get_tool_metrics(),
            }

    def _register_prompts(self) -> None:
        for prompt_name, builder in prompts.PROMPTS.items():
            self.mcp.prompt(name=prompt_name, description=builder.__doc__)(builder)


def start_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    log_level: Optional[str] = None,
    transport_mode: Optional[str] = None,
    include_tools: Optional[List[str]] = None,
    exclude_tools: Optional[List[str]] = None,
) -> None:
    """Start the jq MCP Server.

    Args:
        host: Host to bind in sse mode. Defaults to the configured host.
        port: Port to bind in sse mode. Defaults to the configured port.
        log_level: Logging level name. Defaults to the configured level.
        transport_mode: ``stdio`` (default) or ``sse``.
        include_tools: Only register these tools.
        exclude_tools: Never register these tools.

    Raises:
        ValueError: ``transport_mode`` is not a supported transport.
    """
    cfg = get_config()
    transport_mode = transport_mode or cfg.server.transport_mode
    valid_modes = [mode.value for mode in TransportMode]
    if transport_mode not in valid_modes:
        raise ValueError(f"Invalid transport_mode: {transport_mode}. Must be one of {valid_modes}")

    if include_tools or exclude_tools:
        cfg.tool_registration.filter_enabled = True
    if include_tools:
        cfg.tool_registration.included_tools = list(include_tools)
    if exclude_tools:
        cfg.tool_registration.excluded_tools = list(exclude_tools)

    server_host = host or cfg.server.host
    server_port = port or cfg.server.port
    final_log_level = (log_level or cfg.logging.level).upper()
    log_config = setup_logging(final_log_level)

    logger = get_logger("jq_mcp_server.core.server")
    logger.info(
        "Starting jq MCP Server",
        emoji_key="start",
        transport=transport_mode,
        log_level=final_log_level,
    )

    gateway = Gateway(name=cfg.server.name, host=server_host, port=server_port)

    if transport_mode == TransportMode.SSE.value:
        import uvicorn
        from starlette.responses import JSONResponse

        app = gateway.mcp.sse_app()

        async def health(request):
            result = await run_health_check()
            status = "ok" if result.available else "unavailable"
            return JSONResponse(
                {"status": status, "jq": asdict(result)},
                status_code=200 if result.available else 503,
            )

        app.add_route("/health", health, methods=["GET"])
        logger.info(f"Serving SSE on http://{server_host}:{server_port}", emoji_key="server")
        uvicorn.run(app, host=server_host, port=server_port, log_config=log_config)
    else:
        print("Running jq MCP Server over stdio", file=sys.stderr)
        gateway.mcp.run(transport="stdio")
