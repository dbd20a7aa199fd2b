"""Rich-based logging for the jq MCP Server."""
from jq_mcp_server.utils.logging.console import console
from jq_mcp_server.utils.logging.formatter import create_rich_console_handler
from jq_mcp_server.utils.logging.logger import JqLogger, get_logger, logger

__all__ = ["console", "create_rich_console_handler", "JqLogger", "get_logger", "logger"]
