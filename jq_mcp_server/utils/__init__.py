"""Utility functions for the jq MCP Server."""
from jq_mcp_server.utils.logging import console, get_logger, logger

__all__ = ["console", "get_logger", "logger"]
