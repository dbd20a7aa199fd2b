"""MCP tools for the jq MCP Server."""

import inspect
from typing import Any, Callable, Dict, Optional

from jq_mcp_server.tools.base import (
    BaseToolMetrics,
    get_tool_metrics,
    with_error_handling,
    with_tool_metrics,
)
from jq_mcp_server.utils import get_logger

from .info import tool_info
from .operations import array_operations, math_operations, object_operations, string_operations
from .query import apply_filter, extract_path, filter_data, transform_data, validate_json

logger = get_logger("jq_mcp_server.tools")

# Public MCP tool name -> implementation
STANDALONE_TOOL_FUNCTIONS: Dict[str, Callable] = {
    "apply-filter": apply_filter,
    "validate-json": validate_json,
    "extract-path": extract_path,
    "transform-data": transform_data,
    "filter-data": filter_data,
    "array-operations": array_operations,
    "object-operations": object_operations,
    "string-operations": string_operations,
    "math-operations": math_operations,
    "tool-info": tool_info,
}


def _is_selected(tool_name: str, func: Callable, included: list, excluded: list) -> bool:
    # Filters may use either the MCP name or the Python function name
    names = {tool_name, func.__name__}
    if included and not names & set(included):
        return False
    return not names & set(excluded)


def register_all_tools(mcp_server, tool_wrapper: Optional[Callable] = None) -> Dict[str, Any]:
    """Registers the jq tools with the MCP server.

    Args:
        mcp_server: The FastMCP server instance.
        tool_wrapper: Optional decorator applied to every tool before registration
            (the server uses it for call logging).

    Returns:
        Dictionary containing information about registered tools.
    """
    from jq_mcp_server.config import get_config
    cfg = get_config()
    filter_enabled = cfg.tool_registration.filter_enabled
    included_tools = cfg.tool_registration.included_tools
    excluded_tools = cfg.tool_registration.excluded_tools

    if filter_enabled:
        if included_tools:
            logger.info(f"Tool filtering enabled: including only {len(included_tools)} specified tools")
        if excluded_tools:
            logger.info(f"Tool filtering enabled: excluding {len(excluded_tools)} specified tools")

    registered_tools: Dict[str, Any] = {}
    for tool_name, tool_func in STANDALONE_TOOL_FUNCTIONS.items():
        if filter_enabled and not _is_selected(tool_name, tool_func, included_tools, excluded_tools):
            logger.debug(f"Skipping tool {tool_name}", emoji_key="skip")
            continue

        description = inspect.getdoc(tool_func) or ""
        func = tool_wrapper(tool_func) if tool_wrapper else tool_func
        mcp_server.tool(name=tool_name, description=description)(func)
        registered_tools[tool_name] = {
            "description": description.split("\n", 1)[0],
            "function": tool_func.__name__,
        }
        logger.debug(f"Registered tool: {tool_name}", emoji_key="tool")

    logger.info(f"Registered {len(registered_tools)} tools", emoji_key="tool")
    return registered_tools


__all__ = [
    "BaseToolMetrics",
    "STANDALONE_TOOL_FUNCTIONS",
    "get_tool_metrics",
    "register_all_tools",
    "with_error_handling",
    "with_tool_metrics",
]
