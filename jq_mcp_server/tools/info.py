"""Tool reporting details about the installed jq."""
from jq_mcp_server.core import operations
from jq_mcp_server.tools.base import with_error_handling, with_tool_metrics


@with_tool_metrics
@with_error_handling
async def tool_info() -> str:
    """Get information about jq: its version and the beginning of its help text."""
    return await operations.jq_info()
