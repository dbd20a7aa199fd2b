"""Decorators and metrics shared by all jq tools."""
import functools
import time
from typing import Any, Dict

from mcp.server.fastmcp.exceptions import ToolError as MCPToolError

from jq_mcp_server.exceptions import JqMcpError, ToolInputError
from jq_mcp_server.utils import get_logger

logger = get_logger("jq_mcp_server.tools.base")


class BaseToolMetrics:
    """Metrics tracking for tool execution."""

    def __init__(self):
        self.total_calls = 0
        self.successful_calls = 0
        self.failed_calls = 0
        self.total_duration = 0.0
        self.min_duration = float('inf')
        self.max_duration = 0.0

    def record_call(self, success: bool, duration: float) -> None:
        """Record metrics for a tool call.

        Args:
            success: Whether the call was successful
            duration: Duration of the call in seconds
        """
        self.total_calls += 1
        if success:
            self.successful_calls += 1
        else:
            self.failed_calls += 1
        self.total_duration += duration
        self.min_duration = min(self.min_duration, duration)
        self.max_duration = max(self.max_duration, duration)

    def get_stats(self) -> Dict[str, Any]:
        """Get current metrics."""
        if self.total_calls == 0:
            return {
                "total_calls": 0,
                "successful_calls": 0,
                "failed_calls": 0,
                "success_rate": 0.0,
                "average_duration": 0.0,
                "min_duration": 0.0,
                "max_duration": 0.0,
            }
        return {
            "total_calls": self.total_calls,
            "successful_calls": self.successful_calls,
            "failed_calls": self.failed_calls,
            "success_rate": self.successful_calls / self.total_calls,
            "average_duration": self.total_duration / self.total_calls,
            "min_duration": self.min_duration,
            "max_duration": self.max_duration,
        }


# Metrics per tool function name, filled in by with_tool_metrics
_tool_metrics: Dict[str, BaseToolMetrics] = {}


def get_tool_metrics() -> Dict[str, Dict[str, Any]]:
    """Snapshot of the recorded metrics for every decorated tool."""
    return {name: metrics.get_stats() for name, metrics in sorted(_tool_metrics.items())}


def with_tool_metrics(func):
    """Decorator to add metrics tracking to a tool function.

    The metrics object is also exposed as ``wrapper.metrics``.
    """
    metrics = _tool_metrics.setdefault(func.__name__, BaseToolMetrics())

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.time()
        success = False
        try:
            result = await func(*args, **kwargs)
            success = True
            return result
        finally:
            duration = time.time() - start_time
            metrics.record_call(success=success, duration=duration)
            logger.debug(
                f"Tool {func.__name__} finished",
                emoji_key="tool",
                tool=func.__name__,
                success=success,
                time=duration,
            )

    wrapper.metrics = metrics
    return wrapper


def with_error_handling(func):
    """Decorator that turns any failure into an MCP tool error.

    FastMCP reports a raised ``ToolError`` to the client as a result with
    ``isError`` set, so nothing propagates across the protocol boundary as
    an unhandled exception. Expected failures (bad parameters, jq errors,
    timeouts) are logged without a traceback.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except ToolInputError as e:
            logger.warning(f"Invalid input to {func.__name__}: {e.message}", emoji_key="warning", tool=func.__name__)
            raise MCPToolError(e.message) from e
        except JqMcpError as e:
            logger.error(
                f"{func.__name__} failed: {e.message}",
                emoji_key="error",
                tool=func.__name__,
                error_code=e.error_code,
            )
            raise MCPToolError(e.message) from e
        except MCPToolError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", emoji_key="error", exc_info=True)
            raise MCPToolError(f"Unexpected error in {func.__name__}: {type(e).__name__}: {e}") from e

    return wrapper
