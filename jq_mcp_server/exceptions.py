"""Exception hierarchy for the jq MCP Server."""
from typing import Any, Dict, Optional


class JqMcpError(Exception):
    """Base exception for all jq MCP Server errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "UNKNOWN_ERROR"
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logs and error payloads."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ToolError(JqMcpError):
    """Raised when a tool cannot complete a request."""


class ToolInputError(ToolError):
    """Raised when a tool receives missing or invalid parameters.

    Always raised before any jq process is spawned.
    """

    def __init__(self, message: str, param_name: Optional[str] = None, provided_value: Any = None,
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if param_name is not None:
            details["param_name"] = param_name
        if provided_value is not None:
            details["provided_value"] = provided_value
        super().__init__(message, error_code="INVALID_PARAMETER", details=details)
        self.param_name = param_name
        self.provided_value = provided_value


class ToolExecutionError(ToolError):
    """Raised when executing a tool fails after its inputs were accepted."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code=error_code or "EXECUTION_ERROR", details=details)


class JqExecutionError(ToolExecutionError):
    """jq exited with a non-zero status and wrote to stderr."""

    def __init__(self, message: str, exit_code: int, stderr: str):
        super().__init__(
            message,
            error_code="JQ_ERROR",
            details={"exit_code": exit_code, "stderr": stderr},
        )
        self.exit_code = exit_code
        self.stderr = stderr


class JqTimeoutError(ToolExecutionError):
    """jq did not finish before the configured deadline."""

    def __init__(self, timeout: float, args: Optional[list] = None):
        super().__init__(
            f"jq timed out after {timeout} seconds",
            error_code="TIMEOUT",
            details={"timeout": timeout, "args": list(args or [])},
        )
        self.timeout = timeout


class JqUnavailableError(JqMcpError):
    """The jq binary could not be found or did not answer the version probe."""

    def __init__(self, binary: str, reason: Optional[str] = None):
        message = f"jq is not available (binary: {binary})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, error_code="JQ_UNAVAILABLE", details={"binary": binary})
        self.binary = binary
