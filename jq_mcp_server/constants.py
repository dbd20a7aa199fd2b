"""Constants used throughout the jq MCP Server."""
from enum import Enum
from typing import Dict, Tuple


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TransportMode(str, Enum):
    """Transports the server can be started with."""
    STDIO = "stdio"
    SSE = "sse"


# Name of the interpreter executable, resolved from PATH on every spawn
DEFAULT_JQ_BINARY = "jq"

# Placeholders returned when jq succeeds but prints nothing
NO_OUTPUT = "No output"
NULL_OUTPUT = "null"
NO_MATCHES = "No matches found"

# Failure message prefixes, one per operation category
MSG_APPLY_FILTER = "Error executing jq"
MSG_VALIDATE = "Invalid JSON"
MSG_EXTRACT_PATH = "Error extracting path"
MSG_TRANSFORM = "Error in transformation"
MSG_FILTER_DATA = "Error filtering data"
MSG_ARRAY = "Error in array operation"
MSG_OBJECT = "Error in object operation"
MSG_STRING = "Error in string operation"
MSG_MATH = "Error in math operation"

# Supported operations per category
ARRAY_OPERATIONS: Tuple[str, ...] = (
    "length", "reverse", "sort", "unique", "flatten", "sum",
    "min", "max", "group_by", "first", "last",
)
OBJECT_OPERATIONS: Tuple[str, ...] = (
    "keys", "values", "to_entries", "from_entries", "has", "delete", "merge", "pick",
)
STRING_OPERATIONS: Tuple[str, ...] = (
    "length", "split", "join", "contains", "startswith", "endswith",
    "trim", "upper", "lower", "replace",
)
MATH_OPERATIONS: Tuple[str, ...] = (
    "add", "multiply", "subtract", "divide", "modulo",
    "floor", "ceil", "round", "abs", "sqrt",
)

# jq command-line flags for the output switches of apply-filter
OUTPUT_FLAGS: Dict[str, str] = {
    "compact": "--compact-output",
    "raw": "--raw-output",
    "sort": "--sort-keys",
    "tab": "--tab",
}

# Emoji mapping by log type and action
EMOJI_MAP = {
    "start": "🚀",
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "debug": "🔍",
    "critical": "🔥",

    # Component-specific emojis
    "server": "🖥️",
    "config": "⚙️",
    "tool": "🛠️",
    "jq": "🧩",
    "process": "⚡",
    "health": "🩺",
    "resource": "📚",
    "prompt": "💬",
    "time": "⏱️",

    # Status emojis
    "available": "🟢",
    "unavailable": "🔴",
    "timeout": "⌛",
    "skip": "⏭️",
    "test": "🧪",
}
