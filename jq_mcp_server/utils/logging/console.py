"""Shared Rich console for log output."""
import sys

from rich.console import Console
from rich.theme import Theme

RICH_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "critical": "red reverse",
    "debug": "dim",
    "success": "green",
    "tool": "blue",
    "exit_code": "magenta",
    "time": "bright_black",
})

# stdout carries the MCP stdio transport, so logs always go to stderr
console = Console(theme=RICH_THEME, highlight=True, file=sys.stderr)
