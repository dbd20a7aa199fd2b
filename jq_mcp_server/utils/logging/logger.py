"""Enhanced logging using Rich."""
import logging
from functools import lru_cache
from typing import Any, Optional

from rich.markup import escape

from jq_mcp_server.constants import EMOJI_MAP


def _emoji_enabled() -> bool:
    # Imported lazily: config loading logs through the stdlib logger
    from jq_mcp_server.config import get_config
    return get_config().logging.emoji_enabled


class JqLogger:
    """Logger with Rich markup, emojis and key=value context."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

    def _format_message(self, message: str, emoji_key: Optional[str] = None, **kwargs: Any) -> str:
        """Format log message with emoji and optional metadata.

        Args:
            message: The log message
            emoji_key: Key for emoji lookup
            **kwargs: Additional context data to include

        Returns:
            Formatted message
        """
        emoji = ""
        if emoji_key and emoji_key in EMOJI_MAP and _emoji_enabled():
            emoji = f"{EMOJI_MAP[emoji_key]} "

        formatted_message = f"{emoji}{escape(str(message))}"

        if kwargs:
            context_pairs = []
            for key, value in kwargs.items():
                if key == "time" and isinstance(value, (int, float)):
                    context_pairs.append(f"[time]{value:.3f}s[/time]")
                elif key == "tool":
                    context_pairs.append(f"[tool]{escape(str(value))}[/tool]")
                elif key == "exit_code":
                    context_pairs.append(f"[exit_code]exit_code={value}[/exit_code]")
                else:
                    context_pairs.append(f"{key}={escape(str(value))}")
            formatted_message = f"{formatted_message} " + " ".join(context_pairs)

        return formatted_message

    def _log(self, level: int, message: str, emoji_key: Optional[str], kwargs: dict) -> None:
        exc_info = kwargs.pop("exc_info", None)
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(level, self._format_message(message, emoji_key, **kwargs), exc_info=exc_info)

    def debug(self, message: str, emoji_key: Optional[str] = "debug", **kwargs):
        self._log(logging.DEBUG, message, emoji_key, kwargs)

    def info(self, message: str, emoji_key: Optional[str] = "info", **kwargs):
        self._log(logging.INFO, message, emoji_key, kwargs)

    def warning(self, message: str, emoji_key: Optional[str] = "warning", **kwargs):
        self._log(logging.WARNING, message, emoji_key, kwargs)

    def error(self, message: str, emoji_key: Optional[str] = "error", **kwargs):
        self._log(logging.ERROR, message, emoji_key, kwargs)

    def critical(self, message: str, emoji_key: Optional[str] = "critical", **kwargs):
        self._log(logging.CRITICAL, message, emoji_key, kwargs)

    def success(self, message: str, emoji_key: Optional[str] = "success", **kwargs):
        """Log a success message (info level with success styling)."""
        exc_info = kwargs.pop("exc_info", None)
        if not self.logger.isEnabledFor(logging.INFO):
            return
        formatted = self._format_message(message, emoji_key, **kwargs)
        self.logger.info(f"[success]{formatted}[/success]", exc_info=exc_info)


@lru_cache(maxsize=64)
def get_logger(name: str) -> JqLogger:
    """Get a logger instance with caching.

    Args:
        name: Logger name

    Returns:
        JqLogger instance
    """
    return JqLogger(name)


# Package-level logger
logger = get_logger("jq_mcp_server")
