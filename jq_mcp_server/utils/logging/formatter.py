"""Handler factories referenced from the logging dictConfig."""
import logging

from rich.logging import RichHandler

from jq_mcp_server.utils.logging.console import console


def create_rich_console_handler(show_time: bool = True, level: int = logging.NOTSET) -> RichHandler:
    """Build the Rich console handler used by ``LOGGING_CONFIG``.

    The handler writes to the shared stderr console so that nothing but
    protocol frames ever reaches stdout.
    """
    return RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        markup=True,
        show_time=show_time,
        show_path=False,
        enable_link_path=False,
    )
