"""Logging configuration for Cursor Chat Tools using loguru."""

import os
import sys

from loguru import logger

_PACKAGE = "cursor_chat_tools"

# Flag to track if logging has been configured
_logging_configured = False


def setup_logging(level: str | None = None, force: bool = False) -> None:
    """Configure loguru for console output and enable this package's log records.

    The package disables its own logger on import so library callers see nothing
    unless they opt in. The CLI calls this once at startup.

    Args:
        level: Logging level. If None, reads CURSOR_CHAT_LOG_LEVEL (default: WARNING).
        force: Reconfigure even if logging was already set up (used by --verbose).
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    if level is None:
        level = os.getenv("CURSOR_CHAT_LOG_LEVEL", "WARNING").upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        colorize=True,
    )
    logger.enable(_PACKAGE)
