"""Internal logging utilities."""

import logging

# Package logger for spanlog's own diagnostics (never the span destination)
logger = logging.getLogger("spanlog")

# Default to WARNING to avoid noise
logger.setLevel(logging.WARNING)


def log_internal_error(operation: str, error: Exception) -> None:
    """Log an internal error that is not forwarded to the caller."""
    logger.warning(f"spanlog internal error in {operation}: {error}", exc_info=True)


def log_info(message: str) -> None:
    """Log an info message."""
    logger.info(message)
