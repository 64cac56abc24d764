"""Global spanlog state: the active provider and the handler it writes to.

instrument() installs a stream handler on the destination logger and
records it here with the provider. shutdown() flushes and stops the
provider first, so buffered spans still reach the handler, and only then
detaches the handler and restores the logger's propagation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from spanlog._internal.logging import log_internal_error

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider

    from spanlog._internal.telemetry import InstalledHandler

logger = logging.getLogger(__name__)

_configured: bool = False
_provider: TracerProvider | None = None
_handler: InstalledHandler | None = None


def set_configured(
    provider: TracerProvider, handler: InstalledHandler | None = None
) -> None:
    """Record the provider and handler created by instrument().

    Args:
        provider: The TracerProvider exporting to the span logger.
        handler: The handler installed on the destination logger, or None
            when instrument() fell back to a provider without exporter.
    """
    global _configured, _provider, _handler
    if _configured:
        logger.warning(
            "spanlog already configured. Call shutdown() before re-initializing."
        )
    _configured = True
    _provider = provider
    _handler = handler


def is_configured() -> bool:
    """Check if instrument() has been called successfully."""
    return _configured


def get_provider() -> TracerProvider | None:
    """Get the active TracerProvider, or None if not configured."""
    return _provider


def get_handler() -> InstalledHandler | None:
    """Get the handler installed by instrument(), or None."""
    return _handler


def shutdown(timeout_millis: int = 5000) -> None:
    """Flush pending spans, stop the provider and detach the handler.

    Safe to call more than once. After shutdown, is_configured() returns
    False and the destination logger no longer carries spanlog's handler.

    Args:
        timeout_millis: Maximum time to wait for the flush.
    """
    global _configured, _provider, _handler
    if _provider is not None:
        try:
            _provider.force_flush(timeout_millis=timeout_millis)
            _provider.shutdown()
            logger.debug("TracerProvider shutdown complete")
        except Exception as e:
            log_internal_error("shutdown", e)
    if _handler is not None:
        try:
            _handler.remove()
        except Exception as e:
            log_internal_error("handler removal", e)
    _configured = False
    _provider = None
    _handler = None
