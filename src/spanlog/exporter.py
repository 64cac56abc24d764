"""SpanExporter that writes finished spans to a stdlib logger.

Each span becomes one log record stamped with the span's start time and
carrying a ``duration`` attribute; each span event becomes a further record
stamped with the event time. All records of a batch are delivered in
timestamp order.

Example:
    >>> from opentelemetry.sdk.trace import TracerProvider
    >>> from opentelemetry.sdk.trace.export import BatchSpanProcessor
    >>> from spanlog import SpanLogExporter
    >>> provider = TracerProvider()
    >>> provider.add_span_processor(BatchSpanProcessor(SpanLogExporter()))
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Optional, Sequence

from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from spanlog.exceptions import ShutdownTimeoutError
from spanlog.records import build_batch

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan

    from spanlog.filters import AttributeFilter

logger = logging.getLogger(__name__)

# Destination logger used when none is supplied
DEFAULT_LOGGER_NAME = "spanlog.spans"


class SpanLogExporter(SpanExporter):
    """Export spans as structured log records.

    Args:
        logger: Destination logger. Records are passed to its handle()
            method, so handlers and filters attached to it (and its
            ancestors, when propagating) decide formatting and output.
        attribute_filter: Optional predicate applied to span and event
            attributes before they are rendered. None keeps everything.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        attribute_filter: Optional["AttributeFilter"] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self._attribute_filter = attribute_filter
        self._stopped = False
        self._stopped_lock = threading.Lock()

    @property
    def destination(self) -> logging.Logger:
        """The logger records are delivered to."""
        return self._logger

    @property
    def is_stopped(self) -> bool:
        with self._stopped_lock:
            return self._stopped

    def export(self, spans: Sequence["ReadableSpan"]) -> SpanExportResult:
        """Deliver the batch to the destination logger.

        Spans arriving after shutdown are dropped and the call still
        succeeds. An exception raised by the logging backend stops delivery
        and propagates unchanged; records delivered before it remain.
        """
        if self.is_stopped:
            logger.debug("Exporter is shut down, dropping %d spans", len(spans))
            return SpanExportResult.SUCCESS

        if not spans:
            return SpanExportResult.SUCCESS

        for record in build_batch(spans, self._attribute_filter):
            self._logger.handle(record.to_log_record(self._logger))

        return SpanExportResult.SUCCESS

    def shutdown(self, timeout_millis: Optional[float] = None) -> None:
        """Stop accepting spans.

        In-flight exports are not awaited. Calling this more than once is
        harmless.

        Args:
            timeout_millis: Time left before the caller's deadline. None
                means no deadline.

        Raises:
            ShutdownTimeoutError: If the deadline had already expired. The
                exporter is stopped regardless.
        """
        with self._stopped_lock:
            self._stopped = True

        if timeout_millis is not None and timeout_millis <= 0:
            raise ShutdownTimeoutError(
                f"Shutdown deadline already expired ({timeout_millis}ms)"
            )
        logger.debug("SpanLogExporter shut down")

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Nothing is buffered, so flushing always succeeds."""
        return True
