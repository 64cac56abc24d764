"""Test fakes for the logging backend and the tracing SDK.

This module provides typed test doubles (fakes) that validate usage and
document expected API surfaces. Prefer these over MagicMock for better
type safety and self-documenting tests.

Following the testing philosophy:
- Fakes are working implementations with shortcuts
- They validate usage patterns (unlike MagicMock which accepts anything)
- They catch typos and API drift at test time
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from opentelemetry.sdk.trace import Event, ReadableSpan
from opentelemetry.trace import Status, StatusCode

# A fixed point in time so timestamps in assertions stay readable
T0 = 1_700_000_000_000_000_000
MS = 1_000_000


class DeliveryFailure(RuntimeError):
    """Raised by FailingHandler to simulate a broken logging backend."""


class RecordingHandler(logging.Handler):
    """Logging handler that keeps every record it receives.

    Usage:
        handler = RecordingHandler()
        logger.addHandler(handler)
        exporter = SpanLogExporter(logger=logger)
        exporter.export(spans)
        assert handler.messages == ["parent", "child"]
    """

    def __init__(self) -> None:
        super().__init__(level=logging.NOTSET)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        return [r.getMessage() for r in self.records]

    @property
    def levels(self) -> list[int]:
        return [r.levelno for r in self.records]

    def attributes(self, index: int) -> list[tuple[str, Any]]:
        """Return the rendered attribute pairs of the index-th record."""
        return list(getattr(self.records[index], "attributes", ()))

    def attribute_dict(self, index: int) -> dict[str, Any]:
        return dict(self.attributes(index))


class FailingHandler(RecordingHandler):
    """Recording handler that raises when handling the n-th record (1-based).

    Records before the failing one are kept, the failing one is not.
    """

    def __init__(self, fail_on: int) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.calls = 0

    def emit(self, record: logging.LogRecord) -> None:
        self.calls += 1
        if self.calls == self.fail_on:
            raise DeliveryFailure(f"backend rejected record {self.calls}")
        super().emit(record)


def make_event(
    name: str,
    timestamp: int,
    attributes: Mapping[str, Any] | None = None,
) -> Event:
    """Create a span event at an explicit timestamp (ns since epoch)."""
    return Event(name, attributes=attributes, timestamp=timestamp)


def make_span(
    name: str,
    start: int = T0,
    end: int | None = None,
    attributes: Mapping[str, Any] | None = None,
    events: Sequence[Event] = (),
    error: bool = False,
) -> ReadableSpan:
    """Create a finished ReadableSpan without going through a tracer.

    Args:
        name: Span name.
        start: Start time in ns since the epoch.
        end: End time; defaults to start + 1ms.
        attributes: Span attributes, kept in the given order.
        events: Span events, kept in the given order.
        error: If True, the span status is ERROR.
    """
    status = Status(StatusCode.ERROR, "failed") if error else Status(StatusCode.UNSET)
    return ReadableSpan(
        name=name,
        attributes=dict(attributes) if attributes else None,
        events=tuple(events),
        status=status,
        start_time=start,
        end_time=end if end is not None else start + MS,
    )
