"""Log records derived from finished spans and their events."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from operator import attrgetter
from typing import TYPE_CHECKING, Any, Optional

from opentelemetry.trace import StatusCode

from spanlog.attributes import convert_attributes
from spanlog.filters import AttributeFilter, filter_attributes

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan

DURATION_KEY = "duration"

_NANOS_PER_MICRO = 1_000
_NANOS_PER_MILLI = 1_000_000
_NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class SpanLogRecord:
    """One structured log line built from a span or a span event.

    Attributes:
        timestamp_ns: Span start time or event time, in ns since the epoch.
        level: ``logging.INFO`` or ``logging.ERROR``.
        message: Span or event name.
        attributes: Rendered ``(key, value)`` pairs in emission order.
    """

    timestamp_ns: int
    level: int
    message: str
    attributes: tuple[tuple[str, Any], ...] = ()

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)

    def to_log_record(self, logger: logging.Logger) -> logging.LogRecord:
        """Build a stdlib LogRecord stamped with this record's timestamp.

        The rendered attributes are attached as ``record.attributes``.
        """
        record = logger.makeRecord(
            logger.name, self.level, "", 0, self.message, (), None
        )
        record.created = self.timestamp_ns / _NANOS_PER_SECOND
        record.msecs = float((self.timestamp_ns // _NANOS_PER_MILLI) % 1000)
        record.attributes = self.attributes
        return record


def _with_fraction(whole: int, fraction: int, digits: int) -> str:
    if not fraction:
        return str(whole)
    return f"{whole}.{fraction:0{digits}d}".rstrip("0")


def format_duration(nanoseconds: int) -> str:
    """Render a duration with the largest unit that keeps it readable.

    Examples: ``0s``, ``850ns``, ``1.5µs``, ``10ms``, ``1.234s``,
    ``2m3.5s``, ``1h0m0s``.
    """
    if nanoseconds == 0:
        return "0s"

    sign = "-" if nanoseconds < 0 else ""
    ns = abs(nanoseconds)

    if ns < _NANOS_PER_MICRO:
        return f"{sign}{ns}ns"
    if ns < _NANOS_PER_MILLI:
        return sign + _with_fraction(*divmod(ns, _NANOS_PER_MICRO), 3) + "µs"
    if ns < _NANOS_PER_SECOND:
        return sign + _with_fraction(*divmod(ns, _NANOS_PER_MILLI), 6) + "ms"

    seconds, fraction = divmod(ns, _NANOS_PER_SECOND)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)

    text = _with_fraction(seconds, fraction, 9) + "s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def span_level(span: "ReadableSpan") -> int:
    """Return ERROR for spans with an error status, INFO otherwise."""
    if span.status.status_code == StatusCode.ERROR:
        return logging.ERROR
    return logging.INFO


def build_records(
    span: "ReadableSpan",
    attribute_filter: Optional[AttributeFilter] = None,
) -> list[SpanLogRecord]:
    """Build the span record followed by one record per span event.

    The span record always starts with a ``duration`` attribute. Event
    records share the span's level and carry only their own attributes.
    """
    level = span_level(span)
    start = span.start_time or 0
    end = span.end_time or start

    span_attrs = [(DURATION_KEY, format_duration(end - start))]
    span_attrs.extend(
        convert_attributes(filter_attributes(span.attributes, attribute_filter))
    )
    records = [SpanLogRecord(start, level, span.name, tuple(span_attrs))]

    for event in span.events:
        event_attrs = convert_attributes(
            filter_attributes(event.attributes, attribute_filter)
        )
        records.append(
            SpanLogRecord(event.timestamp, level, event.name, tuple(event_attrs))
        )

    return records


def sort_records(records: Iterable[SpanLogRecord]) -> list[SpanLogRecord]:
    """Sort by timestamp; equal timestamps keep their original order."""
    # sorted() is guaranteed stable
    return sorted(records, key=attrgetter("timestamp_ns"))


def build_batch(
    spans: Sequence["ReadableSpan"],
    attribute_filter: Optional[AttributeFilter] = None,
) -> list[SpanLogRecord]:
    """Build and order the records for a whole batch of spans."""
    records: list[SpanLogRecord] = []
    for span in spans:
        records.extend(build_records(span, attribute_filter))
    return sort_records(records)
