"""Formatters for span log records.

Both formatters read the ``attributes`` pairs attached by the exporter and
fall back gracefully for ordinary log records that carry none, so they can
be installed on loggers shared with regular application logging.

Attribute keys that collide with the line header (``time``, ``level``,
``msg``) are written with an ``attr.`` prefix.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from spanlog.attributes import format_scalar

HEADER_KEYS = frozenset({"time", "level", "msg"})
COLLISION_PREFIX = "attr."


def _format_time(record: logging.LogRecord) -> str:
    dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return dt.isoformat(timespec="microseconds").replace("+00:00", "Z")


def _record_attributes(record: logging.LogRecord) -> tuple[tuple[str, Any], ...]:
    return tuple(
        (COLLISION_PREFIX + key if key in HEADER_KEYS else key, value)
        for key, value in getattr(record, "attributes", None) or ()
    )


class JsonFormatter(logging.Formatter):
    """One JSON object per record: time, level, msg, then each attribute.

    Attribute keys that repeat keep the last value written.
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "time": _format_time(record),
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        for key, value in _record_attributes(record):
            data[key] = value
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str, ensure_ascii=False)


def _quote(text: str) -> str:
    if not text or any(c.isspace() or c in '"=' for c in text):
        return json.dumps(text, ensure_ascii=False)
    return text


class TextFormatter(logging.Formatter):
    """``key=value`` lines: ``time=... level=INFO msg=... duration=1ms``.

    Values containing whitespace, quotes or ``=`` are quoted.
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"time={_format_time(record)}",
            f"level={record.levelname}",
            f"msg={_quote(record.getMessage())}",
        ]
        for key, value in _record_attributes(record):
            parts.append(f"{_quote(key)}={_quote(format_scalar(value))}")
        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JsonFormatter,
    "text": TextFormatter,
}
