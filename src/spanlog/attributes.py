"""Conversion of OpenTelemetry attributes into log record attributes.

Scalar values (bool, int, float, str) are passed through unchanged. Sequence
values are not handed to the logging backend as lists; they are rendered as a
bracketed, space separated string such as ``[1 1 2 3 5 8 13]`` so that every
formatter can display them on a single line. Values of any other kind are
skipped.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Optional

# Exponent bounds outside of which floats switch to scientific notation
_MIN_FIXED_EXPONENT = -4
_MAX_FIXED_EXPONENT = 6

_SCALAR_TYPES = (bool, int, float, str)


def format_float(value: float) -> str:
    """Render a float in its shortest round-trip form.

    Integral values lose their fractional part (``1.0`` becomes ``1``) and
    very large or very small magnitudes use an exponent with at least two
    digits (``1.234567e+06``, ``1e-05``).
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    mantissa = "".join(str(d) for d in digits)
    exp10 = len(digits) + exponent - 1

    if exp10 < _MIN_FIXED_EXPONENT or exp10 >= _MAX_FIXED_EXPONENT:
        text = mantissa[0]
        if len(mantissa) > 1:
            text += "." + mantissa[1:]
        text += "e%s%02d" % ("-" if exp10 < 0 else "+", abs(exp10))
    elif exponent >= 0:
        text = mantissa + "0" * exponent
    elif exp10 >= 0:
        point = exp10 + 1
        text = mantissa[:point] + "." + mantissa[point:]
    else:
        text = "0." + "0" * (-exp10 - 1) + mantissa

    return "-" + text if sign else text


def format_scalar(value: Any) -> str:
    """Render a single sequence element."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_float(value)
    return str(value)


def format_sequence(values: Sequence[Any]) -> str:
    """Render a sequence of scalars as ``[v1 v2 ...]``."""
    return "[" + " ".join(format_scalar(v) for v in values) + "]"


def _is_scalar_sequence(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray)):
        return False
    if not isinstance(value, Sequence):
        return False
    return all(v is None or isinstance(v, _SCALAR_TYPES) for v in value)


def convert_attribute(key: str, value: Any) -> Optional[tuple[str, Any]]:
    """Convert one attribute to a ``(key, value)`` pair for a log record.

    Args:
        key: Attribute key, preserved as-is.
        value: Attribute value as stored on a span or event.

    Returns:
        The rendered pair, or None if the value kind is not supported.
    """
    if isinstance(value, _SCALAR_TYPES):
        return key, value
    if _is_scalar_sequence(value):
        return key, format_sequence(value)
    return None


def convert_attributes(
    attributes: Optional[Mapping[str, Any]],
) -> list[tuple[str, Any]]:
    """Convert an attribute mapping, keeping its iteration order.

    Unsupported values are dropped silently. No deduplication is performed.
    """
    if not attributes:
        return []

    converted: list[tuple[str, Any]] = []
    for key, value in attributes.items():
        pair = convert_attribute(key, value)
        if pair is not None:
            converted.append(pair)
    return converted
