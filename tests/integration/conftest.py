"""Integration test fixtures for spanlog.

These fixtures run real spans through a TracerProvider and a
BatchSpanProcessor, and capture the exporter's JSON output in memory.
"""

from __future__ import annotations

import io
import json
import logging
from typing import Any, Callable, Generator, Optional

import pytest
from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from spanlog.exporter import SpanLogExporter
from spanlog.filters import AttributeFilter
from spanlog.formatting import JsonFormatter


# =============================================================================
# OUTPUT CAPTURE
# =============================================================================


@pytest.fixture
def json_output(logger_name: str) -> Generator[io.StringIO, None, None]:
    """Attach a JSON StreamHandler writing into a StringIO buffer.

    GIVEN an integration test
    WHEN spans are exported to the logger named logger_name
    THEN their JSON lines can be read back from the buffer.
    """
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(JsonFormatter())
    log = logging.getLogger(logger_name)
    log.propagate = False
    log.addHandler(handler)
    yield buffer
    log.removeHandler(handler)


@pytest.fixture
def parse_log_lines(json_output: io.StringIO) -> Callable[[], list[dict[str, Any]]]:
    """Return a callable parsing every JSON line written so far."""

    def _parse() -> list[dict[str, Any]]:
        return [json.loads(line) for line in json_output.getvalue().splitlines()]

    return _parse


# =============================================================================
# TRACER PROVIDER
# =============================================================================


@pytest.fixture
def make_tracer(
    logger_name: str,
) -> Generator[Callable[..., tuple[TracerProvider, trace.Tracer]], None, None]:
    """Build an isolated TracerProvider exporting through SpanLogExporter.

    Usage:
        def test_example(make_tracer, parse_log_lines):
            provider, tracer = make_tracer()
            with tracer.start_as_current_span("test"):
                pass
            provider.force_flush()
            assert parse_log_lines()[0]["msg"] == "test"
    """
    providers: list[TracerProvider] = []

    def _make(
        attribute_filter: Optional[AttributeFilter] = None,
    ) -> tuple[TracerProvider, trace.Tracer]:
        exporter = SpanLogExporter(
            logger=logging.getLogger(logger_name),
            attribute_filter=attribute_filter,
        )
        provider = TracerProvider(
            resource=Resource.create({SERVICE_NAME: "integration-test-service"})
        )
        provider.add_span_processor(
            BatchSpanProcessor(exporter, schedule_delay_millis=100)
        )
        providers.append(provider)
        return provider, provider.get_tracer("test")

    yield _make

    for provider in providers:
        provider.shutdown()
