"""Shared pytest configuration and fixtures.

This module provides test fixtures that:
1. Reset OpenTelemetry global state between tests for isolation
2. Reset spanlog's lifecycle state
3. Provide an isolated destination logger wired to a RecordingHandler

Following OpenTelemetry Python SDK testing patterns.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Generator

import pytest
from opentelemetry import trace as trace_api

from spanlog.exporter import SpanLogExporter
from tests.fakes import RecordingHandler

if TYPE_CHECKING:
    from pathlib import Path


def _reset_trace_globals() -> None:
    """Reset OpenTelemetry trace globals for test isolation.

    This ensures each test starts with a clean slate and avoids
    "tracer provider already set" errors.

    WARNING: Only use this in tests. This accesses internal OTel APIs.
    """
    from opentelemetry.util._once import Once

    current_provider = trace_api.get_tracer_provider()
    shutdown_fn = getattr(current_provider, "shutdown", None)
    if callable(shutdown_fn):
        try:
            shutdown_fn()
        except Exception:  # nosec B110 - cleanup errors should not fail tests
            pass

    trace_api._TRACER_PROVIDER_SET_ONCE = Once()
    trace_api._TRACER_PROVIDER = None
    trace_api._PROXY_TRACER_PROVIDER = trace_api.ProxyTracerProvider()


def _reset_spanlog_state() -> None:
    """Reset the spanlog lifecycle state for test isolation."""
    from spanlog.sdk import lifecycle

    lifecycle._configured = False
    lifecycle._provider = None
    lifecycle._handler = None


@pytest.fixture(autouse=True)
def reset_otel_state() -> Generator[None, None, None]:
    """Reset OpenTelemetry and spanlog global state around each test."""
    _reset_trace_globals()
    _reset_spanlog_state()
    yield
    _reset_trace_globals()
    _reset_spanlog_state()


@pytest.fixture
def logger_name() -> str:
    """Return a logger name no other test uses."""
    return f"tests.spanlog.{uuid.uuid4().hex}"


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def destination(
    logger_name: str, recording_handler: RecordingHandler
) -> Generator[logging.Logger, None, None]:
    """A non-propagating logger that records everything it handles."""
    log = logging.getLogger(logger_name)
    log.propagate = False
    log.addHandler(recording_handler)
    yield log
    log.removeHandler(recording_handler)


@pytest.fixture
def exporter(destination: logging.Logger) -> SpanLogExporter:
    """A SpanLogExporter delivering to the recording destination."""
    return SpanLogExporter(logger=destination)


@pytest.fixture
def write_config(tmp_path: "Path"):
    """Write YAML content to a temporary spanlog.yaml and return its path.

    Usage:
        def test_example(write_config):
            path = write_config("service:\\n  name: demo\\n")
    """

    def _write(content: str) -> "Path":
        config_path = tmp_path / "spanlog.yaml"
        config_path.write_text(content)
        return config_path

    return _write
