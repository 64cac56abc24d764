"""
spanlog demo - finished spans written as log lines on stderr

Creates a parent span with an event and a failing child span, then shuts
the provider down so the batch is flushed.

Run:
    cd examples/spanlog_demo
    python main.py
"""

from __future__ import annotations

import time
from pathlib import Path

from opentelemetry import trace
from opentelemetry.trace import SpanKind, StatusCode

import spanlog


def main() -> None:
    spanlog.instrument(config_path=Path(__file__).parent / "spanlog.yaml")
    tracer = trace.get_tracer("example")

    try:
        with tracer.start_as_current_span(
            "example",
            kind=SpanKind.INTERNAL,
            attributes={
                "example.key": "example.value",
                "internal.request_id": "dropped-by-filter",
            },
        ) as span:
            span.add_event("example event", attributes={"example.event.key": 1})
            time.sleep(2)

            with tracer.start_as_current_span(
                "another example",
                kind=SpanKind.INTERNAL,
                attributes={"errors": ["error1", "error2"]},
            ) as child:
                child.set_status(StatusCode.ERROR, "example error")
    finally:
        spanlog.shutdown()


if __name__ == "__main__":
    main()
