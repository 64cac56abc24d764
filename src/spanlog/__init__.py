"""spanlog: write finished OpenTelemetry spans as structured log lines.

Attach the exporter to any TracerProvider:

    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from spanlog import SpanLogExporter

    provider = TracerProvider()
    provider.add_span_processor(BatchSpanProcessor(SpanLogExporter()))

or let spanlog build one from a YAML file:

    import spanlog
    spanlog.instrument(config_path="/path/to/spanlog.yaml")
"""

from __future__ import annotations

from spanlog.attributes import convert_attribute, convert_attributes
from spanlog.config import SpanLogConfig, load_config
from spanlog.exceptions import ConfigurationError, ShutdownTimeoutError
from spanlog.exporter import SpanLogExporter
from spanlog.formatting import JsonFormatter, TextFormatter
from spanlog.instrument import instrument
from spanlog.records import SpanLogRecord, format_duration
from spanlog.sdk.lifecycle import is_configured, shutdown

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "JsonFormatter",
    "ShutdownTimeoutError",
    "SpanLogConfig",
    "SpanLogExporter",
    "SpanLogRecord",
    "TextFormatter",
    "__version__",
    "convert_attribute",
    "convert_attributes",
    "format_duration",
    "instrument",
    "is_configured",
    "load_config",
    "shutdown",
]
