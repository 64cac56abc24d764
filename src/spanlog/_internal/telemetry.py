"""Exporter, handler and TracerProvider creation from configuration."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor

from spanlog.exceptions import ConfigurationError
from spanlog.exporter import SpanLogExporter
from spanlog.filters import (
    AttributeFilter,
    all_of,
    exclude_keys,
    exclude_prefixes,
    include_keys,
)
from spanlog.formatting import FORMATTERS

if TYPE_CHECKING:
    from spanlog.config import SpanLogConfig

logger = logging.getLogger(__name__)

# Name given to the handler installed on the destination logger
HANDLER_NAME = "spanlog"


def create_attribute_filter(config: SpanLogConfig) -> Optional[AttributeFilter]:
    """Combine the configured include/exclude rules into one predicate.

    Returns None when no rule is configured.
    """
    rules: list[AttributeFilter] = []
    if config.attributes.include:
        rules.append(include_keys(*config.attributes.include))
    if config.attributes.exclude:
        rules.append(exclude_keys(*config.attributes.exclude))
    if config.attributes.exclude_prefixes:
        rules.append(exclude_prefixes(*config.attributes.exclude_prefixes))
    return all_of(*rules)


def create_handler(config: SpanLogConfig) -> logging.Handler:
    """Create the stream handler that renders span records."""
    stream = sys.stdout if config.output.stream == "stdout" else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(FORMATTERS[config.output.format]())

    level = logging.getLevelName(config.output.level)
    handler.setLevel(level if isinstance(level, int) else logging.INFO)
    return handler


@dataclass
class InstalledHandler:
    """A handler attached to a destination logger by install_handler()."""

    destination: logging.Logger
    handler: logging.Handler
    # Destination's propagate flag before the handler was installed
    propagate: bool

    def remove(self) -> None:
        """Detach and close the handler and restore propagation."""
        self.destination.removeHandler(self.handler)
        self.handler.close()
        self.destination.propagate = self.propagate


def install_handler(
    destination: logging.Logger, handler: logging.Handler
) -> InstalledHandler:
    """Attach the handler, replacing one installed by an earlier call.

    The destination stops propagating so records are not printed twice by
    handlers on the root logger.
    """
    installed = InstalledHandler(destination, handler, destination.propagate)
    for existing in list(destination.handlers):
        if existing.get_name() == HANDLER_NAME:
            destination.removeHandler(existing)
            existing.close()
    destination.addHandler(handler)
    destination.propagate = False
    return installed


def create_exporter(
    config: SpanLogConfig,
    destination: Optional[logging.Logger] = None,
) -> SpanLogExporter:
    """Create a SpanLogExporter from configuration.

    Args:
        config: Validated configuration.
        destination: Logger to deliver to. Defaults to output.logger.

    Raises:
        ConfigurationError: If no destination logger can be determined.
    """
    if destination is None:
        if not config.output.logger:
            raise ConfigurationError("output.logger must name a logger")
        destination = logging.getLogger(config.output.logger)

    return SpanLogExporter(
        logger=destination,
        attribute_filter=create_attribute_filter(config),
    )


def create_tracer_provider(
    config: SpanLogConfig,
) -> tuple[TracerProvider, InstalledHandler]:
    """Create a TracerProvider that exports to the configured logger.

    Args:
        config: Validated configuration.

    Returns:
        The TracerProvider, already set as the global provider, and the
        handler installed on the destination logger.
    """
    resource_attrs: dict[str, str] = {
        SERVICE_NAME: config.service.name,
    }
    if config.service.version:
        resource_attrs[SERVICE_VERSION] = config.service.version

    resource = Resource.create(resource_attrs)
    provider = TracerProvider(resource=resource)

    exporter = create_exporter(config)
    installed = install_handler(exporter.destination, create_handler(config))

    # Choose span processor based on configuration
    processor: BatchSpanProcessor | SimpleSpanProcessor
    if config.processor.batch:
        processor = BatchSpanProcessor(
            exporter,
            schedule_delay_millis=config.processor.schedule_delay_millis,
            export_timeout_millis=config.processor.export_timeout_millis,
        )
    else:
        processor = SimpleSpanProcessor(exporter)

    provider.add_span_processor(processor)

    # Set as global tracer provider
    trace.set_tracer_provider(provider)

    logger.debug(
        "TracerProvider configured with span log output to '%s' "
        "(format=%s, batch=%s)",
        config.output.logger,
        config.output.format,
        config.processor.batch,
    )

    return provider, installed


def create_noop_tracer_provider() -> TracerProvider:
    """Create a minimal TracerProvider without exporters.

    This is used in permissive mode when the exporter cannot be set up.
    The provider is functional but doesn't export any spans.
    """
    resource = Resource.create({SERVICE_NAME: "spanlog-noop"})
    provider = TracerProvider(resource=resource)

    # Set as global tracer provider
    trace.set_tracer_provider(provider)

    logger.debug("No-op TracerProvider configured (permissive mode fallback)")

    return provider
