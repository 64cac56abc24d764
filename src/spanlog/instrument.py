"""Main instrument() entry point for spanlog."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from spanlog._internal.logging import log_info
from spanlog._internal.telemetry import (
    create_noop_tracer_provider,
    create_tracer_provider,
)
from spanlog.config import load_config
from spanlog.exceptions import ConfigurationError
from spanlog.sdk import lifecycle

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider

logger = logging.getLogger(__name__)

# Environment variable for config path
SPANLOG_CONFIG_PATH_ENV = "SPANLOG_CONFIG_PATH"


def instrument(config_path: str | Path | None = None) -> TracerProvider:
    """Route finished spans to the console as structured log lines.

    This single call:
    1. Resolves config path (arg > env var)
    2. Loads and validates configuration
    3. Creates a TracerProvider exporting through SpanLogExporter
    4. Records it and the installed handler so shutdown() can flush the
       provider and detach the handler

    Args:
        config_path: Optional path to spanlog.yaml. If omitted,
                     SPANLOG_CONFIG_PATH must be set.

    Returns:
        The configured OpenTelemetry TracerProvider.

    Raises:
        ConfigurationError: If config is missing or invalid (strict mode only).
                           In permissive mode, returns a provider without
                           an exporter.

    Examples:
        import spanlog
        spanlog.instrument(config_path="/path/to/spanlog.yaml")
    """
    resolved_path = _resolve_config_path(config_path)

    try:
        config = load_config(resolved_path)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.warning("Unexpected error loading config: %s", e)
        raise ConfigurationError(f"Failed to load configuration: {e}") from e

    installed = None
    try:
        provider, installed = create_tracer_provider(config)
    except Exception as e:
        if config.is_strict:
            raise ConfigurationError(f"Failed to create tracer provider: {e}") from e
        logger.warning("Failed to create tracer provider, using no-op: %s", e)
        provider = create_noop_tracer_provider()

    lifecycle.set_configured(provider, installed)
    log_info(f"spanlog initialized for service '{config.service.name}'")
    return provider


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """Resolve the configuration file path.

    Resolution order:
    1. Explicit config_path argument (highest priority)
    2. SPANLOG_CONFIG_PATH environment variable
    3. Raise ConfigurationError (no default/auto-discovery)
    """
    if config_path is not None:
        return Path(config_path)

    env_path = os.environ.get(SPANLOG_CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    raise ConfigurationError(
        "No configuration path provided. Either pass config_path to instrument() "
        f"or set the {SPANLOG_CONFIG_PATH_ENV} environment variable."
    )
