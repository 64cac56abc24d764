"""Configuration loading, parsing, and validation for spanlog."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from spanlog.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Pattern for environment variable substitution: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

VALID_FORMATS = ("json", "text")
VALID_STREAMS = ("stderr", "stdout")


@dataclass
class ServiceConfig:
    """Service identification configuration."""

    name: str
    version: str | None = None


@dataclass
class OutputConfig:
    """Where and how span records are written."""

    logger: str = "spanlog.spans"
    format: str = "json"  # "json" or "text"
    stream: str = "stderr"  # "stderr" or "stdout"
    level: str = "INFO"


@dataclass
class AttributesConfig:
    """Attribute filtering configuration."""

    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    exclude_prefixes: list[str] = field(default_factory=list)


@dataclass
class ProcessorConfig:
    """Span processor configuration."""

    # True for BatchSpanProcessor (default), False for SimpleSpanProcessor
    batch: bool = True
    schedule_delay_millis: int = 5000
    export_timeout_millis: int = 30000


@dataclass
class ValidationConfig:
    """Validation mode configuration."""

    mode: str = "permissive"  # "strict" or "permissive"


@dataclass
class SpanLogConfig:
    """Complete spanlog configuration."""

    service: ServiceConfig
    output: OutputConfig = field(default_factory=OutputConfig)
    attributes: AttributesConfig = field(default_factory=AttributesConfig)
    processor: ProcessorConfig = field(default_factory=ProcessorConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    @property
    def is_strict(self) -> bool:
        """Return True if validation mode is strict."""
        return self.validation.mode == "strict"


def _substitute_env_vars(value: str, strict: bool) -> str:
    """Substitute ${VAR_NAME} patterns with environment variable values.

    Args:
        value: String potentially containing ${VAR_NAME} patterns.
        strict: If True, raise ConfigurationError for missing env vars.

    Returns:
        String with environment variables substituted.

    Raises:
        ConfigurationError: If strict=True and an env var is not set.
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            if strict:
                raise ConfigurationError(
                    f"Environment variable '{var_name}' is not set"
                )
            logger.warning(
                "Environment variable '%s' not set, using empty string", var_name
            )
            return ""
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any, strict: bool) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v, strict) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item, strict) for item in data]
    elif isinstance(data, str):
        return _substitute_env_vars(data, strict)
    else:
        return data


def _parse_service_config(data: dict[str, Any]) -> ServiceConfig:
    """Parse service configuration section."""
    return ServiceConfig(
        name=data.get("name", ""),
        version=data.get("version"),
    )


def _parse_output_config(data: dict[str, Any]) -> OutputConfig:
    """Parse output configuration section.

    Unknown format or stream values fall back to the defaults with a warning.
    """
    output_format = str(data.get("format", "json")).lower()
    if output_format not in VALID_FORMATS:
        logger.warning(
            "Unknown output format '%s', defaulting to 'json'", output_format
        )
        output_format = "json"

    stream = str(data.get("stream", "stderr")).lower()
    if stream not in VALID_STREAMS:
        logger.warning("Unknown output stream '%s', defaulting to 'stderr'", stream)
        stream = "stderr"

    return OutputConfig(
        logger=data.get("logger", "spanlog.spans"),
        format=output_format,
        stream=stream,
        level=str(data.get("level", "INFO")).upper(),
    )


def _as_str_list(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    logger.warning("Expected a list for attributes.%s, ignoring %r", name, value)
    return []


def _parse_attributes_config(data: dict[str, Any]) -> AttributesConfig:
    """Parse attribute filtering configuration section."""
    return AttributesConfig(
        include=_as_str_list(data.get("include"), "include"),
        exclude=_as_str_list(data.get("exclude"), "exclude"),
        exclude_prefixes=_as_str_list(
            data.get("exclude_prefixes"), "exclude_prefixes"
        ),
    )


def _as_bool(value: Any, name: str, default: bool) -> bool:
    """Read a boolean that may arrive as a string after env substitution."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "1", "yes"):
        return True
    if text in ("false", "0", "no"):
        return False
    logger.warning("Expected a boolean for %s, defaulting to %s", name, default)
    return default


def _parse_processor_config(data: dict[str, Any]) -> ProcessorConfig:
    """Parse span processor configuration section."""
    return ProcessorConfig(
        batch=_as_bool(data.get("batch"), "processor.batch", True),
        schedule_delay_millis=int(data.get("schedule_delay_millis", 5000)),
        export_timeout_millis=int(data.get("export_timeout_millis", 30000)),
    )


def _parse_validation_config(data: dict[str, Any]) -> ValidationConfig:
    """Parse validation configuration section."""
    mode = data.get("mode", "permissive")
    if mode not in ("strict", "permissive"):
        logger.warning("Unknown validation mode '%s', defaulting to permissive", mode)
        mode = "permissive"
    return ValidationConfig(mode=mode)


def _validate_config(config: SpanLogConfig) -> list[str]:
    """Validate configuration and return list of error messages.

    Args:
        config: Parsed configuration to validate.

    Returns:
        List of validation error messages. Empty if valid.
    """
    errors: list[str] = []

    # Service name is required
    if not config.service.name:
        errors.append("service.name is required")

    if not config.output.logger:
        errors.append("output.logger must not be empty")

    if not isinstance(logging.getLevelName(config.output.level), int):
        errors.append(f"output.level '{config.output.level}' is not a log level")

    if config.processor.schedule_delay_millis <= 0:
        errors.append("processor.schedule_delay_millis must be positive")

    if config.processor.export_timeout_millis <= 0:
        errors.append("processor.export_timeout_millis must be positive")

    return errors


def parse_config(data: dict[str, Any], strict: bool | None = None) -> SpanLogConfig:
    """Build a SpanLogConfig from an already loaded mapping.

    Args:
        data: Configuration mapping, e.g. the parsed YAML document.
        strict: Override validation mode. If None, use mode from the data.

    Returns:
        Parsed and validated SpanLogConfig.

    Raises:
        ConfigurationError: If a value has the wrong type, or validation
                           fails in strict mode.
    """
    # Determine validation mode early (needed for env var substitution)
    validation_mode = (data.get("validation") or {}).get("mode", "permissive")
    is_strict = strict if strict is not None else (validation_mode == "strict")

    data = _substitute_env_vars_recursive(data, strict=is_strict)

    try:
        config = SpanLogConfig(
            service=_parse_service_config(data.get("service") or {}),
            output=_parse_output_config(data.get("output") or {}),
            attributes=_parse_attributes_config(data.get("attributes") or {}),
            processor=_parse_processor_config(data.get("processor") or {}),
            validation=_parse_validation_config(data.get("validation") or {}),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}") from e

    # Override validation mode if specified
    if strict is not None:
        config.validation.mode = "strict" if strict else "permissive"

    errors = _validate_config(config)
    if errors:
        if config.is_strict:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}"
            )
        for error in errors:
            logger.warning("Configuration problem ignored: %s", error)

    return config


def load_config(path: Path, strict: bool | None = None) -> SpanLogConfig:
    """Load and parse configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
        strict: Override validation mode. If None, use mode from config file.

    Returns:
        Parsed and validated SpanLogConfig.

    Raises:
        ConfigurationError: If file doesn't exist, YAML is invalid,
                           or validation fails in strict mode.
    """
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            raw_data = yaml.safe_load(f)
            if raw_data is None:
                raw_data = {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got {type(raw_data).__name__}"
        )

    return parse_config(raw_data, strict=strict)
