"""Shared utilities: time units and configuration validation."""

from .config_validator import ConfigurationError, load_reporter_config, validate_config
from .units import TimeUnit

__all__ = ["ConfigurationError", "TimeUnit", "load_reporter_config", "validate_config"]
