"""
Configuration validation for reporters and their schedules.

This module provides validation for:
- Reporter configurations (tags, units, filter, idle suppression)
- Schedule configurations (period, initial delay)
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .units import TimeUnit

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""
    pass


REPORTER_DEFAULTS = {
    'tags': {},
    'rate_unit': 'SECONDS',
    'duration_unit': 'MILLISECONDS',
    'skip_idle_metrics': False,
    'filter': {},
}

SCHEDULE_DEFAULTS = {
    'initial_delay_s': None,
    'report_on_stop': False,
}


class ReporterConfigValidator:
    """Validates the ``reporter`` section."""

    KNOWN_FIELDS = set(REPORTER_DEFAULTS)
    FILTER_FIELDS = {'prefix', 'include', 'exclude'}

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        """Validate reporter configuration, filling in defaults for missing keys."""
        errors = []

        for key, default in REPORTER_DEFAULTS.items():
            if key not in config:
                config[key] = copy.deepcopy(default)
                logger.debug(f"Reporter config: defaulted {key} to {config[key]!r}")

        unknown = set(config) - cls.KNOWN_FIELDS
        if unknown:
            logger.warning(f"Reporter config: ignoring unknown fields {sorted(unknown)}")

        tags = config['tags']
        if tags is None:
            config['tags'] = {}
        elif not isinstance(tags, dict):
            errors.append(f"Reporter tags must be a mapping, got {type(tags).__name__}")
        else:
            for key, value in tags.items():
                if not isinstance(key, str) or not isinstance(value, str):
                    errors.append(f"Reporter tag {key!r} must map a string to a string")

        for unit_field in ('rate_unit', 'duration_unit'):
            try:
                TimeUnit.parse(config[unit_field])
            except ValueError as e:
                errors.append(f"Reporter {unit_field}: {e}")

        if not isinstance(config['skip_idle_metrics'], bool):
            errors.append(
                f"Reporter skip_idle_metrics must be true/false, got {config['skip_idle_metrics']!r}"
            )

        errors.extend(cls._validate_filter(config['filter']))

        return errors

    @classmethod
    def _validate_filter(cls, metric_filter: Any) -> List[str]:
        errors = []

        if metric_filter is None:
            return errors
        if not isinstance(metric_filter, dict):
            errors.append(f"Reporter filter must be a mapping, got {type(metric_filter).__name__}")
            return errors

        unknown = set(metric_filter) - cls.FILTER_FIELDS
        if unknown:
            errors.append(f"Reporter filter has unknown fields: {sorted(unknown)}")

        prefix = metric_filter.get('prefix')
        if prefix is not None and not isinstance(prefix, str):
            errors.append(f"Reporter filter prefix must be a string, got {prefix!r}")

        for list_field in ('include', 'exclude'):
            names = metric_filter.get(list_field)
            if names is not None and not isinstance(names, list):
                errors.append(f"Reporter filter {list_field} must be a list of metric names")

        return errors


class ScheduleConfigValidator:
    """Validates the ``schedule`` section."""

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        errors = []

        if 'period_s' not in config:
            errors.append("Schedule missing period_s")
        elif not isinstance(config['period_s'], (int, float)) or config['period_s'] <= 0:
            errors.append(f"Invalid schedule period_s: {config['period_s']}")

        for key, default in SCHEDULE_DEFAULTS.items():
            if key not in config:
                config[key] = default

        delay = config['initial_delay_s']
        if delay is not None and (not isinstance(delay, (int, float)) or delay < 0):
            errors.append(f"Invalid schedule initial_delay_s: {delay}")

        if not isinstance(config['report_on_stop'], bool):
            errors.append(f"Schedule report_on_stop must be true/false, got {config['report_on_stop']!r}")

        return errors


def validate_config(config: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Validate a complete configuration with ``reporter`` and optional ``schedule`` sections."""
    all_errors = []

    if not isinstance(config, dict):
        return False, ["Configuration must be a mapping"]

    if 'reporter' not in config:
        logger.warning("Configuration has no reporter section, using defaults")
        config['reporter'] = {}

    if not isinstance(config['reporter'], dict):
        all_errors.append("reporter section must be a mapping")
    else:
        all_errors.extend(ReporterConfigValidator.validate(config['reporter']))

    if 'schedule' in config:
        if not isinstance(config['schedule'], dict):
            all_errors.append("schedule section must be a mapping")
        else:
            all_errors.extend(ScheduleConfigValidator.validate(config['schedule']))

    return len(all_errors) == 0, all_errors


def load_reporter_config(config_path: str) -> Tuple[bool, List[str], Optional[Dict[str, Any]]]:
    """
    Load and validate a configuration file.

    Returns:
        (is_valid, errors, config)
    """
    config_file = Path(config_path)

    with open(config_file) as f:
        if config_file.suffix in ['.yaml', '.yml']:
            config = yaml.safe_load(f)
        else:
            config = json.load(f)

    if config is None:
        config = {}

    is_valid, errors = validate_config(config)

    if not is_valid:
        logger.warning(f"Configuration has {len(errors)} validation errors")
        for error in errors[:10]:
            logger.warning(f"  - {error}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more errors")

    return is_valid, errors, config
