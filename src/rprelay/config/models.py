#
# config/models.py
#
"""
Attrs-based data models for rprelay configuration structure.
"""

import logging
from collections.abc import Mapping
from typing import Any

from attrs import define, field

from rprelay.phase import DEFAULT_LAUNCH_ID_FILE, Phase


def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_non_empty(inst: Any, attr: Any, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Field '{attr.name}' must be a non-empty string, got {value!r}")


def _validate_positive_number(inst: Any, attr: Any, value: float) -> None:
    """Validator ensures the value is a positive number."""
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        raise ValueError(f"Field '{attr.name}' must be a positive number, got {value}")


def _to_attributes(value: Mapping[str, Any] | None) -> dict[str, str]:
    return {str(k): str(v) for k, v in (value or {}).items()}


@define(frozen=True, slots=True)
class ReporterConfig:
    """Connection and launch settings for the reporting backend."""

    endpoint: str = field(validator=_validate_non_empty)
    project: str = field(validator=_validate_non_empty)
    api_key: str = field(validator=_validate_non_empty, repr=False)
    launch_name: str = field(default="rprelay", validator=_validate_non_empty)
    launch_description: str = field(default="")
    attributes: dict[str, str] = field(factory=dict, converter=_to_attributes)
    timeout: float = field(default=30.0, validator=_validate_positive_number)
    verify_ssl: bool = field(default=True)

    @property
    def base_url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/api/v1/{self.project}"


@define(frozen=True, slots=True)
class PhaseConfig:
    """Which lifecycle segment this process owns and where the launch id lives."""

    phase: Phase = field(default=Phase.COMPLETE_TEST, converter=Phase.parse)
    launch_id_file: str = field(default=DEFAULT_LAUNCH_ID_FILE)


@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings for rprelay."""

    log_level: str = field(default="WARNING", validator=_validate_log_level)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


@define(frozen=True, slots=True)
class RelayConfig:
    """Root configuration object for rprelay."""

    reporter: ReporterConfig = field()
    phase: PhaseConfig = field(factory=PhaseConfig)
    global_config: GlobalConfig = field(factory=GlobalConfig)


# 🔼⚙️
