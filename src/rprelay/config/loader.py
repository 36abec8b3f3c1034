#
# config/loader.py
#
"""
Loads rprelay configuration from an inline mapping or a TOML/JSON file.
"""

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from rprelay.config.models import GlobalConfig, PhaseConfig, RelayConfig, ReporterConfig
from rprelay.exceptions import ConfigurationError
from rprelay.telemetry import StructLogger

log: StructLogger = structlog.get_logger("rprelay.config.loader")

# (section, key) pairs that environment variables may override.
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "RP_ENDPOINT": ("reporter", "endpoint"),
    "RP_PROJECT": ("reporter", "project"),
    "RP_API_KEY": ("reporter", "api_key"),
    "RP_LAUNCH": ("reporter", "launch_name"),
    "RP_PHASE": ("phase", "phase"),
    "RP_LAUNCH_ID_FILE": ("phase", "launch_id_file"),
}


def _read_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file '{path}': {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw.decode("utf-8"))
        else:
            data = tomllib.loads(raw.decode("utf-8"))
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{path}' must contain a table/object at top level")
    return data


def _section(data: Mapping[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Config section '{name}' must be a table/object")
    return dict(value)


def load_config(
    source: "Mapping[str, Any] | str | os.PathLike",
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> RelayConfig:
    """
    Builds a RelayConfig from an inline mapping or a config file path.

    Relative paths are resolved against ``cwd`` (default: the process working
    directory). Environment variables listed in ENV_OVERRIDES take precedence
    over values from the source.

    Raises:
        ConfigurationError: If the source cannot be read or fails validation.
    """
    if isinstance(source, Mapping):
        data = dict(source)
        origin = "<inline>"
    elif isinstance(source, str | os.PathLike):
        path = Path(source).expanduser()
        if not path.is_absolute():
            path = (cwd or Path.cwd()) / path
        data = _read_file(path)
        origin = str(path)
    else:
        raise ConfigurationError(
            f"Config source must be a mapping or a file path, got {type(source).__name__}"
        )

    sections = {
        "reporter": _section(data, "reporter"),
        "phase": _section(data, "phase"),
        "global": _section(data, "global"),
    }

    env = os.environ if environ is None else environ
    for var, (section, key) in ENV_OVERRIDES.items():
        if env.get(var):
            sections[section][key] = env[var]
            log.debug("Config value overridden from environment", variable=var, key=f"{section}.{key}")

    try:
        config = RelayConfig(
            reporter=ReporterConfig(**sections["reporter"]),
            phase=PhaseConfig(**sections["phase"]),
            global_config=GlobalConfig(**sections["global"]),
        )
    except (TypeError, ValueError) as e:
        log.error("Configuration validation failed", origin=origin, error=str(e))
        raise ConfigurationError(f"Invalid configuration in {origin}: {e}") from e

    log.debug(
        "Configuration loaded",
        origin=origin,
        phase=config.phase.phase.value,
        project=config.reporter.project,
    )
    return config


# 🔼⚙️
