"""Configuration loading for libregistry.

Settings come from an optional YAML file (explicit path, or ``LIBREG_CONFIG``)
and are then overridden by ``LIBREG_*`` environment variables::

    state_dir: ~/.libreg/state
    operator: alice
    audit_enabled: true
    audit_dir: ~/.libreg/audit_logs
    log_level: INFO
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from libregistry.errors import ConfigError

_DEFAULT_HOME = Path.home() / ".libreg"

_ENV_OVERRIDES = {
    "state_dir": "LIBREG_STATE_DIR",
    "operator": "LIBREG_OPERATOR",
    "audit_enabled": "LIBREG_AUDIT_ENABLED",
    "audit_dir": "LIBREG_AUDIT_DIR",
    "log_level": "LIBREG_LOG_LEVEL",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class RegistryConfig:
    """Runtime settings shared by the CLI and the web app."""

    state_dir: Path = field(default_factory=lambda: _DEFAULT_HOME / "state")
    operator: str = "operator"
    audit_enabled: bool = True
    audit_dir: Path = field(default_factory=lambda: _DEFAULT_HOME / "audit_logs")
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        self.state_dir = Path(self.state_dir).expanduser()
        self.audit_dir = Path(self.audit_dir).expanduser()
        self.log_level = str(self.log_level).upper()


def load_config(path: Optional[str | Path] = None) -> RegistryConfig:
    """Load configuration from YAML and the environment."""
    values: dict[str, Any] = {}

    config_path = path or os.environ.get("LIBREG_CONFIG")
    if config_path:
        values.update(_read_yaml(Path(config_path)))

    for key, env_var in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_var)
        if raw is not None:
            values[key] = raw

    if "audit_enabled" in values:
        values["audit_enabled"] = _parse_bool(
            values["audit_enabled"], str(config_path or "environment")
        )

    config = RegistryConfig(**values)
    if not isinstance(logging.getLevelName(config.log_level), int):
        source = "LIBREG_LOG_LEVEL" if os.environ.get("LIBREG_LOG_LEVEL") else str(config_path)
        raise ConfigError(source, f"unknown log_level {config.log_level!r}")
    return config


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(str(path), str(exc)) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(str(path), f"not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(str(path), "top level must be a mapping")

    known = {f.name for f in fields(RegistryConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(str(path), f"unknown keys: {', '.join(unknown)}")
    return data


def _parse_bool(value: Any, source: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(source, f"audit_enabled must be a boolean, got {value!r}")
