"""Configuration: defaults, then an optional YAML file, then environment variables."""

import os
import logging
from dataclasses import dataclass

import yaml

from logpipe.classifier import DEFAULT_BACKEND_PREFIXES
from logpipe.errors import ConfigError
from logpipe.formatter import VALID_TIMEZONES
from logpipe.models import DAY_SECONDS, Level, RetentionPolicy, RotationStrategy

logger = logging.getLogger(__name__)

ENV_VARS = {
    "log_dir": "LOG_DIR",
    "min_level": "LOG_LEVEL",
    "max_file_size_bytes": "LOG_MAX_FILE_SIZE_BYTES",
    "rotation_strategy": "LOG_ROTATION_STRATEGY",
    "timezone": "LOG_TIMEZONE",
    "retention_days": "LOG_RETENTION_DAYS",
    "cleanup_interval_seconds": "LOG_CLEANUP_INTERVAL_SECONDS",
    "console_output": "LOG_CONSOLE",
    "webview_output": "LOG_WEBVIEW",
    "backend_prefixes": "LOG_BACKEND_PREFIXES",
}


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_prefixes(value) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(",")
    return tuple(p.strip() for p in items if str(p).strip())


@dataclass(frozen=True)
class Config:
    log_dir: str = "./logs"
    min_level: Level = Level.INFO
    max_file_size_bytes: int = 10_000_000
    rotation_strategy: RotationStrategy = RotationStrategy.KEEP_ALL
    timezone: str = "local"
    retention_days: int = 30
    cleanup_interval_seconds: int = DAY_SECONDS
    console_output: bool = False
    webview_output: bool = True
    backend_prefixes: tuple[str, ...] = DEFAULT_BACKEND_PREFIXES

    def retention_policy(self) -> RetentionPolicy:
        return RetentionPolicy(
            max_age_seconds=self.retention_days * DAY_SECONDS,
            scan_interval_seconds=self.cleanup_interval_seconds,
        )


def load_yaml_config(path: str | None) -> dict:
    """Return the ``logging`` section of a YAML file, or {} if there is no file."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    section = data.get("logging", {}) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'logging' section in {path} must be a mapping")
    return section


def _convert(key: str, value):
    if key == "log_dir":
        return str(value)
    if key == "min_level":
        return value if isinstance(value, Level) else Level.parse(str(value))
    if key in ("max_file_size_bytes", "retention_days", "cleanup_interval_seconds"):
        number = int(value)
        if number <= 0:
            raise ValueError(f"must be positive, got {number}")
        return number
    if key == "rotation_strategy":
        return RotationStrategy(str(value).strip().lower())
    if key == "timezone":
        tz = str(value).strip().lower()
        if tz not in VALID_TIMEZONES:
            raise ValueError(f"expected one of {', '.join(VALID_TIMEZONES)}")
        return tz
    if key in ("console_output", "webview_output"):
        return _parse_bool(value)
    if key == "backend_prefixes":
        return _parse_prefixes(value)
    raise ConfigError(f"Unknown config key: {key}")


def load_config(path: str | None = None, env=None) -> Config:
    """Build Config from defaults, YAML file at *path*, then environment variables."""
    env = os.environ if env is None else env
    raw = dict(load_yaml_config(path))
    for key, var in ENV_VARS.items():
        if var in env:
            raw[key] = env[var]

    values = {}
    for key, value in raw.items():
        if key not in ENV_VARS:
            raise ConfigError(f"Unknown config key: {key}")
        try:
            values[key] = _convert(key, value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for {key}: {value!r} ({e})") from e
    return Config(**values)
