"""Log record model and the static descriptors that shape the pipeline."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum

from logpipe.classifier import SinkFilter

DAY_SECONDS = 24 * 60 * 60


class Level(IntEnum):
    """Severity, ordered by verbosity: ERROR is the most severe."""

    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

    @classmethod
    def parse(cls, name: str) -> "Level":
        key = name.strip().upper()
        aliases = {"WARNING": "WARN", "CRITICAL": "ERROR", "FATAL": "ERROR"}
        key = aliases.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown log level: {name!r}") from None

    @classmethod
    def from_logging(cls, levelno: int) -> "Level":
        """Map a stdlib logging level number onto a pipeline level."""
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        if levelno >= logging.DEBUG:
            return cls.DEBUG
        return cls.TRACE

    def enabled_for(self, floor: "Level") -> bool:
        return self <= floor


class RotationStrategy(Enum):
    KEEP_ALL = "keep_all"
    KEEP_ONE = "keep_one"


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class LogRecord:
    origin_tag: str
    level: Level
    message: str
    timestamp: datetime = field(default_factory=_local_now)


@dataclass(frozen=True)
class SinkDescriptor:
    name: str
    file_name: str | None
    filter: SinkFilter
    also_console: bool = False


@dataclass(frozen=True)
class RetentionPolicy:
    max_age_seconds: int = 30 * DAY_SECONDS
    scan_interval_seconds: int = DAY_SECONDS

    def __post_init__(self):
        if self.max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be positive")
        if self.scan_interval_seconds <= 0:
            raise ValueError("scan_interval_seconds must be positive")
