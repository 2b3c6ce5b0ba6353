"""Render log records as single text lines."""

from datetime import timezone

from logpipe.models import LogRecord

VALID_TIMEZONES = ("local", "utc")


def format_record(record: LogRecord, tz: str = "local") -> str:
    """Return ``[date][time][origin][LEVEL] message`` terminated by a newline."""
    ts = record.timestamp
    if tz == "utc":
        ts = ts.astimezone(timezone.utc)
    else:
        ts = ts.astimezone()
    line = (
        f"[{ts.strftime('%Y-%m-%d')}][{ts.strftime('%H:%M:%S')}]"
        f"[{record.origin_tag}][{record.level.name}] {record.message}"
    )
    return line if line.endswith("\n") else line + "\n"
