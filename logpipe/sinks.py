"""Output sinks and the set that fans records out to them.

A failing sink never blocks the others: the failure is reported as an ERROR
record to whichever sinks are still accepting, and the producer never sees it.
"""

import collections
import sys
import threading

from logpipe.classifier import DEFAULT_BACKEND_PREFIXES
from logpipe.errors import SinkWriteFailed
from logpipe.formatter import format_record
from logpipe.models import Level, LogRecord, RotationStrategy, SinkDescriptor
from logpipe.rotation import RotatingFile

SUBSYSTEM_ORIGIN = "logpipe.sinks"


class Sink:
    def __init__(self, descriptor: SinkDescriptor, tz: str = "local",
                 backend_prefixes=DEFAULT_BACKEND_PREFIXES):
        self.descriptor = descriptor
        self._tz = tz
        self._backend_prefixes = tuple(backend_prefixes)

    @property
    def name(self) -> str:
        return self.descriptor.name

    def accepts(self, record: LogRecord) -> bool:
        return self.descriptor.filter.accepts(record.origin_tag, self._backend_prefixes)

    def write(self, record: LogRecord):
        raise NotImplementedError

    def close(self):
        pass


class FileSink(Sink):
    def __init__(self, descriptor: SinkDescriptor, log_dir: str, max_size_bytes: int,
                 strategy: RotationStrategy = RotationStrategy.KEEP_ALL, tz: str = "local",
                 backend_prefixes=DEFAULT_BACKEND_PREFIXES):
        super().__init__(descriptor, tz, backend_prefixes)
        if not descriptor.file_name:
            raise ValueError(f"File sink '{descriptor.name}' needs a file_name")
        self.file = RotatingFile(log_dir, descriptor.file_name, max_size_bytes, strategy)

    def write(self, record: LogRecord):
        self.file.write(format_record(record, self._tz))

    def close(self):
        self.file.close()


class ConsoleSink(Sink):
    """Interactive console output (stdout by default)."""

    def __init__(self, descriptor: SinkDescriptor, stream=None, tz: str = "local"):
        super().__init__(descriptor, tz)
        self._stream = stream
        self._lock = threading.Lock()

    def write(self, record: LogRecord):
        stream = self._stream or sys.stdout
        with self._lock:
            stream.write(format_record(record, self._tz))
            stream.flush()


class WebviewSink(Sink):
    """Embedded UI console: keeps a bounded tail and forwards lines to a listener."""

    def __init__(self, descriptor: SinkDescriptor, listener=None, capacity: int = 1000,
                 tz: str = "local"):
        super().__init__(descriptor, tz)
        self._listener = listener
        self._lines = collections.deque(maxlen=capacity)
        self._lock = threading.Lock()

    def set_listener(self, listener):
        self._listener = listener

    def lines(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    def write(self, record: LogRecord):
        line = format_record(record, self._tz).rstrip("\n")
        with self._lock:
            self._lines.append(line)
        if self._listener is not None:
            self._listener(record.level, line)


class SinkSet:
    def __init__(self, sinks: list[Sink]):
        self._sinks = list(sinks)
        self._failures = collections.Counter()
        self._lock = threading.Lock()

    @property
    def sinks(self) -> list[Sink]:
        return list(self._sinks)

    def get(self, name: str) -> Sink | None:
        for sink in self._sinks:
            if sink.name == name:
                return sink
        return None

    def failure_count(self, name: str) -> int:
        with self._lock:
            return self._failures[name]

    def dispatch(self, record: LogRecord) -> list[str]:
        """Write *record* to every accepting sink. Returns names that succeeded."""
        written = []
        failed: list[tuple[Sink, SinkWriteFailed]] = []
        for sink in self._sinks:
            if not sink.accepts(record):
                continue
            try:
                sink.write(record)
            except Exception as exc:
                error = SinkWriteFailed(sink.name)
                error.__cause__ = exc
                failed.append((sink, error))
            else:
                written.append(sink.name)

        if failed:
            with self._lock:
                for sink, _ in failed:
                    self._failures[sink.name] += 1
            self._report_failures(failed, exclude={sink.name for sink, _ in failed})
        return written

    def _report_failures(self, failed, exclude: set[str]):
        for _, error in failed:
            notice = LogRecord(
                origin_tag=SUBSYSTEM_ORIGIN,
                level=Level.ERROR,
                message=f"{error}: {error.__cause__}",
            )
            for sink in self._sinks:
                if sink.name in exclude or not sink.accepts(notice):
                    continue
                try:
                    sink.write(notice)
                except Exception:
                    # Nowhere left to report; drop.
                    continue

    def close(self):
        for sink in self._sinks:
            try:
                sink.close()
            except OSError:
                continue
