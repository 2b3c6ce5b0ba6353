"""Retention enforcement: periodically delete ``.log`` files past their age limit."""

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum

from logpipe.errors import (
    DirectoryUnavailable,
    FileDeleteFailed,
    FileMetadataUnreadable,
    LogPipelineError,
)
from logpipe.models import RetentionPolicy
from logpipe.rotation import LOG_EXTENSION

logger = logging.getLogger(__name__)


@dataclass
class CleanupReport:
    deleted: list[str] = field(default_factory=list)
    errors: list[LogPipelineError] = field(default_factory=list)
    skipped_scan: bool = False


def _wrap(error: LogPipelineError, cause: Exception) -> LogPipelineError:
    error.__cause__ = cause
    return error


def run_cleanup_cycle(log_dir: str, policy: RetentionPolicy, now: float | None = None) -> CleanupReport:
    """Delete every ``.log`` file in *log_dir* last modified more than
    ``policy.max_age_seconds`` before *now* (epoch seconds).

    Never raises: an unreadable directory skips the whole scan, and a file
    whose metadata or deletion fails is skipped on its own.
    """
    now = time.time() if now is None else now
    report = CleanupReport()

    try:
        entries = list(os.scandir(log_dir))
    except OSError as e:
        report.skipped_scan = True
        report.errors.append(_wrap(DirectoryUnavailable(log_dir), e))
        return report

    for entry in entries:
        if not entry.name.endswith(LOG_EXTENSION):
            continue
        try:
            if not entry.is_file():
                continue
            modified = entry.stat().st_mtime
        except FileNotFoundError:
            # Renamed or removed since the listing.
            continue
        except OSError as e:
            report.errors.append(_wrap(FileMetadataUnreadable(entry.path), e))
            continue

        if now - modified <= policy.max_age_seconds:
            continue

        try:
            os.remove(entry.path)
        except FileNotFoundError:
            continue
        except OSError as e:
            report.errors.append(_wrap(FileDeleteFailed(entry.path), e))
            continue
        report.deleted.append(entry.name)

    return report


class SchedulerState(Enum):
    STOPPED = "stopped"
    IDLE = "idle"
    SCANNING = "scanning"


class CleanupScheduler:
    """Background thread that runs a cleanup cycle every scan interval.

    The first cycle runs one interval after ``start()``. ``stop()`` wakes the
    thread immediately.
    """

    def __init__(self, log_dir: str, policy: RetentionPolicy, time_func=None):
        self._log_dir = log_dir
        self._policy = policy
        self._time_func = time_func or time.time
        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._state = SchedulerState.STOPPED
        self.cycles_run = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        if self._stop_event.is_set():
            # Threads from an earlier start keep their own, already set, event.
            self._stop_event = threading.Event()
        self._state = SchedulerState.IDLE
        self._thread = threading.Thread(
            target=self._loop, args=(self._stop_event,), name="log-cleanup", daemon=True
        )
        self._thread.start()
        logger.info("Starting log cleanup task for directory: %s", self._log_dir)

    def stop(self, timeout: float | None = 5.0):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._thread = None
        self._state = SchedulerState.STOPPED

    def run_now(self) -> CleanupReport:
        """Run one cycle on the calling thread."""
        with self._cycle_lock:
            previous = self._state
            self._state = SchedulerState.SCANNING
            try:
                report = run_cleanup_cycle(self._log_dir, self._policy, now=self._time_func())
            finally:
                if self._state is SchedulerState.SCANNING:
                    self._state = previous
            self.cycles_run += 1

        for name in report.deleted:
            logger.info("Deleted old log file: %s", os.path.join(self._log_dir, name))
        for error in report.errors:
            if isinstance(error, DirectoryUnavailable):
                logger.warning("%s (%s); retrying next cycle", error, error.__cause__)
            else:
                logger.error("%s: %s", error, error.__cause__)
        return report

    def _loop(self, stop_event: threading.Event):
        while not stop_event.wait(timeout=self._policy.scan_interval_seconds):
            try:
                self.run_now()
            except Exception:
                logger.exception("Log cleanup cycle failed")
