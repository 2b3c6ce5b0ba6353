"""Size-based rotation for a single log file.

The active file is ``<stem>.log``. When the next record would push it past
the size limit it is renamed to ``<stem>.<n>.log`` and a fresh active file is
opened. Segment numbers only grow and resume from the highest one on disk.
"""

import logging
import os
import re
import threading
from dataclasses import dataclass

from logpipe.models import RotationStrategy

logger = logging.getLogger(__name__)

LOG_EXTENSION = ".log"


@dataclass
class RotationState:
    current_file_path: str
    current_size_bytes: int
    max_size_bytes: int
    segment_index: int


def segment_name(stem: str, index: int) -> str:
    return f"{stem}.{index}{LOG_EXTENSION}"


def find_last_segment(log_dir: str, stem: str) -> int:
    """Highest rotated segment index present for *stem*, or 0 if none."""
    pattern = re.compile(rf"^{re.escape(stem)}\.(\d+){re.escape(LOG_EXTENSION)}$")
    highest = 0
    try:
        names = os.listdir(log_dir)
    except OSError:
        return 0
    for name in names:
        match = pattern.match(name)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


class RotatingFile:
    """Append-only file with keep-all rotation. Thread-safe per instance."""

    def __init__(self, log_dir: str, stem: str, max_size_bytes: int,
                 strategy: RotationStrategy = RotationStrategy.KEEP_ALL):
        if max_size_bytes <= 0:
            raise ValueError("max_size_bytes must be positive")
        self._log_dir = log_dir
        self._stem = stem
        self._max_size_bytes = max_size_bytes
        self._strategy = strategy
        self._lock = threading.Lock()
        self._file = None
        self._state: RotationState | None = None

    @property
    def path(self) -> str:
        return os.path.join(self._log_dir, self._stem + LOG_EXTENSION)

    @property
    def state(self) -> RotationState | None:
        return self._state

    def _open(self):
        self._file = open(self.path, "ab")

    def _close(self):
        if self._file and not self._file.closed:
            self._file.close()
        self._file = None

    def _ensure_open(self):
        if self._state is None:
            os.makedirs(self._log_dir, exist_ok=True)
            self._open()
            self._state = RotationState(
                current_file_path=self.path,
                current_size_bytes=os.path.getsize(self.path),
                max_size_bytes=self._max_size_bytes,
                segment_index=find_last_segment(self._log_dir, self._stem),
            )
        elif self._file is None:
            self._open()
            self._state.current_size_bytes = os.path.getsize(self.path)

    def _rotate(self) -> str:
        """Rename the active file to the next segment. Returns the segment path."""
        state = self._state
        self._close()
        state.segment_index += 1
        rotated_path = os.path.join(self._log_dir, segment_name(self._stem, state.segment_index))
        os.rename(self.path, rotated_path)
        if self._strategy is RotationStrategy.KEEP_ONE and state.segment_index > 1:
            previous = os.path.join(self._log_dir, segment_name(self._stem, state.segment_index - 1))
            try:
                os.remove(previous)
            except FileNotFoundError:
                pass
        self._open()
        state.current_size_bytes = 0
        return rotated_path

    def write(self, line: str) -> str | None:
        """Append one whole record. Returns the rotated segment path if rotation occurred."""
        data = line.encode("utf-8")
        with self._lock:
            self._ensure_open()
            rotated_path = None
            state = self._state
            if state.current_size_bytes > 0 and state.current_size_bytes + len(data) > state.max_size_bytes:
                rotated_path = self._rotate()
            self._file.write(data)
            self._file.flush()
            state.current_size_bytes += len(data)
        if rotated_path:
            logger.debug("Rotated %s to %s", self.path, rotated_path)
        return rotated_path

    def close(self):
        with self._lock:
            self._close()
