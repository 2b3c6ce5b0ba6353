"""Logger facade used on behalf of the embedded UI layer.

Each logger carries a context name (``App``, ``Email``...) that is folded
into the message. All records share the bracketed ``[webview]`` origin tag,
so they land in the frontend file.
"""

import json
import time
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone

from logpipe.models import Level
from logpipe.pipeline import LogPipeline

WEBVIEW_ORIGIN = "[webview]"


class FrontendLogger:
    def __init__(self, context: str, pipeline: LogPipeline, origin_tag: str = WEBVIEW_ORIGIN):
        self.context = context
        self._pipeline = pipeline
        self._origin_tag = origin_tag

    def format_message(self, message: str, *args) -> str:
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        formatted_args = json.dumps(list(args), default=str) if args else ""
        return f"[{timestamp}] [{self.context}] {message} {formatted_args}".strip()

    def _log(self, level: Level, message: str, *args):
        self._pipeline.emit(self._origin_tag, level, self.format_message(message, *args))

    def trace(self, message: str, *args):
        self._log(Level.TRACE, message, *args)

    def debug(self, message: str, *args):
        self._log(Level.DEBUG, message, *args)

    def info(self, message: str, *args):
        self._log(Level.INFO, message, *args)

    def warn(self, message: str, *args):
        self._log(Level.WARN, message, *args)

    def error(self, message: str, exc=None, *args):
        details = ""
        if isinstance(exc, BaseException):
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip()
            details = f"\nError: {exc}\nStack: {stack}"
        elif exc is not None:
            details = f"\nError Details: {json.dumps(exc, default=str)}"
        self._log(Level.ERROR, message + details, *args)

    @contextmanager
    def timed(self, operation: str):
        """Log how long the block took: DEBUG on success, ERROR (and re-raise) on failure."""
        start = time.perf_counter()
        try:
            yield
        except BaseException as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            self.error(f"{operation} failed after {duration_ms:.2f}ms", exc)
            raise
        duration_ms = (time.perf_counter() - start) * 1000
        self.debug(f"{operation} completed in {duration_ms:.2f}ms")


def create_logger(context: str, pipeline: LogPipeline) -> FrontendLogger:
    return FrontendLogger(context, pipeline)
