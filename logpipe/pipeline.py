"""The log pipeline handle: level floor, routing, fan-out to sinks."""

import logging
from datetime import datetime

from logpipe.classifier import DEFAULT_BACKEND_PREFIXES, Route, classify
from logpipe.models import Level, LogRecord
from logpipe.sinks import SinkSet


class LogPipeline:
    """Owned handle through which every producer emits records.

    ``emit`` and ``log`` never raise: sink failures are isolated by the
    sink set.
    """

    def __init__(self, sinks: SinkSet, min_level: Level = Level.INFO,
                 backend_prefixes=DEFAULT_BACKEND_PREFIXES):
        self.sinks = sinks
        self.min_level = min_level
        self.backend_prefixes = tuple(backend_prefixes)
        self._closed = False

    def route(self, record: LogRecord) -> Route:
        if not record.level.enabled_for(self.min_level):
            return Route.NEITHER
        return classify(record.origin_tag, self.backend_prefixes)

    def log(self, record: LogRecord) -> list[str]:
        """Dispatch *record*. Returns the names of the sinks that received it."""
        if self._closed or not record.level.enabled_for(self.min_level):
            return []
        try:
            return self.sinks.dispatch(record)
        except Exception:
            return []

    def emit(self, origin_tag: str, level: Level, message: str) -> list[str]:
        return self.log(LogRecord(origin_tag=origin_tag, level=level, message=message))

    def close(self):
        self._closed = True
        self.sinks.close()


class LogPipelineHandler(logging.Handler):
    """Feeds stdlib ``logging`` records into a pipeline; logger name is the origin tag."""

    def __init__(self, pipeline: LogPipeline):
        super().__init__()
        self.pipeline = pipeline
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
            self.pipeline.log(LogRecord(
                origin_tag=record.name,
                level=Level.from_logging(record.levelno),
                message=message,
                timestamp=datetime.fromtimestamp(record.created).astimezone(),
            ))
        except Exception:
            self.handleError(record)
