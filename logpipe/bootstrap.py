"""Assemble the logging subsystem at process start."""

import logging
import os
import sys
import threading
import traceback
from dataclasses import dataclass

from logpipe.classifier import SinkFilter
from logpipe.cleanup import CleanupScheduler
from logpipe.config import Config
from logpipe.models import Level, LogRecord, SinkDescriptor
from logpipe.pipeline import LogPipeline, LogPipelineHandler
from logpipe.sinks import ConsoleSink, FileSink, Sink, SinkSet, WebviewSink

logger = logging.getLogger(__name__)

BACKEND_SINK = SinkDescriptor(name="backend", file_name="backend", filter=SinkFilter.BACKEND)
FRONTEND_SINK = SinkDescriptor(name="frontend", file_name="frontend", filter=SinkFilter.FRONTEND)
CONSOLE_SINK = SinkDescriptor(name="console", file_name=None, filter=SinkFilter.ALL, also_console=True)
WEBVIEW_SINK = SinkDescriptor(name="webview", file_name=None, filter=SinkFilter.ALL, also_console=True)

SINK_DESCRIPTORS = (BACKEND_SINK, FRONTEND_SINK, CONSOLE_SINK, WEBVIEW_SINK)

CRASH_ORIGIN = "logpipe.crash"


@dataclass
class LoggingSubsystem:
    config: Config
    pipeline: LogPipeline
    scheduler: CleanupScheduler
    handler: LogPipelineHandler
    previous_root_level: int | None = None

    def shutdown(self):
        self.scheduler.stop()
        root = logging.getLogger()
        root.removeHandler(self.handler)
        if self.previous_root_level is not None:
            root.setLevel(self.previous_root_level)
        self.pipeline.close()


def build_sinks(config: Config, webview_listener=None, console_stream=None,
                descriptors=SINK_DESCRIPTORS) -> list[Sink]:
    """File sinks for plain descriptors; console mirrors for ``also_console`` ones.

    A console mirror named like the webview sink feeds the embedded UI, any
    other one writes to the console. Each is skipped when disabled in config.
    """
    sinks: list[Sink] = []
    for descriptor in descriptors:
        if not descriptor.also_console:
            sinks.append(FileSink(
                descriptor, config.log_dir, config.max_file_size_bytes,
                strategy=config.rotation_strategy, tz=config.timezone,
                backend_prefixes=config.backend_prefixes,
            ))
        elif descriptor.name == WEBVIEW_SINK.name:
            if config.webview_output:
                sinks.append(WebviewSink(descriptor, listener=webview_listener, tz=config.timezone))
        elif config.console_output:
            sinks.append(ConsoleSink(descriptor, stream=console_stream, tz=config.timezone))
    return sinks


def start_logging(config: Config, webview_listener=None, console_stream=None,
                  install_root_handler: bool = True) -> LoggingSubsystem:
    """Open sinks, bridge stdlib logging, and start the cleanup thread.

    Must complete before the first producer call. Returns without waiting
    for any cleanup cycle.
    """
    os.makedirs(config.log_dir, exist_ok=True)
    pipeline = LogPipeline(
        SinkSet(build_sinks(config, webview_listener, console_stream)),
        min_level=config.min_level,
        backend_prefixes=config.backend_prefixes,
    )

    handler = LogPipelineHandler(pipeline)
    previous_root_level = None
    if install_root_handler:
        root = logging.getLogger()
        root.addHandler(handler)
        if root.level > logging.DEBUG:
            previous_root_level = root.level
            root.setLevel(logging.DEBUG)

    scheduler = CleanupScheduler(config.log_dir, config.retention_policy())
    scheduler.start()

    logger.info(
        "Logging started: dir=%s, level=%s, max_size=%d bytes, retention=%dd, rotation=%s",
        config.log_dir, config.min_level.name, config.max_file_size_bytes,
        config.retention_days, config.rotation_strategy.value,
    )
    return LoggingSubsystem(
        config=config, pipeline=pipeline, scheduler=scheduler, handler=handler,
        previous_root_level=previous_root_level,
    )


def install_excepthook(pipeline: LogPipeline):
    """Send uncaught exceptions from any thread to the backend log."""

    def _report(exc_type, exc, tb, where: str):
        stack = "".join(traceback.format_exception(exc_type, exc, tb)).rstrip()
        pipeline.log(LogRecord(
            origin_tag=CRASH_ORIGIN,
            level=Level.ERROR,
            message=f"Unhandled exception in {where}\n{stack}",
        ))

    previous_hook = sys.excepthook
    previous_thread_hook = threading.excepthook

    def excepthook(exc_type, exc, tb):
        _report(exc_type, exc, tb, "main thread")
        previous_hook(exc_type, exc, tb)

    def thread_excepthook(args):
        if args.exc_type is not SystemExit:
            name = args.thread.name if args.thread is not None else "unknown thread"
            _report(args.exc_type, args.exc_value, args.exc_traceback, f"thread {name}")
        previous_thread_hook(args)

    sys.excepthook = excepthook
    threading.excepthook = thread_excepthook
