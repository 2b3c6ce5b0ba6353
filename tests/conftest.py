"""Shared pytest fixtures for the logpipe test suite."""

import logging

import pytest

from logpipe.bootstrap import BACKEND_SINK, FRONTEND_SINK, WEBVIEW_SINK
from logpipe.pipeline import LogPipeline
from logpipe.sinks import FileSink, SinkSet, WebviewSink


@pytest.fixture()
def log_dir(tmp_path):
    path = tmp_path / "logs"
    path.mkdir()
    return path


@pytest.fixture()
def pipeline(log_dir):
    """A pipeline with both file sinks and an in-memory webview console."""
    sinks = SinkSet([
        FileSink(BACKEND_SINK, str(log_dir), 10_000),
        FileSink(FRONTEND_SINK, str(log_dir), 10_000),
        WebviewSink(WEBVIEW_SINK),
    ])
    pipe = LogPipeline(sinks)
    yield pipe
    pipe.close()


@pytest.fixture()
def clean_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
