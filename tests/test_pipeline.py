"""Tests for the pipeline handle and the stdlib logging bridge."""

import logging

from logpipe.classifier import Route
from logpipe.models import Level, LogRecord
from logpipe.pipeline import LogPipelineHandler


def _read(path):
    return path.read_text(encoding="utf-8") if path.exists() else ""


class TestRoute:
    def test_below_floor_is_neither(self, pipeline):
        assert pipeline.route(LogRecord("postium_mail", Level.DEBUG, "x")) is Route.NEITHER
        assert pipeline.route(LogRecord("[ui-console]", Level.TRACE, "x")) is Route.NEITHER

    def test_routes_by_origin(self, pipeline):
        assert pipeline.route(LogRecord("postium_mail", Level.INFO, "x")) is Route.BACKEND
        assert pipeline.route(LogRecord("[ui-console]", Level.ERROR, "x")) is Route.FRONTEND


class TestEmit:
    def test_ui_console_record_goes_to_frontend_only(self, pipeline, log_dir):
        written = pipeline.emit("[ui-console]", Level.INFO, "button clicked")
        assert written == ["frontend", "webview"]
        assert "button clicked" in _read(log_dir / "frontend.log")
        assert "button clicked" not in _read(log_dir / "backend.log")

    def test_below_floor_discarded_everywhere(self, pipeline, log_dir):
        assert pipeline.emit("postium_mail", Level.DEBUG, "noisy") == []
        assert pipeline.sinks.get("webview").lines() == []
        assert not (log_dir / "backend.log").exists()

    def test_lower_floor_admits_debug(self, pipeline, log_dir):
        pipeline.min_level = Level.DEBUG
        pipeline.emit("postium_mail", Level.DEBUG, "detail")
        assert "[postium_mail][DEBUG] detail" in _read(log_dir / "backend.log")

    def test_emit_after_close_is_ignored(self, pipeline):
        pipeline.close()
        assert pipeline.emit("postium_mail", Level.ERROR, "late") == []

    def test_emit_never_raises(self, pipeline):
        def explode(record):
            raise RuntimeError("boom")

        pipeline.sinks.dispatch = explode
        assert pipeline.emit("postium_mail", Level.INFO, "x") == []


class TestLogPipelineHandler:
    def test_logger_name_becomes_origin(self, pipeline, log_dir):
        log = logging.getLogger("postium_mail.accounts")
        handler = LogPipelineHandler(pipeline)
        log.addHandler(handler)
        try:
            log.warning("Token for %s expires soon", "alice@example.com")
        finally:
            log.removeHandler(handler)
        content = _read(log_dir / "backend.log")
        assert "[postium_mail.accounts][WARN] Token for alice@example.com expires soon" in content

    def test_exception_text_included(self, pipeline, log_dir):
        log = logging.getLogger("postium_mail.sync")
        handler = LogPipelineHandler(pipeline)
        log.addHandler(handler)
        try:
            try:
                raise ValueError("bad header")
            except ValueError:
                log.exception("Sync failed")
        finally:
            log.removeHandler(handler)
        content = _read(log_dir / "backend.log")
        assert "[postium_mail.sync][ERROR] Sync failed" in content
        assert "ValueError: bad header" in content
