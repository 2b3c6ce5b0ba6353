"""Tests for levels, records, and retention policy."""

import logging
from dataclasses import FrozenInstanceError

import pytest

from logpipe.models import DAY_SECONDS, Level, LogRecord, RetentionPolicy


class TestLevel:
    def test_parse_names_and_aliases(self):
        assert Level.parse("info") is Level.INFO
        assert Level.parse(" Warn ") is Level.WARN
        assert Level.parse("WARNING") is Level.WARN
        assert Level.parse("critical") is Level.ERROR
        assert Level.parse("trace") is Level.TRACE

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            Level.parse("loud")

    def test_from_logging(self):
        assert Level.from_logging(logging.CRITICAL) is Level.ERROR
        assert Level.from_logging(logging.ERROR) is Level.ERROR
        assert Level.from_logging(logging.WARNING) is Level.WARN
        assert Level.from_logging(logging.INFO) is Level.INFO
        assert Level.from_logging(logging.DEBUG) is Level.DEBUG
        assert Level.from_logging(5) is Level.TRACE

    def test_enabled_for_floor(self):
        assert Level.ERROR.enabled_for(Level.INFO)
        assert Level.WARN.enabled_for(Level.INFO)
        assert Level.INFO.enabled_for(Level.INFO)
        assert not Level.DEBUG.enabled_for(Level.INFO)
        assert not Level.TRACE.enabled_for(Level.INFO)


class TestLogRecord:
    def test_timestamp_is_aware(self):
        record = LogRecord("postium_mail", Level.INFO, "hello")
        assert record.timestamp.tzinfo is not None

    def test_frozen(self):
        record = LogRecord("postium_mail", Level.INFO, "hello")
        with pytest.raises(FrozenInstanceError):
            record.message = "changed"


class TestRetentionPolicy:
    def test_defaults(self):
        policy = RetentionPolicy()
        assert policy.max_age_seconds == 30 * DAY_SECONDS
        assert policy.scan_interval_seconds == 86400

    @pytest.mark.parametrize("kwargs", [{"max_age_seconds": 0}, {"scan_interval_seconds": -1}])
    def test_rejects_non_positive(self, kwargs):
        with pytest.raises(ValueError):
            RetentionPolicy(**kwargs)
