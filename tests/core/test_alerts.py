"""Tests for nostr_addressing.core.alerts module."""

from __future__ import annotations

import logging

from nostr_addressing.core.alerts import LoggingAlertSink, MemoryAlertSink
from nostr_addressing.core.models import AlertCleared, AlertRaised


class TestMemoryAlertSink:
    """Tests for MemoryAlertSink."""

    def test_raise_and_clear(self):
        sink = MemoryAlertSink()
        sink.raise_alert("example.com", ["pubkey_mismatch"])
        assert sink.has_warning("example.com")
        assert sink.warned_domains == {"example.com"}

        sink.clear_alert("example.com")
        assert not sink.has_warning("example.com")
        assert sink.events == [
            AlertRaised("example.com", ("pubkey_mismatch",)),
            AlertCleared("example.com"),
        ]

    def test_clear_unknown_domain(self):
        sink = MemoryAlertSink()
        sink.clear_alert("never.example")
        assert sink.warned_domains == set()

    def test_warned_domains_is_a_copy(self):
        sink = MemoryAlertSink()
        sink.raise_alert("example.com")
        sink.warned_domains.clear()
        assert sink.has_warning("example.com")


class TestLoggingAlertSink:
    """Tests for LoggingAlertSink."""

    def test_raise_logs_warning(self, caplog):
        sink = LoggingAlertSink()
        with caplog.at_level(logging.WARNING, logger="nostr_addressing.alerts"):
            sink.raise_alert("example.com", ["no_record_found"])

        [record] = caplog.records
        assert record.levelno == logging.WARNING
        assert "example.com" in record.getMessage()
        assert record.extra_data == {"domain": "example.com", "reasons": ["no_record_found"]}

    def test_clear_is_quiet(self, caplog):
        sink = LoggingAlertSink()
        with caplog.at_level(logging.WARNING, logger="nostr_addressing.alerts"):
            sink.clear_alert("example.com")
        assert caplog.records == []
