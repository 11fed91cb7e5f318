"""Tests for nostr_addressing.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from nostr_addressing.core.config import (
    DEFAULT_BINDINGS_PATH,
    DEFAULT_RECORD_KIND,
    CoreSettings,
    clear_config_cache,
    get_config,
)


class TestCoreSettings:
    """Tests for CoreSettings."""

    def test_defaults(self, clean_env):
        settings = CoreSettings(_env_file=None)
        assert settings.store_backend == "json"
        assert settings.record_kind == DEFAULT_RECORD_KIND == 11111
        assert settings.record_window_days == 90
        assert settings.relay_timeout == 10.0
        assert settings.page_timeout == 15.0
        assert settings.resolved_bindings_path == DEFAULT_BINDINGS_PATH

    def test_window_seconds(self, clean_env):
        settings = CoreSettings(_env_file=None)
        assert settings.record_window_seconds == 90 * 24 * 60 * 60

    def test_env_overrides(self, clean_env, monkeypatch, tmp_path):
        monkeypatch.setenv("NOSTR_ADDRESSING_STORE", "memory")
        monkeypatch.setenv("NOSTR_ADDRESSING_BINDINGS_PATH", str(tmp_path / "b.json"))
        monkeypatch.setenv("NOSTR_ADDRESSING_RECORD_WINDOW_DAYS", "7")
        monkeypatch.setenv("NOSTR_ADDRESSING_RELAY_TIMEOUT", "2.5")

        settings = CoreSettings(_env_file=None)

        assert settings.store_backend == "memory"
        assert settings.resolved_bindings_path == tmp_path / "b.json"
        assert settings.record_window_days == 7
        assert settings.relay_timeout == 2.5

    def test_bindings_path_expands_user(self, clean_env, monkeypatch):
        monkeypatch.setenv("NOSTR_ADDRESSING_BINDINGS_PATH", "~/trust.json")
        settings = CoreSettings(_env_file=None)
        assert settings.resolved_bindings_path == Path.home() / "trust.json"

    def test_rejects_non_positive_window(self, clean_env, monkeypatch):
        monkeypatch.setenv("NOSTR_ADDRESSING_RECORD_WINDOW_DAYS", "0")
        with pytest.raises(ValidationError):
            CoreSettings(_env_file=None)


class TestGetConfig:
    """Tests for the cached config accessor."""

    def test_cached(self, clean_env):
        assert get_config() is get_config()

    def test_clear_cache(self, clean_env, monkeypatch):
        first = get_config()
        monkeypatch.setenv("NOSTR_ADDRESSING_RECORD_KIND", "30000")
        assert get_config().record_kind == first.record_kind

        clear_config_cache()
        assert get_config().record_kind == 30000
