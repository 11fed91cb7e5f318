# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core configuration - centralized config for the nostr_addressing package.

All environment-based configuration should flow through this module.

Usage:
    from nostr_addressing.core.config import get_config
    config = get_config()

    window = config.record_window_days
    path = config.resolved_bindings_path
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BINDINGS_PATH = Path.home() / ".nostr-addressing" / "bindings.json"

# NIP-37 addressing records
DEFAULT_RECORD_KIND = 11111


class CoreSettings(BaseSettings):
    """Core configuration settings.

    Every setting can be overridden by a ``NOSTR_ADDRESSING_*`` environment
    variable or an entry in a local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # BINDING STORE SETTINGS
    # ==========================================================================

    store_backend: str = Field(
        default="json",
        description="Binding store backend: 'json' or 'memory'",
        validation_alias="NOSTR_ADDRESSING_STORE",
    )
    bindings_path: str | None = Field(
        default=None,
        description="Path to the JSON bindings file",
        validation_alias="NOSTR_ADDRESSING_BINDINGS_PATH",
    )

    # ==========================================================================
    # ADDRESSING RECORD SETTINGS
    # ==========================================================================

    record_kind: int = Field(
        default=DEFAULT_RECORD_KIND,
        description="Nostr event kind carrying addressing records",
        validation_alias="NOSTR_ADDRESSING_RECORD_KIND",
    )
    record_window_days: int = Field(
        default=90,
        ge=1,
        description="Only records issued within this many days are considered",
        validation_alias="NOSTR_ADDRESSING_RECORD_WINDOW_DAYS",
    )
    relay_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait on a single relay before giving up",
        validation_alias="NOSTR_ADDRESSING_RELAY_TIMEOUT",
    )
    page_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Seconds to wait when fetching a page to inspect",
        validation_alias="NOSTR_ADDRESSING_PAGE_TIMEOUT",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="NOSTR_ADDRESSING_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="NOSTR_ADDRESSING_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="NOSTR_ADDRESSING_LOG_FILE",
    )

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def resolved_bindings_path(self) -> Path:
        """Bindings file location, expanded."""
        if self.bindings_path:
            return Path(self.bindings_path).expanduser()
        return DEFAULT_BINDINGS_PATH

    @property
    def record_window_seconds(self) -> int:
        """Recency window for addressing records in seconds."""
        return self.record_window_days * 24 * 60 * 60


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def set_config(config: CoreSettings) -> None:
    """Replace the global configuration, e.g. with command-line overrides."""
    global _config
    _config = config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
