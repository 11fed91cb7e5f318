# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Validators for keys and relay URLs.

All predicates here are total: malformed input yields ``False`` (or is
dropped), never an exception.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlsplit

# 32 raw bytes, hex encoded. Case is preserved, not normalised.
HEX_KEY_PATTERN = re.compile(r"[0-9a-fA-F]{64}")

RELAY_SCHEMES = frozenset({"ws", "wss"})


def is_hex_key(value: Any) -> bool:
    """Return True iff ``value`` is exactly 64 hex characters."""
    if not isinstance(value, str):
        return False
    return HEX_KEY_PATTERN.fullmatch(value) is not None


def is_relay_url(value: Any) -> bool:
    """Return True iff ``value`` is an absolute ``ws://`` or ``wss://`` URL."""
    if not isinstance(value, str) or not value:
        return False
    try:
        parts = urlsplit(value)
        # Accessing .port validates the port component
        parts.port
    except ValueError:
        return False
    return parts.scheme in RELAY_SCHEMES and bool(parts.hostname)


def parse_relay_list(raw: str | None) -> list[str]:
    """Parse a comma separated relay list.

    Entries are trimmed; empty and invalid entries are dropped. Order is
    preserved and duplicates are kept.

    Example:
        >>> parse_relay_list("wss://a,   wss://b ,bad")
        ['wss://a', 'wss://b']
    """
    if not raw:
        return []
    relays = []
    for entry in raw.split(","):
        entry = entry.strip()
        if entry and is_relay_url(entry):
            relays.append(entry)
    return relays


def short_key(key: str) -> str:
    """Shorten a key for display as ``first8...last8``."""
    if len(key) <= 16:
        return key
    return f"{key[:8]}...{key[-8:]}"
