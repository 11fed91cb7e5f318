# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Shared CLI helpers."""

from __future__ import annotations

from ..core.alerts import LoggingAlertSink
from ..core.verifier import AddressingVerifier
from ..relay.client import RelayRecordFetcher
from ..store.bindings import get_binding_store

# check/resolve exit status when the domain is alerting
EXIT_ALERT = 2


def build_verifier() -> AddressingVerifier:
    """Verifier wired to the configured store, Nostr relays and the log."""
    return AddressingVerifier(get_binding_store(), RelayRecordFetcher(), LoggingAlertSink())
