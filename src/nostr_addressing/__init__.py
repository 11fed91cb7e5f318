# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Nostr Addressing - domain identity verification through Nostr.

A site claims a Nostr key in a ``nostr-pubkey`` meta tag. The first key
seen for a domain is trusted on first use; later visits compare the
claim with that binding. Independently, the latest addressing record
signed by the trusted key must endorse the (domain, protocol) pair being
visited.

Architecture:
  Page claim (meta tag)
    -> Engine verdict against the binding store
    -> Addressing record fetched from the key's relays
    -> Reconciliation: VERIFIED / REVOKED_OR_UNENDORSED / NO_RECORD_FOUND
    -> Intents: persist bindings, raise or clear alerts

CLI entry point: ``nostr-addressing``
"""

__version__ = "0.1.0"

from . import (
    core as core,
)
