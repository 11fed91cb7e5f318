"""Global test fixtures for the nostr-addressing test suite."""

from __future__ import annotations

import os
import time
from collections.abc import Sequence

import pytest
from coincurve import PrivateKey

from nostr_addressing.core.config import clear_config_cache
from nostr_addressing.core.models import AddressingRecord, Binding, DomainEndorsement
from nostr_addressing.relay.events import NostrEvent, compute_event_id
from nostr_addressing.store.bindings import reset_binding_store

# ============================================================================
# Keys
# ============================================================================

KEY_1 = "a" * 64
KEY_2 = "b" * 64
KEY_3 = "c" * 64

RELAY_A = "wss://relay-a.example"
RELAY_B = "wss://relay-b.example"

NOW = 1_700_000_000


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop cached config and the global store around every test."""
    clear_config_cache()
    reset_binding_store()
    yield
    clear_config_cache()
    reset_binding_store()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all NOSTR_ADDRESSING_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("NOSTR_ADDRESSING_"):
            monkeypatch.delenv(key, raising=False)


# ============================================================================
# Record Fixtures
# ============================================================================


def make_record(
    issuer: str = KEY_1,
    endorsements: Sequence[tuple[str, str]] = (("example.com", "https"),),
    issued_at: int = NOW,
    record_id: str = "1" * 64,
) -> AddressingRecord:
    return AddressingRecord(
        record_id=record_id,
        issuer_key=issuer,
        issued_at=issued_at,
        endorsements=tuple(DomainEndorsement(d, p) for d, p in endorsements),
    )


def make_binding(domain: str = "example.com", pubkey: str = KEY_1, relays: Sequence[str] = (RELAY_A,)) -> Binding:
    return Binding(domain=domain, pubkey=pubkey, relays=tuple(relays))


class FakeFetcher:
    """RecordFetcher returning canned records per key and logging calls."""

    def __init__(self, records: dict[str, AddressingRecord | None] | None = None, error: Exception | None = None):
        self.records = records or {}
        self.error = error
        self.calls: list[tuple[str, list[str]]] = []

    async def fetch_latest(self, pubkey: str, relays: Sequence[str]) -> AddressingRecord | None:
        self.calls.append((pubkey, list(relays)))
        if self.error is not None:
            raise self.error
        return self.records.get(pubkey)


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


# ============================================================================
# Signed Event Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def signing_key() -> PrivateKey:
    return PrivateKey(bytes.fromhex("01" * 32))


@pytest.fixture(scope="session")
def signing_pubkey(signing_key) -> str:
    return signing_key.public_key_xonly.format().hex()


def sign_event(
    private_key: PrivateKey,
    tags: list[list[str]] | None = None,
    created_at: int | None = None,
    kind: int = 11111,
    content: str = "",
) -> NostrEvent:
    """Build a correctly signed Nostr event."""
    pubkey = private_key.public_key_xonly.format().hex()
    created_at = int(time.time()) if created_at is None else created_at
    tags = tags if tags is not None else [["clearnet", "example.com", "https"]]
    event_id = compute_event_id(pubkey, created_at, kind, tags, content)
    sig = private_key.sign_schnorr(bytes.fromhex(event_id)).hex()
    return NostrEvent(
        id=event_id,
        pubkey=pubkey,
        created_at=created_at,
        kind=kind,
        tags=tags,
        content=content,
        sig=sig,
    )
