# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Nostr event handling for addressing records.

Addressing records are signed Nostr events (kind 11111) listing the
clearnet locations a key endorses as tags::

    ["clearnet", "example.com", "https"]

An event is only turned into an AddressingRecord after its id has been
recomputed from the NIP-01 serialization and its BIP340 Schnorr signature
checked against the author key.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from coincurve import PublicKeyXOnly

from ..core.models import AddressingRecord, DomainEndorsement
from ..core.validation import is_hex_key

logger = logging.getLogger(__name__)

CLEARNET_TAG = "clearnet"

_SIG_HEX_LENGTH = 128


@dataclass(frozen=True)
class NostrEvent:
    """A Nostr event as delivered by a relay."""

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: list[list[str]] = field(default_factory=list)
    content: str = ""
    sig: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> NostrEvent | None:
        """Parse a relay payload, returning None if it is not a well-formed event."""
        if not isinstance(data, dict):
            return None
        try:
            event_id = data["id"]
            pubkey = data["pubkey"]
            created_at = data["created_at"]
            kind = data["kind"]
            tags = data.get("tags", [])
            content = data.get("content", "")
            sig = data["sig"]
        except KeyError:
            return None

        if not (isinstance(event_id, str) and isinstance(pubkey, str) and isinstance(sig, str)):
            return None
        if isinstance(created_at, bool) or not isinstance(created_at, int):
            return None
        if isinstance(kind, bool) or not isinstance(kind, int):
            return None
        if not isinstance(content, str) or not isinstance(tags, list):
            return None
        if not all(isinstance(tag, list) and all(isinstance(v, str) for v in tag) for tag in tags):
            return None

        return cls(
            id=event_id,
            pubkey=pubkey,
            created_at=created_at,
            kind=kind,
            tags=tags,
            content=content,
            sig=sig,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": self.tags,
            "content": self.content,
            "sig": self.sig,
        }


def serialize_event(pubkey: str, created_at: int, kind: int, tags: list[list[str]], content: str) -> bytes:
    """NIP-01 serialization used to derive the event id."""
    return json.dumps(
        [0, pubkey, created_at, kind, tags, content],
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def compute_event_id(pubkey: str, created_at: int, kind: int, tags: list[list[str]], content: str) -> str:
    return hashlib.sha256(serialize_event(pubkey, created_at, kind, tags, content)).hexdigest()


def verify_event(event: NostrEvent) -> bool:
    """Check the event id and BIP340 signature.

    Returns:
        True only if the id matches the serialized event and the signature
        is valid for the author key.
    """
    if not is_hex_key(event.pubkey) or not is_hex_key(event.id):
        return False
    if len(event.sig) != _SIG_HEX_LENGTH:
        return False

    expected_id = compute_event_id(event.pubkey, event.created_at, event.kind, event.tags, event.content)
    if expected_id != event.id.lower():
        logger.debug(f"Event id mismatch: got {event.id[:16]}, computed {expected_id[:16]}")
        return False

    try:
        public_key = PublicKeyXOnly(bytes.fromhex(event.pubkey))
        return public_key.verify(bytes.fromhex(event.sig), bytes.fromhex(event.id))
    except ValueError as e:
        logger.debug(f"Signature check failed for event {event.id[:16]}: {e}")
        return False


def extract_endorsements(tags: list[list[str]]) -> list[DomainEndorsement]:
    """Collect ``clearnet`` tags with a non-empty domain and protocol."""
    endorsements = []
    for tag in tags:
        if len(tag) >= 3 and tag[0] == CLEARNET_TAG and tag[1] and tag[2]:
            endorsements.append(DomainEndorsement(domain=tag[1], protocol=tag[2]))
    return endorsements


def event_to_record(event: NostrEvent) -> AddressingRecord:
    """Convert a verified event into an AddressingRecord."""
    return AddressingRecord(
        record_id=event.id,
        issuer_key=event.pubkey,
        issued_at=event.created_at,
        endorsements=tuple(extract_endorsements(event.tags)),
    )
