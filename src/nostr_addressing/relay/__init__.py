"""Nostr relay access for addressing records.

Key components:
- events: NIP-01 event parsing, id/signature verification, clearnet tags
- client: concurrent REQ/EOSE record fetcher over websockets
"""

from .client import RecordFetcher, RelayRecordFetcher
from .events import (
    CLEARNET_TAG,
    NostrEvent,
    compute_event_id,
    event_to_record,
    extract_endorsements,
    verify_event,
)

__all__ = [
    "CLEARNET_TAG",
    "NostrEvent",
    "RecordFetcher",
    "RelayRecordFetcher",
    "compute_event_id",
    "event_to_record",
    "extract_endorsements",
    "verify_event",
]
