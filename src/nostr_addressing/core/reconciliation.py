# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Record reconciliation.

Checks an addressing record against the (domain, protocol) pair being
visited, and picks the single latest record out of a fetched batch.

Matching is exact-string on both domain and protocol: no wildcards, no
subdomain matching, no case folding.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import AddressingRecord, Reconciliation, RecordStatus

logger = logging.getLogger(__name__)


def reconcile(record: AddressingRecord | None, domain: str, protocol: str) -> Reconciliation:
    """Compute record status and endorsed domains for ``(domain, protocol)``.

    Args:
        record: Latest addressing record, or None if none was found
        domain: Hostname being visited
        protocol: URL scheme being visited, e.g. ``https``

    Returns:
        Reconciliation with VERIFIED if the record endorses the pair,
        REVOKED_OR_UNENDORSED if it does not, NO_RECORD_FOUND without a
        record. ``endorsed`` lists every entry for ``protocol`` in record
        order, the current domain included.
    """
    if record is None:
        return Reconciliation(status=RecordStatus.NO_RECORD_FOUND)

    endorsed = tuple(e for e in record.endorsements if e.protocol == protocol)
    verified = any(e.domain == domain for e in endorsed)

    if not verified:
        logger.info(
            f"Domain {domain} ({protocol}) not endorsed by record {record.record_id[:16]} "
            f"from {record.issuer_key[:16]}"
        )

    return Reconciliation(
        status=RecordStatus.VERIFIED if verified else RecordStatus.REVOKED_OR_UNENDORSED,
        endorsed=endorsed,
    )


def record_sort_key(record: AddressingRecord) -> tuple[int, str]:
    """Total order: newest first, then lowest record id."""
    return (-record.issued_at, record.record_id)


def select_latest_record(
    records: Iterable[AddressingRecord],
    since: int | None = None,
) -> AddressingRecord | None:
    """Select the single latest record.

    Ties on ``issued_at`` go to the lexicographically lowest ``record_id``,
    the same rule relays apply to replaceable events, so the result does
    not depend on the order relays answered in.

    Args:
        records: Candidate records, possibly empty
        since: Drop records issued before this unix timestamp

    Returns:
        The latest record, or None when no candidate survives.
    """
    candidates = [r for r in records if since is None or r.issued_at >= since]
    if not candidates:
        return None
    return min(candidates, key=record_sort_key)
