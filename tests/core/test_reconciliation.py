"""Tests for nostr_addressing.core.reconciliation module."""

from __future__ import annotations

from conftest import KEY_1, NOW, make_record

from nostr_addressing.core.models import DomainEndorsement, RecordStatus
from nostr_addressing.core.reconciliation import reconcile, select_latest_record

# ============================================================================
# reconcile Tests
# ============================================================================


class TestReconcile:
    """Tests for reconcile."""

    def test_no_record(self):
        result = reconcile(None, "example.com", "https")
        assert result.status == RecordStatus.NO_RECORD_FOUND
        assert result.endorsed == ()

    def test_verified(self):
        record = make_record(endorsements=[("example.com", "https")])
        result = reconcile(record, "example.com", "https")
        assert result.status == RecordStatus.VERIFIED
        assert result.endorsed_domains == ["example.com"]

    def test_other_domains_only(self):
        """Record endorsing only x.org leaves example.com unendorsed."""
        record = make_record(endorsements=[("x.org", "https")])
        result = reconcile(record, "example.com", "https")
        assert result.status == RecordStatus.REVOKED_OR_UNENDORSED
        assert result.endorsed_domains == ["x.org"]

    def test_protocol_filter(self):
        """Endorsement for http does not verify an https visit."""
        record = make_record(endorsements=[("example.com", "http"), ("x.org", "https")])
        result = reconcile(record, "example.com", "https")
        assert result.status == RecordStatus.REVOKED_OR_UNENDORSED
        assert result.endorsed == (DomainEndorsement("x.org", "https"),)

    def test_keeps_record_order(self):
        record = make_record(
            endorsements=[("b.org", "https"), ("example.com", "https"), ("a.org", "https")],
        )
        result = reconcile(record, "example.com", "https")
        assert result.status == RecordStatus.VERIFIED
        assert result.endorsed_domains == ["b.org", "example.com", "a.org"]

    def test_exact_matching(self):
        """No subdomain or case-insensitive matching."""
        record = make_record(endorsements=[("Example.com", "https"), ("www.example.com", "https")])
        assert reconcile(record, "example.com", "https").status == RecordStatus.REVOKED_OR_UNENDORSED

    def test_empty_record(self):
        record = make_record(endorsements=[])
        result = reconcile(record, "example.com", "https")
        assert result.status == RecordStatus.REVOKED_OR_UNENDORSED
        assert result.endorsed == ()


# ============================================================================
# select_latest_record Tests
# ============================================================================


class TestSelectLatestRecord:
    """Tests for select_latest_record."""

    def test_empty(self):
        assert select_latest_record([]) is None

    def test_newest_wins(self):
        old = make_record(issued_at=NOW - 100, record_id="a" * 64)
        new = make_record(issued_at=NOW, record_id="b" * 64)
        assert select_latest_record([old, new]) == new
        assert select_latest_record([new, old]) == new

    def test_tie_breaks_on_lowest_id(self):
        first = make_record(issued_at=NOW, record_id="0" * 64)
        second = make_record(issued_at=NOW, record_id="f" * 64)
        assert select_latest_record([second, first]) == first
        assert select_latest_record([first, second]) == first

    def test_since_filters(self):
        old = make_record(issued_at=NOW - 1000)
        assert select_latest_record([old], since=NOW - 10) is None
        assert select_latest_record([old], since=NOW - 1000) == old

    def test_accepts_generator(self):
        records = (make_record(issuer=KEY_1, issued_at=NOW + i, record_id=f"{i:064x}") for i in range(3))
        latest = select_latest_record(records)
        assert latest is not None
        assert latest.issued_at == NOW + 2
