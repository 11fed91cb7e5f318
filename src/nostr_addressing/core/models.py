# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Data models for domain identity verification.

Key types:
- Binding: persisted domain -> (pubkey, relays) trust association
- Observation: one page visit's claimed identity
- AddressingRecord: latest signed statement of endorsed (domain, protocol) pairs
- Verdict / RecordStatus: the two independent axes of an evaluation
- PersistBinding / AlertRaised / AlertCleared: side-effect intents
- Evaluation: everything a caller needs to render and act on one check
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from urllib.parse import urlsplit

from .validation import is_hex_key, parse_relay_list

# =============================================================================
# ENUMS
# =============================================================================


class VerdictKind(StrEnum):
    """Outcome of comparing a claimed key with the trust history."""

    NEW_TRUSTED = "new_trusted"  # First sighting, accepted on first use
    UNCHANGED = "unchanged"  # Matches the stored binding
    RELAYS_UPDATED = "relays_updated"  # Same key, different relay set
    PUBKEY_MISMATCH = "pubkey_mismatch"  # Stored key differs from claimed key
    IMPERSONATION_SUSPECTED = "impersonation_suspected"  # Key already bound elsewhere
    NO_IDENTITY_FOUND = "no_identity_found"  # Nothing claimed, nothing stored


class RecordStatus(StrEnum):
    """Outcome of checking the addressing record for (domain, protocol)."""

    VERIFIED = "verified"
    REVOKED_OR_UNENDORSED = "revoked_or_unendorsed"
    NO_RECORD_FOUND = "no_record_found"


class TrustDecision(StrEnum):
    """Explicit user resolution of a pubkey mismatch."""

    KEEP_INCUMBENT = "keep_incumbent"
    TRUST_NEW = "trust_new"


# =============================================================================
# CORE RECORDS
# =============================================================================


@dataclass(frozen=True)
class Binding:
    """Trusted association between a domain and a key."""

    domain: str
    pubkey: str
    relays: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "relays", tuple(self.relays))

    def to_dict(self) -> dict[str, Any]:
        return {"domain": self.domain, "pubkey": self.pubkey, "relays": list(self.relays)}

    @classmethod
    def from_dict(cls, data: dict[str, Any], domain: str | None = None) -> Binding:
        """Create from a dictionary.

        ``domain`` may be given separately for storage formats keyed by domain.

        Raises:
            ValueError: If the pubkey is not a hex key or relays is not a
                list of strings.
        """
        pubkey = data["pubkey"]
        if not is_hex_key(pubkey):
            raise ValueError(f"pubkey is not a 64-character hex key: {pubkey!r}")
        relays = data.get("relays") or []
        if not isinstance(relays, list) or not all(isinstance(r, str) for r in relays):
            raise ValueError(f"relays must be a list of strings: {relays!r}")
        return cls(
            domain=domain if domain is not None else data["domain"],
            pubkey=pubkey,
            relays=tuple(relays),
        )


@dataclass(frozen=True)
class DomainEndorsement:
    """A (domain, protocol) pair endorsed by an addressing record."""

    domain: str
    protocol: str

    def to_dict(self) -> dict[str, str]:
        return {"domain": self.domain, "protocol": self.protocol}


@dataclass(frozen=True)
class AddressingRecord:
    """Authenticated statement of the domains a key endorses."""

    record_id: str
    issuer_key: str
    issued_at: int  # unix seconds
    endorsements: tuple[DomainEndorsement, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "endorsements", tuple(self.endorsements))

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "issuer_key": self.issuer_key,
            "issued_at": self.issued_at,
            "endorsements": [e.to_dict() for e in self.endorsements],
        }


@dataclass(frozen=True)
class Observation:
    """The identity a page claims during one visit."""

    domain: str
    protocol: str
    claimed_key: str | None = None
    claimed_relays: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "claimed_relays", tuple(self.claimed_relays))

    @classmethod
    def from_url(
        cls,
        url: str,
        claimed_key: str | None = None,
        relays_raw: str | None = None,
    ) -> Observation:
        """Build an observation from a page URL and its raw meta values.

        The domain is the URL hostname and the protocol its scheme without
        the trailing colon, e.g. ``https``.
        """
        parts = urlsplit(url)
        return cls(
            domain=parts.hostname or "",
            protocol=parts.scheme,
            claimed_key=claimed_key or None,
            claimed_relays=tuple(parse_relay_list(relays_raw)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "protocol": self.protocol,
            "claimed_key": self.claimed_key,
            "claimed_relays": list(self.claimed_relays),
        }


@dataclass(frozen=True)
class Verdict:
    """Tagged verdict from the trust-history axis.

    ``previous_key``/``claimed_key`` are set for PUBKEY_MISMATCH;
    ``claimed_key``/``known_owner`` for IMPERSONATION_SUSPECTED.
    """

    kind: VerdictKind
    previous_key: str | None = None
    claimed_key: str | None = None
    known_owner: Binding | None = None

    @classmethod
    def pubkey_mismatch(cls, previous: str, claimed: str) -> Verdict:
        return cls(VerdictKind.PUBKEY_MISMATCH, previous_key=previous, claimed_key=claimed)

    @classmethod
    def impersonation_suspected(cls, claimed: str, known_owner: Binding) -> Verdict:
        return cls(VerdictKind.IMPERSONATION_SUSPECTED, claimed_key=claimed, known_owner=known_owner)

    @property
    def is_conflict(self) -> bool:
        """True for verdicts that need an explicit resolution."""
        return self.kind in (VerdictKind.PUBKEY_MISMATCH, VerdictKind.IMPERSONATION_SUSPECTED)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value}
        if self.previous_key is not None:
            data["previous_key"] = self.previous_key
        if self.claimed_key is not None:
            data["claimed_key"] = self.claimed_key
        if self.known_owner is not None:
            data["known_owner"] = self.known_owner.to_dict()
        return data


@dataclass(frozen=True)
class Reconciliation:
    """Result of checking one record against a (domain, protocol) pair."""

    status: RecordStatus
    endorsed: tuple[DomainEndorsement, ...] = ()

    @property
    def endorsed_domains(self) -> list[str]:
        return [e.domain for e in self.endorsed]


# =============================================================================
# SIDE-EFFECT INTENTS
# =============================================================================


@dataclass(frozen=True)
class PersistBinding:
    """Write ``binding`` to the binding store."""

    binding: Binding
    reason: str


@dataclass(frozen=True)
class AlertRaised:
    """One-shot warning about ``domain`` for the notifier."""

    domain: str
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class AlertCleared:
    """One-shot event clearing any warning for ``domain``."""

    domain: str


Intent = PersistBinding | AlertRaised | AlertCleared


# =============================================================================
# EVALUATION RESULT
# =============================================================================


@dataclass
class Evaluation:
    """Complete result of verifying one observation.

    The engine builds it; the verifier fills in ``store_error`` when a
    persist intent could not be applied.
    """

    observation: Observation
    stored_binding: Binding | None
    verdict: Verdict
    record_status: RecordStatus
    lookup_key: str | None = None
    lookup_relays: tuple[str, ...] = ()
    endorsed: tuple[DomainEndorsement, ...] = ()
    record: AddressingRecord | None = None
    intents: tuple[Intent, ...] = ()

    # True when the last-known-good binding stood in for a missing claim
    fallback: bool = False
    override: TrustDecision | None = None
    record_reachable: bool = True
    store_error: str | None = None

    @property
    def domain(self) -> str:
        return self.observation.domain

    @property
    def conflict_unresolved(self) -> bool:
        return self.verdict.is_conflict and self.override is None

    @property
    def alert(self) -> bool:
        """Whether the notifier should warn about this domain."""
        if self.verdict.kind == VerdictKind.NO_IDENTITY_FOUND:
            return False
        return self.conflict_unresolved or self.record_status != RecordStatus.VERIFIED

    @property
    def alert_reasons(self) -> tuple[str, ...]:
        if not self.alert:
            return ()
        reasons = []
        if self.conflict_unresolved:
            reasons.append(self.verdict.kind.value)
        if self.record_status != RecordStatus.VERIFIED:
            reasons.append(self.record_status.value)
        return tuple(reasons)

    @property
    def persist_intents(self) -> list[PersistBinding]:
        return [i for i in self.intents if isinstance(i, PersistBinding)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "observation": self.observation.to_dict(),
            "stored_binding": self.stored_binding.to_dict() if self.stored_binding else None,
            "verdict": self.verdict.to_dict(),
            "record_status": self.record_status.value,
            "lookup_key": self.lookup_key,
            "lookup_relays": list(self.lookup_relays),
            "endorsed": [
                {**e.to_dict(), "current": e.domain == self.domain and e.protocol == self.observation.protocol}
                for e in self.endorsed
            ],
            "record": self.record.to_dict() if self.record else None,
            "fallback": self.fallback,
            "override": self.override.value if self.override else None,
            "record_reachable": self.record_reachable,
            "store_error": self.store_error,
            "alert": self.alert,
            "alert_reasons": list(self.alert_reasons),
            "persisted": [i.binding.to_dict() for i in self.persist_intents],
        }


@dataclass
class EvaluationPlan:
    """First half of an evaluation: verdict and which record to look up.

    ``lookup_key`` is None only for NO_IDENTITY_FOUND, which skips the
    record lookup entirely.
    """

    observation: Observation
    stored_binding: Binding | None
    verdict: Verdict
    lookup_key: str | None
    lookup_relays: tuple[str, ...] = ()
    persist: PersistBinding | None = None
    # Relay update written only once the record verifies the domain
    pending_relay_update: PersistBinding | None = None
    fallback: bool = False
    override: TrustDecision | None = None

    @property
    def needs_record(self) -> bool:
        return self.lookup_key is not None
