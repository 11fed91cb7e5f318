# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Presentation helpers for evaluations."""

from __future__ import annotations

from .models import Evaluation, RecordStatus, VerdictKind
from .validation import short_key

STATUS_LABELS = {
    RecordStatus.VERIFIED: "VERIFIED",
    RecordStatus.NO_RECORD_FOUND: "UNVERIFIED",
    RecordStatus.REVOKED_OR_UNENDORSED: "REVOKED",
}

VERDICT_TEXT = {
    VerdictKind.NEW_TRUSTED: "First time seeing this domain",
    VerdictKind.UNCHANGED: "Pubkey matches the saved binding",
    VerdictKind.RELAYS_UPDATED: "Relay info changed",
    VerdictKind.PUBKEY_MISMATCH: "Pubkey differs from the one previously trusted",
    VerdictKind.IMPERSONATION_SUSPECTED: "Pubkey already belongs to another domain",
    VerdictKind.NO_IDENTITY_FOUND: "No Nostr pubkey found",
}


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def domain_color(domain: str) -> str:
    """Deterministic HSL colour for a domain.

    Uses the ``hash * 31 + char`` string hash over UTF-16 code units with
    32-bit shift semantics, so browser and CLI render the same colour.
    """
    h = 0
    data = domain.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = code + (_to_int32(_to_int32(h) << 5) - h)
    hue = abs(h) % 360
    return f"hsl({hue}, 70%, 50%)"


def status_label(status: RecordStatus) -> str:
    return STATUS_LABELS[status]


def describe(evaluation: Evaluation) -> str:
    """One-line summary of an evaluation."""
    verdict = evaluation.verdict
    text = VERDICT_TEXT[verdict.kind]
    if verdict.kind == VerdictKind.NO_IDENTITY_FOUND:
        return f"{evaluation.domain}: {text}"

    key = short_key(evaluation.lookup_key or "")
    if evaluation.fallback:
        key += " (saved)"
    line = f"{evaluation.domain}: {status_label(evaluation.record_status)} {key} - {text}"
    if evaluation.override is not None:
        line += f" [resolved: {evaluation.override}]"
    return line
