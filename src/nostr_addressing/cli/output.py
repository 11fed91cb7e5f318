# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Output formatting for CLI commands.

Handles JSON vs human-readable text output.
"""

from __future__ import annotations

import json
import sys
from typing import Any

from ..core.display import VERDICT_TEXT, status_label
from ..core.models import Binding, Evaluation, VerdictKind


def output_result(data: dict[str, Any] | list[Any], as_json: bool = False, text: str | None = None) -> None:
    """Print a command result.

    JSON output pretty-prints ``data``; text output prints ``text`` when
    given and falls back to JSON otherwise.
    """
    if as_json or text is None:
        print(json.dumps(data, indent=2, default=str))
    else:
        print(text)


def output_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)


def format_binding(binding: Binding) -> str:
    relays = ", ".join(binding.relays) if binding.relays else "(none)"
    return f"{binding.domain}\n  Pubkey: {binding.pubkey}\n  Relays: {relays}"


def format_evaluation(evaluation: Evaluation) -> str:
    """Multi-line text rendering of an evaluation."""
    verdict = evaluation.verdict
    lines = [f"{evaluation.domain} ({evaluation.observation.protocol})"]
    lines.append(f"  Verdict:  {VERDICT_TEXT[verdict.kind]} [{verdict.kind.value}]")

    if verdict.kind == VerdictKind.NO_IDENTITY_FOUND:
        if evaluation.store_error:
            lines.append(f"  Store:    {evaluation.store_error}")
        return "\n".join(lines)

    lines.append(f"  Status:   {status_label(evaluation.record_status)}")
    key = evaluation.lookup_key or ""
    if evaluation.fallback:
        key += " (saved)"
    lines.append(f"  Pubkey:   {key}")
    if evaluation.lookup_relays:
        lines.append(f"  Relays:   {', '.join(evaluation.lookup_relays)}")

    if verdict.kind == VerdictKind.PUBKEY_MISMATCH:
        lines.append(f"  Previous: {verdict.previous_key}")
        lines.append(f"  Claimed:  {verdict.claimed_key}")
    elif verdict.kind == VerdictKind.IMPERSONATION_SUSPECTED and verdict.known_owner is not None:
        lines.append(f"  Owner:    {verdict.known_owner.domain}")

    if evaluation.endorsed:
        names = []
        for e in evaluation.endorsed:
            current = e.domain == evaluation.domain and e.protocol == evaluation.observation.protocol
            names.append(f"{e.domain} (current)" if current else e.domain)
        lines.append(f"  Endorsed: {', '.join(names)}")

    if not evaluation.record_reachable:
        lines.append("  Relays could not be reached")
    if evaluation.override is not None:
        lines.append(f"  Resolved: {evaluation.override.value}")
    if evaluation.store_error:
        lines.append(f"  Store:    {evaluation.store_error}")
    if evaluation.alert:
        lines.append(f"  WARNING:  {', '.join(evaluation.alert_reasons)}")
    return "\n".join(lines)
