# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Resolve command - settle a pubkey mismatch.

Commands:
    nostr-addressing resolve <url> --keep        Keep the previously trusted key
    nostr-addressing resolve <url> --trust-new   Trust the key the site claims now
"""

from __future__ import annotations

import argparse
import asyncio

from ...core.exceptions import AddressingException
from ...core.models import Evaluation, TrustDecision, VerdictKind
from ...core.verifier import AddressingVerifier
from ..output import format_evaluation, output_error, output_result
from ..utils import EXIT_ALERT, build_verifier


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the resolve command on the CLI parser."""
    resolve_parser = subparsers.add_parser("resolve", help="Resolve a pubkey mismatch for a site")
    resolve_parser.add_argument("url", help="Page URL showing the mismatch")
    decision = resolve_parser.add_mutually_exclusive_group(required=True)
    decision.add_argument(
        "--keep",
        dest="decision",
        action="store_const",
        const=TrustDecision.KEEP_INCUMBENT,
        help="Keep trusting the previously saved key",
    )
    decision.add_argument(
        "--trust-new",
        dest="decision",
        action="store_const",
        const=TrustDecision.TRUST_NEW,
        help="Trust the key the site claims now",
    )
    resolve_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    resolve_parser.set_defaults(func=cmd_resolve)


async def _resolve(verifier: AddressingVerifier, url: str, decision: TrustDecision) -> Evaluation | None:
    evaluation = await verifier.verify_url(url)
    if evaluation.verdict.kind != VerdictKind.PUBKEY_MISMATCH:
        output_error(f"Nothing to resolve for {evaluation.domain}: verdict is {evaluation.verdict.kind.value}")
        return None
    return await verifier.resolve_mismatch(evaluation, decision)


def cmd_resolve(args: argparse.Namespace) -> int:
    """Re-verify a URL and apply an explicit trust decision."""
    try:
        verifier = build_verifier()
        evaluation = asyncio.run(_resolve(verifier, args.url, args.decision))
    except AddressingException as e:
        output_error(e.message)
        return 1

    if evaluation is None:
        return 1

    output_result(evaluation.to_dict(), as_json=args.json, text=format_evaluation(evaluation))
    return EXIT_ALERT if evaluation.alert else 0
