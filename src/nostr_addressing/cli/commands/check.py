# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Check command - verify the identity a site claims.

Commands:
    nostr-addressing check <url>            Verify and print the result
    nostr-addressing check <url> --json     Full evaluation as JSON

Exit status is 0 when nothing is wrong, 2 when the domain is alerting
and 1 on error.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from ...core.exceptions import AddressingException
from ..output import format_evaluation, output_error, output_result
from ..utils import EXIT_ALERT, build_verifier

logger = logging.getLogger(__name__)


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the check command on the CLI parser."""
    check_parser = subparsers.add_parser("check", help="Verify the Nostr identity of a site")
    check_parser.add_argument("url", help="Page URL, e.g. https://example.com/")
    check_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    check_parser.set_defaults(func=cmd_check)


def cmd_check(args: argparse.Namespace) -> int:
    """Verify a URL and apply the outcome to the binding store."""
    try:
        verifier = build_verifier()
        evaluation = asyncio.run(verifier.verify_url(args.url))
    except AddressingException as e:
        output_error(e.message)
        return 1

    output_result(evaluation.to_dict(), as_json=args.json, text=format_evaluation(evaluation))
    return EXIT_ALERT if evaluation.alert else 0
