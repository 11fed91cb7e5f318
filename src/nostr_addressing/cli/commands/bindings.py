# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Bindings commands - inspect and edit the trust history.

Commands:
    nostr-addressing bindings list              List every saved binding
    nostr-addressing bindings show <domain>     Show one binding
    nostr-addressing bindings forget <domain>   Delete a binding
"""

from __future__ import annotations

import argparse
import logging

from ...core.exceptions import AddressingException
from ...store.bindings import get_binding_store
from ..output import format_binding, output_error, output_result

logger = logging.getLogger(__name__)


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the bindings sub-command group."""
    bindings_parser = subparsers.add_parser("bindings", help="Manage saved domain bindings")
    bindings_sub = bindings_parser.add_subparsers(dest="bindings_command", required=True)

    # --- list ---
    list_p = bindings_sub.add_parser("list", help="List saved bindings")
    list_p.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    list_p.set_defaults(func=cmd_bindings_list)

    # --- show ---
    show_p = bindings_sub.add_parser("show", help="Show the binding for a domain")
    show_p.add_argument("domain", help="Domain as observed, e.g. example.com")
    show_p.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    show_p.set_defaults(func=cmd_bindings_show)

    # --- forget ---
    forget_p = bindings_sub.add_parser("forget", help="Delete the binding for a domain")
    forget_p.add_argument("domain", help="Domain as observed, e.g. example.com")
    forget_p.set_defaults(func=cmd_bindings_forget)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def cmd_bindings_list(args: argparse.Namespace) -> int:
    """List saved bindings."""
    try:
        bindings = get_binding_store().list_all()
    except AddressingException as e:
        output_error(e.message)
        return 1

    if not bindings:
        text = "No saved bindings."
    else:
        text = "\n".join(format_binding(b) for b in bindings)
    output_result([b.to_dict() for b in bindings], as_json=args.json, text=text)
    return 0


def cmd_bindings_show(args: argparse.Namespace) -> int:
    """Show the binding for one domain."""
    try:
        binding = get_binding_store().get(args.domain)
    except AddressingException as e:
        output_error(e.message)
        return 1

    if binding is None:
        output_error(f"No binding saved for {args.domain}")
        return 1

    output_result(binding.to_dict(), as_json=args.json, text=format_binding(binding))
    return 0


def cmd_bindings_forget(args: argparse.Namespace) -> int:
    """Delete the binding for one domain; the next visit is a first use again."""
    try:
        removed = get_binding_store().delete(args.domain)
    except AddressingException as e:
        output_error(e.message)
        return 1

    if not removed:
        output_error(f"No binding saved for {args.domain}")
        return 1

    logger.info(f"Forgot binding for {args.domain}")
    print(f"Forgot binding for {args.domain}")
    return 0
