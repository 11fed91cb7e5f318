#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
Nostr Addressing CLI - verify the Nostr identity behind a domain.

Commands:
  nostr-addressing check <url>                 Verify a site's claimed key
  nostr-addressing resolve <url> --keep        Keep the saved key after a mismatch
  nostr-addressing resolve <url> --trust-new   Trust the newly claimed key
  nostr-addressing bindings list               Show saved bindings
"""

from __future__ import annotations

import argparse
import sys

from ..core.config import CoreSettings, clear_config_cache, set_config
from ..core.logging import configure_logging
from ..store.bindings import reset_binding_store
from .commands import COMMAND_MODULES

# Global flags and the setting aliases they override
_GLOBAL_OVERRIDES = {
    "log_level": "NOSTR_ADDRESSING_LOG_LEVEL",
    "store": "NOSTR_ADDRESSING_STORE",
    "bindings_path": "NOSTR_ADDRESSING_BINDINGS_PATH",
}


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="nostr-addressing",
        description="Verify the Nostr identity behind a domain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  nostr-addressing check https://example.com/          Verify a site
  nostr-addressing check https://example.com/ --json   Full result as JSON
  nostr-addressing resolve https://example.com/ --keep Keep the saved key
  nostr-addressing bindings show example.com           Show a saved binding
  nostr-addressing bindings forget example.com         Forget a binding
        """,
    )
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--store", choices=["json", "memory"], help="Binding store backend")
    parser.add_argument("--bindings-path", help="Path to the JSON bindings file")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in COMMAND_MODULES:
        module.register(subparsers)
    return parser


def _apply_global_options(args: argparse.Namespace) -> None:
    overrides = {alias: value for attr, alias in _GLOBAL_OVERRIDES.items() if (value := getattr(args, attr, None))}
    if overrides:
        # Remaining settings still come from the environment
        set_config(CoreSettings(**overrides))
        reset_binding_store()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)

    _apply_global_options(args)
    try:
        configure_logging()
        return args.func(args)
    finally:
        clear_config_cache()
        reset_binding_store()


if __name__ == "__main__":
    sys.exit(main())
