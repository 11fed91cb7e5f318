"""CLI command modules for Nostr Addressing.

Each module exposes a ``register(subparsers)`` function that wires up
its argparse sub-commands and sets ``parser.set_defaults(func=handler)``.
"""

from . import (
    bindings,
    check,
    resolve,
)
from .bindings import cmd_bindings_forget, cmd_bindings_list, cmd_bindings_show
from .check import cmd_check
from .resolve import cmd_resolve

# All command modules with register() functions, in registration order.
COMMAND_MODULES = [
    check,
    resolve,
    bindings,
]

__all__ = [
    "COMMAND_MODULES",
    "cmd_bindings_forget",
    "cmd_bindings_list",
    "cmd_bindings_show",
    "cmd_check",
    "cmd_resolve",
]
