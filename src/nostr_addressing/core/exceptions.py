# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for nostr-addressing.

Provides specific exception types for the failure categories the
verification pipeline distinguishes. Lookup misses (no stored binding,
no addressing record) are normal outcomes and never raised.
"""

from __future__ import annotations

from typing import Any


class AddressingException(Exception):  # noqa: N818
    """Base exception for all nostr-addressing errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AddressingException):
    """Exception for invalid input.

    Raised when:
    - An override is requested for an evaluation that has no mismatch
    - A trust decision value is not recognised
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class StoreException(AddressingException):
    """Exception for binding store failures.

    Raised when:
    - The bindings file cannot be read or parsed
    - A binding cannot be written
    """

    def __init__(self, message: str, operation: str | None = None, domain: str | None = None):
        details = {}
        if operation:
            details["operation"] = operation
        if domain:
            details["domain"] = domain
        super().__init__(message, details)
        self.operation = operation
        self.domain = domain


class FetchException(AddressingException):
    """Exception for relay transport failures.

    Raised inside the relay client when a relay cannot be reached or
    drops the subscription, and by ``fetch_latest`` when every relay failed.
    """

    def __init__(self, message: str, relay: str | None = None):
        details = {}
        if relay:
            details["relay"] = relay
        super().__init__(message, details)
        self.relay = relay


class ConfigException(AddressingException):
    """Exception for configuration errors.

    Raised when:
    - An unknown store backend is configured
    """

    def __init__(self, message: str, setting: str | None = None):
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)
        self.setting = setting
