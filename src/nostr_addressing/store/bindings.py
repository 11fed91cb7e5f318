# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Binding store backends.

Persists the trust-on-first-use history: one binding per domain, keyed by
the hostname as observed. Default backend is a JSON file holding a single
object keyed by domain::

    {"example.com": {"pubkey": "<64 hex>", "relays": ["wss://relay.example"]}}

Configure via environment variables:
    NOSTR_ADDRESSING_STORE=json|memory  (default: json)
    NOSTR_ADDRESSING_BINDINGS_PATH=~/.nostr-addressing/bindings.json
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from ..core.exceptions import ConfigException, StoreException
from ..core.models import Binding

logger = logging.getLogger(__name__)


class BindingStore(ABC):
    """Abstract interface for binding storage.

    Implementations must be read-your-writes consistent within a process.
    Failures are raised as StoreException.
    """

    @abstractmethod
    def get(self, domain: str) -> Binding | None:
        """Return the binding for ``domain``, or None."""
        ...

    @abstractmethod
    def put(self, binding: Binding) -> None:
        """Store ``binding``, replacing any binding for its domain."""
        ...

    @abstractmethod
    def list_by_key(self, pubkey: str) -> list[Binding]:
        """Return every binding using ``pubkey``, in insertion order."""
        ...

    @abstractmethod
    def delete(self, domain: str) -> bool:
        """Remove the binding for ``domain``.

        Returns:
            True if a binding was removed, False if none existed.
        """
        ...

    @abstractmethod
    def list_all(self) -> list[Binding]:
        """Return every binding, in insertion order."""
        ...


class MemoryBindingStore(BindingStore):
    """In-memory binding store.

    Suitable for tests and one-shot checks. Bindings are lost on exit.
    """

    def __init__(self, bindings: list[Binding] | None = None) -> None:
        self._bindings: dict[str, Binding] = {}
        for binding in bindings or []:
            self._bindings[binding.domain] = binding

    def get(self, domain: str) -> Binding | None:
        return self._bindings.get(domain)

    def put(self, binding: Binding) -> None:
        self._bindings[binding.domain] = binding

    def list_by_key(self, pubkey: str) -> list[Binding]:
        return [b for b in self._bindings.values() if b.pubkey == pubkey]

    def delete(self, domain: str) -> bool:
        return self._bindings.pop(domain, None) is not None

    def list_all(self) -> list[Binding]:
        return list(self._bindings.values())

    def __contains__(self, domain: str) -> bool:
        return domain in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)


class JsonFileBindingStore(BindingStore):
    """File-backed binding store.

    The whole file is loaded on first access and rewritten on every change,
    via a temporary file and an atomic rename.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self._bindings: dict[str, Binding] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Binding]:
        if self._bindings is not None:
            return self._bindings

        if not self._path.exists():
            self._bindings = {}
            return self._bindings

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreException(f"Failed to read bindings from {self._path}: {e}", operation="load") from e

        if not isinstance(data, dict):
            raise StoreException(f"Bindings file {self._path} is not a JSON object", operation="load")

        bindings: dict[str, Binding] = {}
        for domain, entry in data.items():
            try:
                bindings[domain] = Binding.from_dict(entry, domain=domain)
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                raise StoreException(
                    f"Malformed binding in {self._path}: {e}",
                    operation="load",
                    domain=domain,
                ) from e

        logger.debug(f"Loaded {len(bindings)} bindings from {self._path}")
        self._bindings = bindings
        return bindings

    def _save(self, bindings: dict[str, Binding], domain: str | None = None) -> None:
        payload = {b.domain: {"pubkey": b.pubkey, "relays": list(b.relays)} for b in bindings.values()}
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StoreException(
                f"Failed to write bindings to {self._path}: {e}", operation="save", domain=domain
            ) from e

    def get(self, domain: str) -> Binding | None:
        return self._load().get(domain)

    def put(self, binding: Binding) -> None:
        bindings = dict(self._load())
        bindings[binding.domain] = binding
        self._save(bindings, domain=binding.domain)
        self._bindings = bindings

    def list_by_key(self, pubkey: str) -> list[Binding]:
        return [b for b in self._load().values() if b.pubkey == pubkey]

    def delete(self, domain: str) -> bool:
        bindings = dict(self._load())
        if bindings.pop(domain, None) is None:
            return False
        self._save(bindings, domain=domain)
        self._bindings = bindings
        return True

    def list_all(self) -> list[Binding]:
        return list(self._load().values())


# =============================================================================
# FACTORY
# =============================================================================

_store_instance: BindingStore | None = None


def get_binding_store() -> BindingStore:
    """Get or create the global binding store.

    Reads the ``store_backend`` setting:
        - "json" (default): JsonFileBindingStore at ``bindings_path``
        - "memory": MemoryBindingStore

    Raises:
        ConfigException: For an unknown backend.
    """
    global _store_instance
    if _store_instance is not None:
        return _store_instance

    from ..core.config import get_config

    config = get_config()
    backend = config.store_backend.lower()

    if backend == "json":
        path = config.resolved_bindings_path
        logger.info(f"Using JSON binding store at {path}")
        _store_instance = JsonFileBindingStore(path)
    elif backend == "memory":
        logger.info("Using in-memory binding store")
        _store_instance = MemoryBindingStore()
    else:
        raise ConfigException(f"Unknown binding store backend '{backend}'", setting="NOSTR_ADDRESSING_STORE")

    return _store_instance


def reset_binding_store() -> None:
    """Reset the global store instance (for testing)."""
    global _store_instance
    _store_instance = None
