# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Alert sinks consuming AlertRaised / AlertCleared events."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from .models import AlertCleared, AlertRaised

logger = logging.getLogger(__name__)


class AlertSink(ABC):
    """Receives one-shot alert events for a domain."""

    @abstractmethod
    def raise_alert(self, domain: str, reasons: Sequence[str] = ()) -> None:
        ...

    @abstractmethod
    def clear_alert(self, domain: str) -> None:
        ...


class LoggingAlertSink(AlertSink):
    """Report alerts through the log."""

    def __init__(self, logger_name: str = "nostr_addressing.alerts") -> None:
        self._logger = logging.getLogger(logger_name)

    def raise_alert(self, domain: str, reasons: Sequence[str] = ()) -> None:
        self._logger.warning(
            f"Warning: {domain} is not verified by the addressing record of its key ({', '.join(reasons)})",
            extra={"extra_data": {"domain": domain, "reasons": list(reasons)}},
        )

    def clear_alert(self, domain: str) -> None:
        self._logger.debug(f"Alert cleared for {domain}")


class MemoryAlertSink(AlertSink):
    """Track warned domains and the emitted events.

    Mirrors the state a notifier keeps between page loads: which domains
    currently carry a warning.
    """

    def __init__(self) -> None:
        self.events: list[AlertRaised | AlertCleared] = []
        self._warned: set[str] = set()

    def raise_alert(self, domain: str, reasons: Sequence[str] = ()) -> None:
        self._warned.add(domain)
        self.events.append(AlertRaised(domain, tuple(reasons)))

    def clear_alert(self, domain: str) -> None:
        self._warned.discard(domain)
        self.events.append(AlertCleared(domain))

    def has_warning(self, domain: str) -> bool:
        return domain in self._warned

    @property
    def warned_domains(self) -> set[str]:
        return set(self._warned)
