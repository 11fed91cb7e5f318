"""Nostr Addressing Core - trust-state primitives for domain identity checks."""

from .engine import complete, evaluate, plan_override
from .exceptions import (
    AddressingException,
    ConfigException,
    FetchException,
    StoreException,
    ValidationException,
)
from .models import (
    AddressingRecord,
    AlertCleared,
    AlertRaised,
    Binding,
    DomainEndorsement,
    Evaluation,
    EvaluationPlan,
    Observation,
    PersistBinding,
    RecordStatus,
    TrustDecision,
    Verdict,
    VerdictKind,
)
from .reconciliation import reconcile, select_latest_record
from .validation import is_hex_key, is_relay_url, parse_relay_list

__all__ = [
    # Engine
    "evaluate",
    "complete",
    "plan_override",
    # Reconciliation
    "reconcile",
    "select_latest_record",
    # Validation
    "is_hex_key",
    "is_relay_url",
    "parse_relay_list",
    # Models
    "AddressingRecord",
    "AlertCleared",
    "AlertRaised",
    "Binding",
    "DomainEndorsement",
    "Evaluation",
    "EvaluationPlan",
    "Observation",
    "PersistBinding",
    "RecordStatus",
    "TrustDecision",
    "Verdict",
    "VerdictKind",
    # Exceptions
    "AddressingException",
    "ConfigException",
    "FetchException",
    "StoreException",
    "ValidationException",
]
