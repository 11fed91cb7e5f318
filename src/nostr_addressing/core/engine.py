# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Verification engine - trust-state decisions for one observation.

The engine is pure. It never touches the store, the network or the
notifier; it returns values plus side-effect intents and the caller
applies them (see :mod:`nostr_addressing.core.verifier`).

An evaluation runs in two halves around the record fetch:

    plan = evaluate(observation, stored_binding, key_owners)
    record = await fetcher.fetch_latest(plan.lookup_key, plan.lookup_relays)
    evaluation = complete(plan, record)

The authoritative key for the record lookup is always the previously
trusted key when one exists. A claimed key only becomes authoritative for
a domain seen for the first time, or through an explicit override
(:func:`plan_override`).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .exceptions import ValidationException
from .models import (
    AddressingRecord,
    AlertCleared,
    AlertRaised,
    Binding,
    Evaluation,
    EvaluationPlan,
    Intent,
    Observation,
    PersistBinding,
    RecordStatus,
    Reconciliation,
    TrustDecision,
    Verdict,
    VerdictKind,
)
from .reconciliation import reconcile
from .validation import is_hex_key, short_key

logger = logging.getLogger(__name__)


def evaluate(
    observation: Observation,
    stored_binding: Binding | None,
    key_owners: Sequence[Binding] = (),
) -> EvaluationPlan:
    """Decide the verdict and the record lookup for an observation.

    Args:
        observation: Claimed identity for this page visit
        stored_binding: Binding previously stored for ``observation.domain``
        key_owners: Bindings of other domains already using the claimed key,
            in store order. Only consulted for first-time domains.

    Returns:
        EvaluationPlan carrying the verdict, the authoritative key and
        relays to query, and any persist intent.
    """
    domain = observation.domain
    claimed = observation.claimed_key

    # Missing or unparseable claim: use last-known-good, if any
    if claimed is None or not is_hex_key(claimed):
        if stored_binding is None:
            logger.info(f"No identity claimed or stored for {domain}")
            return EvaluationPlan(
                observation=observation,
                stored_binding=None,
                verdict=Verdict(VerdictKind.NO_IDENTITY_FOUND),
                lookup_key=None,
            )
        if claimed is not None:
            logger.info(f"Ignoring invalid key claimed by {domain}, using stored binding")
        return EvaluationPlan(
            observation=observation,
            stored_binding=stored_binding,
            verdict=Verdict(VerdictKind.UNCHANGED),
            lookup_key=stored_binding.pubkey,
            lookup_relays=stored_binding.relays,
            fallback=True,
        )

    if stored_binding is None:
        owners = [b for b in key_owners if b.domain != domain]
        if owners:
            owner = owners[0]
            logger.warning(
                f"Potential impersonation: {domain} claims key {short_key(claimed)} "
                f"already bound to {', '.join(b.domain for b in owners)}"
            )
            return EvaluationPlan(
                observation=observation,
                stored_binding=None,
                verdict=Verdict.impersonation_suspected(claimed, owner),
                lookup_key=owner.pubkey,
                lookup_relays=owner.relays,
            )

        binding = Binding(domain=domain, pubkey=claimed, relays=observation.claimed_relays)
        logger.info(f"First use of {domain}, trusting key {short_key(claimed)}")
        return EvaluationPlan(
            observation=observation,
            stored_binding=None,
            verdict=Verdict(VerdictKind.NEW_TRUSTED),
            lookup_key=claimed,
            lookup_relays=observation.claimed_relays,
            persist=PersistBinding(binding, reason="first_use"),
        )

    if stored_binding.pubkey == claimed:
        if set(observation.claimed_relays) != set(stored_binding.relays):
            logger.info(
                f"Relays changed for {domain}: {list(stored_binding.relays)} -> {list(observation.claimed_relays)}"
            )
            update = Binding(domain=domain, pubkey=claimed, relays=observation.claimed_relays)
            return EvaluationPlan(
                observation=observation,
                stored_binding=stored_binding,
                verdict=Verdict(VerdictKind.RELAYS_UPDATED),
                lookup_key=claimed,
                lookup_relays=stored_binding.relays,
                pending_relay_update=PersistBinding(update, reason="relays_updated"),
            )
        return EvaluationPlan(
            observation=observation,
            stored_binding=stored_binding,
            verdict=Verdict(VerdictKind.UNCHANGED),
            lookup_key=claimed,
            lookup_relays=stored_binding.relays,
        )

    logger.warning(
        f"Pubkey mismatch for {domain}: stored {short_key(stored_binding.pubkey)}, "
        f"claimed {short_key(claimed)}"
    )
    return EvaluationPlan(
        observation=observation,
        stored_binding=stored_binding,
        verdict=Verdict.pubkey_mismatch(stored_binding.pubkey, claimed),
        lookup_key=stored_binding.pubkey,
        lookup_relays=stored_binding.relays,
    )


def complete(
    plan: EvaluationPlan,
    record: AddressingRecord | None,
    record_reachable: bool = True,
) -> Evaluation:
    """Reconcile the fetched record and emit the final intents.

    Args:
        plan: Result of :func:`evaluate` or :func:`plan_override`
        record: Latest record for ``plan.lookup_key``, or None
        record_reachable: False when no relay could be queried

    Returns:
        The finished Evaluation. Its intents are, in order: the first-use
        or override persist, the relay update if the record verified the
        domain, then exactly one of AlertRaised / AlertCleared.
    """
    observation = plan.observation

    # Relays carry keys as lowercase hex
    if record is not None and record.issuer_key.lower() != (plan.lookup_key or "").lower():
        logger.warning(
            f"Discarding record {record.record_id[:16]} issued by {short_key(record.issuer_key)}, "
            f"expected {short_key(plan.lookup_key or '')}"
        )
        record = None

    if plan.needs_record:
        result = reconcile(record, observation.domain, observation.protocol)
    else:
        result = Reconciliation(status=RecordStatus.NO_RECORD_FOUND)
        record = None

    intents: list[Intent] = []
    if plan.persist is not None:
        intents.append(plan.persist)
    if plan.pending_relay_update is not None:
        if result.status == RecordStatus.VERIFIED:
            intents.append(plan.pending_relay_update)
        else:
            logger.info(f"Not persisting relay update for {observation.domain}: record status {result.status}")

    evaluation = Evaluation(
        observation=observation,
        stored_binding=plan.stored_binding,
        verdict=plan.verdict,
        record_status=result.status,
        lookup_key=plan.lookup_key,
        lookup_relays=plan.lookup_relays,
        endorsed=result.endorsed,
        record=record,
        fallback=plan.fallback,
        override=plan.override,
        record_reachable=record_reachable,
    )

    if evaluation.alert:
        intents.append(AlertRaised(observation.domain, evaluation.alert_reasons))
    else:
        intents.append(AlertCleared(observation.domain))
    evaluation.intents = tuple(intents)

    logger.info(
        f"Evaluated {observation.domain}: verdict={evaluation.verdict.kind} "
        f"record={evaluation.record_status} alert={evaluation.alert}"
    )
    return evaluation


def plan_override(evaluation: Evaluation, decision: TrustDecision | str) -> EvaluationPlan:
    """Plan an explicit resolution of a pubkey mismatch.

    KEEP_INCUMBENT re-persists the stored binding and keeps querying the
    incumbent key. TRUST_NEW persists the claimed key and relays and makes
    the claimed key authoritative, so its record must be fetched again.

    The returned plan carries exactly one active decision; planning again
    from the same evaluation with the other decision replaces it.

    Raises:
        ValidationException: If the evaluation is not a pubkey mismatch or
            the decision is unknown.
    """
    try:
        decision = TrustDecision(decision)
    except ValueError as e:
        raise ValidationException(f"Unknown trust decision: {decision}", field="decision", value=decision) from e

    verdict = evaluation.verdict
    stored = evaluation.stored_binding
    if verdict.kind != VerdictKind.PUBKEY_MISMATCH or stored is None or verdict.claimed_key is None:
        raise ValidationException(
            f"No pubkey mismatch to resolve for {evaluation.domain}",
            field="verdict",
            value=verdict.kind,
        )

    observation = evaluation.observation
    if decision == TrustDecision.KEEP_INCUMBENT:
        binding = Binding(domain=observation.domain, pubkey=stored.pubkey, relays=stored.relays)
    else:
        binding = Binding(
            domain=observation.domain,
            pubkey=verdict.claimed_key,
            relays=observation.claimed_relays,
        )

    logger.info(f"Resolving mismatch for {observation.domain}: {decision} -> {short_key(binding.pubkey)}")
    return EvaluationPlan(
        observation=observation,
        stored_binding=stored,
        verdict=verdict,
        lookup_key=binding.pubkey,
        lookup_relays=binding.relays,
        persist=PersistBinding(binding, reason=decision.value),
        override=decision,
    )
