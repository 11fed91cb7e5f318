# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Verification service.

Glues the pure engine to its collaborators: reads the binding store,
fetches the addressing record, and applies the engine's intents (store
writes and alert events).

Collaborator failures are recovered here:
- store read failure: the evaluation stops at NO_IDENTITY_FOUND with
  ``store_error`` set
- store write failure: the persist is aborted, ``store_error`` is set and
  the remaining intents still apply
- record fetch failure: NO_RECORD_FOUND with ``record_reachable=False``

The only exception raised to callers is a StoreException while applying
an explicit override.

Example:
    >>> verifier = AddressingVerifier(store, RelayRecordFetcher(), LoggingAlertSink())
    >>> evaluation = await verifier.verify(observation)
    >>> if evaluation.verdict.kind == VerdictKind.PUBKEY_MISMATCH:
    ...     evaluation = await verifier.resolve_mismatch(evaluation, TrustDecision.KEEP_INCUMBENT)
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from ..page.extract import fetch_page_claim
from ..relay.client import RecordFetcher
from ..store.bindings import BindingStore
from .alerts import AlertSink
from .engine import complete, evaluate, plan_override
from .exceptions import StoreException
from .logging import correlation_context
from .models import (
    AddressingRecord,
    AlertCleared,
    AlertRaised,
    Binding,
    Evaluation,
    EvaluationPlan,
    Observation,
    PersistBinding,
    TrustDecision,
    Verdict,
    VerdictKind,
)
from .validation import is_hex_key

logger = logging.getLogger(__name__)


class AddressingVerifier:
    """Verify observations against the trust history and addressing records.

    Args:
        store: Binding store holding the trust-on-first-use history
        fetcher: Source of the latest addressing record for a key
        alerts: Optional alert sink; alert intents are dropped without one
    """

    def __init__(
        self,
        store: BindingStore,
        fetcher: RecordFetcher,
        alerts: AlertSink | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.alerts = alerts

    async def verify(self, observation: Observation) -> Evaluation:
        """Run one full evaluation and apply its intents."""
        with correlation_context(domain=observation.domain):
            logger.debug(f"Verifying {observation.domain} ({observation.protocol})")
            try:
                stored, owners = self._read_history(observation)
            except StoreException as e:
                logger.error(f"Binding store unavailable, not verifying {observation.domain}: {e}")
                evaluation = complete(
                    EvaluationPlan(
                        observation=observation,
                        stored_binding=None,
                        verdict=Verdict(VerdictKind.NO_IDENTITY_FOUND),
                        lookup_key=None,
                    ),
                    None,
                )
                evaluation.store_error = e.message
                return evaluation

            plan = evaluate(observation, stored, owners)
            record, reachable = await self._fetch(plan)
            evaluation = complete(plan, record, record_reachable=reachable)
            self._apply(evaluation, raise_on_store_error=False)
            return evaluation

    async def verify_url(self, url: str, session: aiohttp.ClientSession | None = None) -> Evaluation:
        """Fetch ``url``, read its claimed identity and verify it.

        A page that cannot be fetched or decoded counts as a page claiming
        nothing, so the last-known-good binding still applies.
        """
        try:
            claim = await fetch_page_claim(url, session=session)
        except (aiohttp.ClientError, asyncio.TimeoutError, LookupError, ValueError) as e:
            logger.warning(f"Could not inspect {url}, using saved binding if any: {e}")
            claim = None

        if claim is None:
            observation = Observation.from_url(url)
        else:
            observation = Observation.from_url(url, claim.pubkey_raw, claim.relays_raw)
        return await self.verify(observation)

    async def resolve_mismatch(self, evaluation: Evaluation, decision: TrustDecision | str) -> Evaluation:
        """Apply an explicit trust decision to a pubkey mismatch.

        Returns:
            A new Evaluation with ``override`` set to ``decision``.

        Raises:
            ValidationException: If ``evaluation`` is not a pubkey mismatch.
            StoreException: If the decision cannot be persisted.
        """
        with correlation_context(domain=evaluation.domain):
            plan = plan_override(evaluation, decision)
            if plan.lookup_key == evaluation.lookup_key and plan.lookup_relays == evaluation.lookup_relays:
                record, reachable = evaluation.record, evaluation.record_reachable
            else:
                record, reachable = await self._fetch(plan)

            resolved = complete(plan, record, record_reachable=reachable)
            self._apply(resolved, raise_on_store_error=True)
            return resolved

    def _read_history(self, observation: Observation) -> tuple[Binding | None, list[Binding]]:
        stored = self.store.get(observation.domain)
        owners: list[Binding] = []
        claimed = observation.claimed_key
        if stored is None and claimed is not None and is_hex_key(claimed):
            owners = self.store.list_by_key(claimed)
        return stored, owners

    async def _fetch(self, plan: EvaluationPlan) -> tuple[AddressingRecord | None, bool]:
        if not plan.needs_record:
            return None, True
        try:
            record = await self.fetcher.fetch_latest(plan.lookup_key, list(plan.lookup_relays))
        except Exception as e:
            logger.warning(f"Record fetch failed for {plan.observation.domain}, treating as no record: {e}")
            return None, False
        return record, True

    def _apply(self, evaluation: Evaluation, raise_on_store_error: bool) -> None:
        for intent in evaluation.intents:
            if isinstance(intent, PersistBinding):
                try:
                    self.store.put(intent.binding)
                    logger.info(f"Saved binding for {intent.binding.domain} ({intent.reason})")
                except StoreException as e:
                    if raise_on_store_error:
                        raise
                    logger.error(f"Could not save binding for {intent.binding.domain}: {e}")
                    evaluation.store_error = e.message
            elif isinstance(intent, AlertRaised):
                if self.alerts is not None:
                    self.alerts.raise_alert(intent.domain, intent.reasons)
            elif isinstance(intent, AlertCleared):
                if self.alerts is not None:
                    self.alerts.clear_alert(intent.domain)
