# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Relay client for fetching the latest addressing record of a key.

Speaks NIP-01 over websockets: one ``REQ`` subscription per relay, events
collected until ``EOSE`` (or the per-relay timeout), then ``CLOSE``. All
relays are queried concurrently; results are deduplicated by event id,
verified, restricted to the recency window and reduced to the single
latest record.

Example:
    >>> fetcher = RelayRecordFetcher()
    >>> record = await fetcher.fetch_latest(pubkey, ["wss://relay.example"])
"""

from __future__ import annotations

import asyncio
import json
import logging
import secrets
import time
from collections.abc import Callable, Sequence
from typing import Any, Protocol, runtime_checkable

import aiohttp
from aiohttp import WSMsgType

from ..core.exceptions import FetchException
from ..core.models import AddressingRecord
from ..core.reconciliation import select_latest_record
from .events import NostrEvent, event_to_record, verify_event

logger = logging.getLogger(__name__)

WS_HEARTBEAT_SECONDS = 30

_CLOSED_TYPES = (WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED, WSMsgType.ERROR)


@runtime_checkable
class RecordFetcher(Protocol):
    """Interface for obtaining the latest addressing record of a key.

    Implementations return the latest record authored by ``pubkey`` within
    their recency window, or None. They may raise when no source could be
    queried at all; callers treat that as "no record found".
    """

    async def fetch_latest(self, pubkey: str, relays: Sequence[str]) -> AddressingRecord | None:
        ...


class RelayRecordFetcher:
    """Fetch addressing records from Nostr relays.

    Args:
        kind: Event kind of addressing records (default from config)
        window_seconds: Recency window (default from config, 90 days)
        timeout: Per-relay timeout in seconds (default from config)
        session: Optional shared aiohttp session; one is created per
            fetch otherwise
        clock: Returns the current unix time, injectable for tests
    """

    def __init__(
        self,
        kind: int | None = None,
        window_seconds: int | None = None,
        timeout: float | None = None,
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        from ..core.config import get_config

        config = get_config()
        self.kind = kind if kind is not None else config.record_kind
        self.window_seconds = window_seconds if window_seconds is not None else config.record_window_seconds
        self.timeout = timeout if timeout is not None else config.relay_timeout
        self._session = session
        self._clock = clock

    async def fetch_latest(self, pubkey: str, relays: Sequence[str]) -> AddressingRecord | None:
        """Return the latest verified record authored by ``pubkey``.

        Raises:
            FetchException: If every relay failed. An empty relay list is
                not a failure and returns None without any I/O.
        """
        relays = list(dict.fromkeys(relays))
        if not relays:
            logger.debug(f"No relays for {pubkey[:16]}, skipping record fetch")
            return None

        author = pubkey.lower()
        since = int(self._clock()) - self.window_seconds
        filters = {"kinds": [self.kind], "authors": [author], "since": since}

        if self._session is not None:
            results = await self._query_all(self._session, relays, filters)
        else:
            async with aiohttp.ClientSession() as session:
                results = await self._query_all(session, relays, filters)

        events: dict[str, NostrEvent] = {}
        failures = 0
        for relay, result in zip(relays, results, strict=True):
            if isinstance(result, BaseException):
                failures += 1
                logger.warning(f"Relay {relay} failed: {result}")
                continue
            for event in result:
                events.setdefault(event.id, event)

        if failures == len(relays):
            raise FetchException(f"All {failures} relays failed for {author[:16]}", relay=relays[0])

        records = [event_to_record(e) for e in events.values() if self._accept(e, author, since)]
        latest = select_latest_record(records, since=since)
        if latest is None:
            logger.info(f"No addressing record found for {author[:16]} on {len(relays)} relays")
        else:
            logger.debug(f"Latest record for {author[:16]}: {latest.record_id[:16]} at {latest.issued_at}")
        return latest

    async def _query_all(
        self,
        session: aiohttp.ClientSession,
        relays: list[str],
        filters: dict[str, Any],
    ) -> list[list[NostrEvent] | BaseException]:
        return await asyncio.gather(
            *(self._query_relay(session, relay, filters) for relay in relays),
            return_exceptions=True,
        )

    async def _query_relay(
        self,
        session: aiohttp.ClientSession,
        relay: str,
        filters: dict[str, Any],
    ) -> list[NostrEvent]:
        """Run one subscription against one relay.

        Events received before a timeout are kept; a relay that times out
        or drops the connection without sending any is a failure.
        """
        sub_id = secrets.token_hex(8)
        events: list[NostrEvent] = []
        deadline = time.monotonic() + self.timeout

        try:
            ws = await asyncio.wait_for(
                session.ws_connect(relay, heartbeat=WS_HEARTBEAT_SECONDS),
                timeout=self.timeout,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise FetchException(f"Could not connect to {relay}: {e}", relay=relay) from e

        try:
            await ws.send_json(["REQ", sub_id, filters])
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise asyncio.TimeoutError()
                msg = await asyncio.wait_for(ws.receive(), timeout=remaining)

                if msg.type == WSMsgType.TEXT:
                    if self._handle_message(relay, sub_id, msg.data, events):
                        break
                elif msg.type in _CLOSED_TYPES:
                    if events:
                        logger.debug(f"{relay} closed before EOSE, keeping {len(events)} events")
                        return events
                    raise FetchException(f"{relay} closed the connection before EOSE", relay=relay)

            await ws.send_json(["CLOSE", sub_id])
        except asyncio.TimeoutError as e:
            await self._close_subscription(ws, relay, sub_id)
            if events:
                logger.debug(f"Timed out on {relay}, keeping {len(events)} events")
                return events
            raise FetchException(f"Timed out waiting for {relay}", relay=relay) from e
        except aiohttp.ClientError as e:
            raise FetchException(f"Error talking to {relay}: {e}", relay=relay) from e
        finally:
            await ws.close()

        return events

    async def _close_subscription(self, ws: aiohttp.ClientWebSocketResponse, relay: str, sub_id: str) -> None:
        try:
            await ws.send_json(["CLOSE", sub_id])
        except (aiohttp.ClientError, ConnectionResetError) as e:
            logger.debug(f"Could not send CLOSE to {relay}: {e}")

    def _handle_message(self, relay: str, sub_id: str, raw: str, events: list[NostrEvent]) -> bool:
        """Process one relay message. Returns True once the subscription is done."""
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug(f"Ignoring non-JSON message from {relay}")
            return False

        if not isinstance(message, list) or not message:
            return False

        msg_type = message[0]
        if msg_type == "EVENT" and len(message) >= 3 and message[1] == sub_id:
            event = NostrEvent.from_dict(message[2])
            if event is None:
                logger.debug(f"Ignoring malformed event from {relay}")
            else:
                events.append(event)
        elif msg_type == "EOSE" and message[1:2] == [sub_id]:
            return True
        elif msg_type == "CLOSED" and message[1:2] == [sub_id]:
            reason = message[2] if len(message) > 2 else ""
            logger.info(f"{relay} closed subscription: {reason}")
            return True
        elif msg_type == "NOTICE":
            logger.debug(f"Notice from {relay}: {message[1:]}")
        return False

    def _accept(self, event: NostrEvent, author: str, since: int) -> bool:
        if event.pubkey != author or event.kind != self.kind:
            logger.debug(f"Dropping event {event.id[:16]}: wrong author or kind")
            return False
        if event.created_at < since:
            logger.debug(f"Dropping event {event.id[:16]}: older than the recency window")
            return False
        if not verify_event(event):
            logger.warning(f"Dropping event {event.id[:16]}: invalid id or signature")
            return False
        return True
