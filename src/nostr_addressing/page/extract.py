# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Extract the claimed identity from a web page.

A site advertises its key with a meta tag; relays ride along in a
``relays`` attribute, or ``rel`` on older markup::

    <meta name="nostr-pubkey" content="<64 hex>" relays="wss://a,wss://b">

Values are returned raw. Validation is the engine's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import aiohttp
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

META_NAME = "nostr-pubkey"


@dataclass(frozen=True)
class PageClaim:
    """Raw identity claim found on a page."""

    pubkey_raw: str | None
    relays_raw: str | None


def extract_claim(html: str) -> PageClaim | None:
    """Find the ``nostr-pubkey`` meta tag in ``html``.

    Returns:
        PageClaim, or None if the page has no such tag or the tag has no
        key in ``content``.
    """
    # rel is multi-valued for bs4 by default; keep every attribute a plain string
    soup = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
    meta = soup.find("meta", attrs={"name": META_NAME})
    if meta is None:
        return None

    pubkey = meta.get("content")
    if not pubkey:
        return None

    relays = meta.get("relays") or meta.get("rel")
    return PageClaim(pubkey_raw=pubkey.strip(), relays_raw=relays or None)


async def fetch_page_claim(
    url: str,
    session: aiohttp.ClientSession | None = None,
    timeout: float | None = None,
) -> PageClaim | None:
    """Fetch ``url`` and extract its claim.

    Raises:
        aiohttp.ClientError: If the page cannot be fetched.
    """
    if timeout is None:
        from ..core.config import get_config

        timeout = get_config().page_timeout

    client_timeout = aiohttp.ClientTimeout(total=timeout)
    if session is not None:
        html = await _get_text(session, url, client_timeout)
    else:
        async with aiohttp.ClientSession() as own_session:
            html = await _get_text(own_session, url, client_timeout)

    claim = extract_claim(html)
    if claim is None:
        logger.info(f"No {META_NAME} meta tag on {url}")
    return claim


async def _get_text(session: aiohttp.ClientSession, url: str, timeout: aiohttp.ClientTimeout) -> str:
    async with session.get(url, timeout=timeout) as response:
        response.raise_for_status()
        return await response.text(errors="replace")
