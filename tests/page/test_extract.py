"""Tests for nostr_addressing.page.extract module."""

from __future__ import annotations

from unittest.mock import MagicMock

import aiohttp
import pytest
from conftest import KEY_1, RELAY_A, RELAY_B

from nostr_addressing.page.extract import PageClaim, extract_claim, fetch_page_claim


def page(meta: str) -> str:
    return f"<html><head><title>t</title>{meta}</head><body>hi</body></html>"


# ============================================================================
# extract_claim Tests
# ============================================================================


class TestExtractClaim:
    """Tests for extract_claim."""

    def test_key_and_relays(self):
        html = page(f'<meta name="nostr-pubkey" content="{KEY_1}" relays="{RELAY_A},{RELAY_B}">')
        assert extract_claim(html) == PageClaim(KEY_1, f"{RELAY_A},{RELAY_B}")

    def test_rel_fallback(self):
        """Older markup carries relays in rel, space included."""
        html = page(f'<meta name="nostr-pubkey" content="{KEY_1}" rel="{RELAY_A}, {RELAY_B}">')
        assert extract_claim(html) == PageClaim(KEY_1, f"{RELAY_A}, {RELAY_B}")

    def test_relays_preferred_over_rel(self):
        html = page(f'<meta name="nostr-pubkey" content="{KEY_1}" relays="{RELAY_A}" rel="{RELAY_B}">')
        assert extract_claim(html).relays_raw == RELAY_A

    def test_no_relays(self):
        html = page(f'<meta name="nostr-pubkey" content="{KEY_1}">')
        assert extract_claim(html) == PageClaim(KEY_1, None)

    def test_content_trimmed_not_validated(self):
        html = page('<meta name="nostr-pubkey" content="  not-a-key  ">')
        assert extract_claim(html).pubkey_raw == "not-a-key"

    @pytest.mark.parametrize(
        "meta",
        [
            "",
            '<meta name="description" content="x">',
            '<meta name="nostr-pubkey">',
            '<meta name="nostr-pubkey" content="">',
        ],
    )
    def test_no_claim(self, meta):
        assert extract_claim(page(meta)) is None

    def test_first_tag_wins(self):
        html = page(
            f'<meta name="nostr-pubkey" content="{KEY_1}">'
            f'<meta name="nostr-pubkey" content="{"b" * 64}">'
        )
        assert extract_claim(html).pubkey_raw == KEY_1


# ============================================================================
# fetch_page_claim Tests
# ============================================================================


class FakeResponse:
    def __init__(self, body: str | bytes, error: Exception | None = None):
        self.body = body
        self.error = error

    def raise_for_status(self):
        if self.error is not None:
            raise self.error

    async def text(self, errors: str = "strict"):
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors)
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class TestFetchPageClaim:
    """Tests for fetch_page_claim."""

    async def test_fetches_and_extracts(self):
        session = MagicMock()
        session.get.return_value = FakeResponse(page(f'<meta name="nostr-pubkey" content="{KEY_1}">'))

        claim = await fetch_page_claim("https://example.com/", session=session, timeout=5)

        assert claim == PageClaim(KEY_1, None)
        assert session.get.call_args[0][0] == "https://example.com/"
        assert session.get.call_args[1]["timeout"].total == 5

    async def test_page_without_tag(self):
        session = MagicMock()
        session.get.return_value = FakeResponse(page(""))
        assert await fetch_page_claim("https://example.com/", session=session, timeout=5) is None

    async def test_http_error_raised(self):
        session = MagicMock()
        error = aiohttp.ClientResponseError(MagicMock(), (), status=404)
        session.get.return_value = FakeResponse("", error=error)
        with pytest.raises(aiohttp.ClientResponseError):
            await fetch_page_claim("https://example.com/", session=session, timeout=5)

    async def test_invalid_bytes_decoded_with_replacement(self):
        session = MagicMock()
        body = page(f'<meta name="nostr-pubkey" content="{KEY_1}" relays="\xff\xfe">').encode("latin-1")
        session.get.return_value = FakeResponse(body)

        claim = await fetch_page_claim("https://example.com/", session=session, timeout=5)

        assert claim.pubkey_raw == KEY_1
        assert claim.relays_raw == "\ufffd\ufffd"
