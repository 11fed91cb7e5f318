"""Page inspection: find the identity a site claims."""

from .extract import META_NAME, PageClaim, extract_claim, fetch_page_claim

__all__ = ["META_NAME", "PageClaim", "extract_claim", "fetch_page_claim"]
