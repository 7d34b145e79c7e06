"""
page_fetch.py — public interface for fetching a competitor page.

The rest of the app imports only from here:
  from page_fetch import scrape, FetchedPage, FetchOptions, FetchFailure

Strategy:
  1. Always try Tier 1 (HTTP + HTML parse).
  2. If the Tier 1 page is usable, return it.
  3. If Tier 1 flagged a JS-only shell, came back blank, or failed, and a
     Tier 2 fetcher was passed in (and options.skip_tier2 is off), try Tier 2.
  4. Prefer a thin Tier 1 page over nothing; raise FetchFailure only when
     no tier produced a page.

Tier 2 (full browser rendering) is not implemented in this project — callers
that have one pass it as `tier2`.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from scraper import tier1_fetch
from scraper.base import FetchedImage, FetchedPage, FetchFailure, FetchOptions, PageFetcher
from scraper.photo_filter import filter_product_photos

logger = logging.getLogger(__name__)

__all__ = ["scrape", "FetchedImage", "FetchedPage", "FetchOptions", "FetchFailure", "PageFetcher"]


def _is_usable(page: FetchedPage) -> bool:
    """Good enough to skip Tier 2: not a JS shell and not completely blank."""
    return not page.needs_tier2 and not page.is_blank


def _with_product_photos(page: FetchedPage) -> FetchedPage:
    return replace(page, images=tuple(filter_product_photos(page.images)))


async def scrape(
    url: str,
    options: Optional[FetchOptions] = None,
    tier2: Optional[PageFetcher] = None,
) -> FetchedPage:
    """
    Fetch `url` with the tiered strategy. Returned images are already
    narrowed to product-photo candidates.
    """
    options = options or FetchOptions()
    tier1_error: Optional[FetchFailure] = None
    tier1_page: Optional[FetchedPage] = None

    # ── Tier 1 ────────────────────────────────────────────────────────────────
    try:
        tier1_page = await tier1_fetch.fetch(url, options)
        if _is_usable(tier1_page):
            return _with_product_photos(tier1_page)
        logger.info(
            "[scrape] Tier 1 result for %s is thin (js_only=%s)", url, tier1_page.needs_tier2,
        )
    except FetchFailure as exc:
        tier1_error = exc
        logger.warning("[scrape] Tier 1 failed for %s: %s", url, exc)

    # ── Tier 2 (only through an injected fetcher) ─────────────────────────────
    if options.skip_tier2 or tier2 is None:
        if tier1_page is not None:
            return _with_product_photos(tier1_page)
        raise tier1_error

    try:
        tier2_page = await tier2.fetch(url, options)
        logger.info("[scrape] %s used for %s", tier2.name, url)
        return _with_product_photos(tier2_page)
    except FetchFailure as exc:
        logger.warning("[scrape] %s failed for %s: %s", tier2.name, url, exc)
        if tier1_page is not None:
            return _with_product_photos(tier1_page)
        raise FetchFailure(
            f"Tier 1: {tier1_error}; Tier 2: {exc}", url=url, tier="both",
        ) from exc
