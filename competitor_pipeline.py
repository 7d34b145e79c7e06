"""
competitor_pipeline.py — end-to-end pipeline for a single competitor URL.

  validate → FETCH → ENRICH → ATTACH_PHOTO → done

Failure handling per stage:
  • invalid URL             → InvalidURLError, before any network I/O
  • fetch failure           → contained: continue with a blank page
  • unparseable model JSON  → contained inside competitor_analysis.enrich()
  • provider outage         → ProviderUnavailableError propagates

The returned record's `link` is always the URL the caller asked for; the
model's idea of the canonical URL is discarded.
"""
from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import urlsplit

import competitor_analysis
import page_fetch
from competitor_analysis import GenerateFn
from competitor_models import CompetitorRecord, PipelineReport, StageResult
from scraper.base import FetchedPage, FetchFailure, FetchOptions, PageFetcher
from scraper.photo_filter import DEFAULT_PHOTO_FILTER, PhotoFilterCriteria, select_best_photo

logger = logging.getLogger(__name__)


_WHITESPACE_OR_CONTROL_RE = re.compile(r"[\s\x00-\x1f\x7f]")


class InvalidURLError(ValueError):
    """The input is not an absolute http(s) URL."""


def validate_url(url) -> str:
    """Return the stripped URL or raise InvalidURLError."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError("url is required and must be a string")
    url = url.strip()
    if _WHITESPACE_OR_CONTROL_RE.search(url):
        raise InvalidURLError(f"url must not contain whitespace or control characters, got {url!r}")
    try:
        parts = urlsplit(url)
        parts.port          # raises ValueError when out of range or non-numeric
    except ValueError as exc:
        raise InvalidURLError(f"url must be a valid URL: {exc}") from exc
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise InvalidURLError(f"url must be an absolute http(s) URL, got {url!r}")
    return url


async def _fetch_stage(
    url: str,
    options: Optional[FetchOptions],
    tier2: Optional[PageFetcher],
) -> StageResult[FetchedPage]:
    try:
        page = await page_fetch.scrape(url, options, tier2=tier2)
    except FetchFailure as exc:
        logger.warning("[pipeline] Fetch failed, using empty page: %s", exc)
        return StageResult.degraded(FetchedPage.empty(url), str(exc))

    logger.info(
        "[pipeline] Fetch complete — tier=%d title=%r images=%d",
        page.tier, page.title[:60], len(page.images),
    )
    return StageResult.ok(page)


def choose_photo(
    page: FetchedPage,
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> tuple[Optional[str], Optional[str]]:
    """
    Best product photo URL for `page` and where it came from:
    ("image" | "hero" | None). Falls back to og:image, then to nothing.
    """
    best = select_best_photo(page.images, criteria)
    if best is not None:
        return best.url, "image"
    if page.hero_image_url:
        return page.hero_image_url, "hero"
    return None, None


async def run_pipeline_report(
    url: str,
    options: Optional[FetchOptions] = None,
    *,
    generate: Optional[GenerateFn] = None,
    tier2: Optional[PageFetcher] = None,
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> PipelineReport:
    """Run the pipeline and return the record together with per-stage status."""
    url = validate_url(url)
    logger.info("[pipeline] Starting competitor extraction for %s", url)

    fetched = await _fetch_stage(url, options, tier2)
    enriched = await competitor_analysis.enrich(url, fetched.value, generate)

    photo_url, photo_source = choose_photo(fetched.value, criteria)
    record = enriched.value.with_photo(photo_url).with_link(url)

    report = PipelineReport(
        record=record,
        fetch=fetched,
        enrichment=enriched,
        photo_source=photo_source,
    )
    logger.info(
        "[pipeline] Extraction complete — brand=%r product=%r photo=%s degraded=%s",
        record.brand, record.product_name, photo_source or "none", report.degraded,
    )
    return report


async def run_pipeline(
    url: str,
    options: Optional[FetchOptions] = None,
    *,
    generate: Optional[GenerateFn] = None,
    tier2: Optional[PageFetcher] = None,
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> CompetitorRecord:
    report = await run_pipeline_report(
        url, options, generate=generate, tier2=tier2, criteria=criteria,
    )
    return report.record
