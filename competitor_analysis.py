"""
competitor_analysis.py — turns a fetched page into a CompetitorRecord.

One text-generation call, one JSON parse. A response that isn't usable JSON
degrades to a minimal record built from the page's own title/description;
it never raises. Errors from the generation backend itself do propagate.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from competitor_models import CompetitorRecord, StageResult
from providers.base import GenerationResponse, parse_json_response
from scraper.base import FetchedPage

logger = logging.getLogger(__name__)

# Opening of the page is the densest part; prompt cost scales with this.
PROMPT_BODY_CHARS = 1_500

# How much of a bad response to keep in the log line.
LOG_RAW_CHARS = 200

SYSTEM_PROMPT = """You are a product analyst. Given a product page's scraped content, \
extract structured data and return ONLY valid JSON — no markdown, no commentary.

JSON shape:
{
  "brand": "company or brand name",
  "productName": "product name",
  "description": "1-2 sentence product description",
  "cost": "price or price range, empty string if unknown",
  "link": "canonical product URL"
}"""

GenerateFn = Callable[[str, str], Awaitable[GenerationResponse]]


def build_user_prompt(url: str, page: FetchedPage) -> str:
    sections = [
        f"URL: {url}",
        f"Title: {page.title}",
        f"Description: {page.description}",
    ]
    if page.body_text:
        sections.append(
            f"Page content (first {PROMPT_BODY_CHARS} chars):\n{page.body_text[:PROMPT_BODY_CHARS]}"
        )
    return "\n\n".join(sections)


def _as_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_competitor_json(raw: str, fallback_url: str) -> CompetitorRecord:
    """
    Parse the model's JSON into a CompetitorRecord.
    Markdown fences are stripped first. Raises ValueError if the text is not
    a JSON object.
    """
    data = parse_json_response(raw, "competitor-analysis")
    return CompetitorRecord(
        brand=_as_text(data.get("brand")),
        product_name=_as_text(data.get("productName")),
        description=_as_text(data.get("description")),
        cost=_as_text(data.get("cost")),
        link=_as_text(data.get("link")) or fallback_url,
    )


def minimal_record(url: str, page: FetchedPage) -> CompetitorRecord:
    """Fallback built only from what the page itself said."""
    return CompetitorRecord(
        brand="",
        product_name=page.title,
        description=page.description,
        cost="",
        link=url,
    )


async def enrich(
    url: str,
    page: FetchedPage,
    generate: Optional[GenerateFn] = None,
) -> StageResult[CompetitorRecord]:
    """
    Ask the text-generation backend for structured competitor data.

    `generate` defaults to the provider chain in providers.manager.
    """
    if generate is None:
        from providers.manager import generate_text as generate

    logger.info("[enrich] Analysing %s (title=%r)", url, page.title[:60])
    response = await generate(build_user_prompt(url, page), SYSTEM_PROMPT)
    raw = response.text or ""

    try:
        record = parse_competitor_json(raw, url)
    except ValueError as exc:
        logger.warning(
            "[enrich] JSON parse failed for %s — returning minimal data. raw=%r",
            url, raw[:LOG_RAW_CHARS],
        )
        return StageResult.degraded(minimal_record(url, page), f"unparseable model output: {exc}")

    logger.info("[enrich] brand=%r product=%r", record.brand, record.product_name)
    return StageResult.ok(record)
