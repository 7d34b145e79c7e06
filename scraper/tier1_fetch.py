"""
Tier 1 fetcher — plain HTTP GET + BeautifulSoup.

Fast and browser-free. Works for static and server-rendered pages; pages that
render everything client-side come back nearly empty, so parse_html() flags
them with needs_tier2 and leaves the escalation decision to the caller.

Images are returned raw (no photo filtering) so the output can be inspected;
page_fetch.scrape() applies the photo filter once on top of this.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional
from urllib.parse import urljoin, urlsplit

import aiohttp
from bs4 import BeautifulSoup

from scraper.base import (
    BODY_TEXT_LIMIT,
    FetchedImage,
    FetchedPage,
    FetchFailure,
    FetchOptions,
    PageFetcher,
)

logger = logging.getLogger(__name__)

# Desktop Chrome UA; bare client UAs get blocked by many storefronts.
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

REQUEST_HEADERS = {
    "User-Agent":      USER_AGENT,
    "Accept":          "text/html,application/xhtml+xml",
    "Accept-Language": "en-US,en;q=0.9",
}

# Paragraphs shorter than this are usually nav labels or buttons.
MIN_PARAGRAPH_CHARS = 40

# A SPA root with less body text than this is treated as an unrendered shell.
JS_ONLY_BODY_THRESHOLD = 200

_NON_CONTENT_TAGS = ("script", "style", "noscript", "nav", "header", "footer", "aside")
_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


# ── HTML helpers ──────────────────────────────────────────────────────────────

def _meta_content(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return (tag.get("content") or "").strip()


def _parse_dimension(raw: Optional[str]) -> Optional[int]:
    """'300', '300px' → 300. Missing, non-numeric or zero → None."""
    if not raw:
        return None
    m = _LEADING_INT_RE.match(str(raw))
    if not m:
        return None
    value = int(m.group(1))
    return value or None


def _resolve_url(src: str, base_url: str) -> Optional[str]:
    try:
        resolved = urljoin(base_url, src.strip())
        parts = urlsplit(resolved)
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return resolved


def extract_title(soup: BeautifulSoup) -> str:
    """og:title, falling back to <title>."""
    og_title = _meta_content(soup, property="og:title")
    if og_title:
        return og_title
    if soup.title is None:
        return ""
    return soup.title.get_text().strip()


def extract_description(soup: BeautifulSoup) -> str:
    """og:description → meta description → first substantial <p>."""
    og_desc = _meta_content(soup, property="og:description")
    if og_desc:
        return og_desc

    meta_desc = _meta_content(soup, name="description")
    if meta_desc:
        return meta_desc

    for para in soup.find_all("p"):
        text = para.get_text().strip()
        if len(text) > MIN_PARAGRAPH_CHARS:
            return text
    return ""


def extract_hero_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    og_image = _meta_content(soup, property="og:image")
    if not og_image:
        return None
    return _resolve_url(og_image, base_url)


def extract_images(soup: BeautifulSoup, base_url: str) -> list[FetchedImage]:
    """Every <img> with a resolvable src/data-src, in document order."""
    images: list[FetchedImage] = []
    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-src") or ""
        if not src.strip():
            continue
        url = _resolve_url(src, base_url)
        if url is None:
            continue
        images.append(FetchedImage(
            url=url,
            alt_text=img.get("alt") or "",
            width=_parse_dimension(img.get("width")),
            height=_parse_dimension(img.get("height")),
        ))
    return images


def extract_body_text(soup: BeautifulSoup) -> str:
    """
    Plain text of the page body, whitespace-collapsed, capped at BODY_TEXT_LIMIT.
    Removes non-content subtrees first — this mutates `soup`.
    """
    for tag in soup.find_all(list(_NON_CONTENT_TAGS)):
        if not tag.decomposed:      # nested inside an already-removed subtree
            tag.decompose()
    root = soup.body or soup
    text = _WHITESPACE_RE.sub(" ", root.get_text(" ")).strip()
    return text[:BODY_TEXT_LIMIT]


def is_js_only_page(soup: BeautifulSoup, body_text: str) -> bool:
    """SPA mount point present and almost no server-rendered text."""
    has_app_root = (
        soup.find(id="root") is not None
        or soup.find(id="app") is not None
        or soup.find(attrs={"data-reactroot": True}) is not None
    )
    return has_app_root and len(body_text) < JS_ONLY_BODY_THRESHOLD


def parse_html(html: str, url: str) -> FetchedPage:
    """
    Parse raw HTML into a FetchedPage without any network call.
    `url` is the final (post-redirect) URL that relative links resolve against.
    """
    soup = BeautifulSoup(html or "", "lxml")

    title       = extract_title(soup)
    description = extract_description(soup)
    hero_image  = extract_hero_image(soup, url)
    images      = extract_images(soup, url)
    body_text   = extract_body_text(soup)
    js_only     = is_js_only_page(soup, body_text)

    return FetchedPage(
        url=url,
        title=title,
        description=description,
        hero_image_url=hero_image,
        images=tuple(images),
        body_text=body_text,
        tier=1,
        js_rendered=False,
        needs_tier2=js_only,
    )


# ── Network ───────────────────────────────────────────────────────────────────

async def fetch(url: str, options: Optional[FetchOptions] = None) -> FetchedPage:
    """
    GET `url` and parse it.

    Each call opens its own ClientSession. The total timeout aborts the
    in-flight request.
    Raises FetchFailure(tier=1) on timeout, connection errors and non-2xx.
    """
    options = options or FetchOptions()
    timeout = aiohttp.ClientTimeout(total=options.timeout)

    try:
        async with aiohttp.ClientSession(headers=REQUEST_HEADERS, timeout=timeout) as session:
            async with session.get(url, allow_redirects=True) as resp:
                final_url = str(resp.url) if resp.url else url
                if not 200 <= resp.status < 300:
                    raise FetchFailure(f"HTTP {resp.status}", url=url, tier=1)
                html = await resp.text(errors="replace")
    except asyncio.TimeoutError as exc:
        raise FetchFailure(f"timed out after {options.timeout:g}s", url=url, tier=1) from exc
    except aiohttp.ClientError as exc:
        raise FetchFailure(f"{type(exc).__name__}: {exc}", url=url, tier=1) from exc

    page = parse_html(html, final_url)
    logger.info(
        "[tier1] %s → title=%r images=%d body=%d chars%s",
        final_url, page.title[:60], len(page.images), len(page.body_text),
        " (JS-only shell)" if page.needs_tier2 else "",
    )
    return page


class Tier1Fetcher(PageFetcher):
    """PageFetcher wrapper around fetch()."""

    @property
    def tier(self) -> int:
        return 1

    async def fetch(self, url: str, options: FetchOptions) -> FetchedPage:
        return await fetch(url, options)
