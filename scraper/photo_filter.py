"""
Photo filter — decides which fetched images look like product photos.

Pure functions, no I/O: the same image list and criteria always give the same
answer. An image is rejected when any of these say so:

  • URL    — path/query looks like an icon, logo, sprite, banner, tracking
             pixel, ad slot, vector asset or placeholder
  • alt    — alt text is a UI label ("logo", "icon", "spacer", …)
  • size   — declared dimensions are too small or the aspect ratio is extreme
             (unknown dimensions pass; the enrichment step can still judge)
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import urlsplit

from scraper.base import FetchedImage


@dataclass(frozen=True)
class PhotoFilterCriteria:
    """Size thresholds in px. Aspect ratio is width / height, bounds inclusive."""
    min_width: int = 200
    min_height: int = 150
    min_area: int = 40_000
    min_aspect_ratio: float = 0.4
    max_aspect_ratio: float = 3.0


DEFAULT_PHOTO_FILTER = PhotoFilterCriteria()

# ── URL patterns ──────────────────────────────────────────────────────────────

_EXCLUDED_URL_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/icons?/",
        r"/logos?/",
        r"/sprites?/",
        r"/avatars?/",
        r"/badges?/",
        r"/banners?/",
        r"/pixels?/",
        r"/tracking/",
        r"/ads?/",
        r"\.svg(\?|$)",     # vector UI assets
        r"1x1",             # tracking pixels by declared size
        r"placeholder",
    )
)

# ── Alt-text patterns ─────────────────────────────────────────────────────────

_EXCLUDED_ALT_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^logo$",
        r"^icon$",
        r"^avatar$",
        r"^tracking",
        r"^advertisement",
        r"^spacer$",
        r"^pixel$",
    )
)


def is_excluded_by_url(url: str) -> bool:
    """True if the URL looks like a UI/tracking asset. Unparseable URLs are excluded."""
    try:
        parts = urlsplit(url)
    except (ValueError, TypeError):
        return True
    if not parts.scheme or not parts.netloc:
        return True
    path_and_query = parts.path + (f"?{parts.query}" if parts.query else "")
    return any(p.search(path_and_query) for p in _EXCLUDED_URL_PATTERNS)


def is_excluded_by_alt(alt_text: str) -> bool:
    trimmed = (alt_text or "").strip()
    return any(p.search(trimmed) for p in _EXCLUDED_ALT_PATTERNS)


def meets_minimum_size(
    image: FetchedImage,
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> bool:
    """
    Unknown width or height passes — we can't reject what we can't measure.
    Known dimensions must clear the minimums and sit inside the aspect band,
    which drops thin banner strips and extreme crops.
    """
    if not image.has_dimensions:
        return True

    width, height = image.width, image.height
    if width <= 0 or height <= 0:
        return False
    if width < criteria.min_width or height < criteria.min_height:
        return False
    if width * height < criteria.min_area:
        return False

    ratio = width / height
    return criteria.min_aspect_ratio <= ratio <= criteria.max_aspect_ratio


def is_product_photo(
    image: FetchedImage,
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> bool:
    if is_excluded_by_url(image.url):
        return False
    if is_excluded_by_alt(image.alt_text):
        return False
    return meets_minimum_size(image, criteria)


def filter_product_photos(
    images: Iterable[FetchedImage],
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
    max_results: int = 5,
) -> list[FetchedImage]:
    """Product-photo candidates in discovery order, capped at max_results."""
    if max_results <= 0:
        return []
    kept: list[FetchedImage] = []
    for image in images:
        if is_product_photo(image, criteria):
            kept.append(image)
            if len(kept) >= max_results:
                break
    return kept


def select_best_photo(
    images: Iterable[FetchedImage],
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> Optional[FetchedImage]:
    """
    Pick the single best product-photo candidate.

    Candidates with declared dimensions win over those without; among them
    the largest area wins and the first one seen wins a tie. With no declared
    dimensions at all, the first candidate is returned. None when nothing passes.
    """
    candidates = [img for img in images if is_product_photo(img, criteria)]
    if not candidates:
        return None

    sized = [img for img in candidates if img.has_dimensions]
    if not sized:
        return candidates[0]

    best = sized[0]
    for img in sized[1:]:
        if img.area > best.area:
            best = img
    return best
