"""
Shared types and abstract base for all page fetchers.

Every fetch tier must return the same FetchedPage — the rest of the pipeline
doesn't care which tier produced it.

  Tier 1 (fast):  HTTP GET + HTML parse (scraper/tier1_fetch.py)
  Tier 2 (heavy): full browser rendering, provided by the caller as a
                  PageFetcher with tier == 2. Not implemented here.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Union

import config

BODY_TEXT_LIMIT = 5_000


# ── Images ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FetchedImage:
    """A single <img> found on a fetched page."""
    url: str                        # absolute URL
    alt_text: str = ""
    width: Optional[int] = None     # px, only when the markup declares it
    height: Optional[int] = None

    @property
    def has_dimensions(self) -> bool:
        return self.width is not None and self.height is not None

    @property
    def area(self) -> int:
        if not self.has_dimensions:
            return 0
        return self.width * self.height


# ── Pages ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FetchedPage:
    """
    Normalised content of one fetched page, before AI enrichment.

    `url` is the post-redirect URL. `needs_tier2` is advisory: Tier 1 sets it
    when the page looks like a client-rendered shell, and the fetch service
    decides whether to escalate.
    """
    url: str
    title: str = ""
    description: str = ""
    hero_image_url: Optional[str] = None   # og:image
    images: tuple[FetchedImage, ...] = ()
    body_text: str = ""                    # plain text, ≤ BODY_TEXT_LIMIT chars
    tier: int = 1
    js_rendered: bool = False
    needs_tier2: bool = False

    @classmethod
    def empty(cls, url: str) -> "FetchedPage":
        """Blank page used when fetching failed outright."""
        return cls(url=url)

    @property
    def is_blank(self) -> bool:
        return not self.title and not self.description and len(self.body_text) < 50


# ── Options ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FetchOptions:
    """Passed through unchanged to every fetch tier."""
    timeout: float = field(default_factory=lambda: config.FETCH_TIMEOUT)   # seconds
    skip_tier2: bool = field(default_factory=lambda: config.SKIP_TIER2)

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")


# ── Errors ────────────────────────────────────────────────────────────────────

class FetchFailure(RuntimeError):
    """Transport-level failure (timeout, DNS, non-2xx) while fetching a page."""

    def __init__(self, message: str, url: str, tier: Union[int, str]) -> None:
        super().__init__(message)
        self.url = url
        self.tier = tier            # 1 | 2 | "both"

    def __str__(self) -> str:
        return f"[tier {self.tier}] {self.url}: {super().__str__()}"


# ── Abstract base ─────────────────────────────────────────────────────────────

class PageFetcher(ABC):
    """All fetch tiers must implement this interface."""

    @abstractmethod
    async def fetch(self, url: str, options: FetchOptions) -> FetchedPage:
        """
        Fetch `url` and return its normalised content.
        Raises FetchFailure on transport errors; never on parse problems.
        """
        ...

    @property
    @abstractmethod
    def tier(self) -> int:
        """1 for plain HTTP, 2 for full browser rendering."""
        ...

    @property
    def name(self) -> str:
        return f"tier{self.tier}"
