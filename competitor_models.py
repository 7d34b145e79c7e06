"""
competitor_models.py — canonical home of CompetitorRecord and the per-stage
result types used by the competitor pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CompetitorRecord:
    """Structured competitor data produced for one URL."""
    brand: str
    product_name: str
    description: str
    cost: str                       # free-form price text, "" if unknown
    link: str
    photo_url: Optional[str] = None

    def with_link(self, link: str) -> "CompetitorRecord":
        return replace(self, link=link)

    def with_photo(self, photo_url: Optional[str]) -> "CompetitorRecord":
        return replace(self, photo_url=photo_url)

    def to_dict(self) -> dict:
        """JSON shape used by the web/export layers (camelCase keys)."""
        return {
            "brand":       self.brand,
            "productName": self.product_name,
            "description": self.description,
            "cost":        self.cost,
            "link":        self.link,
            "photoUrl":    self.photo_url,
        }


class StageStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"     # stage fell back to a default value


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """
    Outcome of one pipeline stage that is allowed to soft-fail.

    A stage that cannot produce even a fallback raises instead, so there is
    no "failed" status.
    """
    status: StageStatus
    value: T
    reason: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "StageResult[T]":
        return cls(StageStatus.OK, value)

    @classmethod
    def degraded(cls, value: T, reason: str) -> "StageResult[T]":
        return cls(StageStatus.DEGRADED, value, reason)

    @property
    def is_degraded(self) -> bool:
        return self.status is StageStatus.DEGRADED


@dataclass(frozen=True)
class PipelineReport:
    """Final record plus how each stage went."""
    record: CompetitorRecord
    fetch: StageResult
    enrichment: StageResult
    photo_source: Optional[str] = None      # "image" | "hero" | None

    @property
    def degraded(self) -> bool:
        return self.fetch.is_degraded or self.enrichment.is_degraded

    def to_dict(self) -> dict:
        return {
            "record":     self.record.to_dict(),
            "fetch":      {"status": self.fetch.status.value, "reason": self.fetch.reason},
            "enrichment": {"status": self.enrichment.status.value, "reason": self.enrichment.reason},
            "photoSource": self.photo_source,
            "degraded":   self.degraded,
        }
