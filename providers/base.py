"""
Shared types and base class for all text-generation providers.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1024


# ── Errors ────────────────────────────────────────────────────────────────────

class ProviderUnavailableError(RuntimeError):
    """No provider is configured, or every configured provider failed."""


# ── Shared result type ─────────────────────────────────────────────────────────

@dataclass
class GenerationResponse:
    """Result from a single text-generation call."""
    text: str
    provider_name: str = ""     # e.g. "openai/gpt-4o-mini"
    latency_ms: int = 0         # wall-clock time for this call
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0       # estimated cost

    @property
    def cost_str(self) -> str:
        if self.cost_usd < 0.001:
            return f"${self.cost_usd * 1000:.3f}m"   # show in milli-dollars
        return f"${self.cost_usd:.4f}"


# ── JSON helpers ──────────────────────────────────────────────────────────────

def strip_code_fence(raw: str) -> str:
    """
    Remove a Markdown code fence (```json … ``` or ``` … ```) wrapped around
    a model response. Text without a leading fence is returned stripped.
    """
    text = (raw or "").strip()
    if text.startswith("```"):
        lines = text.split("\n")
        text = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
        # Fence closed on the same line as the payload: {...}```
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_json_response(raw: str, provider_name: str) -> dict:
    """
    Parse a JSON object from a model response, handling markdown fences gracefully.
    Raises ValueError on parse failure or when the payload is not an object.
    """
    text = strip_code_fence(raw)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("[%s] Non-JSON response: %s", provider_name, (raw or "")[:300])
        raise ValueError(f"[{provider_name}] JSON parse error: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"[{provider_name}] expected a JSON object, got {type(data).__name__}")
    return data


# ── Abstract base ──────────────────────────────────────────────────────────────

class TextProvider(ABC):
    """Base class all text-generation providers must implement."""

    name: str           # e.g. "openai"
    model_id: str       # e.g. "gpt-4o-mini"
    cost_per_1k_input_tokens: float = 0.0
    cost_per_1k_output_tokens: float = 0.0

    @abstractmethod
    async def generate_text(self, prompt: str, system_prompt: str = "") -> GenerationResponse:
        """Run one completion. Must return GenerationResponse; raise on API errors."""
        ...

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.model_id}"

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            input_tokens / 1000 * self.cost_per_1k_input_tokens
            + output_tokens / 1000 * self.cost_per_1k_output_tokens
        )
