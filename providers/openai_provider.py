"""
OpenAI text provider — gpt-4o-mini by default.

Pricing (as of early 2025):
  gpt-4o:       $5.00 / 1M input tokens,  $15.00 / 1M output tokens
  gpt-4o-mini:  $0.15 / 1M input tokens,  $0.60  / 1M output tokens
"""
from __future__ import annotations

import time
import logging

from openai import AsyncOpenAI

from providers.base import DEFAULT_MAX_TOKENS, GenerationResponse, TextProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(TextProvider):

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        self.name = "openai"
        self.model_id = model
        self._client = AsyncOpenAI(api_key=api_key)

        # Pricing per 1k tokens
        _pricing = {
            "gpt-4o":      (0.005,  0.015),
            "gpt-4o-mini": (0.00015, 0.0006),
        }
        self.cost_per_1k_input_tokens, self.cost_per_1k_output_tokens = _pricing.get(
            model, (0.005, 0.015)
        )

    async def generate_text(self, prompt: str, system_prompt: str = "") -> GenerationResponse:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        t0 = time.monotonic()
        response = await self._client.chat.completions.create(
            model=self.model_id,
            max_tokens=DEFAULT_MAX_TOKENS,
            temperature=0,
            messages=messages,
        )
        latency_ms = int((time.monotonic() - t0) * 1000)

        raw = response.choices[0].message.content or ""
        usage = response.usage
        input_tokens = usage.prompt_tokens if usage else 0
        output_tokens = usage.completion_tokens if usage else 0

        return GenerationResponse(
            text=raw,
            provider_name=self.full_name,
            latency_ms=latency_ms,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=self.estimate_cost(input_tokens, output_tokens),
        )
