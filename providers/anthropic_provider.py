"""
Anthropic text provider — supports claude-3-5-sonnet and claude-3-haiku.

Pricing (as of early 2025):
  claude-3-5-sonnet-20241022: $3.00 / 1M input,  $15.00 / 1M output
  claude-3-haiku-20240307:    $0.25 / 1M input,  $1.25  / 1M output
"""
from __future__ import annotations

import time
import logging

import anthropic

from providers.base import DEFAULT_MAX_TOKENS, GenerationResponse, TextProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(TextProvider):

    def __init__(self, api_key: str, model: str = "claude-3-haiku-20240307"):
        self.name = "anthropic"
        self.model_id = model
        self._client = anthropic.AsyncAnthropic(api_key=api_key)

        _pricing = {
            "claude-3-5-sonnet-20241022": (0.003,  0.015),
            "claude-3-haiku-20240307":    (0.00025, 0.00125),
        }
        self.cost_per_1k_input_tokens, self.cost_per_1k_output_tokens = _pricing.get(
            model, (0.003, 0.015)
        )

    async def generate_text(self, prompt: str, system_prompt: str = "") -> GenerationResponse:
        kwargs = {}
        if system_prompt:
            kwargs["system"] = system_prompt

        t0 = time.monotonic()
        message = await self._client.messages.create(
            model=self.model_id,
            max_tokens=DEFAULT_MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
        latency_ms = int((time.monotonic() - t0) * 1000)

        # Concatenate text blocks; tool/other block types are not requested.
        raw = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens

        return GenerationResponse(
            text=raw,
            provider_name=self.full_name,
            latency_ms=latency_ms,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=self.estimate_cost(input_tokens, output_tokens),
        )
