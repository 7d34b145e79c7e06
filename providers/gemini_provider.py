"""
Google Gemini text provider — uses the google-genai SDK (v1 API).

Pricing (as of early 2025):
  gemini-1.5-pro:        $3.50 / 1M input,  $10.50 / 1M output
  gemini-1.5-flash:      $0.075 / 1M input,  $0.30  / 1M output
  gemini-2.0-flash:      $0.10  / 1M input,  $0.40  / 1M output
"""
from __future__ import annotations

import time
import logging

from google import genai
from google.genai import types as genai_types

from providers.base import DEFAULT_MAX_TOKENS, GenerationResponse, TextProvider

logger = logging.getLogger(__name__)

_PRICING: dict[str, tuple[float, float]] = {
    # model_id: ($/1k_input_tokens, $/1k_output_tokens)
    "gemini-1.5-pro":        (0.0035,   0.0105),
    "gemini-1.5-flash":      (0.000075, 0.0003),
    "gemini-2.0-flash":      (0.0001,   0.0004),
    "gemini-2.0-flash-lite": (0.000075, 0.0003),
}


class GeminiProvider(TextProvider):

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash"):
        self.name     = "google"
        self.model_id = model
        self._client  = genai.Client(api_key=api_key)

        rates = _PRICING.get(model, _PRICING["gemini-2.0-flash"])
        self.cost_per_1k_input_tokens  = rates[0]
        self.cost_per_1k_output_tokens = rates[1]

    async def generate_text(self, prompt: str, system_prompt: str = "") -> GenerationResponse:
        gen_config = genai_types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            temperature=0,
            max_output_tokens=DEFAULT_MAX_TOKENS,
        )

        t0 = time.monotonic()
        response = await self._client.aio.models.generate_content(
            model=self.model_id,
            contents=prompt,
            config=gen_config,
        )
        latency_ms = int((time.monotonic() - t0) * 1000)

        usage         = response.usage_metadata
        input_tokens  = getattr(usage, "prompt_token_count", 0) or 0
        output_tokens = getattr(usage, "candidates_token_count", 0) or 0

        return GenerationResponse(
            text          = response.text or "",
            provider_name = self.full_name,
            latency_ms    = latency_ms,
            input_tokens  = input_tokens,
            output_tokens = output_tokens,
            cost_usd      = self.estimate_cost(input_tokens, output_tokens),
        )
