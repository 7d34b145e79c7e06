"""
Tests for the SDK adapters in providers/ (openai, anthropic, google-genai).

The SDK clients are constructed for real (no network at construction time)
and their call method is replaced with an AsyncMock.

Covers:
  - request shape: model, temperature 0, system prompt placement
  - GenerationResponse fields: text, provider_name, tokens, cost
"""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from providers.anthropic_provider import AnthropicProvider
from providers.gemini_provider import GeminiProvider
from providers.openai_provider import OpenAIProvider


@pytest.mark.asyncio
class TestOpenAIProvider:
    def _provider(self, content="{}", usage=True):
        p = OpenAIProvider("sk-test", "gpt-4o-mini")
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(prompt_tokens=1000, completion_tokens=1000) if usage else None,
        )
        create = AsyncMock(return_value=response)
        p._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        return p, create

    async def test_system_prompt_sent_first(self):
        p, create = self._provider('{"brand": "Acme"}')
        r = await p.generate_text("page", "system")

        messages = create.call_args.kwargs["messages"]
        assert messages == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "page"},
        ]
        assert create.call_args.kwargs["temperature"] == 0
        assert r.text == '{"brand": "Acme"}'
        assert r.provider_name == "openai/gpt-4o-mini"
        assert r.cost_usd == pytest.approx(0.00015 + 0.0006)

    async def test_no_system_prompt(self):
        p, create = self._provider()
        await p.generate_text("page")
        assert [m["role"] for m in create.call_args.kwargs["messages"]] == ["user"]

    async def test_missing_usage_and_content(self):
        p, _ = self._provider(content=None, usage=False)
        r = await p.generate_text("page")
        assert r.text == ""
        assert r.input_tokens == 0
        assert r.cost_usd == 0


@pytest.mark.asyncio
class TestAnthropicProvider:
    def _provider(self, blocks):
        p = AnthropicProvider("ak-test", "claude-3-haiku-20240307")
        message = SimpleNamespace(
            content=blocks,
            usage=SimpleNamespace(input_tokens=200, output_tokens=50),
        )
        create = AsyncMock(return_value=message)
        p._client = SimpleNamespace(messages=SimpleNamespace(create=create))
        return p, create

    async def test_text_blocks_joined(self):
        p, create = self._provider([
            SimpleNamespace(type="text", text='{"brand": '),
            SimpleNamespace(type="text", text='"Acme"}'),
        ])
        r = await p.generate_text("page", "system")

        assert r.text == '{"brand": "Acme"}'
        assert create.call_args.kwargs["system"] == "system"
        assert r.input_tokens == 200
        assert r.output_tokens == 50
        assert r.provider_name == "anthropic/claude-3-haiku-20240307"

    async def test_system_omitted_when_empty(self):
        p, create = self._provider([SimpleNamespace(type="text", text="{}")])
        await p.generate_text("page")
        assert "system" not in create.call_args.kwargs


@pytest.mark.asyncio
class TestGeminiProvider:
    async def test_generate_content_called_with_config(self):
        p = GeminiProvider("g-test", "gemini-2.0-flash")
        response = SimpleNamespace(
            text='{"brand": "Acme"}',
            usage_metadata=SimpleNamespace(prompt_token_count=10, candidates_token_count=5),
        )
        generate = AsyncMock(return_value=response)
        p._client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))

        r = await p.generate_text("page", "system")

        kwargs = generate.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["contents"] == "page"
        assert kwargs["config"].system_instruction == "system"
        assert kwargs["config"].temperature == 0
        assert r.text == '{"brand": "Acme"}'
        assert r.input_tokens == 10
        assert r.output_tokens == 5
        assert r.provider_name == "google/gemini-2.0-flash"
