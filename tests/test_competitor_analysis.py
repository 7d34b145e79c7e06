"""
Tests for competitor_analysis.py.

Covers:
  - build_user_prompt: sections, 1,500-char body cap, body omitted when empty
  - parse_competitor_json: plain, fenced, missing/None fields, non-object JSON
  - enrich(): ok path, fenced output, unparseable output → degraded minimal record
  - enrich(): generation errors propagate
  - enrich(): defaults to the provider chain
"""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from competitor_analysis import (
    PROMPT_BODY_CHARS,
    SYSTEM_PROMPT,
    build_user_prompt,
    enrich,
    parse_competitor_json,
)
from competitor_models import CompetitorRecord, StageStatus
from providers.base import GenerationResponse, ProviderUnavailableError
from scraper.base import FetchedPage

URL = "https://shop.test/widget"

PAYLOAD = {
    "brand": "Acme",
    "productName": "Widget Pro",
    "description": "A very good widget.",
    "cost": "$49",
    "link": "https://acme.test/canonical",
}


def make_page(**overrides) -> FetchedPage:
    defaults = dict(url=URL, title="Widget Pro | Acme", description="Meta description", body_text="Body copy")
    defaults.update(overrides)
    return FetchedPage(**defaults)


def generator_returning(text: str) -> AsyncMock:
    return AsyncMock(return_value=GenerationResponse(text=text, provider_name="fake/model"))


# ── build_user_prompt ─────────────────────────────────────────────────────────

class TestBuildUserPrompt:
    def test_contains_url_title_description(self):
        prompt = build_user_prompt(URL, make_page())
        assert f"URL: {URL}" in prompt
        assert "Title: Widget Pro | Acme" in prompt
        assert "Description: Meta description" in prompt
        assert "Body copy" in prompt

    def test_body_capped(self):
        body = "a" * PROMPT_BODY_CHARS + "OVERFLOW"
        prompt = build_user_prompt(URL, make_page(body_text=body))
        assert "a" * PROMPT_BODY_CHARS in prompt
        assert "OVERFLOW" not in prompt

    def test_body_section_omitted_when_empty(self):
        prompt = build_user_prompt(URL, make_page(body_text=""))
        assert "Page content" not in prompt
        assert prompt.count("\n\n") == 2

    def test_system_prompt_lists_all_fields(self):
        for field in ("brand", "productName", "description", "cost", "link"):
            assert f'"{field}"' in SYSTEM_PROMPT


# ── parse_competitor_json ─────────────────────────────────────────────────────

class TestParseCompetitorJson:
    def test_plain_json(self):
        record = parse_competitor_json(json.dumps(PAYLOAD), URL)
        assert record == CompetitorRecord(
            brand="Acme",
            product_name="Widget Pro",
            description="A very good widget.",
            cost="$49",
            link="https://acme.test/canonical",
        )

    def test_fenced_json_parses_identically(self):
        plain = parse_competitor_json(json.dumps(PAYLOAD), URL)
        fenced = parse_competitor_json("```json\n" + json.dumps(PAYLOAD) + "\n```", URL)
        bare_fence = parse_competitor_json("```\n" + json.dumps(PAYLOAD, indent=2) + "\n```", URL)
        assert fenced == plain
        assert bare_fence == plain

    def test_missing_fields_become_empty(self):
        record = parse_competitor_json('{"brand": "Acme"}', URL)
        assert record.product_name == ""
        assert record.cost == ""
        assert record.link == URL

    def test_null_and_numeric_fields_coerced(self):
        record = parse_competitor_json('{"brand": null, "cost": 49.5, "link": ""}', URL)
        assert record.brand == ""
        assert record.cost == "49.5"
        assert record.link == URL

    @pytest.mark.parametrize("raw", ["not json at all", "", '["a", "b"]', '"just a string"', '{"brand": "Ac'])
    def test_unusable_output_raises_value_error(self, raw):
        with pytest.raises(ValueError):
            parse_competitor_json(raw, URL)


# ── enrich ────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
class TestEnrich:
    async def test_ok_result(self):
        generate = generator_returning(json.dumps(PAYLOAD))
        result = await enrich(URL, make_page(), generate)

        assert result.status is StageStatus.OK
        assert result.is_degraded is False
        assert result.value.brand == "Acme"
        prompt, system_prompt = generate.call_args.args
        assert URL in prompt
        assert system_prompt == SYSTEM_PROMPT

    async def test_fenced_output_ok(self):
        generate = generator_returning("```json\n" + json.dumps(PAYLOAD) + "\n```")
        result = await enrich(URL, make_page(), generate)
        assert result.status is StageStatus.OK
        assert result.value.product_name == "Widget Pro"

    async def test_not_json_degrades_to_minimal_record(self):
        page = make_page()
        result = await enrich(URL, page, generator_returning("not json at all"))

        assert result.is_degraded
        assert result.reason
        assert result.value == CompetitorRecord(
            brand="",
            product_name=page.title,
            description=page.description,
            cost="",
            link=URL,
        )

    async def test_empty_page_degrades_to_blank_record(self):
        result = await enrich(URL, FetchedPage.empty(URL), generator_returning("Sorry, I can't."))
        assert result.is_degraded
        assert result.value.product_name == ""
        assert result.value.link == URL

    async def test_none_text_degrades(self):
        generate = AsyncMock(return_value=GenerationResponse(text=None))
        result = await enrich(URL, make_page(), generate)
        assert result.is_degraded

    async def test_degraded_logs_truncated_raw(self, caplog):
        raw = "x" * 1000
        with caplog.at_level("WARNING", logger="competitor_analysis"):
            await enrich(URL, make_page(), generator_returning(raw))
        messages = [r.getMessage() for r in caplog.records if r.name == "competitor_analysis"]
        assert messages
        assert "x" * 200 in messages[0]
        assert "x" * 201 not in messages[0]

    async def test_generation_error_propagates(self):
        generate = AsyncMock(side_effect=ProviderUnavailableError("All text providers failed"))
        with pytest.raises(ProviderUnavailableError):
            await enrich(URL, make_page(), generate)

    async def test_defaults_to_provider_chain(self):
        chain = generator_returning(json.dumps(PAYLOAD))
        with patch("providers.manager.generate_text", chain):
            result = await enrich(URL, make_page())
        assert chain.await_count == 1
        assert result.value.brand == "Acme"
