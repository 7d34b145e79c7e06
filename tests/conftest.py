"""
Shared pytest fixtures.

Every test starts with an empty provider cache and no provider keys, so a
test that forgets to inject a fake generator fails loudly instead of calling
a real API.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def isolated_providers(monkeypatch):
    """Clear provider keys and the module-level provider cache."""
    import config
    import providers.manager as manager_mod

    monkeypatch.setattr(config, "OPENAI_API_KEY", None)
    monkeypatch.setattr(config, "ANTHROPIC_API_KEY", None)
    monkeypatch.setattr(config, "GOOGLE_API_KEY", None)
    manager_mod.reset_providers()
    yield
    manager_mod.reset_providers()


def fake_aiohttp_session(html: str = "", status: int = 200, final_url: str = "https://shop.test/p"):
    """
    Build a MagicMock standing in for aiohttp.ClientSession(...).
    Returns (session, response) so tests can inspect calls.
    """
    from unittest.mock import AsyncMock, MagicMock

    mock_resp = MagicMock()
    mock_resp.status = status
    mock_resp.url = final_url
    mock_resp.text = AsyncMock(return_value=html)
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=False)

    mock_session = MagicMock()
    mock_session.get = MagicMock(return_value=mock_resp)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=False)
    return mock_session, mock_resp
