"""
api_server.py — JSON endpoint for competitor extraction.

Runs as an aiohttp web server. The web front end posts a competitor URL and
gets back the structured record.

Endpoints:
  POST /api/extract-competitor   {"url": "..."} → {"success": true, "data": {...}, "degraded": bool}
  GET  /health                   → plain-text health check

Status codes:
  400  missing / invalid URL or malformed JSON body
  502  every text provider failed (or none is configured)
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from aiohttp import web

import config
from competitor_pipeline import InvalidURLError, run_pipeline_report
from providers.base import ProviderUnavailableError
from scraper.base import FetchOptions, PageFetcher

logger = logging.getLogger(__name__)

# App keys for values shared between handlers
TIER2_KEY = web.AppKey("tier2", object)


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


# ── Request handlers ───────────────────────────────────────────────────────────

async def handle_extract_competitor(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error("Request body must be JSON", 400)
    if not isinstance(body, dict):
        return _error("Request body must be a JSON object", 400)

    url = body.get("url")
    if not url or not isinstance(url, str):
        return _error("URL is required", 400)

    try:
        report = await run_pipeline_report(
            url,
            FetchOptions(),
            tier2=request.app.get(TIER2_KEY),
        )
    except InvalidURLError as exc:
        return _error(str(exc), 400)
    except ProviderUnavailableError as exc:
        logger.error("Extraction failed for %s: %s", url, exc)
        return _error(str(exc), 502)

    return web.json_response({
        "success":  True,
        "data":     report.record.to_dict(),
        "degraded": report.degraded,
    })


async def handle_health(request: web.Request) -> web.Response:
    """Health check — returns 200 OK. Use with uptime monitors."""
    return web.Response(text="OK", content_type="text/plain")


# ── App factory ────────────────────────────────────────────────────────────────

def build_web_app(tier2: Optional[PageFetcher] = None) -> web.Application:
    app = web.Application()
    app[TIER2_KEY] = tier2
    app.router.add_get("/health",                  handle_health)
    app.router.add_post("/api/extract-competitor", handle_extract_competitor)
    return app


async def start_api_server(tier2: Optional[PageFetcher] = None) -> web.AppRunner:
    """Start the web server. Returns runner so caller can shut it down cleanly."""
    app    = build_web_app(tier2)
    runner = web.AppRunner(app, access_log=logger)
    await runner.setup()
    site = web.TCPSite(runner, config.API_HOST, config.API_PORT)
    await site.start()
    logger.info("API listening on %s:%d", config.API_HOST, config.API_PORT)
    return runner
