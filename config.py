"""
Central configuration — reads from .env file.

Every value is a plain module attribute read once at import time, so code
reading config.X gets the same value for the life of the process. Tests
monkeypatch these attributes directly.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# ── Text-generation providers ─────────────────────────────────────────────────
# Add keys for whichever providers you have access to.
# Only providers whose keys are present are loaded.
OPENAI_API_KEY: str | None    = os.getenv("OPENAI_API_KEY")
ANTHROPIC_API_KEY: str | None = os.getenv("ANTHROPIC_API_KEY")
GOOGLE_API_KEY: str | None    = os.getenv("GOOGLE_API_KEY")

OPENAI_MODEL: str    = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
ANTHROPIC_MODEL: str = os.getenv("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
GEMINI_MODEL: str    = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

# Order in which providers are tried, e.g. "google,anthropic,openai".
# Unknown names are ignored; providers without a key are skipped.
PROVIDER_PRIORITY: list[str] = [
    name.strip().lower()
    for name in os.getenv("PROVIDER_PRIORITY", "google,anthropic,openai").split(",")
    if name.strip()
]

# ── Page fetching ─────────────────────────────────────────────────────────────
# Seconds before an in-flight page request is aborted.
FETCH_TIMEOUT: float = float(os.getenv("FETCH_TIMEOUT", "15"))

# Never escalate to a full-browser fetcher, even when one is wired in.
SKIP_TIER2: bool = os.getenv("SKIP_TIER2", "false").lower() == "true"

# ── Runtime ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# HTTP endpoint (api_server.py)
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8080"))
