"""
Provider Manager — initialises the enabled text providers and runs them as a
fallback chain.

Providers are tried in config.PROVIDER_PRIORITY order. The first one that
returns text wins; a provider that raises is logged and skipped. There are no
retries or delays — one attempt per provider.

Per-provider enable/disable via environment variables (all default to true):
  ENABLE_OPENAI=true/false
  ENABLE_ANTHROPIC=true/false
  ENABLE_GEMINI=true/false
"""
from __future__ import annotations

import logging
import os

import config
from providers.base import GenerationResponse, ProviderUnavailableError, TextProvider

logger = logging.getLogger(__name__)

# Module-level cache, cleared by reset_providers()
_providers: dict[str, TextProvider] = {}


def _model_enabled(env_key: str, default: bool = True) -> bool:
    """
    Check whether a provider is enabled via an environment variable.
    Default is True; pass default=False to require explicit opt-in.
    """
    raw = os.getenv(env_key, "true" if default else "false")
    return raw.strip().lower() not in ("false", "0", "no")


def _make_openai() -> TextProvider:
    from providers.openai_provider import OpenAIProvider
    return OpenAIProvider(config.OPENAI_API_KEY, config.OPENAI_MODEL)


def _make_anthropic() -> TextProvider:
    from providers.anthropic_provider import AnthropicProvider
    return AnthropicProvider(config.ANTHROPIC_API_KEY, config.ANTHROPIC_MODEL)


def _make_gemini() -> TextProvider:
    from providers.gemini_provider import GeminiProvider
    return GeminiProvider(config.GOOGLE_API_KEY, config.GEMINI_MODEL)


# name in PROVIDER_PRIORITY → (config key attribute, enable flag, factory)
_REGISTRY = {
    "openai":    ("OPENAI_API_KEY",    "ENABLE_OPENAI",    _make_openai),
    "anthropic": ("ANTHROPIC_API_KEY", "ENABLE_ANTHROPIC", _make_anthropic),
    "google":    ("GOOGLE_API_KEY",    "ENABLE_GEMINI",    _make_gemini),
}


def _build_providers() -> dict[str, TextProvider]:
    """
    Instantiate every provider whose API key is set AND whose toggle is enabled.
    Returns dict keyed by full_name, in priority order.
    """
    providers: dict[str, TextProvider] = {}

    for name in config.PROVIDER_PRIORITY:
        if name not in _REGISTRY:
            logger.warning("Unknown provider %r in PROVIDER_PRIORITY — ignored", name)
            continue
        key_attr, env_flag, factory = _REGISTRY[name]
        if not getattr(config, key_attr):
            continue
        if not _model_enabled(env_flag):
            logger.info("Skipped provider %s (disabled by %s)", name, env_flag)
            continue
        try:
            p = factory()
        except Exception as exc:
            logger.warning("Could not load %s: %s", name, exc)
            continue
        providers[p.full_name] = p
        logger.info("Loaded provider: %s", p.full_name)

    if not providers:
        raise ProviderUnavailableError(
            "No text providers available.\n"
            "Set at least one key in .env:\n"
            "  • OPENAI_API_KEY\n"
            "  • ANTHROPIC_API_KEY\n"
            "  • GOOGLE_API_KEY"
        )

    return providers


def get_providers() -> dict[str, TextProvider]:
    global _providers
    if not _providers:
        _providers = _build_providers()
    return _providers


def reset_providers() -> None:
    """Forget built providers so the next call re-reads config."""
    global _providers
    _providers = {}


# ── Core generation function ──────────────────────────────────────────────────

async def generate_text(prompt: str, system_prompt: str = "") -> GenerationResponse:
    """
    Run `prompt` through the provider chain.

    Raises ProviderUnavailableError when no provider is configured or every
    provider failed.
    """
    providers = get_providers()
    errors: list[str] = []

    for provider in providers.values():
        try:
            response = await provider.generate_text(prompt, system_prompt)
        except Exception as exc:
            logger.error("[%s] Failed: %s", provider.full_name, exc)
            errors.append(f"{provider.full_name}: {exc}")
            continue
        logger.info(
            "[%s] OK — cost=%s latency=%dms",
            provider.full_name, response.cost_str, response.latency_ms,
        )
        return response

    raise ProviderUnavailableError("All text providers failed: " + "; ".join(errors))
