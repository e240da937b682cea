"""
LLM client for OpenAI-compatible chat completion endpoints.

Features:
  - Reusable client (connection pooling)
  - Provider selection by flag (openai | gemini)
  - Structured logging of latency and token usage

One request per call. Callers decide what a failure means; the coach turns
it into a fallback reply, the profile updater logs and drops it.
"""

import logging
import time
from typing import Any, Optional

import httpx

from ..core.config import get_settings
from ..core.flags import get_flags

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"
GEMINI_MODEL_PREFIX = "gemini"


class LLMNotConfiguredError(RuntimeError):
    """No API key for the active provider."""


# ── Reusable client (connection pool) ────────────────────────────────

_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=10, read=120, write=30, pool=10),
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )
    return _client


async def close_client():
    """Close the shared HTTP client. Call on app shutdown."""
    global _client
    if _client and not _client.is_closed:
        await _client.aclose()
        _client = None


# ── Provider config ──────────────────────────────────────────────────

def _get_provider_config(provider: Optional[str] = None) -> tuple[str, str, str]:
    """Returns (base_url, api_key, default_model) for a provider."""
    settings = get_settings()
    p = (provider or get_flags().llm_provider).lower()

    if p == "gemini":
        return GEMINI_BASE_URL, settings.gemini_api_key, settings.gemini_default_model
    # openai (default)
    return settings.openai_base_url, settings.openai_api_key, settings.default_llm_model


def is_configured(provider: Optional[str] = None) -> bool:
    """True when the active provider has an API key."""
    return bool(_get_provider_config(provider)[1])


def model_for_provider(model: Optional[str], provider: Optional[str] = None) -> str:
    """
    Model id to send to the active provider.

    Stored settings hold one model id whatever the provider flag says. An id
    from the other family (gpt-4o while on Gemini, gemini-* while on OpenAI)
    is swapped for the provider's default.
    """
    p = (provider or get_flags().llm_provider).lower()
    default_model = _get_provider_config(p)[2]
    if not model:
        return default_model

    is_gemini_model = model.lower().removeprefix("models/").startswith(GEMINI_MODEL_PREFIX)
    if is_gemini_model != (p == "gemini"):
        logger.warning("Model %s does not belong to provider %s, using %s", model, p, default_model)
        return default_model
    return model


# ── Main chat function ───────────────────────────────────────────────

async def chat(
    messages: list[dict],
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    provider: Optional[str] = None,
) -> dict:
    """
    Chat completion. Returns the full API response as dict.

    Raises LLMNotConfiguredError without a key, httpx errors on failure.
    """
    settings = get_settings()
    active_provider = (provider or get_flags().llm_provider).lower()
    base_url, api_key, _ = _get_provider_config(provider)

    if not api_key:
        raise LLMNotConfiguredError(
            f"No API key for LLM provider '{active_provider}'. "
            "Set OPENAI_API_KEY or GEMINI_API_KEY."
        )

    payload: dict[str, Any] = {
        "model": model_for_provider(model, active_provider),
        "messages": messages,
        "temperature": temperature if temperature is not None else settings.default_llm_temperature,
        "max_tokens": max_tokens or settings.default_llm_max_tokens,
    }

    url = f"{base_url.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    start = time.monotonic()
    client = _get_client()

    try:
        resp = await client.post(url, json=payload, headers=headers)
        if resp.status_code >= 400:
            logger.error("LLM API error %d: %s", resp.status_code, resp.text[:500])
        resp.raise_for_status()
        data = resp.json()
    except Exception as e:
        elapsed = time.monotonic() - start
        logger.error("LLM failed after %.1fs (model=%s): %s", elapsed, payload["model"], e)
        raise

    elapsed = time.monotonic() - start
    usage = data.get("usage", {})
    logger.info(
        "LLM chat: %dms | in=%d out=%d tokens | model=%s",
        int(elapsed * 1000),
        usage.get("prompt_tokens", 0),
        usage.get("completion_tokens", 0),
        payload["model"],
    )
    return data


def _content(response: dict) -> str:
    choices = response.get("choices") or [{}]
    return (choices[0].get("message") or {}).get("content") or ""


# ── Convenience functions ────────────────────────────────────────────

async def complete(
    system: str,
    history: list[dict],
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> str:
    """System prompt plus prior turns in, reply text out."""
    messages = [{"role": "system", "content": system}, *history]
    response = await chat(
        messages=messages, model=model,
        temperature=temperature, max_tokens=max_tokens,
    )
    return _content(response)


async def chat_simple(
    prompt: str,
    system: str = "",
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: int = 2048,
) -> str:
    """Send a prompt, get a string back."""
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    response = await chat(
        messages=messages, model=model,
        temperature=temperature, max_tokens=max_tokens,
    )
    return _content(response)
