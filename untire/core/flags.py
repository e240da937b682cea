"""
Central feature flags. One file controls every external dependency.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the system uses a local fallback. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Auth ─────────────────────────────────────────────────────────
    use_session_auth: bool = Field(default=True, alias="FF_USE_SESSION_AUTH")
    # ON  → Session cookie (or Bearer token) validated against the sessions table.
    # OFF → Dev user injected (user_id="dev-user", admin). No login needed.

    # ── Cache / Realtime ─────────────────────────────────────────────
    use_redis: bool = Field(default=False, alias="FF_USE_REDIS")
    # ON  → Redis pub/sub for realtime frontend notifications. Needs REDIS_URL.
    # OFF → Notifications silently skipped. Nothing breaks.

    # ── LLM Provider ─────────────────────────────────────────────────
    llm_provider: str = Field(default="openai", alias="FF_LLM_PROVIDER")
    # "openai" → Direct OpenAI (default). Needs OPENAI_API_KEY.
    # "gemini" → Gemini's OpenAI-compatible endpoint. Needs GEMINI_API_KEY.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
