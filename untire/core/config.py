"""
Central configuration. All API keys and settings in one place.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Environment ---
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    # --- Database ---
    database_url: str = Field(
        default="sqlite+aiosqlite:///./untire_coach.db",
        alias="DATABASE_URL",
    )

    # --- LLM ---
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    default_llm_model: str = Field(default="gpt-4o", alias="DEFAULT_LLM_MODEL")
    # Used instead of a stored OpenAI model id when FF_LLM_PROVIDER=gemini
    gemini_default_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_DEFAULT_MODEL")
    default_llm_temperature: float = Field(default=0.8, alias="DEFAULT_LLM_TEMPERATURE")
    default_llm_max_tokens: int = Field(default=500, alias="DEFAULT_LLM_MAX_TOKENS")
    llm_timeout_seconds: float = Field(default=45.0, alias="LLM_TIMEOUT_SECONDS")

    # --- Dynamic profile extraction ---
    extraction_model: str = Field(default="gpt-4o", alias="EXTRACTION_MODEL")
    extraction_temperature: float = Field(default=0.3, alias="EXTRACTION_TEMPERATURE")
    extraction_max_tokens: int = Field(default=400, alias="EXTRACTION_MAX_TOKENS")
    profile_queue_size: int = Field(default=100, alias="PROFILE_QUEUE_SIZE")

    # --- Sessions ---
    secret_key: str = Field(default="dev-secret-key-change-in-production", alias="SECRET_KEY")
    session_algorithm: str = Field(default="HS256", alias="SESSION_ALGORITHM")
    session_ttl_days: int = Field(default=7, alias="SESSION_TTL_DAYS")
    session_cookie_name: str = Field(default="sessionId", alias="SESSION_COOKIE_NAME")

    # --- Bootstrap admin (skipped when password is empty) ---
    admin_username: str = Field(default="admin", alias="ADMIN_USERNAME")
    admin_password: str = Field(default="", alias="ADMIN_PASSWORD")

    # --- Redis ---
    redis_url: str = Field(default="", alias="REDIS_URL")

    # --- API ---
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=3003, alias="API_PORT")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")


@lru_cache
def get_settings() -> Settings:
    return Settings()
