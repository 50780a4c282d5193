# app/config/settings.py
"""
Application configuration using pydantic-settings (pydantic v2 style).

Everything environment-driven lives here: Supabase credentials, the OpenAI
key and request parameters, the generation budgets, and the switches that
enable the curated store and the generative backfill.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application configuration loaded from environment.

    Relevant environment variables:
      - SUPABASE_URL
      - SUPABASE_KEY
      - MEAL_TABLE
      - OPENAI_API_KEY
      - OPENAI_MODEL
      - ENABLE_DATABASE_SUGGESTIONS / ENABLE_AI_SUGGESTIONS
      - ENABLE_FALLBACK_SUGGESTIONS
      - AI_POOL_SIZE
      - GENERATION_MAX_ATTEMPTS / GENERATION_MAX_TIME_SECONDS
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Supabase
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    meal_table: str = "meal_suggestions"

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_request_timeout: float = 15.0

    # Feature switches
    enable_database_suggestions: bool = True
    enable_ai_suggestions: bool = True
    enable_fallback_suggestions: bool = True

    # Generated suggestions kept per criteria once the store is exhausted
    ai_pool_size: int = 12

    # Generation budgets and sampling
    generation_max_attempts: int = 3
    generation_max_time_seconds: float = 20.0
    generation_temperature: float = 0.7
    generation_max_tokens: int = 800
    generation_presence_penalty: float = 0.4
    generation_frequency_penalty: float = 0.6

    # Startup / health
    health_check_timeout: float = 5.0
    fail_on_db_startup: bool = False

    @field_validator("supabase_url", "supabase_key", "openai_api_key")
    @classmethod
    def maybe_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("generation_max_attempts", "ai_pool_size")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        return max(1, v)

    def model_post_init(self, __context) -> None:
        if not self.supabase_url or not self.supabase_key:
            logger.warning(
                "Supabase credentials are not configured. "
                "Set SUPABASE_URL and SUPABASE_KEY to enable curated suggestions."
            )
        if not self.openai_api_key:
            logger.info(
                "OPENAI_API_KEY not set. Generated suggestions will fall back to the static catalog."
            )
        if not self.enable_database_suggestions:
            logger.info("Database suggestions disabled: running in AI-only mode.")


# single exporter
settings = Settings()
