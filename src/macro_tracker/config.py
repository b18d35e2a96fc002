"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    fatsecret_consumer_key: str
    fatsecret_consumer_secret: str
    fatsecret_base_url: str = "https://platform.fatsecret.com/rest/server.api"
    food_search_max_results: int = Field(default=50, gt=0)
    openai_api_key: str
    openai_model: str = "gpt-4-turbo"
    google_search_api_key: str
    google_search_engine_id: str
    image_cache_ttl_days: int = Field(default=30, gt=0)
    llm_max_requests_per_minute: int = Field(default=5, gt=0)
    llm_request_delay_seconds: float = Field(default=1.0, ge=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
