from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "AI Recruitment Hub"
    environment: str = "dev"
    debug: bool = True
    log_level: str = "INFO"

    llm_provider: str = "mock"
    llm_model: str = "gpt-4o-mini"
    # Outreach drafting may use a stronger model than parsing/scoring.
    llm_drafting_model: str = ""
    llm_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 800
    llm_timeout_seconds: int = 45

    batch_size: int = Field(default=5, ge=1)
    skills_display_limit: int = Field(default=5, ge=0)

    drafting_rate_limit: int = 30
    rate_limit_window_seconds: int = 60
    redis_url: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
