"""Application configuration utilities."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings derived from environment variables."""

    database_url: str = Field(
        default="sqlite:///./cement.db", alias="DATABASE_URL"
    )
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4.1-mini", alias="OPENAI_MODEL")
    answer_max_tokens: int = Field(default=512, alias="ANSWER_MAX_TOKENS")
    query_timeout_seconds: float = Field(
        default=10.0, alias="ASSISTANT_QUERY_TIMEOUT_SECONDS"
    )
    business_timezone: str = Field(
        default="Asia/Ho_Chi_Minh", alias="BUSINESS_TIMEZONE"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def answers_enabled(self) -> bool:
        """Return ``True`` when an LLM key is configured for phrasing answers."""

        return bool(self.openai_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
