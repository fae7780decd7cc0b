"""
Recipe book configuration.
Values can be overridden with RECIPEBOOK_* environment variables or a .env file.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CATEGORIES = ["和食", "洋食", "中華", "イタリアン", "デザート", "その他"]


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="RECIPEBOOK_", extra="ignore"
    )

    DATABASE_URL: str = "sqlite:///./recipes.db"
    # closed list; a recipe's category must be one of these
    RECIPE_CATEGORIES: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES)
    )
    PAGE_SIZE: int = Field(default=10, ge=1)
    NAME_MAX_LENGTH: int = Field(default=100, ge=1)
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get application settings instance"""
    return Settings()
