from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings, read from ``RECIPES_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RECIPES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(
        "sqlite:///./recipes.db", description="SQLAlchemy database URL"
    )
    log_level: str = Field("INFO", description="Root log level")
    # Off by default: ingredient delete is unconditional unless enabled
    guard_ingredient_delete: bool = Field(
        False, description="Refuse to delete ingredients used by recipes"
    )
    seed_file: Path = Field(
        Path("data/recipes.json"), description="JSON seed for import scripts"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
