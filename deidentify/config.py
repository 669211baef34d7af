"""
Configuration settings for the de-identification tool.

Uses Pydantic Settings to load environment variables (and `.env`) for the
pseudonym salt, pipeline options and logging. CLI arguments override these
values.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Pseudonymization
    salt: Optional[SecretStr] = Field(None, alias="DEID_SALT")

    # Pipelines
    reject_duplicate_people: bool = Field(False, alias="DEID_REJECT_DUPLICATE_PEOPLE")
    first_only: bool = Field(False, alias="DEID_FIRST_ONLY")
    source_pattern: str = Field("*", alias="DEID_SOURCE_PATTERN")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def salt_value(self) -> Optional[str]:
        return self.salt.get_secret_value() if self.salt is not None else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
