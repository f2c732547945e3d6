from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True,
    )

    # Signing key for session cookies
    session_secret: str = Field(validation_alias=AliasChoices("SESSION_SECRET", "JWTSECRET"))
    session_ttl_seconds: int = 60 * 60 * 24

    # Set to False only when serving over plain HTTP locally
    cookie_secure: bool = True

    database_url: str = "sqlite:///ourApp.db"

    port: int = 3000

    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
