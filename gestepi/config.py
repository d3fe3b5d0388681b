# gestepi/config.py
"""
Application settings, read from the environment and an optional .env file.
"""
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

COMMISSIONING_POLICIES = ("today", "reject")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "GestEPI API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    DATABASE_PATH: str = "gestepi.db"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    # Alert horizon used when the caller does not pass ?days=
    DEFAULT_HORIZON_DAYS: int = Field(30, ge=0)

    # What to do when an equipment is registered without a commissioning date:
    # "today" keeps the legacy default, "reject" refuses the record.
    COMMISSIONING_DATE_POLICY: str = "today"

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "testing", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("COMMISSIONING_DATE_POLICY")
    @classmethod
    def validate_commissioning_policy(cls, v):
        v = v.lower()
        if v not in COMMISSIONING_POLICIES:
            raise ValueError(f"Commissioning date policy must be one of: {list(COMMISSIONING_POLICIES)}")
        return v


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings instance, built on first use."""
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reset_settings():
    global _settings
    _settings = None
