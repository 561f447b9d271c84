"""
Application settings.

Values come from environment variables (or a local .env file) and are read
once per process through get_settings().
"""

import re
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "devsecret"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> int:
    """Parse "3600", "30m", "1h" or "7d" into seconds."""
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    seconds = int(amount) * _UNIT_SECONDS[unit.lower()]
    if seconds <= 0:
        raise ValueError("Duration must be positive")
    return seconds


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    database_url: str = "mongodb://localhost:27017"
    database_name: str = "shop"

    # Tokens
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_expires_in: str = "1h"

    # Server
    port: int = 8000
    app_env: str = "development"
    allowed_origins: str = "*"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Optional admin seed
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_name: str = "Administrator"

    @field_validator("jwt_expires_in")
    @classmethod
    def _validate_expires_in(cls, value: str) -> str:
        parse_duration(value)
        return value

    @model_validator(mode="after")
    def _reject_default_secret_in_production(self) -> "Settings":
        if self.is_production() and self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set in production")
        return self

    @property
    def token_ttl_seconds(self) -> int:
        return parse_duration(self.jwt_expires_in)

    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    def get_allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
