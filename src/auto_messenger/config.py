# src/auto_messenger/config.py

import re
from functools import lru_cache
from typing import Any, Optional

import httpx
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Any) -> float:
    """
    Seconds from a number or a duration string such as "30s", "2m", "1h30m", "500ms".
    """
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


class Settings(BaseSettings):
    """
    Central application settings (Pydantic v2).

    - Aliases match the .env keys: APP_NAME, ENV
    - Everything else is read by its field name
    """

    # ------------------------------------------------------------------------------------
    # App / API
    # ------------------------------------------------------------------------------------
    PROJECT_NAME: str = Field(default="auto-messenger", alias="APP_NAME")
    ENVIRONMENT: str = Field(default="dev", alias="ENV")  # dev|staging|prod
    PROJECT_VERSION: str = Field(default="1.0.0")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=False)
    HTTP_HOST: str = Field(default="0.0.0.0")
    HTTP_PORT: int = Field(default=6060)

    # ------------------------------------------------------------------------------------
    # Database / Redis
    # ------------------------------------------------------------------------------------
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./dev.db",
        description="Async SQLAlchemy URL (postgresql+asyncpg in production)",
    )
    REDIS_URL: Optional[str] = Field(
        default=None,
        description="When unset, idempotency records go to an in-process TTL cache",
    )

    # ------------------------------------------------------------------------------------
    # Webhook delivery
    # ------------------------------------------------------------------------------------
    WEBHOOK_URL: str = Field(default="http://localhost:8080/webhook")
    WEBHOOK_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    # ------------------------------------------------------------------------------------
    # Scheduler / retry
    # ------------------------------------------------------------------------------------
    MSG_BATCH_SIZE: int = Field(default=2, ge=1)
    MSG_SEND_INTERVAL: float = Field(default=120.0, gt=0, description="seconds or e.g. '2m'")
    MSG_MAX_RETRY: Optional[int] = Field(default=None, ge=1, description="unset = unbounded")
    RETRY_BASE_DELAY_SECONDS: float = Field(default=1.0, ge=0)
    RETRY_MAX_DELAY_SECONDS: float = Field(default=30.0, ge=0)
    RETRY_JITTER_SECONDS: float = Field(default=0.5, ge=0)
    DISPATCH_CONCURRENCY: Optional[int] = Field(default=None, ge=1, description="unset = batch size")
    SHUTDOWN_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    AUTO_START: bool = Field(default=True)
    SEED_DEMO_MESSAGES: bool = Field(default=False)

    @field_validator("MSG_SEND_INTERVAL", mode="before")
    @classmethod
    def _parse_interval(cls, v: Any) -> float:
        return parse_duration(v)

    @field_validator("WEBHOOK_URL")
    @classmethod
    def _check_webhook_url(cls, v: str) -> str:
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid WEBHOOK_URL: {e}") from e
        if url.scheme not in {"http", "https"} or not url.host:
            raise ValueError("WEBHOOK_URL must be an absolute http(s) URL")
        return v

    @model_validator(mode="after")
    def _require_webhook_in_production(self) -> "Settings":
        if self.is_production and "WEBHOOK_URL" not in self.model_fields_set:
            raise ValueError("WEBHOOK_URL must be set explicitly in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    # ------------------------------------------------------------------------------------
    # Pydantic v2 settings config
    # ------------------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        populate_by_name=True,   # enable aliases
        extra="ignore",          # don't crash on unrelated env keys
        env_ignore_empty=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
