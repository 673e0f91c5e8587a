"""Environment-driven configuration for the EONET loader."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from eonet.retry import RetryPolicy

REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env", override=False)


class EonetSettings(BaseSettings):
    """All loader knobs, overridable through ``EONET_*`` variables."""

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default="https://eonet.gsfc.nasa.gov/api/v3",
        validation_alias="EONET_BASE_URL",
    )
    status: str = Field(default="open", validation_alias="EONET_STATUS")
    limit: int = Field(default=50, ge=1, le=500, validation_alias="EONET_LIMIT")
    limit_detail_fetch: int = Field(default=10, ge=0, validation_alias="EONET_LIMIT_DETAIL_FETCH")
    cache_key: str = Field(default="eonet_events_cache", validation_alias="EONET_CACHE_KEY")
    cache_ttl_seconds: float = Field(default=600.0, ge=0, validation_alias="EONET_CACHE_TTL_SECONDS")
    cache_dir: Path = Field(
        default=REPO_ROOT / ".cache" / "eonet",
        validation_alias="EONET_CACHE_DIR",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        validation_alias="EONET_REQUEST_TIMEOUT_SECONDS",
    )

    retry_attempts: int = Field(default=3, ge=1, validation_alias="EONET_RETRY_ATTEMPTS")
    backoff_base_ms: int = Field(default=500, ge=0, validation_alias="EONET_BACKOFF_BASE_MS")
    backoff_jitter_ms: int = Field(default=400, ge=0, validation_alias="EONET_BACKOFF_JITTER_MS")
    rate_limit_base_ms: int = Field(default=1000, ge=0, validation_alias="EONET_RATE_LIMIT_BASE_MS")
    rate_limit_jitter_ms: int = Field(default=500, ge=0, validation_alias="EONET_RATE_LIMIT_JITTER_MS")
    min_retry_after_ms: int = Field(default=1000, ge=0, validation_alias="EONET_MIN_RETRY_AFTER_MS")
    detail_delay_min_ms: int = Field(default=150, ge=0, validation_alias="EONET_DETAIL_DELAY_MIN_MS")
    detail_delay_jitter_ms: int = Field(default=200, ge=0, validation_alias="EONET_DETAIL_DELAY_JITTER_MS")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> str:
        if value is None:
            return "open"
        cleaned = str(value).strip().lower()
        if cleaned not in ("open", "closed", "all"):
            raise ValueError("EONET_STATUS must be one of open, closed, all")
        return cleaned

    @field_validator("base_url", mode="after")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def cache_ttl_ms(self) -> int:
        return int(self.cache_ttl_seconds * 1000)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            attempts=self.retry_attempts,
            backoff_base_ms=self.backoff_base_ms,
            backoff_jitter_ms=self.backoff_jitter_ms,
            rate_limit_base_ms=self.rate_limit_base_ms,
            rate_limit_jitter_ms=self.rate_limit_jitter_ms,
            min_retry_after_ms=self.min_retry_after_ms,
            detail_delay_min_ms=self.detail_delay_min_ms,
            detail_delay_jitter_ms=self.detail_delay_jitter_ms,
        )


settings = EonetSettings()
