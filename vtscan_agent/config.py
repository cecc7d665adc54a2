from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

VT_BASE_URL = "https://www.virustotal.com/api/v3"

_HERE = Path(__file__).resolve()
_PROJECT_ROOT = _HERE.parents[1]
ENV_FILE = _PROJECT_ROOT / ".env"


def load_env() -> None:
    # Already-exported variables win over the .env file.
    load_dotenv(ENV_FILE, override=False)


class Settings(BaseSettings):
    # ── Upstream ────────────────────────────────
    api_key: str = Field(validation_alias="VIRUS_TOTAL_API_KEY", min_length=1)
    base_url: str = Field(VT_BASE_URL, validation_alias="VT_BASE_URL")
    http_timeout_s: float = Field(30.0, gt=0, validation_alias="VT_HTTP_TIMEOUT_S")

    # ── Polling ─────────────────────────────────
    poll_interval_ms: int = Field(3000, ge=1, validation_alias="VT_POLL_INTERVAL_MS")
    poll_timeout_ms: int = Field(180000, ge=1, validation_alias="VT_POLL_TIMEOUT_MS")

    # ── Result cache ────────────────────────────
    cache_ttl_s: int = Field(24 * 60 * 60, ge=1, validation_alias="VTSCAN_CACHE_TTL_S")
    cache_max_entries: int = Field(1000, ge=1, validation_alias="VTSCAN_CACHE_MAX_ENTRIES")
    cache_evict_batch: int = Field(100, ge=1, validation_alias="VTSCAN_CACHE_EVICT_BATCH")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/") or VT_BASE_URL

    @model_validator(mode="after")
    def _evict_batch_fits(self) -> "Settings":
        if self.cache_evict_batch > self.cache_max_entries:
            raise ValueError("VTSCAN_CACHE_EVICT_BATCH cannot exceed VTSCAN_CACHE_MAX_ENTRIES")
        return self

    @classmethod
    def from_env(cls, env_file: str | Path | None = ENV_FILE) -> "Settings":
        """Read settings from the environment and `env_file`; raises ConfigError."""
        try:
            return cls(_env_file=env_file)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}" for err in e.errors()
            )
            if any(err["loc"] == ("VIRUS_TOTAL_API_KEY",) for err in e.errors()):
                problems = f"VIRUS_TOTAL_API_KEY is required in environment variables ({problems})"
            raise ConfigError(problems) from e
