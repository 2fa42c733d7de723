from __future__ import annotations

from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "CODESTATS_"


class SyncSettings(BaseSettings):
    """Runtime settings, read from CODESTATS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    data_dir: str = "data"
    request_timeout: float = Field(12.0, gt=0)
    max_retries: int = Field(2, ge=0)
    backoff_base: float = Field(0.5, ge=0)
    backoff_max: float = Field(5.0, ge=0)
    qps: float = Field(1.0, gt=0)
    max_workers: int = Field(6, ge=1)
    impersonate: str = "chrome120"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(cls) -> "SyncSettings":
        """Build settings from the environment.

        Raises ValueError naming the offending variables."""
        try:
            return cls()
        except ValidationError as exc:
            names = sorted({f"{ENV_PREFIX}{str(err['loc'][0]).upper()}" for err in exc.errors() if err["loc"]})
            raise ValueError(f"Invalid configuration in {', '.join(names)}: {exc}") from exc

    def with_overrides(self, **overrides: Any) -> "SyncSettings":
        """Return a copy with every non-None override applied."""
        return self.model_copy(update={k: v for k, v in overrides.items() if v is not None})
