from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BACKEND_DIR / ".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str

    # Runtime
    environment: str = Field(default="development", validation_alias=AliasChoices("environment", "ENVIRONMENT"))
    frontend_origin: str = Field(
        default="http://localhost:5173",
        validation_alias=AliasChoices("frontend_origin", "FRONTEND_ORIGIN"),
    )

    # Logging (level defaults from ENVIRONMENT)
    log_level: str | None = Field(default=None, validation_alias=AliasChoices("log_level", "LOG_LEVEL"))
    log_dir: str | None = Field(default=None, validation_alias=AliasChoices("log_dir", "LOG_DIR"))

    # Timetable grid shape (Monday..Saturday, periods per day)
    days_per_week: int = Field(default=6, validation_alias=AliasChoices("days_per_week", "DAYS_PER_WEEK"))
    slots_per_day: int = Field(default=8, validation_alias=AliasChoices("slots_per_day", "SLOTS_PER_DAY"))

    # Diagnostics
    diagnostic_max_workers: int = Field(
        default=4,
        validation_alias=AliasChoices("diagnostic_max_workers", "DIAGNOSTIC_MAX_WORKERS"),
    )
    diagnostic_min_rows: int = Field(
        default=1,
        validation_alias=AliasChoices("diagnostic_min_rows", "DIAGNOSTIC_MIN_ROWS"),
    )

    @field_validator("frontend_origin")
    @classmethod
    def _normalize_frontend_origin(cls, v: str) -> str:
        # Starlette CORS expects the Origin to match exactly (no trailing slash).
        return v.strip().rstrip("/")

    @field_validator("days_per_week")
    @classmethod
    def _check_days_per_week(cls, v: int) -> int:
        if not (1 <= v <= 6):
            raise ValueError("DAYS_PER_WEEK must be between 1 and 6")
        return v

    @field_validator("slots_per_day")
    @classmethod
    def _check_slots_per_day(cls, v: int) -> int:
        if not (1 <= v <= 8):
            raise ValueError("SLOTS_PER_DAY must be between 1 and 8")
        return v

    @field_validator("diagnostic_max_workers", "diagnostic_min_rows")
    @classmethod
    def _check_positive(cls, v: int) -> int:
        return max(1, int(v))


settings = Settings()
