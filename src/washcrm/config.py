"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="WASHCRM_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Car Wash CRM API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")
    data_root: Path = Field(default=Path("data"), description="Root directory for file-backed storage.")
    storage_backend: Literal["file", "supabase"] = Field(
        default="file",
        description="Document store backend. Falls back to 'file' when Supabase is not configured.",
    )
    business_timezone: str = Field(
        default="Asia/Kolkata",
        description="Timezone that defines calendar days (today/tomorrow, day grouping).",
    )
    subscription_period_days: int = Field(default=30, ge=1)
    default_scheduled_time: str = Field(default="10:00")
    default_wash_amount: float = Field(default=100.0, ge=0.0)
    wash_type_pricing: dict[str, float] = Field(
        default={
            "Basic": 100.0,
            "Premium": 150.0,
            "Deluxe": 200.0,
            "One-time": 120.0,
            "Monthly": 100.0,
        },
        description="Default per-wash amount by wash type when none is supplied.",
    )
    dedupe_by: Literal["customer_id", "customer_name"] = Field(
        default="customer_id",
        description="Customer component of the calendar de-duplication key.",
    )
    calendar_include_cancelled: bool = Field(
        default=True,
        description="Whether cancelled occurrences still appear in calendar views.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("default_scheduled_time")
    @classmethod
    def _validate_time_of_day(cls, value: str) -> str:
        hours, _, minutes = value.partition(":")
        if not (hours.isdigit() and minutes.isdigit() and 0 <= int(hours) < 24 and 0 <= int(minutes) < 60):
            raise ValueError("default_scheduled_time must be HH:MM")
        return value

    def price_for(self, wash_type: Optional[str]) -> float:
        return self.wash_type_pricing.get(wash_type or "", self.default_wash_amount)


# Catalog of standard monthly packages: washes per month, price, interior washes.
WASH_PACKAGES: dict[str, tuple[int, float, int]] = {
    "Basic": (3, 300.0, 1),
    "Premium": (4, 400.0, 2),
    "Deluxe": (5, 500.0, 3),
}


settings = Settings()
