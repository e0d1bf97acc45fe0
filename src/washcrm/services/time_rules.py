"""
Time rules shared by scheduling, attendance and billing.
Stored datetimes are UTC and timezone-aware; calendar days are taken in the business timezone.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Optional

import pytz

from ..config import settings
from ..errors import WashValidationError


def business_tz():
    return pytz.timezone(settings.business_timezone)


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def business_today() -> date:
    return utc_now().astimezone(business_tz()).date()


def ensure_aware(value: datetime) -> datetime:
    """Attach the business timezone to naive datetimes and convert to UTC."""
    if value.tzinfo is None:
        value = business_tz().localize(value)
    return value.astimezone(pytz.UTC)


def calendar_day(value: datetime) -> date:
    """Calendar date of a datetime in the business timezone."""
    return ensure_aware(value).astimezone(business_tz()).date()


def start_of_day(day: date) -> datetime:
    return business_tz().localize(datetime.combine(day, time.min)).astimezone(pytz.UTC)


def end_of_day(day: date) -> datetime:
    return business_tz().localize(datetime.combine(day, time.max)).astimezone(pytz.UTC)


def at_time_of_day(day: date, hour: int, minute: int = 0) -> datetime:
    return business_tz().localize(datetime.combine(day, time(hour, minute))).astimezone(pytz.UTC)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Best-effort conversion used for stored documents; returns None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return start_of_day(value)
    if isinstance(value, (int, float)):
        # epoch milliseconds
        return datetime.fromtimestamp(value / 1000.0, tz=pytz.UTC)
    if isinstance(value, str):
        text = value.strip()
        if "/" in text:
            # MM/DD/YYYY as sent by the wash entry form
            parts = text.split("/")
            if len(parts) == 3 and all(part.isdigit() for part in parts):
                month, day, year = (int(part) for part in parts)
                try:
                    return start_of_day(date(year, month, day))
                except ValueError:
                    return None
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if len(text) == 10:
            return start_of_day(parsed.date())
        return ensure_aware(parsed)
    return None


def parse_datetime(value: Any, field_name: str = "date") -> datetime:
    """Strict variant for request input: raises on missing or unparseable values."""
    if value is None or value == "":
        raise WashValidationError(f"{field_name} is required")
    parsed = coerce_datetime(value)
    if parsed is None:
        raise WashValidationError(f"Invalid date format provided for {field_name}: '{value}'")
    return parsed


def minutes_between(start: datetime, end: datetime) -> int:
    return int(round((ensure_aware(end) - ensure_aware(start)).total_seconds() / 60))


def add_days(value: datetime, days: int) -> datetime:
    """Add calendar days keeping the wall-clock time in the business timezone."""
    local = ensure_aware(value).astimezone(business_tz())
    shifted = local.replace(tzinfo=None) + timedelta(days=days)
    return business_tz().localize(shifted).astimezone(pytz.UTC)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return ensure_aware(value).isoformat().replace("+00:00", "Z")
