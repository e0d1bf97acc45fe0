"""Evenly spaced scheduled washes for a new monthly subscription."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ...config import settings
from ...errors import WashValidationError
from ...models.domain import ScheduledWash
from ..time_rules import add_days


def generate_scheduled_washes(
    start_date: datetime,
    total_washes: int,
    *,
    period_days: Optional[int] = None,
    scheduled_time: Optional[str] = None,
) -> List[ScheduledWash]:
    """Spread ``total_washes`` over a fixed period starting at ``start_date``.

    The period is ``subscription_period_days`` (30) regardless of the
    subscription's end date, and the interval is ``period // total_washes`` days.
    Callers must only invoke this on a subscription with no scheduled washes;
    running it twice duplicates entries.
    """
    if total_washes < 1:
        raise WashValidationError("totalWashes must be at least 1")
    period = period_days or settings.subscription_period_days
    interval = period // total_washes
    period_end = add_days(start_date, period)

    washes: List[ScheduledWash] = []
    current = start_date
    wash_number = 1
    while current <= period_end and wash_number <= total_washes:
        washes.append(
            ScheduledWash(
                wash_number=wash_number,
                scheduled_date=current,
                scheduled_time=scheduled_time or settings.default_scheduled_time,
                status="scheduled",
                service_type="Exterior",
            )
        )
        current = add_days(current, interval)
        wash_number += 1
    return washes
