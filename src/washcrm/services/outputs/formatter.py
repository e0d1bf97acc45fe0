"""Utilities to serialize calendar views into JSON/CSV artifacts."""

from __future__ import annotations

import csv
import io
from typing import Sequence

from ...schemas.schedule import ScheduledWashModel

SCHEDULE_COLUMNS = [
    "id",
    "scheduledDate",
    "customerName",
    "phone",
    "area",
    "carModel",
    "washType",
    "washerName",
    "status",
    "rawStatus",
    "source",
    "leadId",
    "leadType",
]


def schedule_to_json(washes: Sequence[ScheduledWashModel]) -> list[dict]:
    return [wash.model_dump() for wash in washes]


def schedule_to_csv(washes: Sequence[ScheduledWashModel]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=SCHEDULE_COLUMNS)
    writer.writeheader()
    for wash in washes:
        row = wash.model_dump(exclude={"washer"})
        row["washerName"] = wash.washer.name if wash.washer else ""
        writer.writerow({column: row.get(column, "") for column in SCHEDULE_COLUMNS})
    return buffer.getvalue()
