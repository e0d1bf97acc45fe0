from datetime import date, datetime
from pathlib import Path

import pytest
import pytz

from washcrm.models.domain import Lead, Washer
from washcrm.persistence import database
from washcrm.persistence.filesystem import FileDocumentStore
from washcrm.services.time_rules import at_time_of_day

TODAY = date(2026, 3, 10)


def at(day: date, hour: int = 10, minute: int = 0) -> datetime:
    """UTC datetime for a wall-clock time in the business timezone."""
    return at_time_of_day(day, hour, minute)


def make_lead(lead_id: int = 1, name: str = "Ravi Kumar", **overrides) -> Lead:
    values = dict(
        record_id=f"lead-{lead_id}",
        lead_id=lead_id,
        lead_type="One-time",
        lead_source="WhatsApp",
        customer_name=name,
        phone=f"98450{lead_id:05d}",
        area="Indiranagar",
        created_at=datetime(2026, 3, 1, 4, 30, tzinfo=pytz.UTC),
        car_model="Swift",
    )
    values.update(overrides)
    return Lead(**values)


@pytest.fixture
def store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FileDocumentStore:
    document_store = FileDocumentStore(root=tmp_path)
    monkeypatch.setattr(database, "get_document_store", lambda: document_store)
    return document_store


@pytest.fixture
def washer(store) -> Washer:
    from washcrm.services.washers import register_washer

    return register_washer("Suresh", "9000000001", area="Indiranagar")
