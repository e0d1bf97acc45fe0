from io import BytesIO

import pytest
from openpyxl import Workbook

from conftest import TODAY
from washcrm.errors import RecordNotFoundError, WashValidationError
from washcrm.services import scheduling
from washcrm.services.leads import build_bill, create_lead, list_leads, update_lead
from washcrm.services.leads.importer import import_leads, read_rows, suggest_column_mappings

BASE = {
    "customerName": "Meera Nair",
    "phone": "9845012345",
    "area": "Koramangala",
    "carModel": "City",
    "leadType": "One-time",
    "leadSource": "Referral",
}


def test_create_lead_reports_every_missing_field(store) -> None:
    with pytest.raises(WashValidationError) as excinfo:
        create_lead({"customerName": "Meera", "leadType": "One-time"})

    message = str(excinfo.value)
    for field in ("phone", "area", "carModel", "leadSource"):
        assert field in message


def test_create_lead_rejects_unknown_classification(store) -> None:
    with pytest.raises(WashValidationError, match="Invalid leadSource"):
        create_lead(dict(BASE, leadSource="Billboard"))
    with pytest.raises(WashValidationError, match="Invalid leadType"):
        create_lead(dict(BASE, leadType="Weekly"))


def test_one_time_lead_with_known_phone_returns_existing_record(store) -> None:
    first, created = create_lead(BASE)
    again, created_again = create_lead(dict(BASE, customerName="Meera N."))

    assert created is True
    assert created_again is False
    assert again.lead_id == first.lead_id
    assert first.lead_id == 1


def test_one_time_intake_ignores_monthly_lead_with_same_phone(store) -> None:
    monthly, _ = create_lead(dict(BASE, leadType="Monthly"))
    first, created = create_lead(BASE)
    again, created_again = create_lead(BASE)

    assert (created, created_again) == (True, False)
    assert first.lead_id != monthly.lead_id
    assert again.lead_id == first.lead_id == 2


def test_inline_one_time_wash_converts_lead(store) -> None:
    lead, _ = create_lead(dict(BASE, oneTimeWash={"washType": "Premium", "scheduledDate": TODAY.isoformat()}))

    assert lead.status == "Converted"
    assert lead.one_time_wash.amount == 150.0
    assert lead.one_time_wash.status == "pending"


def test_create_lead_with_unknown_washer_fails(store) -> None:
    with pytest.raises(RecordNotFoundError):
        create_lead(dict(BASE, assignedWasher="77"))


def test_list_leads_filters_and_orders_newest_first(store) -> None:
    create_lead(BASE)
    create_lead(dict(BASE, customerName="Arjun", phone="9845099999", area="HSR Layout", leadType="Monthly"))
    create_lead(dict(BASE, customerName="Template-Sedan", phone="9845000000"))

    assert [lead.customer_name for lead in list_leads()] == ["Arjun", "Meera Nair"]
    assert [lead.customer_name for lead in list_leads(search="hsr")] == ["Arjun"]
    assert [lead.customer_name for lead in list_leads(lead_type="One-time")] == ["Meera Nair"]
    assert list_leads(status="Converted") == []


def test_update_lead_changes_profile_and_validates_status(store, washer) -> None:
    lead, _ = create_lead(BASE)

    updated = update_lead(lead.lead_id, {"area": " Whitefield ", "assignedWasher": str(washer.washer_id)})

    assert updated.area == "Whitefield"
    assert updated.assigned_washer == washer.record_id
    assert updated.version == lead.version + 1
    with pytest.raises(WashValidationError):
        update_lead(lead.lead_id, {"status": "Lost"})


def test_bill_totals_paid_and_pending_amounts(store) -> None:
    lead, _ = create_lead(dict(BASE, vehicleNumber="KA01AB1234"))
    scheduling.add_wash_entry(lead.lead_id, "Basic", "2026-03-01", amount=100, paid=True, wash_status="completed")
    scheduling.add_wash_entry(lead.lead_id, "Premium", "2026-03-05", amount=150)

    bill = build_bill(lead.lead_id)

    assert [item["washType"] for item in bill["items"]] == ["Premium", "Basic"]
    assert bill["items"][0]["vehicleNumber"] == "KA01AB1234"
    assert (bill["totalAmount"], bill["paidAmount"], bill["pendingAmount"]) == (250.0, 100.0, 150.0)
    assert "subscriptionDetails" not in bill


def test_monthly_bill_includes_subscription_details(store) -> None:
    lead, _ = create_lead(BASE)
    scheduling.create_monthly_subscription(lead.lead_id, package_type="Basic", start_date=TODAY.isoformat(), today=TODAY)

    bill = build_bill(lead.lead_id)

    assert bill["leadType"] == "Monthly"
    assert bill["subscriptionDetails"]["packageType"] == "Basic"
    assert bill["subscriptionDetails"]["completedWashes"] == 0
    assert bill["totalAmount"] == 300.0
    assert bill["pendingAmount"] == 300.0


def test_read_rows_from_csv_and_excel() -> None:
    csv_bytes = "\ufeffName,Mobile,Locality,Car\nAsha,9000011111,Jayanagar,i20\n".encode("utf-8")
    headers, rows = read_rows("leads.csv", csv_bytes)
    assert headers == ["Name", "Mobile", "Locality", "Car"]
    assert rows == [{"Name": "Asha", "Mobile": "9000011111", "Locality": "Jayanagar", "Car": "i20"}]

    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Name", "Mobile"])
    sheet.append(["Asha", 9000011111])
    sheet.append([None, None])
    buffer = BytesIO()
    workbook.save(buffer)
    headers, rows = read_rows("leads.xlsx", buffer.getvalue())
    assert headers == ["Name", "Mobile"]
    assert rows == [{"Name": "Asha", "Mobile": 9000011111}]

    with pytest.raises(WashValidationError):
        read_rows("leads.pdf", b"")


def test_suggested_mappings_follow_header_names() -> None:
    mappings = suggest_column_mappings(["Customer Name", "Mobile", "Locality", "Car Model", "Reg No"])

    assert mappings == {
        "customerName": "Customer Name",
        "phone": "Mobile",
        "area": "Locality",
        "carModel": "Car Model",
        "vehicleNumber": "Reg No",
    }


def test_import_reports_created_existing_and_failed_rows(store) -> None:
    rows = [
        {"Name": "Asha", "Mobile": "9000011111", "Locality": "Jayanagar", "Car": "i20"},
        {"Name": "Asha", "Mobile": "9000011111", "Locality": "Jayanagar", "Car": "i20"},
        {"Name": "Bala", "Mobile": "", "Locality": "Hebbal", "Car": "Nexon"},
    ]
    mappings = {"customerName": "Name", "phone": "Mobile", "area": "Locality", "carModel": "Car"}

    summary = import_leads(rows, mappings, default_lead_source="Pamphlet")

    assert summary["totalRows"] == 3
    assert summary["created"] == [1]
    assert summary["existing"] == [1]
    assert summary["failed"] == [{"row": 4, "error": "Missing required fields: phone"}]
    assert list_leads()[0].lead_source == "Pamphlet"
