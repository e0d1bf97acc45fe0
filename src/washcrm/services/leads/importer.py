"""Bulk lead import from CSV or Excel spreadsheets."""

from __future__ import annotations

import csv
import logging
from io import BytesIO
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from ...errors import RecordNotFoundError, WashValidationError
from .service import create_lead

SUPPORTED_SUFFIXES = {".csv", ".xlsx"}

IMPORT_FIELDS = [
    {"field": "customerName", "description": "Customer name", "required": True},
    {"field": "phone", "description": "Phone number", "required": True},
    {"field": "area", "description": "Area or locality", "required": True},
    {"field": "carModel", "description": "Car model", "required": True},
    {"field": "leadType", "description": "One-time or Monthly", "required": False},
    {"field": "leadSource", "description": "Acquisition channel", "required": False},
    {"field": "vehicleNumber", "description": "Registration number", "required": False},
    {"field": "notes", "description": "Free-text notes", "required": False},
]

_PATTERNS = {
    "customerName": ["customer_name", "customername", "name", "customer", "client_name", "full_name"],
    "phone": ["phone", "mobile", "phone_number", "contact", "mobile_number", "whatsapp"],
    "area": ["area", "locality", "location", "city", "region", "address"],
    "carModel": ["car_model", "carmodel", "car", "model", "vehicle", "vehicle_model"],
    "leadType": ["lead_type", "leadtype", "type", "plan_type"],
    "leadSource": ["lead_source", "leadsource", "source", "channel"],
    "vehicleNumber": ["vehicle_number", "vehiclenumber", "car_number", "registration", "reg_no", "number_plate"],
    "notes": ["notes", "note", "remarks", "comments"],
}


def check_suffix(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise WashValidationError("Only .csv and .xlsx files are supported.")
    return suffix


def read_rows(filename: str, contents: bytes) -> tuple[list[str], list[dict[str, Any]]]:
    """Header row and data rows (as dicts keyed by header) of an uploaded sheet."""
    suffix = check_suffix(filename)
    if suffix == ".csv":
        lines = contents.decode("utf-8-sig").splitlines()
        reader = csv.DictReader(lines)
        rows = list(reader)
        return list(reader.fieldnames or []), rows

    workbook = load_workbook(filename=BytesIO(contents), read_only=True, data_only=True)
    worksheet = workbook.active
    headers = [str(cell) if cell is not None else "" for cell in next(worksheet.iter_rows(values_only=True), [])]
    rows = []
    for row_values in worksheet.iter_rows(values_only=True, min_row=2):
        if all(cell is None for cell in row_values):
            continue
        rows.append({headers[i]: ("" if cell is None else cell) for i, cell in enumerate(row_values) if i < len(headers)})
    return headers, rows


def suggest_column_mappings(headers: list[str]) -> dict[str, str]:
    """Auto-suggest lead field -> sheet column based on header names."""
    mappings: dict[str, str] = {}
    normalized_headers = {h.lower().strip().replace(" ", "_").replace("-", "_"): h for h in headers}
    for field, pattern_list in _PATTERNS.items():
        for pattern in pattern_list:
            if pattern in normalized_headers:
                mappings[field] = normalized_headers[pattern]
                break
    return mappings


def remap_row(row: dict[str, Any], mappings: dict[str, str]) -> dict[str, Any]:
    remapped = {field: row[column] for field, column in mappings.items() if column in row}
    for column, value in row.items():
        if column not in mappings.values() and column not in remapped:
            remapped[column] = value
    return remapped


def import_leads(
    rows: list[dict[str, Any]],
    mappings: dict[str, str] | None = None,
    *,
    default_lead_type: str = "One-time",
    default_lead_source: str = "Other",
) -> dict:
    """Create a lead per row. Rows that fail validation are reported, not fatal."""
    mappings = mappings or {}
    created: list[int] = []
    existing: list[int] = []
    failed: list[dict] = []

    for line_number, row in enumerate(rows, start=2):
        payload = {key: (str(value).strip() if value is not None else "") for key, value in remap_row(row, mappings).items()}
        payload["leadType"] = payload.get("leadType") or default_lead_type
        payload["leadSource"] = payload.get("leadSource") or default_lead_source
        try:
            lead, was_created = create_lead(payload)
        except (WashValidationError, RecordNotFoundError) as exc:
            failed.append({"row": line_number, "error": str(exc)})
            continue
        (created if was_created else existing).append(lead.lead_id)

    logging.info(f"Lead import: {len(created)} created, {len(existing)} existing, {len(failed)} failed")
    return {
        "totalRows": len(rows),
        "created": created,
        "existing": existing,
        "failed": failed,
    }
