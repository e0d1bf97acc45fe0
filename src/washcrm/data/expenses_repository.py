"""Data access helpers for expense records."""

from __future__ import annotations

from ..errors import RecordNotFoundError
from ..models.domain import Expense
from ..persistence import database
from ..services.time_rules import coerce_datetime, to_iso, utc_now

COLLECTION = "expenses"


def expense_from_document(document: dict) -> Expense:
    return Expense(
        record_id=document["_id"],
        washer_name=(document.get("washerName") or "").strip(),
        amount=float(document.get("amount") or 0.0),
        reason=(document.get("reason") or "").strip(),
        date=coerce_datetime(document.get("date")) or utc_now(),
        created_by=document.get("createdBy") or "Admin",
        version=int(document.get("version", 0)),
    )


def expense_to_document(expense: Expense) -> dict:
    date = to_iso(expense.date)
    return {
        "_id": expense.record_id,
        "version": expense.version,
        "washerName": expense.washer_name,
        "amount": expense.amount,
        "reason": expense.reason,
        "date": date,
        "createdBy": expense.created_by,
        "span": {"first": date, "last": date},
    }


def get_expense(record_id: str) -> Expense:
    document = database.get_document_store().get(COLLECTION, record_id)
    if document is None:
        raise RecordNotFoundError("Expense", record_id)
    return expense_from_document(document)


def list_expenses(overlapping=None) -> list[Expense]:
    documents = database.get_document_store().list(COLLECTION, overlapping=overlapping)
    expenses = [expense_from_document(doc) for doc in documents]
    return sorted(expenses, key=lambda expense: expense.date, reverse=True)


def insert_expense(expense: Expense) -> Expense:
    document = expense_to_document(expense)
    if not expense.record_id:
        document.pop("_id")
    return expense_from_document(database.get_document_store().insert(COLLECTION, document))


def save_expense(expense: Expense) -> Expense:
    stored = database.get_document_store().replace(
        COLLECTION, expense_to_document(expense), expected_version=expense.version
    )
    expense.version = int(stored["version"])
    return expense


def delete_expense(record_id: str) -> None:
    if not database.get_document_store().delete(COLLECTION, record_id):
        raise RecordNotFoundError("Expense", record_id)
