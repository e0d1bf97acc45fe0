"""Expense bookkeeping and monthly salary calculation."""

from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Any, Optional

from ...data import expenses_repository, leads_repository, washers_repository
from ...errors import WashValidationError
from ...models.domain import Expense
from ...persistence.base import DateSpan
from ..time_rules import business_today, calendar_day, end_of_day, parse_datetime, start_of_day, utc_now


def _amount(value: Any) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise WashValidationError(f"Invalid amount '{value}'") from exc
    if amount < 0:
        raise WashValidationError("amount cannot be negative")
    return amount


def create_expense(washer_name: str, amount: Any, reason: str, expense_date: Any = None, created_by: str = "Admin") -> Expense:
    if not (washer_name or "").strip() or amount in (None, "") or not (reason or "").strip():
        raise WashValidationError("Washer name, amount, and reason are required")
    expense = Expense(
        record_id="",
        washer_name=washer_name.strip(),
        amount=_amount(amount),
        reason=reason.strip(),
        date=parse_datetime(expense_date, "date") if expense_date else utc_now(),
        created_by=created_by or "Admin",
    )
    stored = expenses_repository.insert_expense(expense)
    logging.info(f"Recorded expense {stored.amount:.2f} for {stored.washer_name}")
    return stored


def update_expense(record_id: str, changes: dict[str, Any]) -> Expense:
    expense = expenses_repository.get_expense(record_id)
    if changes.get("washerName") is not None:
        expense.washer_name = changes["washerName"].strip()
    if changes.get("amount") is not None:
        expense.amount = _amount(changes["amount"])
    if changes.get("reason") is not None:
        expense.reason = changes["reason"].strip()
    if changes.get("date") is not None:
        expense.date = parse_datetime(changes["date"], "date")
    return expenses_repository.save_expense(expense)


def list_expenses(
    start_date: Any = None,
    end_date: Any = None,
    name: Optional[str] = None,
    reason: Optional[str] = None,
) -> list[Expense]:
    span = None
    if start_date and end_date:
        span = DateSpan(parse_datetime(start_date, "startDate"), parse_datetime(end_date, "endDate"))
    expenses = expenses_repository.list_expenses(overlapping=span)
    if span is not None:
        expenses = [e for e in expenses if span.start <= e.date <= span.end]
    if name:
        expenses = [e for e in expenses if name.lower() in e.washer_name.lower()]
    if reason:
        expenses = [e for e in expenses if reason.lower() in e.reason.lower()]
    return expenses


def month_bounds(month: Optional[int] = None, year: Optional[int] = None) -> tuple[date, date]:
    today = business_today()
    month = month or today.month
    year = year or today.year
    if not 1 <= month <= 12:
        raise WashValidationError(f"Invalid month '{month}'")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def calculate_salaries(
    month: Optional[int] = None,
    year: Optional[int] = None,
    washer_id: Optional[str | int] = None,
) -> list[dict]:
    """Base salary minus loss of pay for days not present minus the month's expenses, floored at zero.

    Every calendar day of the month counts as a working day.
    """
    first, last = month_bounds(month, year)
    span = DateSpan(start_of_day(first), end_of_day(last))
    working_days = (last - first).days + 1

    washers = [washers_repository.get_washer(washer_id)] if washer_id else washers_repository.list_washers()
    leads = leads_repository.list_leads(overlapping=span)
    expenses = expenses_repository.list_expenses(overlapping=span)

    salary_data = []
    for washer in washers:
        wash_count = sum(
            1
            for lead, _, entry in leads_repository.iter_history(leads)
            if entry.washer == washer.record_id
            and entry.wash_status == "completed"
            and entry.date is not None
            and first <= calendar_day(entry.date) <= last
        )
        present_days = sum(
            1
            for record in washer.attendance
            if record.status == "present" and record.date is not None and first <= calendar_day(record.date) <= last
        )
        total_expenses = sum(
            e.amount for e in expenses if e.washer_name == washer.name and first <= calendar_day(e.date) <= last
        )
        base_salary = washer.salary.base_salary if washer.salary else 0.0
        loss_of_pay = (working_days - present_days) * base_salary / working_days
        final_salary = max(0.0, base_salary - loss_of_pay - total_expenses)

        salary_data.append(
            {
                "washerId": washer.washer_id,
                "washerName": washer.name,
                "baseSalary": base_salary,
                "washCount": wash_count,
                "presentDays": present_days,
                "totalWorkingDays": working_days,
                "attendancePercentage": round(present_days / working_days * 100, 1),
                "expenses": round(total_expenses, 2),
                "lossOfPay": round(loss_of_pay, 2),
                "totalSalary": round(final_salary, 2),
                "month": first.month,
                "year": first.year,
            }
        )
    return salary_data
