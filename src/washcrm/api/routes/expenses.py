"""Expense and salary calculation endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from ...data import expenses_repository
from ...schemas.washers import ExpenseModel, ExpenseRequest, SalaryCalculationModel
from ...services.expenses import service as expenses
from ..errors import http_error
from ..serializers import expense_model

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("", response_model=List[ExpenseModel], status_code=status.HTTP_200_OK)
def list_expenses(
    startDate: str | None = Query(default=None),
    endDate: str | None = Query(default=None),
    name: str | None = Query(default=None, description="Case-insensitive washer name filter."),
    reason: str | None = Query(default=None, description="Case-insensitive reason filter."),
) -> List[ExpenseModel]:
    try:
        return [expense_model(e) for e in expenses.list_expenses(startDate, endDate, name, reason)]
    except Exception as exc:
        raise http_error(exc, "listing expenses") from exc


@router.post("", response_model=ExpenseModel, status_code=status.HTTP_201_CREATED)
def create_expense(payload: ExpenseRequest) -> ExpenseModel:
    try:
        expense = expenses.create_expense(payload.washerName, payload.amount, payload.reason, payload.date)
    except Exception as exc:
        raise http_error(exc, "recording expense") from exc
    return expense_model(expense)


@router.get("/salary-calculation", response_model=List[SalaryCalculationModel], status_code=status.HTTP_200_OK)
def salary_calculation(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000),
    washerId: str | None = Query(default=None),
) -> List[SalaryCalculationModel]:
    try:
        return [SalaryCalculationModel(**row) for row in expenses.calculate_salaries(month, year, washerId)]
    except Exception as exc:
        raise http_error(exc, "calculating salaries") from exc


@router.put("/{expense_id}", response_model=ExpenseModel, status_code=status.HTTP_200_OK)
def update_expense(expense_id: str, payload: ExpenseRequest) -> ExpenseModel:
    try:
        return expense_model(expenses.update_expense(expense_id, payload.model_dump(exclude_unset=True)))
    except Exception as exc:
        raise http_error(exc, "updating expense") from exc


@router.delete("/{expense_id}", status_code=status.HTTP_200_OK)
def delete_expense(expense_id: str) -> dict:
    try:
        expenses_repository.delete_expense(expense_id)
    except Exception as exc:
        raise http_error(exc, "deleting expense") from exc
    return {"message": "Expense deleted successfully"}
