"""Expense ledger and salary calculation."""

from .service import calculate_salaries, create_expense, list_expenses, month_bounds, update_expense

__all__ = ["create_expense", "update_expense", "list_expenses", "month_bounds", "calculate_salaries"]
