"""Route group exports."""

from . import expenses, health, leads, schedule, washers

__all__ = ["leads", "schedule", "washers", "expenses", "health"]
