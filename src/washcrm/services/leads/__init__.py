"""Lead service helpers."""

from .billing import build_bill
from .service import create_lead, list_leads, update_lead

__all__ = ["create_lead", "list_leads", "update_lead", "build_bill"]
