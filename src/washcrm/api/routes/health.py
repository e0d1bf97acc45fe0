"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings
from ...errors import PersistenceError
from ...persistence import database

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check that the configured document store answers."""
    store = database.get_document_store()
    backend = type(store).__name__
    try:
        store.get("counters", "leadId")
    except PersistenceError as exc:
        return {
            "backend": backend,
            "configuredBackend": settings.storage_backend,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "backend": backend,
        "configuredBackend": settings.storage_backend,
        "supabaseConfigured": bool(settings.supabase_url and settings.supabase_key),
        "connected": True,
        "message": "Document store reachable.",
    }
