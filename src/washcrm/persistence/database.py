"""Supabase-backed document store and backend selection."""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache
from typing import Any

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import PersistenceError, WriteConflictError
from .base import DateSpan, Document, DocumentStore
from .filesystem import FileDocumentStore


class SupabaseDocumentStore(DocumentStore):
    """Stores each document as a jsonb row; ``span_start``/``span_end`` columns back overlap queries."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def _row(self, document: Document) -> dict[str, Any]:
        span = document.get("span") or {}
        return {
            "id": document["_id"],
            "version": document["version"],
            "span_start": span.get("first"),
            "span_end": span.get("last"),
            "document": document,
        }

    def _execute(self, description: str, query: Any) -> Any:
        try:
            return query.execute()
        except Exception as exc:
            logging.error(f"Supabase {description} failed: {exc}")
            raise PersistenceError(f"Database error during {description}: {exc}") from exc

    def get(self, collection: str, key: str) -> Document | None:
        response = self._execute(
            f"get {collection}",
            self.client.table(collection).select("document").eq("id", key).limit(1),
        )
        rows = response.data or []
        return rows[0]["document"] if rows else None

    def find_one(self, collection: str, field: str, value: Any, **also: Any) -> Document | None:
        query = self.client.table(collection).select("document")
        for key, expected in {field: value, **also}.items():
            query = query.eq(f"document->>{key}", str(expected))
        response = self._execute(f"lookup {collection}.{field}", query.limit(1))
        rows = response.data or []
        return rows[0]["document"] if rows else None

    def list(self, collection: str, *, overlapping: DateSpan | None = None) -> list[Document]:
        query = self.client.table(collection).select("document")
        if overlapping is not None:
            query = query.lte("span_start", overlapping.end.isoformat()).gte(
                "span_end", overlapping.start.isoformat()
            )
        response = self._execute(f"list {collection}", query)
        return [row["document"] for row in (response.data or [])]

    def insert(self, collection: str, document: Document) -> Document:
        stored = dict(document)
        stored.setdefault("_id", uuid.uuid4().hex)
        stored["version"] = 1
        self._execute(f"insert {collection}", self.client.table(collection).insert(self._row(stored)))
        return stored

    def replace(self, collection: str, document: Document, *, expected_version: int) -> Document:
        stored = dict(document)
        stored["version"] = expected_version + 1
        response = self._execute(
            f"update {collection}",
            self.client.table(collection)
            .update(self._row(stored))
            .eq("id", stored["_id"])
            .eq("version", expected_version),
        )
        if not response.data:
            raise WriteConflictError(collection, stored["_id"], expected_version)
        return stored

    def delete(self, collection: str, key: str) -> bool:
        response = self._execute(f"delete {collection}", self.client.table(collection).delete().eq("id", key))
        return bool(response.data)

    def next_sequence(self, name: str) -> int:
        response = self._execute(f"next_sequence {name}", self.client.rpc("next_sequence", {"sequence_name": name}))
        value = response.data
        if isinstance(value, list):
            value = value[0] if value else None
        if isinstance(value, dict):
            value = value.get("next_sequence") or value.get("sequence_value")
        if value is None:
            raise PersistenceError(f"Counter '{name}' returned no value")
        return int(value)


@lru_cache(maxsize=1)
def get_document_store() -> DocumentStore:
    """Return the configured store. Falls back to files when Supabase is not configured."""
    if settings.storage_backend == "supabase":
        client = get_supabase_client()
        if client is not None:
            return SupabaseDocumentStore(client)
        logging.info("Supabase not configured - records will be stored in local JSON files")
    return FileDocumentStore()
