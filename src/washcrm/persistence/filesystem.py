"""File-based document store: one JSON file per collection under the data root."""

from __future__ import annotations

import copy
import json
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from ..config import settings
from ..errors import PersistenceError, WriteConflictError
from ..services.time_rules import coerce_datetime
from .base import DateSpan, Document, DocumentStore

_COUNTERS = "counters"


class FileStorage:
    """Thin wrapper around the data root for reading and writing JSON files."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.collections_root = self.root / "collections"
        self.collections_root.mkdir(parents=True, exist_ok=True)

    def collection_path(self, name: str) -> Path:
        return self.collections_root / f"{name}.json"

    def read_json(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Failed to read {path.name}: {exc}") from exc

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=indent)
            tmp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path.name}: {exc}") from exc


class FileDocumentStore(DocumentStore):
    """Single-process store. A lock serializes each read-modify-write on a collection file."""

    def __init__(self, root: Path | None = None) -> None:
        self.storage = FileStorage(root)
        self._lock = threading.RLock()

    def _load(self, collection: str) -> dict[str, Document]:
        return self.storage.read_json(self.storage.collection_path(collection), {})

    def _save(self, collection: str, documents: dict[str, Document]) -> None:
        self.storage.write_json(self.storage.collection_path(collection), documents)

    def get(self, collection: str, key: str) -> Document | None:
        with self._lock:
            document = self._load(collection).get(key)
            return copy.deepcopy(document) if document is not None else None

    def find_one(self, collection: str, field: str, value: Any, **also: Any) -> Document | None:
        conditions = {field: value, **also}
        with self._lock:
            for document in self._load(collection).values():
                if all(document.get(key) == expected for key, expected in conditions.items()):
                    return copy.deepcopy(document)
        return None

    def list(self, collection: str, *, overlapping: DateSpan | None = None) -> list[Document]:
        with self._lock:
            documents = list(self._load(collection).values())
        if overlapping is None:
            return copy.deepcopy(documents)
        matched = [doc for doc in documents if overlapping.overlaps(*_span_bounds(doc))]
        return copy.deepcopy(matched)

    def insert(self, collection: str, document: Document) -> Document:
        with self._lock:
            documents = self._load(collection)
            stored = copy.deepcopy(document)
            stored.setdefault("_id", uuid.uuid4().hex)
            if stored["_id"] in documents:
                raise PersistenceError(f"Duplicate key '{stored['_id']}' in '{collection}'")
            stored["version"] = 1
            documents[stored["_id"]] = stored
            self._save(collection, documents)
            return copy.deepcopy(stored)

    def replace(self, collection: str, document: Document, *, expected_version: int) -> Document:
        key = document["_id"]
        with self._lock:
            documents = self._load(collection)
            current = documents.get(key)
            if current is None or current.get("version", 0) != expected_version:
                raise WriteConflictError(collection, key, expected_version)
            stored = copy.deepcopy(document)
            stored["version"] = expected_version + 1
            documents[key] = stored
            self._save(collection, documents)
            return copy.deepcopy(stored)

    def delete(self, collection: str, key: str) -> bool:
        with self._lock:
            documents = self._load(collection)
            if key not in documents:
                return False
            del documents[key]
            self._save(collection, documents)
            return True

    def next_sequence(self, name: str) -> int:
        with self._lock:
            counters = self._load(_COUNTERS)
            entry = counters.get(name) or {"_id": name, "sequence_value": 0}
            entry["sequence_value"] = int(entry["sequence_value"]) + 1
            counters[name] = entry
            self._save(_COUNTERS, counters)
            return entry["sequence_value"]


def _span_bounds(document: Document) -> tuple[datetime | None, datetime | None]:
    span = document.get("span") or {}
    return coerce_datetime(span.get("first")), coerce_datetime(span.get("last"))
