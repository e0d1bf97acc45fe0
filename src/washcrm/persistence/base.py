"""Base class for document store implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

Document = dict[str, Any]


@dataclass(slots=True, frozen=True)
class DateSpan:
    """Inclusive time range used for coarse overlap queries."""

    start: datetime
    end: datetime

    def overlaps(self, first: Optional[datetime], last: Optional[datetime]) -> bool:
        if first is None or last is None:
            return False
        return first <= self.end and last >= self.start


class DocumentStore(ABC):
    """Contract for the record store.

    Documents are plain dicts keyed by ``_id``. Every stored document carries an
    integer ``version``; ``replace`` only succeeds when the caller passes the
    version it read (compare-and-swap), otherwise ``WriteConflictError`` is raised.
    Documents may carry a ``span`` of ``{"first": iso, "last": iso}`` that
    ``list(..., overlapping=...)`` uses as a coarse pre-filter.
    """

    @abstractmethod
    def get(self, collection: str, key: str) -> Document | None:
        raise NotImplementedError

    @abstractmethod
    def find_one(self, collection: str, field: str, value: Any, **also: Any) -> Document | None:
        """First document whose ``field`` equals ``value`` and every ``also`` field matches too."""
        raise NotImplementedError

    @abstractmethod
    def list(self, collection: str, *, overlapping: DateSpan | None = None) -> list[Document]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, collection: str, document: Document) -> Document:
        raise NotImplementedError

    @abstractmethod
    def replace(self, collection: str, document: Document, *, expected_version: int) -> Document:
        raise NotImplementedError

    @abstractmethod
    def delete(self, collection: str, key: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def next_sequence(self, name: str) -> int:
        """Atomically increment and return the named counter (starting at 1)."""
        raise NotImplementedError
