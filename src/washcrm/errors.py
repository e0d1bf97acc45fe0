"""Error types raised by services and translated to HTTP responses by the routes."""

from __future__ import annotations


class WashValidationError(ValueError):
    """Malformed input: missing dates, unparseable values, illegal transitions."""


class RecordNotFoundError(LookupError):
    """A referenced customer, washer, entry or expense does not exist."""

    def __init__(self, kind: str, reference: object) -> None:
        super().__init__(f"{kind} '{reference}' not found")
        self.kind = kind
        self.reference = reference


class PersistenceError(ConnectionError):
    """The document store is unavailable or rejected the operation."""


class WriteConflictError(PersistenceError):
    """A compare-and-swap write found a newer version of the record."""

    def __init__(self, collection: str, key: str, expected_version: int) -> None:
        super().__init__(
            f"Record '{key}' in '{collection}' was modified concurrently "
            f"(expected version {expected_version}); retry the operation."
        )
        self.collection = collection
        self.key = key
        self.expected_version = expected_version
