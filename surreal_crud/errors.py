"""Custom exceptions for surreal-crud."""

from __future__ import annotations

from typing import Optional


class SurrealCrudError(Exception):
    """Base exception for all surreal-crud errors."""

    pass


class NotInitializedError(SurrealCrudError):
    """Raised when the database handle is requested before `init()` succeeded."""

    def __init__(self) -> None:
        super().__init__("SurrealDB is not initialized. Call ConnectionManager.init() first.")


class PersistenceError(SurrealCrudError):
    """Raised when a write returned no record."""

    def __init__(self, table: str, message: Optional[str] = None):
        self.table = table
        super().__init__(message or f"Failed to create {table} record: store returned no result")


class RecordNotFoundError(PersistenceError):
    """Raised when an update targets a record that does not exist."""

    def __init__(self, table: str, record_id: object):
        self.record_id = record_id
        super().__init__(table, f"Failed to update record: {record_id} does not exist")


class InvalidStateError(SurrealCrudError):
    """Raised when an entity lacks the identifier or repository an operation needs."""

    pass


class QueryError(SurrealCrudError):
    """Raised when the store reports an error status for a statement."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"SurrealDB query error: {detail}")


__all__ = [
    "SurrealCrudError",
    "NotInitializedError",
    "PersistenceError",
    "RecordNotFoundError",
    "InvalidStateError",
    "QueryError",
]
