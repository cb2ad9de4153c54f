"""
surreal-crud - generic CRUD / Active-Record data access over SurrealDB.

This package provides:

- A `ConnectionManager` owning one authenticated SurrealDB handle
- A generic `RecordService` that turns create/find/update/delete/count/paginate
  calls into SurrealQL statements and normalises the results
- Tagged query conditions (`FieldEquals`, `ConditionList`) and their
  translation into WHERE clauses
- Pydantic `Entity` models with Active-Record methods supplied by a `Repository`
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from surreal_crud.conditions import (
    Condition,
    ConditionList,
    FieldEquals,
    Operator,
    as_condition,
    build_where_clause,
)
from surreal_crud.config import DEFAULT_CONFIG, DbConfig, Settings, get_settings
from surreal_crud.errors import (
    InvalidStateError,
    NotInitializedError,
    PersistenceError,
    QueryError,
    RecordNotFoundError,
    SurrealCrudError,
)
from surreal_crud.infrastructure.connection import ConnectionManager, connect
from surreal_crud.models import Entity, Repository, User, user_repository
from surreal_crud.service import OrderBy, PaginateResult, RecordService
from surreal_crud.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "DEFAULT_CONFIG",
    "DbConfig",
    "Settings",
    "get_settings",
    # Connection
    "ConnectionManager",
    "connect",
    # Conditions
    "Condition",
    "ConditionList",
    "FieldEquals",
    "Operator",
    "as_condition",
    "build_where_clause",
    # Records
    "OrderBy",
    "PaginateResult",
    "RecordService",
    # Active Record
    "Entity",
    "Repository",
    "User",
    "user_repository",
    # Errors
    "SurrealCrudError",
    "NotInitializedError",
    "PersistenceError",
    "RecordNotFoundError",
    "InvalidStateError",
    "QueryError",
    # Logging
    "configure_logging",
    "get_logger",
]
