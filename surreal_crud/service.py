"""
Generic CRUD service over a single SurrealDB table.

`RecordService` translates high-level calls (create, find, update, delete,
count, paginate) into SurrealQL statements sent through a `ConnectionManager`
and turns the results back into records. Every operation is an independent
coroutine; nothing here spans a transaction across calls.

Failure policy:
- `create`, `update` and the batch/bulk variants log and re-raise.
- `find_by_id`, `delete`, `delete_all` and `delete_many` log and report
  `None`/`False` instead of raising.
- `find_by` and `query` return `[]` when the store reports an error status.
- `NotInitializedError` always propagates.

Batch operations (`create_many`, `update_many`, `delete_many`) fan out every
member call at once with `asyncio.gather`. There is no concurrency cap and no
rollback: a failure part-way through leaves earlier writes committed.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, TypeVar

from surrealdb.errors import ServerError

from surreal_crud.conditions import ConditionLike, build_set_clause, build_where_clause
from surreal_crud.errors import (
    NotInitializedError,
    PersistenceError,
    QueryError,
    RecordNotFoundError,
)
from surreal_crud.infrastructure.connection import ConnectionManager
from surreal_crud.results import format_record, normalize_result, to_record_id
from surreal_crud.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")
RecordFactory = Callable[[Dict[str, Any]], T]


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: str = "ASC"

    def __post_init__(self) -> None:
        direction = self.direction.upper()
        if direction not in ("ASC", "DESC"):
            raise ValueError(f"Unknown sort direction '{self.direction}'. Use ASC or DESC.")
        object.__setattr__(self, "direction", direction)


@dataclass
class PaginateResult(Generic[T]):
    """
    One page of records plus the totals needed to render a pager.
    """

    data: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        """Camel-case form used by the UI layer."""
        return {
            "data": self.data,
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
        }


async def run_statement(
    client: Any, statement: str, variables: Optional[Mapping[str, Any]] = None
) -> List[Any]:
    """
    Send one statement through `client` and return the first statement's rows.

    Store-side failures surface as `QueryError`, whether the SDK raised a
    `ServerError` or handed back an `ERR` status envelope.
    """
    try:
        if variables is not None:
            raw = await client.query(statement, dict(variables))
        else:
            raw = await client.query(statement)
    except ServerError as exc:
        raise QueryError(str(exc) or exc.kind) from exc
    return normalize_result(raw)


def _payload(data: Any) -> Dict[str, Any]:
    if hasattr(data, "model_dump"):
        return data.model_dump(exclude_none=True)
    return dict(data)


class RecordService(Generic[T]):
    """
    CRUD operations for one table.

    Parameters
    ----------
    table : str
        Table name; also the prefix of every record id (`table:key`).
    connection : ConnectionManager
        Provider of the live client. The client is looked up on every call,
        so a service may be built before the connection is initialised.
    factory : callable, optional
        Converts a normalised row (a dict with a string `id`) into `T`.
        Defaults to returning the dict itself.
    """

    def __init__(
        self,
        table: str,
        connection: ConnectionManager,
        factory: Optional[RecordFactory[T]] = None,
    ) -> None:
        self.table = table
        self._connection = connection
        self._factory = factory

    @property
    def db(self) -> Any:
        return self._connection.get()

    def _to_record(self, row: Any) -> T:
        record = format_record(row)
        if self._factory is None or not isinstance(record, dict):
            return record
        return self._factory(record)

    def _record_id(self, record_id: Any) -> str:
        return to_record_id(self.table, record_id)

    async def _execute(self, statement: str, variables: Optional[Mapping[str, Any]] = None) -> List[Any]:
        log.debug("Executing statement", extra={"table": self.table, "statement": statement})
        return await run_statement(self.db, statement, variables)

    # ------------------------------------------------------------------ create

    async def create(self, data: Any) -> T:
        """
        Insert one record and return it with its store-assigned id.

        Raises
        ------
        PersistenceError
            If the store returned no record.
        """
        try:
            result = await self.db.create(self.table, _payload(data))
            records = result if isinstance(result, list) else [result]
            if not records or not records[0]:
                raise PersistenceError(self.table)
            return self._to_record(records[0])
        except Exception:
            log.exception(f"Failed to create {self.table} record", extra={"table": self.table})
            raise

    async def create_many(self, items: Iterable[Any]) -> List[T]:
        try:
            return list(await asyncio.gather(*(self.create(item) for item in items)))
        except Exception:
            log.error(f"Failed to batch create {self.table} records", extra={"table": self.table})
            raise

    # -------------------------------------------------------------------- read

    async def find_by_id(self, record_id: Any) -> Optional[T]:
        """
        Fetch a record by `table:key` or bare key. Returns None when the id is
        empty, the record is missing, or the lookup fails.
        """
        if not record_id:
            log.error(f"Invalid id: {record_id!r}", extra={"table": self.table})
            return None
        rid = self._record_id(record_id)
        try:
            rows = await self._execute(f"SELECT * FROM {rid}")
        except NotInitializedError:
            raise
        except Exception:
            log.exception(f"Failed to fetch {rid}", extra={"table": self.table, "record_id": rid})
            return None
        return self._to_record(rows[0]) if rows and rows[0] else None

    async def find_all(self) -> List[T]:
        try:
            result = await self.db.select(self.table)
        except Exception:
            log.exception(f"Failed to fetch all {self.table} records", extra={"table": self.table})
            raise
        if not isinstance(result, list):
            return []
        return [self._to_record(row) for row in result]

    async def find_by(self, conditions: ConditionLike) -> List[T]:
        """
        Records matching `conditions`. A store-side error yields an empty list;
        empty `conditions` raise `ValueError`.
        """
        statement = f"SELECT * FROM {self.table} WHERE {build_where_clause(conditions)}"
        try:
            rows = await self._execute(statement)
        except QueryError as exc:
            log.error(f"{exc}", extra={"table": self.table, "statement": statement})
            return []
        except Exception:
            log.exception(f"Failed to query {self.table} by conditions", extra={"table": self.table})
            raise
        return [self._to_record(row) for row in rows]

    async def find_one(self, conditions: ConditionLike) -> Optional[T]:
        results = await self.find_by(conditions)
        return results[0] if results else None

    async def exists(self, record_id: Any) -> bool:
        return await self.find_by_id(record_id) is not None

    async def exists_by(self, conditions: ConditionLike) -> bool:
        return await self.find_one(conditions) is not None

    # ------------------------------------------------------------------ update

    async def update(self, record_id: Any, data: Any) -> T:
        """
        Merge `data` into an existing record and return the post-update record.

        Raises
        ------
        RecordNotFoundError
            If the id is empty or no record matched.
        ValueError
            If `data` has no fields to set.
        """
        if not record_id:
            raise RecordNotFoundError(self.table, record_id)
        rid = self._record_id(record_id)
        statement = f"UPDATE {rid} SET {build_set_clause(_payload(data))} RETURN AFTER"
        try:
            rows = await self._execute(statement)
            if not rows or not rows[0]:
                raise RecordNotFoundError(self.table, rid)
            return self._to_record(rows[0])
        except Exception:
            log.exception(f"Failed to update {rid}", extra={"table": self.table, "record_id": rid})
            raise

    async def update_many(self, record_ids: Iterable[Any], data: Any) -> List[T]:
        payload = _payload(data)
        try:
            return list(await asyncio.gather(*(self.update(rid, payload) for rid in record_ids)))
        except Exception:
            log.error(f"Failed to batch update {self.table} records", extra={"table": self.table})
            raise

    async def update_by(self, conditions: ConditionLike, data: Any) -> List[T]:
        statement = (
            f"UPDATE {self.table} SET {build_set_clause(_payload(data))} "
            f"WHERE {build_where_clause(conditions)} RETURN AFTER"
        )
        try:
            rows = await self._execute(statement)
        except Exception:
            log.exception(f"Failed to update {self.table} by conditions", extra={"table": self.table})
            raise
        return [self._to_record(row) for row in rows]

    async def upsert(self, record_id: Any, data: Any) -> T:
        """
        Update the record if it exists, otherwise create a new one from `data`.

        The id argument only selects the record to update; a created record gets
        a fresh store-assigned id.
        """
        try:
            existing = await self.find_by_id(record_id)
            if existing is not None:
                return await self.update(record_id, data)
            return await self.create(_payload(data))
        except Exception:
            log.error(f"Upsert of {self.table}:{record_id} failed", extra={"table": self.table})
            raise

    # ------------------------------------------------------------------ delete

    async def delete(self, record_id: Any) -> bool:
        """
        Remove one record. Returns False if the id is empty, nothing was
        removed, or the statement failed.
        """
        if not record_id:
            log.error(f"Invalid id: {record_id!r}", extra={"table": self.table})
            return False
        rid = self._record_id(record_id)
        try:
            rows = await self._execute(f"DELETE {rid} RETURN BEFORE")
        except NotInitializedError:
            raise
        except Exception:
            log.exception(f"Failed to delete {rid}", extra={"table": self.table, "record_id": rid})
            return False
        return bool(rows)

    async def delete_all(self) -> bool:
        try:
            await self._execute(f"DELETE FROM {self.table}")
        except NotInitializedError:
            raise
        except Exception:
            log.exception(f"Failed to delete all {self.table} records", extra={"table": self.table})
            return False
        return True

    async def delete_many(self, record_ids: Iterable[Any]) -> bool:
        try:
            await asyncio.gather(*(self.delete(rid) for rid in record_ids))
        except NotInitializedError:
            raise
        except Exception:
            log.exception(f"Failed to batch delete {self.table} records", extra={"table": self.table})
            return False
        return True

    async def delete_by(self, conditions: ConditionLike) -> int:
        """Delete matching records and return how many were removed."""
        statement = f"DELETE FROM {self.table} WHERE {build_where_clause(conditions)} RETURN BEFORE"
        try:
            rows = await self._execute(statement)
        except Exception:
            log.exception(f"Failed to delete {self.table} by conditions", extra={"table": self.table})
            raise
        return len(rows)

    # --------------------------------------------------------------- aggregate

    async def count(self, conditions: Optional[ConditionLike] = None) -> int:
        if conditions:
            statement = (
                f"SELECT count() FROM {self.table} WHERE {build_where_clause(conditions)} GROUP ALL"
            )
        else:
            statement = f"SELECT count() FROM {self.table} GROUP ALL"
        try:
            rows = await self._execute(statement)
        except Exception:
            log.exception(f"Failed to count {self.table} records", extra={"table": self.table})
            raise
        if rows and isinstance(rows[0], Mapping):
            return int(rows[0].get("count") or 0)
        return 0

    async def paginate(
        self,
        page: int = 1,
        page_size: int = 10,
        conditions: Optional[ConditionLike] = None,
        order_by: Optional[OrderBy] = None,
    ) -> PaginateResult[T]:
        """
        Fetch one page of records together with the matching total.

        `page` and `page_size` are echoed back as given; they are not validated.
        The page fetch and the count run concurrently.
        """
        offset = (page - 1) * page_size
        statement = f"SELECT * FROM {self.table}"
        if conditions:
            statement += f" WHERE {build_where_clause(conditions)}"
        if order_by is not None:
            statement += f" ORDER BY {order_by.field} {order_by.direction}"
        statement += f" LIMIT {page_size} START {offset}"

        try:
            rows, total = await asyncio.gather(self._execute(statement), self.count(conditions))
        except Exception:
            log.exception(f"Failed to paginate {self.table}", extra={"table": self.table})
            raise

        total_pages = math.ceil(total / page_size) if page_size > 0 else 0
        return PaginateResult(
            data=[self._to_record(row) for row in rows],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
        )

    # -------------------------------------------------------------------- raw

    async def query(self, statement: str, variables: Optional[Mapping[str, Any]] = None) -> List[Any]:
        """
        Run an arbitrary statement and return the first statement's rows.

        Interpreting the rows is up to the caller. A store-side error status is
        logged and yields an empty list.
        """
        try:
            rows = await self._execute(statement, variables)
        except QueryError as exc:
            log.error(f"{exc}", extra={"statement": statement})
            return []
        except Exception:
            log.exception("Failed to execute query", extra={"statement": statement})
            raise
        return [format_record(row) for row in rows]


__all__ = ["OrderBy", "PaginateResult", "RecordFactory", "RecordService", "run_statement"]
