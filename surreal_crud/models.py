"""
Active-Record style entities for surreal-crud.

Entities are plain Pydantic models. Persistence is provided by a `Repository`
that is composed into each entity instance rather than inherited: the
repository knows the table name and owns a single cached `RecordService`, and
entities bound to it gain `add()`, `update()` and `delete()`.

Usage:
    users = Repository(User, "user", manager)
    alice = users.new(name="Alice", email="alice@example.com", age=30)
    await alice.add()          # alice.id == "user:<key>"
    alice.age = 31
    await alice.update()
    page = await users.service.paginate(1, 20)
"""

from __future__ import annotations

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from surreal_crud.errors import InvalidStateError
from surreal_crud.infrastructure.connection import ConnectionManager
from surreal_crud.results import strip_table_prefix
from surreal_crud.service import RecordService

E = TypeVar("E", bound="Entity")


class Entity(BaseModel):
    """
    Base for persisted records. `id` is assigned by the store on `add()` and
    never changes afterwards.
    """

    id: Optional[str] = Field(None, description="Record id, `table:key`.")

    _repository: Any = PrivateAttr(default=None)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def short_id(self) -> Optional[str]:
        """The id without its `table:` prefix, for display."""
        if not self.id:
            return None
        return strip_table_prefix(self.id)

    @property
    def repository(self) -> "Repository[Any]":
        if self._repository is None:
            raise InvalidStateError(
                f"{type(self).__name__} is not bound to a repository; use Repository.new() or bind()"
            )
        return self._repository

    def to_payload(self) -> Dict[str, Any]:
        """Public fields as a plain dict; unset (None) fields are left out."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def _merge(self, record: "Entity") -> None:
        for name in record.model_fields_set:
            setattr(self, name, getattr(record, name))

    async def add(self: E) -> E:
        """Insert this entity and copy the stored fields (e.g. the new id) back."""
        created = await self.repository.service.create(self.to_payload())
        self._merge(created)
        return self

    async def update(self: E) -> E:
        if not self.id:
            raise InvalidStateError(f"Cannot update a {type(self).__name__} without an id")
        payload = self.to_payload()
        payload.pop("id", None)
        updated = await self.repository.service.update(self.id, payload)
        self._merge(updated)
        return self

    async def delete(self) -> bool:
        if not self.id:
            return False
        return await self.repository.service.delete(self.id)


class Repository(Generic[E]):
    """
    Persistence for one entity type stored in one table.

    The underlying `RecordService` is built on first use and cached; records it
    returns are validated into `model` and bound to this repository.
    """

    def __init__(self, model: Type[E], table: str, connection: ConnectionManager) -> None:
        self.model = model
        self.table = table
        self._connection = connection
        self._service: Optional[RecordService[E]] = None

    @property
    def service(self) -> RecordService[E]:
        if self._service is None:
            self._service = RecordService(self.table, self._connection, factory=self._from_row)
        return self._service

    def _from_row(self, row: Dict[str, Any]) -> E:
        return self.bind(self.model.model_validate(row))

    def bind(self, entity: E) -> E:
        entity._repository = self
        return entity

    def new(self, **data: Any) -> E:
        return self.bind(self.model(**data))


class User(Entity):
    name: str = ""
    email: str = ""
    age: int = 0
    created_at: Optional[str] = Field(None, alias="createdAt")


USER_TABLE = "user"


def user_repository(connection: ConnectionManager) -> Repository[User]:
    return Repository(User, USER_TABLE, connection)


__all__ = ["Entity", "Repository", "USER_TABLE", "User", "user_repository"]
