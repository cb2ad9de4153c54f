from __future__ import annotations

import pytest

from surreal_crud.errors import InvalidStateError, RecordNotFoundError
from surreal_crud.models import Repository, User, user_repository
from tests.fakes import FakeSurreal


@pytest.mark.asyncio
async def test_add_assigns_id_and_short_id(users: Repository[User]) -> None:
    alice = users.new(name="Alice", email="alice@example.com", age=30)

    returned = await alice.add()

    assert returned is alice
    assert alice.id is not None and alice.id.startswith("user:")
    assert alice.short_id == alice.id.split(":", 1)[1]


@pytest.mark.asyncio
async def test_add_sends_only_public_non_empty_fields(users: Repository[User], fake_client: FakeSurreal) -> None:
    bob = users.new(name="Bob", email="bob@example.com", age=41, createdAt="2024-05-01T00:00:00Z")

    await bob.add()

    stored = fake_client.tables["user"][bob.short_id]
    assert set(stored) == {"id", "name", "email", "age", "createdAt"}
    assert "_repository" not in stored


@pytest.mark.asyncio
async def test_update_persists_changes(users: Repository[User], fake_client: FakeSurreal) -> None:
    carol = users.new(name="Carol", email="carol@example.com", age=22)
    await carol.add()

    carol.age = 23
    await carol.update()

    assert carol.age == 23
    assert "id =" not in fake_client.statements[-1]
    fetched = await users.service.find_by_id(carol.id)
    assert fetched is not None and fetched.age == 23 and fetched.name == "Carol"


@pytest.mark.asyncio
async def test_update_without_id_raises_invalid_state(users: Repository[User]) -> None:
    with pytest.raises(InvalidStateError):
        await users.new(name="Nobody").update()


@pytest.mark.asyncio
async def test_update_of_deleted_record_raises_not_found(users: Repository[User]) -> None:
    dave = users.new(name="Dave")
    await dave.add()
    await users.service.delete(dave.id)

    with pytest.raises(RecordNotFoundError):
        await dave.update()


@pytest.mark.asyncio
async def test_delete(users: Repository[User]) -> None:
    erin = users.new(name="Erin")
    assert await erin.delete() is False

    await erin.add()

    assert await erin.delete() is True
    assert await users.service.exists(erin.id) is False


@pytest.mark.asyncio
async def test_unbound_entity_cannot_persist() -> None:
    with pytest.raises(InvalidStateError):
        await User(name="Loose").add()


@pytest.mark.asyncio
async def test_service_results_are_bound_entities(users: Repository[User]) -> None:
    await users.service.create_many(
        [{"name": "Fay", "age": 30}, {"name": "Gus", "age": 30}, {"name": "Hal", "age": 31}]
    )

    page = await users.service.paginate(1, 2, {"age": 30})
    gus = await users.service.find_one({"name": "Gus"})
    gus.age = 32
    await gus.update()

    assert all(isinstance(u, User) for u in page.data)
    assert page.total == 2
    assert (await users.service.find_by_id(gus.id)).age == 32


@pytest.mark.asyncio
async def test_repository_service_is_cached(manager) -> None:
    repo = user_repository(manager)

    assert repo.service is repo.service
    assert repo.service.table == "user"


def test_short_id_and_payload_without_store() -> None:
    assert User().short_id is None
    assert User(id="user:abc").short_id == "abc"
    assert User(id="abc").short_id == "abc"
    assert User(name="Ann", age=3).to_payload() == {"name": "Ann", "email": "", "age": 3}
