from __future__ import annotations

import pytest

from userstore.domain.errors import (
    AlreadyExists,
    InvalidArgument,
    NotFound,
    StoreUnavailable,
    ValidationFailed,
)
from userstore.orchestrator import INVALID_USER_ID, UserOrchestrator
from userstore.stores.abstract import StoreError
from userstore.stores.memory import MemoryRecordStore

JOHN = {"name": "John Doe", "email": "JOHN@EXAMPLE.COM", "age": 30}


class _BrokenStore(MemoryRecordStore):
    name = "broken"

    async def put(self, key, item):
        raise StoreError("connection reset by peer")

    async def get(self, key):
        raise StoreError("connection reset by peer")

    async def update(self, key, changes):
        raise StoreError("connection reset by peer")


@pytest.mark.asyncio
async def test_add_user_persists_normalized_record(orchestrator, store) -> None:
    result = await orchestrator.add_user("user123", JOHN)

    assert result.success is True
    assert result.message == "User created successfully"
    assert result.user["id"] == "user123"
    assert result.user["email"] == "john@example.com"
    assert result.user["createdAt"] == result.user["updatedAt"] == "2024-01-15T10:30:00.000Z"
    assert (await store.get("user123"))["email"] == "john@example.com"


@pytest.mark.asyncio
async def test_add_user_keeps_pass_through_fields(orchestrator) -> None:
    result = await orchestrator.add_user("u1", {"name": "Jane", "team": "core", "tags": ["a"]})

    assert {k: result.user[k] for k in ("team", "tags")} == {"team": "core", "tags": ["a"]}


@pytest.mark.asyncio
async def test_add_user_twice_fails_with_already_exists(orchestrator) -> None:
    await orchestrator.add_user("user123", JOHN)

    with pytest.raises(AlreadyExists, match="User already exists"):
        await orchestrator.add_user("user123", {"name": "Someone Else"})


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", ["", "   ", None, 123])
async def test_invalid_user_id_is_rejected_before_the_store(orchestrator, store, user_id) -> None:
    with pytest.raises(InvalidArgument) as excinfo:
        await orchestrator.add_user(user_id, {"name": "John"})

    assert excinfo.value.message == INVALID_USER_ID
    assert store.calls == []


@pytest.mark.asyncio
async def test_invalid_user_id_wins_over_validation_errors(orchestrator) -> None:
    with pytest.raises(InvalidArgument):
        await orchestrator.add_user("", {"name": ""})


@pytest.mark.asyncio
async def test_add_user_validation_failure_lists_every_error(orchestrator, store) -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        await orchestrator.add_user("user123", {"name": "", "email": "invalid-email", "age": -5, "phone": "123"})

    assert str(excinfo.value) == (
        "Validation failed: Name is required and must be a non-empty string, "
        "Invalid email format, Age must be a positive integer between 0 and 150, "
        "Invalid phone number format"
    )
    assert len(excinfo.value.errors) == 4
    assert store.calls == []


@pytest.mark.asyncio
async def test_add_user_without_payload_fails_validation(orchestrator) -> None:
    with pytest.raises(ValidationFailed, match="Name is required"):
        await orchestrator.add_user("user123", None)


@pytest.mark.asyncio
async def test_store_failures_are_opaque(clock) -> None:
    users = UserOrchestrator(_BrokenStore(), clock=clock)

    with pytest.raises(StoreUnavailable, match="^Failed to add user$"):
        await users.add_user("user123", JOHN)
    with pytest.raises(StoreUnavailable, match="^Failed to get user$"):
        await users.get_user("user123")
    with pytest.raises(StoreUnavailable, match="^Failed to update user$") as excinfo:
        await users.update_user("user123", {"age": 31})

    assert isinstance(excinfo.value.__cause__, StoreError)


@pytest.mark.asyncio
async def test_get_user_returns_stored_record(orchestrator) -> None:
    created = await orchestrator.add_user("user123", JOHN)

    first = await orchestrator.get_user("user123")
    second = await orchestrator.get_user("  user123  ")

    assert first.user == created.user
    assert first.user == second.user
    assert first.message is None


@pytest.mark.asyncio
async def test_get_user_returns_record_verbatim(clock) -> None:
    raw = {
        "id": "legacy",
        "name": "  Not Trimmed ",
        "email": "MIXED@Case.com",
        "createdAt": "2020-01-01T00:00:00.000Z",
        "updatedAt": "2020-01-01T00:00:00.000Z",
    }
    users = UserOrchestrator(MemoryRecordStore({"legacy": raw}), clock=clock)

    result = await users.get_user("legacy")

    assert result.user == raw


@pytest.mark.asyncio
async def test_get_missing_user_fails_with_not_found(orchestrator) -> None:
    with pytest.raises(NotFound, match="User not found"):
        await orchestrator.get_user("nonexistent")


@pytest.mark.asyncio
async def test_update_user_preserves_untouched_fields(orchestrator) -> None:
    created = await orchestrator.add_user("user123", JOHN)

    result = await orchestrator.update_user("user123", {"age": 31})

    assert result.message == "User updated successfully"
    assert result.user["age"] == 31
    assert result.user["name"] == created.user["name"]
    assert result.user["email"] == created.user["email"]
    assert result.user["createdAt"] == created.user["createdAt"]
    assert result.user["updatedAt"] > created.user["updatedAt"]


@pytest.mark.asyncio
async def test_update_user_normalizes_present_fields(orchestrator) -> None:
    await orchestrator.add_user("user123", JOHN)

    result = await orchestrator.update_user("user123", {"name": "  Jane Doe ", "email": " JANE@EXAMPLE.COM"})

    assert result.user["name"] == "Jane Doe"
    assert result.user["email"] == "jane@example.com"


@pytest.mark.asyncio
async def test_update_user_cannot_rewrite_id_or_created_at(orchestrator) -> None:
    created = await orchestrator.add_user("user123", JOHN)

    result = await orchestrator.update_user(
        "user123", {"id": "hijack", "createdAt": "1999-01-01T00:00:00.000Z"}
    )

    assert result.user["id"] == "user123"
    assert result.user["createdAt"] == created.user["createdAt"]


@pytest.mark.asyncio
async def test_update_missing_user_fails_with_not_found(orchestrator, store) -> None:
    with pytest.raises(NotFound, match="User not found"):
        await orchestrator.update_user("nonexistent", {"name": "X"})

    assert "nonexistent" not in store


@pytest.mark.asyncio
async def test_update_user_validation_failure_skips_store(orchestrator, store) -> None:
    await orchestrator.add_user("user123", JOHN)
    store.calls.clear()

    with pytest.raises(ValidationFailed, match="Name is required"):
        await orchestrator.update_user("user123", {"name": "   "})

    assert store.calls == []


@pytest.mark.asyncio
async def test_each_operation_makes_one_store_call(orchestrator, store) -> None:
    await orchestrator.add_user("user123", JOHN)
    await orchestrator.get_user("user123")
    await orchestrator.update_user("user123", {"age": 40})

    assert store.calls == [("put", "user123"), ("get", "user123"), ("update", "user123")]


@pytest.mark.asyncio
async def test_get_user_does_not_coerce_or_require_schema_fields(clock) -> None:
    raw = {"id": "u1", "name": "A", "age": "30"}
    users = UserOrchestrator(MemoryRecordStore({"u1": raw}), clock=clock)

    result = await users.get_user("u1")

    assert result.user == raw
    assert result.user["age"] == "30"


@pytest.mark.asyncio
async def test_update_user_on_record_without_created_at_returns_stored_item(clock) -> None:
    store = MemoryRecordStore({"u1": {"id": "u1", "name": "A"}})
    users = UserOrchestrator(store, clock=clock)

    result = await users.update_user("u1", {"age": 31})

    assert result.user == {"id": "u1", "name": "A", "age": 31, "updatedAt": "2024-01-15T10:30:00.000Z"}
    assert "createdAt" not in result.user
    assert await store.get("u1") == result.user
