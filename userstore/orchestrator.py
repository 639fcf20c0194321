"""
Orchestrator for the user operations: create, fetch and modify.

Each operation checks the id, validates and normalizes the payload, then
makes exactly one call to the injected record store. Store-level outcomes are
translated into domain errors here; nothing is retried.

Usage:
    from userstore.orchestrator import UserOrchestrator
    from userstore.stores import MemoryRecordStore

    users = UserOrchestrator(MemoryRecordStore())
    result = await users.add_user("user123", {"name": "John Doe"})
    print(result.user["createdAt"])
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from userstore.domain.errors import (
    AlreadyExists,
    InvalidArgument,
    NotFound,
    StoreUnavailable,
    ValidationFailed,
)
from userstore.domain.models import Record, UserResult
from userstore.domain.normalize import normalize_changes, normalize_id, normalize_new, utc_now
from userstore.domain.validation import validate
from userstore.stores.abstract import ConditionFailed, RecordStore, StoreError
from userstore.utils.logging import get_logger

log = get_logger(__name__)

INVALID_USER_ID = "User ID is required and must be a non-empty string"


def _require_user_id(user_id: Any, operation: str) -> str:
    if not isinstance(user_id, str) or not user_id.strip():
        log.error(
            f"[{operation}] Invalid userId provided",
            extra={"userId": repr(user_id), "operation": operation},
        )
        raise InvalidArgument(INVALID_USER_ID)
    return normalize_id(user_id)


def _require_valid(data: Mapping[str, Any], user_id: str, operation: str, partial: bool) -> None:
    errors = validate(data, partial=partial)
    if errors:
        log.error(
            f"[{operation}] Validation failed",
            extra={"userId": user_id, "operation": operation, "validationErrors": errors},
        )
        raise ValidationFailed(errors)


class UserOrchestrator:
    """
    Runs the three user operations against a record store.

    Parameters
    ----------
    store : RecordStore
        Backing store, constructed once by the caller and shared across calls.
    clock : Callable[[], datetime]
        Source of the current time for `createdAt`/`updatedAt`.
    """

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = utc_now) -> None:
        self.store = store
        self._clock = clock

    async def add_user(self, user_id: Any, user_data: Optional[Mapping[str, Any]]) -> UserResult:
        """
        Create a user; fails if a user with the same id already exists.

        Raises
        ------
        InvalidArgument, ValidationFailed, AlreadyExists, StoreUnavailable
        """
        data = user_data or {}
        log.info("[ADD USER] Starting", extra={"userId": user_id, "userDataKeys": list(data)})
        key = _require_user_id(user_id, "ADD USER")
        _require_valid(data, key, "ADD USER", partial=False)

        item = normalize_new(key, data, self._clock())
        # Schema check on the write path only; reads return the stored item untouched.
        Record.model_validate(item)
        try:
            log.info("[ADD USER] Writing to store", extra={"userId": key, "backend": self.store.name})
            await self.store.put(key, item)
        except ConditionFailed as exc:
            log.warning("[ADD USER] User already exists", extra={"userId": key})
            raise AlreadyExists("User already exists") from exc
        except StoreError as exc:
            log.error("[ADD USER] Store failure", extra={"userId": key, "error": str(exc)})
            raise StoreUnavailable("Failed to add user") from exc

        log.info("[ADD USER] Created", extra={"userId": key, "createdAt": item["createdAt"]})
        return UserResult(message="User created successfully", user=item)

    async def get_user(self, user_id: Any) -> UserResult:
        """
        Fetch a user exactly as stored.

        Raises
        ------
        InvalidArgument, NotFound, StoreUnavailable
        """
        log.info("[GET USER] Starting", extra={"userId": user_id})
        key = _require_user_id(user_id, "GET USER")

        try:
            log.info("[GET USER] Reading from store", extra={"userId": key, "backend": self.store.name})
            item = await self.store.get(key)
        except StoreError as exc:
            log.error("[GET USER] Store failure", extra={"userId": key, "error": str(exc)})
            raise StoreUnavailable("Failed to get user") from exc

        if item is None:
            log.warning("[GET USER] User not found", extra={"userId": key})
            raise NotFound("User not found")

        log.info("[GET USER] Retrieved", extra={"userId": key})
        return UserResult(user=item)

    async def update_user(
        self, user_id: Any, update_data: Optional[Mapping[str, Any]]
    ) -> UserResult:
        """
        Apply a partial update to an existing user and advance `updatedAt`.

        Only the fields present in `update_data` are written; the rest of the
        record is left as stored.

        Raises
        ------
        InvalidArgument, ValidationFailed, NotFound, StoreUnavailable
        """
        data = update_data or {}
        log.info("[UPDATE USER] Starting", extra={"userId": user_id, "updateDataKeys": list(data)})
        key = _require_user_id(user_id, "UPDATE USER")
        _require_valid(data, key, "UPDATE USER", partial=True)

        changes = normalize_changes(data, self._clock())
        try:
            log.info(
                "[UPDATE USER] Writing to store", extra={"userId": key, "backend": self.store.name}
            )
            item = await self.store.update(key, changes)
        except ConditionFailed as exc:
            log.warning("[UPDATE USER] User not found", extra={"userId": key})
            raise NotFound("User not found") from exc
        except StoreError as exc:
            log.error("[UPDATE USER] Store failure", extra={"userId": key, "error": str(exc)})
            raise StoreUnavailable("Failed to update user") from exc

        log.info("[UPDATE USER] Updated", extra={"userId": key, "updatedAt": changes["updatedAt"]})
        return UserResult(message="User updated successfully", user=item)


__all__ = ["INVALID_USER_ID", "UserOrchestrator"]
