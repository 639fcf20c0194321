"""
Domain errors raised by the user operations.

Every error carries a user-facing `message`; the request dispatcher maps all
of them to the same failure response, so the message is the only detail a
caller ever sees.
"""

from __future__ import annotations

from typing import List, Sequence


class UserStoreError(Exception):
    """Base class for domain-level failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(UserStoreError):
    """The user id is missing, not a string, or blank."""


class ValidationFailed(UserStoreError):
    """One or more field rules were violated."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")


class AlreadyExists(UserStoreError):
    """Creation lost against an existing record with the same id."""


class NotFound(UserStoreError):
    """The fetch or modify target does not exist."""


class StoreUnavailable(UserStoreError):
    """The backing store failed for a reason unrelated to a condition check."""


__all__ = [
    "UserStoreError",
    "InvalidArgument",
    "ValidationFailed",
    "AlreadyExists",
    "NotFound",
    "StoreUnavailable",
]
