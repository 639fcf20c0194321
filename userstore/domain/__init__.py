"""
Domain package for the user record store.

Exports the record model, the error taxonomy and the pure validation and
normalization rules. Nothing here performs I/O.
"""

from userstore.domain.errors import (
    AlreadyExists,
    InvalidArgument,
    NotFound,
    StoreUnavailable,
    UserStoreError,
    ValidationFailed,
)
from userstore.domain.models import Record, UserResult
from userstore.domain.validation import validate

__all__ = [
    "Record",
    "UserResult",
    "validate",
    # Errors
    "UserStoreError",
    "InvalidArgument",
    "ValidationFailed",
    "AlreadyExists",
    "NotFound",
    "StoreUnavailable",
]
