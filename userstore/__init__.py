"""
userstore - validation, normalization and conditional persistence for user records.

This package implements the request-handling core of a single-entity record
store:

- Field validation and canonicalization of user payloads
- Create / fetch / modify operations over a conditional key-value store
- Store adapters for DynamoDB, PostgreSQL and an in-memory dict
- A dispatcher for direct invocations and change-event batches
- A Lambda entry point and a small CLI

Store-level condition failures are translated into domain errors
(already-exists, not-found, store-unavailable) so callers never depend on a
backend's error naming.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from userstore.config import Settings, get_settings
from userstore.dispatcher import Dispatcher
from userstore.domain import (
    AlreadyExists,
    InvalidArgument,
    NotFound,
    Record,
    StoreUnavailable,
    UserResult,
    UserStoreError,
    ValidationFailed,
    validate,
)
from userstore.handler import create_dispatcher, lambda_handler
from userstore.orchestrator import UserOrchestrator
from userstore.stores import (
    ConditionFailed,
    MemoryRecordStore,
    RecordStore,
    StoreError,
    build_store,
)
from userstore.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Record",
    "UserResult",
    "validate",
    "UserStoreError",
    "InvalidArgument",
    "ValidationFailed",
    "AlreadyExists",
    "NotFound",
    "StoreUnavailable",
    # Operations and dispatch
    "UserOrchestrator",
    "Dispatcher",
    "create_dispatcher",
    "lambda_handler",
    # Stores
    "RecordStore",
    "MemoryRecordStore",
    "ConditionFailed",
    "StoreError",
    "build_store",
    # Logging
    "configure_logging",
    "get_logger",
]
