"""
Lambda entry point.

The dispatcher (and the store client inside it) is built once per process on
first use and reused across invocations.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from userstore.config import Settings, get_settings
from userstore.dispatcher import Dispatcher
from userstore.orchestrator import UserOrchestrator
from userstore.stores.factory import build_store
from userstore.utils.logging import configure_logging


def create_dispatcher(settings: Optional[Settings] = None) -> Dispatcher:
    """Wire store -> orchestrator -> dispatcher from settings."""
    settings = settings or get_settings()
    return Dispatcher(UserOrchestrator(build_store(settings)))


@lru_cache(maxsize=1)
def get_dispatcher() -> Dispatcher:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs, force=False)
    return create_dispatcher(settings)


def lambda_handler(event: Mapping[str, Any], context: Any = None) -> Dict[str, Any]:
    return get_dispatcher()(event, context)


__all__ = ["create_dispatcher", "get_dispatcher", "lambda_handler"]
