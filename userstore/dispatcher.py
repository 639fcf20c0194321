"""
Request dispatcher for the user operations.

Accepts the two inbound event shapes delivered by the transport layer:

- a change-event batch (`{"Records": [...]}`) from the table's stream, which is
  only classified and logged;
- a direct invocation (`{"body": "{\"action\": ..., \"userId\": ..., \"userData\": ...}"}`),
  which is routed to the matching orchestrator operation.

Every outcome is shaped into an HTTP-style response envelope
(`statusCode`, `headers`, JSON `body`). Domain failures all map to 500; only
an unknown action gets a 400.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from userstore.domain.errors import UserStoreError
from userstore.domain.models import UserResult
from userstore.orchestrator import UserOrchestrator
from userstore.utils.logging import get_logger

log = get_logger(__name__)

UNKNOWN_REQUEST_ID = "unknown"
INVALID_ACTION = "Invalid action. Supported actions: addUser, getUser, updateUser"
INVALID_BODY = "Invalid request body"
INTERNAL_ERROR = "Internal server error"
CHANGE_EVENTS_PROCESSED = "Change events processed successfully"

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "OPTIONS,POST,GET,PUT,DELETE",
}


class Action(str, Enum):
    ADD_USER = "addUser"
    GET_USER = "getUser"
    UPDATE_USER = "updateUser"


# Success status per action.
_SUCCESS_STATUS: Dict[Action, int] = {
    Action.ADD_USER: 201,
    Action.GET_USER: 200,
    Action.UPDATE_USER: 200,
}


class ApiRequest(BaseModel):
    """Decoded body of a direct invocation."""

    action: Optional[str] = None
    userId: Any = None
    userData: Optional[Dict[str, Any]] = None


class StreamImage(BaseModel):
    Keys: Dict[str, Any] = Field(default_factory=dict)
    NewImage: Optional[Dict[str, Any]] = None
    OldImage: Optional[Dict[str, Any]] = None

    model_config = {"extra": "allow"}


class ChangeEvent(BaseModel):
    eventName: str
    dynamodb: StreamImage = Field(default_factory=StreamImage)

    model_config = {"extra": "allow"}


class ChangeBatch(BaseModel):
    Records: List[ChangeEvent]


_CHANGE_KINDS: Dict[str, str] = {
    "INSERT": "created",
    "MODIFY": "updated",
    "REMOVE": "deleted",
}


def _request_id(event: Mapping[str, Any]) -> str:
    context = event.get("requestContext")
    if isinstance(context, Mapping) and context.get("requestId"):
        return str(context["requestId"])
    return UNKNOWN_REQUEST_ID


def _event_key(keys: Mapping[str, Any]) -> Optional[str]:
    """First key value of a stream record, unwrapping DynamoDB type descriptors."""
    for value in keys.values():
        if isinstance(value, Mapping):
            for typed in ("S", "N", "B"):
                if typed in value:
                    return str(value[typed])
            return None
        return str(value)
    return None


def _response(status_code: int, body: Any, request_id: str) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json", "X-Request-ID": request_id, **CORS_HEADERS},
        "body": json.dumps(body, default=str),
    }


def _error(status_code: int, message: str, request_id: str) -> Dict[str, Any]:
    return _response(status_code, {"error": message, "requestId": request_id}, request_id)


def _parse_request(body: Any) -> ApiRequest:
    """
    Decode the invocation body.

    Raises
    ------
    ValueError
        If the body is not JSON or does not have the expected structure.
    """
    if body is None or body == "":
        payload: Any = {}
    elif isinstance(body, (str, bytes)):
        payload = json.loads(body)
    else:
        payload = body
    return ApiRequest.model_validate(payload)


class Dispatcher:
    """
    Routes inbound events to the orchestrator and shapes the responses.

    Instances are callable with the Lambda `(event, context)` signature.
    """

    def __init__(self, orchestrator: UserOrchestrator) -> None:
        self.orchestrator = orchestrator

    def __call__(self, event: Mapping[str, Any], context: Any = None) -> Dict[str, Any]:
        return asyncio.run(self.dispatch(event))

    async def dispatch(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        request_id = _request_id(event)
        log.info(
            "Dispatching event",
            extra={"requestId": request_id, "eventType": "change" if "Records" in event else "api"},
        )

        if event.get("httpMethod") == "OPTIONS":
            response = _response(200, None, request_id)
            response["headers"].pop("Content-Type")
            response["body"] = ""
            return response

        if "Records" in event:
            try:
                batch = ChangeBatch.model_validate({"Records": event["Records"]})
            except ValidationError:
                log.warning("Malformed change-event batch", extra={"requestId": request_id})
            else:
                return self._process_changes(batch, request_id)

        try:
            request = _parse_request(event.get("body"))
        except (ValueError, ValidationError) as exc:
            log.error("Failed to parse request body", extra={"requestId": request_id, "error": str(exc)})
            return _error(500, INVALID_BODY, request_id)

        try:
            return await self._invoke(request, request_id)
        except UserStoreError as exc:
            log.error(
                "Operation failed",
                extra={"requestId": request_id, "action": request.action, "error": exc.message},
            )
            return _error(500, exc.message, request_id)
        except Exception:  # noqa: BLE001 - boundary: every failure becomes a response
            log.exception("Unhandled error while dispatching", extra={"requestId": request_id})
            return _error(500, INTERNAL_ERROR, request_id)

    async def _invoke(self, request: ApiRequest, request_id: str) -> Dict[str, Any]:
        try:
            action = Action(request.action)
        except ValueError:
            log.warning("Invalid action requested", extra={"action": request.action, "requestId": request_id})
            return _error(400, INVALID_ACTION, request_id)

        log.info(
            f"Executing {action.value}",
            extra={"requestId": request_id, "userId": "provided" if request.userId else "missing"},
        )
        result: UserResult
        if action is Action.ADD_USER:
            result = await self.orchestrator.add_user(request.userId, request.userData)
        elif action is Action.GET_USER:
            result = await self.orchestrator.get_user(request.userId)
        else:
            result = await self.orchestrator.update_user(request.userId, request.userData)
        return _response(_SUCCESS_STATUS[action], result.to_body(), request_id)

    def _process_changes(self, batch: ChangeBatch, request_id: str) -> Dict[str, Any]:
        log.info(
            "Processing change events",
            extra={"recordCount": len(batch.Records), "requestId": request_id},
        )
        for change in batch.Records:
            kind = _CHANGE_KINDS.get(change.eventName, "unknown")
            log.info(
                f"User {kind} via change event",
                extra={
                    "eventName": change.eventName,
                    "userId": _event_key(change.dynamodb.Keys),
                    "requestId": request_id,
                },
            )

        processed = len(batch.Records)
        log.info("Change events processed", extra={"processedRecords": processed, "requestId": request_id})
        return _response(
            200,
            {"message": CHANGE_EVENTS_PROCESSED, "processedRecords": processed, "requestId": request_id},
            request_id,
        )


__all__ = [
    "Action",
    "ApiRequest",
    "ChangeBatch",
    "Dispatcher",
    "INVALID_ACTION",
    "INVALID_BODY",
]
