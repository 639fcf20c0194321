"""
Domain models for the user record store.

`Record` is the schema of a newly created user: a fixed set of known,
validated fields plus any number of pass-through attributes. It guards the
write path only. `UserResult` is the success envelope returned by every
operation and carries the user item exactly as the store holds it.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Record(BaseModel):
    """
    Representation of a single user as written on creation.
    """

    id: str = Field(..., description="Primary key, trimmed caller-supplied id.")
    name: str = Field(..., description="Display name, trimmed.")
    email: Optional[str] = Field(None, description="Trimmed, lower-cased email.")
    age: Optional[int] = Field(None, description="Age in years (0-150).")
    phone: Optional[str] = Field(None, description="Phone number as supplied.")
    createdAt: str = Field(..., description="ISO-8601 creation timestamp.")
    updatedAt: str = Field(..., description="ISO-8601 last-modification timestamp.")

    model_config = {
        "frozen": True,
        "extra": "allow",
    }


class UserResult(BaseModel):
    """
    Outcome of a successful operation.
    """

    success: bool = True
    message: Optional[str] = None
    user: Dict[str, Any] = Field(..., description="User item as held by the store.")

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": self.success}
        if self.message is not None:
            body["message"] = self.message
        body["user"] = self.user
        return body


__all__ = ["Record", "UserResult"]
