"""
Field validation for user payloads.

`validate` is pure: it inspects a candidate mapping and returns every rule
violation in a fixed order. An empty list means the candidate is acceptable.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping

NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 255
AGE_MIN = 0
AGE_MAX = 150

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")
_PHONE_SEPARATORS = re.compile(r"[\s\-()]")

NAME_REQUIRED = "Name is required and must be a non-empty string"
NAME_TOO_LONG = "Name must be less than 256 characters"
EMAIL_INVALID = "Invalid email format"
EMAIL_TOO_LONG = "Email must be less than 256 characters"
AGE_INVALID = "Age must be a positive integer between 0 and 150"
PHONE_INVALID = "Invalid phone number format"


def _is_whole_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _name_errors(candidate: Mapping[str, Any], partial: bool) -> List[str]:
    errors: List[str] = []
    if "name" not in candidate and partial:
        return errors
    name = candidate.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append(NAME_REQUIRED)
    if isinstance(name, str) and len(name) > NAME_MAX_LENGTH:
        errors.append(NAME_TOO_LONG)
    return errors


def _email_errors(email: Any) -> List[str]:
    errors: List[str] = []
    if not email:
        return errors
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip()):
        errors.append(EMAIL_INVALID)
    if isinstance(email, str) and len(email) > EMAIL_MAX_LENGTH:
        errors.append(EMAIL_TOO_LONG)
    return errors


def _age_errors(candidate: Mapping[str, Any]) -> List[str]:
    if "age" not in candidate:
        return []
    age = candidate["age"]
    if not _is_whole_number(age) or age < AGE_MIN or age > AGE_MAX:
        return [AGE_INVALID]
    return []


def _phone_errors(phone: Any) -> List[str]:
    if not phone:
        return []
    if not isinstance(phone, str):
        return [PHONE_INVALID]
    if not PHONE_PATTERN.match(_PHONE_SEPARATORS.sub("", phone)):
        return [PHONE_INVALID]
    return []


def validate(candidate: Mapping[str, Any], partial: bool = False) -> List[str]:
    """
    Collect every validation error for a user payload.

    Parameters
    ----------
    candidate : Mapping[str, Any]
        Field values to check. Unknown keys are ignored.
    partial : bool
        When True (updates), a missing `name` is allowed; a present but blank
        one is still rejected.

    Returns
    -------
    List[str]
        Error messages in rule order: name, email, age, phone.
    """
    errors: List[str] = []
    errors.extend(_name_errors(candidate, partial))
    errors.extend(_email_errors(candidate.get("email")))
    errors.extend(_age_errors(candidate))
    errors.extend(_phone_errors(candidate.get("phone")))
    return errors


__all__ = ["validate"]
