"""Local field validators.

A validator takes a field value and returns None when the value is valid, or
an error mapping such as ``{"required": True}``.
"""

from __future__ import annotations

from collections.abc import Callable, Sized
import re
from typing import Any

type ValidationErrors = dict[str, Any]
type Validator = Callable[[Any], ValidationErrors | None]

# Local part, "@", then dot-separated labels of at most 63 characters.
_EMAIL_PATTERN = re.compile(
    r"^(?=.{1,254}$)(?=.{1,64}@)[a-zA-Z0-9!#$%&'*+/=?^_`{|}~-]+"
    r"(?:\.[a-zA-Z0-9!#$%&'*+/=?^_`{|}~-]+)*@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, Sized) and len(value) == 0


def required(value: Any) -> ValidationErrors | None:
    """Fail for None and empty strings or collections."""
    return {"required": True} if _is_empty(value) else None


def email(value: Any) -> ValidationErrors | None:
    """Fail for non-empty values that are not e-mail addresses."""
    if _is_empty(value):
        return None
    if not isinstance(value, str) or not _EMAIL_PATTERN.match(value):
        return {"email": True}
    return None
