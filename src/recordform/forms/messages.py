"""Human-readable messages for field errors.

Server-injected errors carry their message as the error value and are shown
as is. Errors from local validators are flags (``{"required": True}``) and are
looked up in the custom messages for the field, then in the defaults, then
fall back to the generic ``unknown`` message.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from recordform.forms.state import FormState

type ValidationErrorMessages = Mapping[str, str]
type FieldValidationErrorMessages = Mapping[str, ValidationErrorMessages]

DEFAULT_ERROR_MESSAGES: dict[str, str] = {
    "unknown": "This field has an error",
    "required": "This field is required",
    "email": "Please enter a valid email",
}


def error_message(
    code: str,
    value: Any,
    custom_messages: ValidationErrorMessages | None = None,
    default_messages: ValidationErrorMessages = DEFAULT_ERROR_MESSAGES,
) -> str:
    """Return the message for one error entry."""
    if isinstance(value, str) and value:
        return value
    return (
        (custom_messages or {}).get(code)
        or default_messages.get(code)
        or default_messages.get("unknown")
        or DEFAULT_ERROR_MESSAGES["unknown"]
    )


def render_errors(
    errors: Mapping[str, Any] | None,
    custom_messages: ValidationErrorMessages | None = None,
    default_messages: ValidationErrorMessages = DEFAULT_ERROR_MESSAGES,
) -> str:
    """Join the messages for all of a field's errors with ``". "``.

    Returns an empty string when there are no errors.
    """
    if not errors:
        return ""
    return ". ".join(
        error_message(code, value, custom_messages, default_messages)
        for code, value in errors.items()
    )


def form_error_messages(
    form: FormState,
    custom_messages: FieldValidationErrorMessages | None = None,
) -> dict[str, str]:
    """Render the error text of every invalid field, keyed by field name."""
    custom_messages = custom_messages or {}
    return {
        field.name: render_errors(field.errors, custom_messages.get(field.name))
        for field in form
        if field.errors
    }
