"""Map validation error payloads into field-keyed error maps."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
from typing import TYPE_CHECKING, Any

from recordform.core.types import FieldError, FieldErrorMap, ValidationFailure

if TYPE_CHECKING:
    from recordform.forms.state import FormState

logger = logging.getLogger(__name__)


def _entries(payload: Any) -> Sequence[Any] | None:
    if isinstance(payload, ValidationFailure):
        return payload.field_errors
    if isinstance(payload, Mapping):
        errors = payload.get("errors")
        if isinstance(errors, Sequence) and not isinstance(errors, str | bytes):
            return errors
    return None


def _entry_parts(entry: Any) -> tuple[str, str, str] | None:
    if isinstance(entry, FieldError):
        return entry.field, entry.code, entry.message
    if isinstance(entry, Mapping):
        field, code, message = entry.get("field"), entry.get("code"), entry.get("message")
        if isinstance(field, str) and isinstance(code, str):
            return field, code, message if isinstance(message, str) else ""
    return None


def map_field_errors(payload: Any) -> FieldErrorMap | None:
    """Build a fresh error map from a validation payload.

    Args:
        payload: None, a ``ValidationFailure``, or a decoded
            ``{"message": ..., "errors": [...]}`` body.

    Returns:
        None when there is no errors array, meaning "clear all errors";
        otherwise ``{field: {code: message}}``. Later entries win for the
        same ``(field, code)`` pair. Malformed entries are skipped.
    """
    entries = _entries(payload)
    if entries is None:
        return None
    error_map: FieldErrorMap = {}
    for entry in entries:
        parts = _entry_parts(entry)
        if parts is None:
            logger.debug("Skipping malformed validation entry: %r", entry)
            continue
        field, code, message = parts
        error_map.setdefault(field, {})[code] = message
    return error_map


def apply_field_errors(form: FormState, error_map: FieldErrorMap) -> None:
    """Write each field's errors into ``form``; unmentioned fields are untouched.

    Field names the form does not have are ignored.
    """
    for field_name, errors in error_map.items():
        field = form.get(field_name)
        if field is None:
            logger.debug("Ignoring errors for unknown field %r", field_name)
            continue
        field.set_errors(errors)
