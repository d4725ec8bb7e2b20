"""Form structure, validation messages and reconciliation with records."""

from recordform.forms.attachment import AttachmentPreview
from recordform.forms.messages import (
    DEFAULT_ERROR_MESSAGES,
    form_error_messages,
    render_errors,
)
from recordform.forms.reconciler import FormReconciler
from recordform.forms.state import FormField, FormState
from recordform.forms.taxonomy import apply_field_errors, map_field_errors
from recordform.forms.validators import email, required

__all__ = [
    "DEFAULT_ERROR_MESSAGES",
    "AttachmentPreview",
    "FormField",
    "FormReconciler",
    "FormState",
    "apply_field_errors",
    "email",
    "form_error_messages",
    "map_field_errors",
    "render_errors",
    "required",
]
