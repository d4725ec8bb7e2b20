"""Keep a form consistent with the last saved record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from recordform.core.records import record_values
from recordform.forms.taxonomy import apply_field_errors, map_field_errors

if TYPE_CHECKING:
    from recordform.forms.state import FormState


def project(data: Any, keys: Any) -> dict[str, Any]:
    """Return the entries of ``data`` whose keys are in ``keys``.

    Keys missing from ``data`` are left out rather than filled in.
    """
    values = record_values(data)
    return {key: values[key] for key in keys if key in values}


class FormReconciler:
    """Pristine detection, button state, and error injection for a form.

    The record may be a pydantic model or a plain mapping. Only the fields
    the form exposes take part in any comparison.
    """

    def update_form(self, form: FormState, data: Any) -> None:
        """Reset ``form`` to the values of ``data`` it shares keys with.

        This is a full reset: validity, touched and dirty state start over.
        """
        form.reset(project(data, form.value.keys()))

    def is_pristine(self, form: FormState, last_saved: Any | None) -> bool:
        """True when the form's values equal the last saved record's.

        A form without a saved record is never pristine.
        """
        if last_saved is None:
            return False
        value = form.value
        if not value:
            return False
        return value == project(last_saved, value.keys())

    def is_save_disabled(
        self,
        form: FormState,
        last_saved: Any | None,
        in_progress: bool = False,
    ) -> bool:
        """Save is disabled for invalid or unchanged forms and while saving."""
        return not form.valid or self.is_pristine(form, last_saved) or in_progress

    def is_reset_disabled(
        self,
        form: FormState,
        last_saved: Any | None,
        in_progress: bool = False,
    ) -> bool:
        """Reset is disabled for unchanged forms and while saving."""
        return self.is_pristine(form, last_saved) or in_progress

    def restore_form(self, form: FormState, data: Any | None) -> None:
        """Like ``update_form``, but does nothing when ``data`` is None."""
        if data is not None:
            self.update_form(form, data)

    def set_errors(self, form: FormState, payload: Any | None) -> None:
        """Inject server validation errors into ``form``.

        An absent or empty payload clears all injected errors; otherwise only
        the fields it mentions are updated.
        """
        error_map = map_field_errors(payload)
        if not error_map:
            form.clear_errors()
            return
        apply_field_errors(form, error_map)
