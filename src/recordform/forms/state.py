"""Caller-owned form structure.

``FormState`` holds one ``FormField`` per editable field. A field's errors come
from its local validators, or from server-side errors injected with
``set_errors``; injected errors stay until the value changes, the form is
reset, or errors are cleared.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Self

from recordform.forms.validators import ValidationErrors, Validator


class FormField:
    """A single form field with value, validity and interaction flags."""

    def __init__(
        self,
        name: str,
        value: Any = None,
        validators: Iterable[Validator] = (),
    ) -> None:
        """Create a field and run its validators on the initial value."""
        if not name or not name.strip():
            raise ValueError("name: must be a non-empty str")
        self.name = name
        self.validators: tuple[Validator, ...] = tuple(validators)
        self._value = value
        self.errors: ValidationErrors | None = None
        self.touched = False
        self.dirty = False
        self.update_validity()

    def __repr__(self) -> str:  # noqa: D105
        return (
            f"FormField(name={self.name!r}, value={self._value!r}, "
            f"errors={self.errors!r}, dirty={self.dirty!r})"
        )

    @property
    def value(self) -> Any:
        """Current value."""
        return self._value

    @property
    def valid(self) -> bool:
        """True when the field has no errors."""
        return not self.errors

    def set_value(self, value: Any) -> None:
        """Change the value as a user edit would, re-running validators."""
        self._value = value
        self.dirty = True
        self.update_validity()

    def mark_touched(self) -> None:
        """Record that the user has interacted with the field."""
        self.touched = True

    def update_validity(self) -> None:
        """Recompute errors from the local validators."""
        errors: ValidationErrors = {}
        for validator in self.validators:
            result = validator(self._value)
            if result:
                errors.update(result)
        self.errors = errors or None

    def set_errors(self, errors: Mapping[str, Any] | None) -> None:
        """Replace the field's errors wholesale."""
        self.errors = dict(errors) if errors else None

    def reset(self, value: Any = None) -> None:
        """Set ``value`` and return to the untouched, pristine state."""
        self._value = value
        self.touched = False
        self.dirty = False
        self.update_validity()


class FormState:
    """A group of named fields."""

    def __init__(self, fields: Iterable[FormField]) -> None:
        """Create a form from its fields; names must be unique."""
        self._fields: dict[str, FormField] = {}
        for field in fields:
            if field.name in self._fields:
                raise ValueError(f"duplicate field name: {field.name!r}")
            self._fields[field.name] = field
        self.errors: ValidationErrors | None = None

    @classmethod
    def build(cls, **definitions: Any) -> Self:
        """Build a form from ``name=value`` or ``name=(value, [validators])``.

        Example:
            form = FormState.build(
                name=("", [required]),
                email=("", [required, email]),
                avatar="",
            )
        """
        fields = []
        for name, entry in definitions.items():
            if isinstance(entry, tuple):
                value, validators = entry
                fields.append(FormField(name, value, validators))
            else:
                fields.append(FormField(name, entry))
        return cls(fields)

    def __contains__(self, name: object) -> bool:  # noqa: D105
        return name in self._fields

    def __iter__(self) -> Iterator[FormField]:  # noqa: D105
        return iter(self._fields.values())

    @property
    def fields(self) -> Mapping[str, FormField]:
        """Fields keyed by name."""
        return dict(self._fields)

    @property
    def value(self) -> dict[str, Any]:
        """Current values keyed by field name."""
        return {name: field.value for name, field in self._fields.items()}

    @property
    def valid(self) -> bool:
        """True when neither the form nor any field has errors."""
        return not self.errors and all(f.valid for f in self._fields.values())

    @property
    def dirty(self) -> bool:
        """True when any field was edited since the last reset."""
        return any(f.dirty for f in self._fields.values())

    @property
    def touched(self) -> bool:
        """True when any field was touched since the last reset."""
        return any(f.touched for f in self._fields.values())

    def get(self, name: str) -> FormField | None:
        """Return the field called ``name``, or None."""
        return self._fields.get(name)

    def set_value(self, name: str, value: Any) -> None:
        """Edit one field; raises KeyError for unknown names."""
        self._fields[name].set_value(value)

    def reset(self, values: Mapping[str, Any] | None = None) -> None:
        """Reset every field; fields missing from ``values`` become None."""
        values = values or {}
        self.errors = None
        for name, field in self._fields.items():
            field.reset(values.get(name))

    def clear_errors(self) -> None:
        """Drop injected errors everywhere, keeping local validator results."""
        self.errors = None
        for field in self._fields.values():
            field.update_validity()
