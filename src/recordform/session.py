"""Editing session: the user-facing entry point.

An ``EditingSession`` owns everything one edit of one record needs: the form,
the last saved record, a load and a save lifecycle, and the attachment
preview. It is the caller the pipeline reports to: successful loads and saves
replace the record and reset the form, validation failures are written into
the form, and every other failure only flips UI flags (the user has already
been notified by the pipeline).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, ValidationError

from recordform.config import FrozenConfig, resolve_config
from recordform.constants import MALFORMED_RESPONSE_MESSAGE, PROFILE_SAVED_MESSAGE
from recordform.core.exceptions import MalformedResponseError, RecordFormError
from recordform.core.records import UserProfile
from recordform.forms.attachment import AttachmentPreview
from recordform.forms.messages import form_error_messages
from recordform.forms.reconciler import FormReconciler
from recordform.forms.state import FormState
from recordform.forms.validators import email, required
from recordform.http.backend import HTTPXBackend
from recordform.http.client import HttpClient
from recordform.notifications import LoggingNotifier
from recordform.pipeline.interceptor import ResponseIntegrityInterceptor
from recordform.pipeline.lifecycle import RequestLifecycle
from recordform.services.records import RecordService

if TYPE_CHECKING:
    from types import TracebackType

    from recordform.core.types import TerminalOutcome, TransportFailure, ValidationFailure
    from recordform.forms.messages import FieldValidationErrorMessages
    from recordform.http.form_data import Attachment
    from recordform.notifications import Notifier
    from recordform.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)

PROFILE_ERROR_MESSAGES: FieldValidationErrorMessages = {
    "name": {"required": "Please fill in the name"},
    "email": {"required": "Please fill in the email"},
    "address": {"required": "Please fill in the address"},
}


def build_profile_form() -> FormState:
    """Return an empty user profile form with its validators."""
    return FormState.build(
        name=("", [required]),
        email=("", [required, email]),
        address=("", [required]),
        avatar="",
    )


class EditingSession:
    """Loads a record into a form, and saves the form back."""

    def __init__(
        self,
        config: FrozenConfig,
        *,
        client: HttpClient | None = None,
        notifier: Notifier | None = None,
        form: FormState | None = None,
        record_model: type[BaseModel] = UserProfile,
        error_messages: FieldValidationErrorMessages | None = None,
        attachment_field: str | None = "avatar",
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            config: Frozen configuration.
            client: HTTP client; when omitted, an httpx-backed client with the
                response integrity interceptor is created and owned here.
            notifier: User-facing notification channel.
            form: The form to edit; defaults to the user profile form.
            record_model: Model records are decoded into.
            error_messages: Custom messages per field and error code.
            attachment_field: Form field holding the attachment, if any.
            telemetry: Optional telemetry context for the lifecycles.
        """
        self.config = config
        self.notifier: Notifier = notifier or LoggingNotifier(
            config.notification_duration
        )
        self._backend: HTTPXBackend | None = None
        if client is None:
            self._backend = HTTPXBackend(
                base_url=config.base_url,
                timeout=config.request_timeout,
                upload_chunk_size=config.upload_chunk_size,
            )
            client = HttpClient(
                self._backend, [ResponseIntegrityInterceptor(self.notifier)]
            )
        self.service = RecordService(client, config)
        self.reconciler = FormReconciler()
        self.form = form if form is not None else build_profile_form()
        self.error_messages = (
            PROFILE_ERROR_MESSAGES if error_messages is None else error_messages
        )
        self.load_lifecycle = RequestLifecycle(
            self.notifier, name="load", telemetry=telemetry
        )
        self.save_lifecycle = RequestLifecycle(
            self.notifier, name="save", telemetry=telemetry
        )
        self.preview = AttachmentPreview(config.base_url)
        self._record_model = record_model
        self._attachment_field = attachment_field

        self.record: BaseModel | None = None
        self.has_loading_error = False
        self.upload_progress = 0

    async def __aenter__(self) -> Self:  # noqa: D105
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the attachment preview and any owned HTTP client."""
        self.preview.close()
        if self._backend is not None:
            await self._backend.aclose()

    # --- UI state ---

    @property
    def is_loading(self) -> bool:
        """Whether a load request is outstanding."""
        return self.load_lifecycle.is_in_progress

    @property
    def is_saving(self) -> bool:
        """Whether a save request is outstanding."""
        return self.save_lifecycle.is_in_progress

    @property
    def is_pristine(self) -> bool:
        """Whether the form still matches the last saved record."""
        return self.reconciler.is_pristine(self.form, self.record)

    @property
    def save_disabled(self) -> bool:
        """Whether the save action should be disabled."""
        return self.reconciler.is_save_disabled(self.form, self.record, self.is_saving)

    @property
    def reset_disabled(self) -> bool:
        """Whether the reset action should be disabled."""
        return self.reconciler.is_reset_disabled(
            self.form, self.record, self.is_saving
        )

    @property
    def field_errors(self) -> dict[str, str]:
        """Rendered error text of every invalid field."""
        return form_error_messages(self.form, self.error_messages)

    # --- Actions ---

    async def load(self) -> TerminalOutcome:
        """Load the record and show it in the form."""
        return await self.load_lifecycle.run(
            self.service.load_record(),
            decode=self._decode_record,
            on_success=self._on_loaded,
            on_validation_failure=self._on_load_failed,
            on_failure=self._on_load_failed,
        )

    async def save(self) -> TerminalOutcome:
        """Submit the form and reconcile with the server's answer.

        Raises:
            RecordFormError: If a save is already in progress.
        """
        if self.is_saving:
            raise RecordFormError("A save request is already in progress")
        try:
            return await self.save_lifecycle.run(
                self.service.save_record(self.form.value),
                decode=self._decode_record,
                on_progress=self._on_progress,
                on_success=self._on_saved,
                on_validation_failure=self._on_validation_failure,
            )
        finally:
            self.upload_progress = 0

    def restore(self) -> None:
        """Discard edits and show the last saved record again."""
        self.reconciler.restore_form(self.form, self.record)
        self._show_stored_attachment()

    def select_attachment(self, attachment: Attachment) -> str:
        """Put a newly chosen file into the attachment field.

        Returns:
            The preview source for the file.
        """
        if self._attachment_field is None:
            raise RecordFormError("This form has no attachment field")
        self.form.set_value(self._attachment_field, attachment)
        return self.preview.select(attachment)

    # --- Outcome handlers ---

    def _decode_record(self, data: Any) -> BaseModel:
        """Turn success data into a record.

        Raises:
            MalformedResponseError: If the data does not fit the record model;
                the user has been notified already.
        """
        try:
            return self._record_model.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "Received record does not match %s: %s",
                self._record_model.__name__,
                e,
            )
            self.notifier.notify(MALFORMED_RESPONSE_MESSAGE)
            raise MalformedResponseError(notified=True) from e

    def _on_loaded(self, record: BaseModel) -> None:
        self.has_loading_error = False
        self.record = record
        self.reconciler.update_form(self.form, record)
        self._show_stored_attachment()

    def _on_load_failed(self, outcome: ValidationFailure | TransportFailure) -> None:
        logger.debug("Load failed: %s", outcome)
        self.has_loading_error = True

    def _on_progress(self, percent: int) -> None:
        self.upload_progress = percent

    def _on_saved(self, record: BaseModel) -> None:
        self.record = record
        self.restore()
        self.notifier.notify(PROFILE_SAVED_MESSAGE)

    def _on_validation_failure(self, outcome: ValidationFailure) -> None:
        self.reconciler.set_errors(self.form, outcome)

    def _show_stored_attachment(self) -> None:
        if self._attachment_field is None:
            return
        field = self.form.get(self._attachment_field)
        value = field.value if field is not None else None
        self.preview.show_stored(value if isinstance(value, str) else None)


def create_session(
    config: FrozenConfig | None = None,
    **kwargs: Any,
) -> EditingSession:
    """Create an editing session, resolving configuration if none is given.

    Args:
        config: Optional frozen configuration.
        **kwargs: Passed through to ``EditingSession``.

    Returns:
        A new ``EditingSession``.
    """
    # The only place ambient configuration is resolved.
    final_config = config if config is not None else resolve_config().to_frozen()
    return EditingSession(final_config, **kwargs)


__all__ = [
    "PROFILE_ERROR_MESSAGES",
    "EditingSession",
    "build_profile_form",
    "create_session",
]
