"""Record editing client: load a record into a form, save it back."""

import importlib.metadata
import logging

from recordform.config import FrozenConfig, ResolvedConfig, config_scope, resolve_config
from recordform.core.exceptions import (
    ConfigurationError,
    HTTPErrorResponse,
    IncompleteExchangeError,
    MalformedResponseError,
    NetworkUnreachableError,
    RecordFormError,
    TransportFailureError,
)
from recordform.core.records import UserProfile
from recordform.core.types import (
    FieldError,
    FieldErrorMap,
    InFlightState,
    Outcome,
    Progress,
    Success,
    TerminalOutcome,
    TransportFailure,
    TransportFailureKind,
    ValidationFailure,
)
from recordform.forms import FormReconciler, FormState
from recordform.http import Attachment, HttpClient, HTTPXBackend, RequestDescriptor
from recordform.notifications import CollectingNotifier, LoggingNotifier, Notifier
from recordform.pipeline import RequestLifecycle, ResponseIntegrityInterceptor
from recordform.services import RecordService
from recordform.session import EditingSession, build_profile_form, create_session
from recordform.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("recordform")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Session
    "EditingSession",
    "build_profile_form",
    "create_session",
    "RecordService",
    "UserProfile",
    # Pipeline
    "RequestLifecycle",
    "ResponseIntegrityInterceptor",
    "InFlightState",
    # Outcomes
    "Outcome",
    "TerminalOutcome",
    "Progress",
    "Success",
    "ValidationFailure",
    "TransportFailure",
    "TransportFailureKind",
    "FieldError",
    "FieldErrorMap",
    # Transport
    "Attachment",
    "HttpClient",
    "HTTPXBackend",
    "RequestDescriptor",
    # Forms
    "FormReconciler",
    "FormState",
    # Notifications
    "Notifier",
    "LoggingNotifier",
    "CollectingNotifier",
    # Configuration
    "FrozenConfig",
    "ResolvedConfig",
    "config_scope",
    "resolve_config",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "RecordFormError",
    "ConfigurationError",
    "HTTPErrorResponse",
    "TransportFailureError",
    "MalformedResponseError",
    "NetworkUnreachableError",
    "IncompleteExchangeError",
]
