"""Request outcome pipeline: classification, progress, integrity and lifecycle."""

from recordform.pipeline.classifier import (
    classify_failure,
    classify_value,
    decode_validation_failure,
    is_invalid_ok_response,
    is_network_unreachable,
    is_success_envelope,
)
from recordform.pipeline.interceptor import ResponseIntegrityInterceptor
from recordform.pipeline.lifecycle import RequestLifecycle
from recordform.pipeline.progress import progress_outcome, upload_percent

__all__ = [
    "RequestLifecycle",
    "ResponseIntegrityInterceptor",
    "classify_failure",
    "classify_value",
    "decode_validation_failure",
    "is_invalid_ok_response",
    "is_network_unreachable",
    "is_success_envelope",
    "progress_outcome",
    "upload_percent",
]
