"""
Project-wide constants for the record form client
"""  # noqa: D200, D212, D415

# ==============================================================================
# API and Network Configuration
# ==============================================================================

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_RECORDS_PATH = "users"
DEFAULT_RECORD_ID = 1
NETWORK_TIMEOUT = 30.0  # seconds

# Attachments are streamed in chunks of this size when progress is reported
_KB = 1024
UPLOAD_CHUNK_SIZE = 64 * _KB

# Remote attachment values are file names served under this path
IMAGES_PATH = "images"

# ==============================================================================
# User-facing Notifications
# ==============================================================================

NOTIFICATION_DURATION = 3.0  # seconds

MALFORMED_RESPONSE_MESSAGE = "An internal error has occurred. Please try again later."
NO_NETWORK_MESSAGE = "No network connection. Please try again later."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error has occurred. Please try again later."
PROFILE_SAVED_MESSAGE = "The profile was successfully saved"
