"""Shared constants for the transfer engine."""

# =============================================================================
# Protocol
# =============================================================================

# Server notification stream, keyed by the client-chosen channel id
NOTIFICATIONS_PATH = "/~/api/get_notifications"

# Prefix of generated notification channel ids
CHANNEL_PREFIX = "upload-"

# Push events consumed while a transfer is active
EVENT_RESUMABLE = "upload.resumable"
EVENT_STATUS = "upload.status"

# Form field name of the single file part
FORM_FIELD = "file"

# Bytes read from disk per body chunk
CHUNK_SIZE = 256 * 1024

# =============================================================================
# Scheduling
# =============================================================================

# Estimator tick interval and minimum sampling window, in seconds
SAMPLE_INTERVAL = 5.0
MIN_SAMPLE_WINDOW = 3.0

# Delay before refreshing the remote listing once the queue drains, so the
# server has renamed the temporary upload file to its final name
REFRESH_DELAY = 0.5

# Max seconds to wait for the notification stream to connect
SUBSCRIBE_TIMEOUT = 5.0

# =============================================================================
# User Messages
# =============================================================================

MSG_REJECTED = "Some files were not accepted"
MSG_PAUSE_NOTICE = "Pause applies to the queue, but current file will still be uploaded"
MSG_FAILED = "Couldn't upload {name}"
MSG_TOO_LARGE = "file too large"
MSG_RESUME = "Resume upload? ({percent} = {size})"
MSG_CONCLUDED = "Upload concluded:"
