"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_QR_TOKEN_TTL_MINUTES = 10
QR_TOKEN_BYTES = 16
DEFAULT_EVENT_QUEUE_SIZE = 100
DEFAULT_SSE_KEEPALIVE_SECONDS = 15
