"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Canonical log keys populated by the HTTP middleware
HTTP_REQUEST_METHOD = "http.request.method"
HTTP_REQUEST_PATH = "http.request.path"
HTTP_REQUEST_BODY_BYTES = "http.request.body_bytes"
HTTP_RESPONSE_DURATION_MS = "http.response.duration_ms"
HTTP_RESPONSE_BODY_BYTES = "http.response.body_bytes"
HTTP_RESPONSE_STATUS_CODE = "http.response.status_code"
ERROR_TYPE = "error.type"
ERROR_MESSAGE = "error.message"
