"""Canonical log middleware emitting one wide event per HTTP request.

Each request gets its own canonical log. The middleware records the
standard request/response fields around the wrapped application, and any
code running inside the request (endpoints, dependencies, background work
spawned from them) can add its own fields through ``clog.core.context``.
When the response is ready the whole log is rendered once and passed to the
configured sink.

Fields recorded:
- ``http.request.method`` / ``http.request.path``
- ``http.request.body_bytes``: request ``Content-Length``, 0 if absent or invalid
- ``http.response.duration_ms``: wall time spent in the wrapped app
- ``http.response.body_bytes``: response ``Content-Length``, 0 if absent or invalid
- ``http.response.status_code``
- ``error.type`` / ``error.message`` when the wrapped app raises

The line is emitted as soon as the wrapped app has sent its response
headers. For streaming responses the duration leaves out body streaming,
``body_bytes`` is 0 unless the app set ``Content-Length``, and fields added
while the body streams are not part of the line.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from clog.api.constants import CONTENT_LENGTH_HEADER, HTTP_500_INTERNAL_SERVER_ERROR
from clog.core.canonical import CanonicalLog
from clog.core.config import CanonicalLogConfig
from clog.core.constants import (
    ERROR_MESSAGE,
    ERROR_TYPE,
    HTTP_REQUEST_BODY_BYTES,
    HTTP_REQUEST_METHOD,
    HTTP_REQUEST_PATH,
    HTTP_RESPONSE_BODY_BYTES,
    HTTP_RESPONSE_DURATION_MS,
    HTTP_RESPONSE_STATUS_CODE,
    MILLISECONDS_PER_SECOND,
)
from clog.core.context import canonical_log_scope
from clog.core.exceptions import ConfigurationError
from clog.core.types import LogFn


def parse_content_length(value: str | None) -> int:
    """Parse a Content-Length header value.

    Args:
        value: Raw header value, possibly missing.

    Returns:
        int: The byte count, or 0 when missing, non-numeric or negative.
    """
    if value is None:
        return 0
    try:
        size = int(value)
    except ValueError:
        return 0
    return max(size, 0)


class CanonicalLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that builds and emits a canonical log line per request.

    Args:
        app: The ASGI application.
        log_fn: Sink called once per request with the rendered JSON line.
        config: Canonical log configuration.

    Raises:
        ConfigurationError: If ``log_fn`` or ``app`` is None.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        log_fn: LogFn,
        config: CanonicalLogConfig | None = None,
    ) -> None:
        if log_fn is None:
            raise ConfigurationError("log_fn cannot be None")
        if app is None:
            raise ConfigurationError("app cannot be None")
        super().__init__(app)
        self.log_fn = log_fn
        self.config = config or CanonicalLogConfig()
        self.excluded_paths = set(self.config.excluded_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request inside a canonical log scope.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: The response from the application.

        Raises:
            Exception: Any exception raised by the application is re-raised
                after the canonical log line is emitted.
        """
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        with canonical_log_scope() as canonical_log:
            canonical_log.set_string(HTTP_REQUEST_METHOD, request.method)
            canonical_log.set_string(HTTP_REQUEST_PATH, request.url.path)

            start_time = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as exc:
                self._record_request(canonical_log, request, start_time)
                canonical_log.set_int(
                    HTTP_RESPONSE_STATUS_CODE, HTTP_500_INTERNAL_SERVER_ERROR
                )
                canonical_log.set_string(ERROR_TYPE, type(exc).__name__)
                canonical_log.set_string(ERROR_MESSAGE, str(exc))
                self.log_fn(canonical_log.marshal_json())
                raise

            self._record_request(canonical_log, request, start_time)
            canonical_log.set_int(
                HTTP_RESPONSE_BODY_BYTES,
                parse_content_length(response.headers.get(CONTENT_LENGTH_HEADER)),
            )
            canonical_log.set_int(HTTP_RESPONSE_STATUS_CODE, response.status_code)
            self.log_fn(canonical_log.marshal_json())
            return response

    def _record_request(
        self, canonical_log: CanonicalLog, request: Request, start_time: float
    ) -> None:
        duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
        canonical_log.set_int(HTTP_RESPONSE_DURATION_MS, int(duration_ms))
        canonical_log.set_int(
            HTTP_REQUEST_BODY_BYTES,
            parse_content_length(request.headers.get(CONTENT_LENGTH_HEADER)),
        )
