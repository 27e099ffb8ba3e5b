"""FastAPI middleware package for cross-cutting request/response concerns.

- **CanonicalLoggingMiddleware**: Creates a canonical log per request,
  records method, path, sizes, status and duration, and emits the
  rendered line to a sink once the response is ready
"""
