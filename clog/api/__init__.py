"""HTTP API layer with FastAPI.

Key components:
- **main**: Application factory and lifecycle management
- **middleware**: Canonical logging middleware emitting one wide event
  per request

The API layer is a thin consumer of ``clog.core``: it creates a canonical
log per request, fills in the standard HTTP fields and hands the rendered
line to a sink.
"""
