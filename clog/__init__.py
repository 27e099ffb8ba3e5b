"""clog - canonical logs ("wide events") for Python services.

A canonical log is one structured record per unit of work. Any code in the
call graph adds dot-separated keys to the same log, and the log is rendered
once, at the end, as a single nested JSON object.

Architecture Overview:
- **Core Layer**: The ordered key-value store, its ambient propagation,
  configuration, logging and errors
- **API Layer**: FastAPI application with the canonical logging middleware

Typical use:

    >>> from clog.core.context import canonical_log_scope, set_string, add_int
    >>> with canonical_log_scope(print):
    ...     set_string("http.request.method", "GET")
    ...     add_int("db.queries", 1)
    {"http":{"request":{"method":"GET"}},"db":{"queries":1}}
"""
