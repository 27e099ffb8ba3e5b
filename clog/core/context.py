"""Ambient propagation of the canonical log through a call graph.

The carrier is the current ``contextvars.Context``. Attaching a store sets a
context variable; asyncio tasks and Starlette thread-pool calls copy the
context when they start, so they carry a reference to the same store and
annotate the same canonical log as their parent.

Every accessor is a silent no-op when no store is attached, so library code
can annotate unconditionally without knowing whether a caller initialized
a canonical log.
"""

from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar

from clog.core.canonical import CanonicalLog
from clog.core.types import LogFn

# Context variable holding the store for the current unit of work
_canonical_log_var: ContextVar[CanonicalLog | None] = ContextVar(
    "canonical_log", default=None
)


def init_canonical_log() -> CanonicalLog:
    """Attach a fresh canonical log to the current context if none is attached.

    Idempotent: when a store is already attached it is returned unchanged,
    so every layer of a call chain may call this without losing data.

    The store stays attached until the context ends or
    ``clear_canonical_log()`` is called. A worker that handles several jobs
    in one context should wrap each job in ``canonical_log_scope()``, or
    clear between jobs, otherwise every job writes into the first job's store.

    Returns:
        CanonicalLog: The store attached to the current context.
    """
    existing = _canonical_log_var.get()
    if existing is not None:
        return existing
    canonical_log = CanonicalLog()
    _canonical_log_var.set(canonical_log)
    return canonical_log


def get_canonical_log() -> CanonicalLog | None:
    """Get the canonical log attached to the current context.

    Returns:
        CanonicalLog | None: The store if initialized, None otherwise.
    """
    return _canonical_log_var.get()


def clear_canonical_log() -> None:
    """Detach any canonical log from the current context."""
    _canonical_log_var.set(None)


@contextmanager
def canonical_log_scope(log_fn: LogFn | None = None) -> Generator[CanonicalLog]:
    """Bound one unit of work, such as a request or a background job.

    The store is attached on enter. On exit, if this scope attached it, the
    rendered line is passed to ``log_fn`` and the store is detached. A scope
    nested inside an existing one shares the outer store and leaves emitting
    to the outer scope.

    Args:
        log_fn: Sink called once with the rendered JSON line.

    Yields:
        CanonicalLog: The store for this unit of work.

    Example:
        >>> with canonical_log_scope(print):
        ...     set_string("job.name", "reindex")
        {"job":{"name":"reindex"}}
    """
    existing = _canonical_log_var.get()
    if existing is not None:
        yield existing
        return

    canonical_log = CanonicalLog()
    token = _canonical_log_var.set(canonical_log)
    try:
        yield canonical_log
    finally:
        try:
            if log_fn is not None:
                log_fn(canonical_log.marshal_json())
        finally:
            _canonical_log_var.reset(token)


def set_string(key: str, value: str) -> None:
    """Set a string value, overwriting any existing value at key."""
    if (canonical_log := _canonical_log_var.get()) is not None:
        canonical_log.set_string(key, value)


def set_int(key: str, value: int) -> None:
    """Set an int value, overwriting any existing value at key."""
    if (canonical_log := _canonical_log_var.get()) is not None:
        canonical_log.set_int(key, value)


def set_float(key: str, value: float) -> None:
    """Set a float value, overwriting any existing value at key."""
    if (canonical_log := _canonical_log_var.get()) is not None:
        canonical_log.set_float(key, value)


def add_int(key: str, delta: int) -> None:
    """Add to an int value, creating it if it does not exist."""
    if (canonical_log := _canonical_log_var.get()) is not None:
        canonical_log.add_int(key, delta)


def add_float(key: str, delta: float) -> None:
    """Add to a float value, creating it if it does not exist."""
    if (canonical_log := _canonical_log_var.get()) is not None:
        canonical_log.add_float(key, delta)


def marshal_json() -> str:
    """Render the current canonical log as JSON.

    Returns:
        str: The JSON object, or an empty string when no store is attached.
    """
    if (canonical_log := _canonical_log_var.get()) is not None:
        return canonical_log.marshal_json()
    return ""
