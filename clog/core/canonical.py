"""Ordered, hierarchical key-value store backing a canonical log line.

A canonical log (also called a wide event) is one structured record per
unit of work. Code anywhere in the call graph contributes dot-separated
keys to the same store, and the store is rendered once, at the end, as a
single nested JSON object.

Key rules:
- **Dotted paths**: ``http.request.method`` nests three levels deep
- **Case-insensitive keys**: keys are lower-cased before storage and lookup
- **Stable ordering**: output order is first-insertion order at every level,
  overwriting a key keeps its original position
- **Closed value kinds**: leaves are ``str``, ``int`` or ``float``; nested
  levels are ``Node`` instances
- **Finite numbers**: NaN and infinity are dropped, so the output is
  always valid JSON
- **Never raises**: kind mismatches, non-string keys and uncoercible values
  degrade to no-ops so that instrumentation can't break the instrumented
  code path
"""

from __future__ import annotations

import json
import math
import threading
from collections.abc import Iterator
from typing import Final

import orjson
from loguru import logger

from clog.core.types import JsonObject

KEY_SEPARATOR: Final[str] = "."

type Scalar = str | int | float
type Value = Scalar | Node


class Node:
    """One level of nesting: an insertion-ordered mapping of key to Value."""

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: dict[str, Value] = {}

    def get(self, key: str) -> Value | None:
        """Return the value stored at key, or None if absent."""
        return self._values.get(key)

    def set(self, key: str, value: Value) -> None:
        """Store value at key, keeping the key's position if it exists."""
        self._values[key] = value

    def child(self, key: str) -> Node:
        """Return the Node stored at key, creating it if absent.

        A scalar sitting where a Node is needed is replaced by a fresh Node.
        """
        existing = self._values.get(key)
        if isinstance(existing, Node):
            return existing
        node = Node()
        self._values[key] = node
        return node

    def items(self) -> Iterator[tuple[str, Value]]:
        """Iterate over (key, value) pairs in insertion order."""
        return iter(self._values.items())

    def to_dict(self) -> JsonObject:
        """Deep copy into plain dicts, preserving order."""
        return {
            key: value.to_dict() if isinstance(value, Node) else value
            for key, value in self._values.items()
        }

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __repr__(self) -> str:
        return f"Node({self.to_dict()!r})"


def normalize_key(key: str) -> list[str]:
    """Lower-case a dotted key and split it into path segments.

    Args:
        key: Dotted key such as ``"HTTP.Request.Method"``.

    Returns:
        list[str]: Path segments, e.g. ``["http", "request", "method"]``.
    """
    return key.lower().split(KEY_SEPARATOR)


def _coerce(kind: type[Scalar], key: str, value: object) -> Scalar | None:
    try:
        coerced = kind(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError) as e:
        logger.trace(f"Dropping {kind.__name__} value for {key}: {e}")
        return None
    # JSON has no representation for NaN or infinity
    if isinstance(coerced, float) and not math.isfinite(coerced):
        logger.trace(f"Dropping non-finite float for {key}: {coerced}")
        return None
    return coerced


def _split_key(key: object) -> list[str] | None:
    if not isinstance(key, str):
        logger.trace(f"Dropping canonical log write with non-string key: {key!r}")
        return None
    return normalize_key(key)


class CanonicalLog:
    """Context store for a single unit of work.

    All mutations and reads take the same lock, so a store can be shared by
    threads and asyncio tasks spawned while handling one request.

    Examples:
        >>> log = CanonicalLog()
        >>> log.set_int("foo.bar", 1)
        >>> log.set_int("foo.baz", 2)
        >>> log.marshal_json()
        '{"foo":{"bar":1,"baz":2}}'
    """

    def __init__(self) -> None:
        self._root = Node()
        self._lock = threading.Lock()

    def set_string(self, key: str, value: str) -> None:
        """Set a string leaf, overwriting whatever is stored at key."""
        coerced = _coerce(str, key, value)
        if coerced is not None:
            self._set(key, coerced)

    def set_int(self, key: str, value: int) -> None:
        """Set an integer leaf, overwriting whatever is stored at key."""
        coerced = _coerce(int, key, value)
        if coerced is not None:
            self._set(key, coerced)

    def set_float(self, key: str, value: float) -> None:
        """Set a float leaf, overwriting whatever is stored at key."""
        coerced = _coerce(float, key, value)
        if coerced is not None:
            self._set(key, coerced)

    def add_int(self, key: str, delta: int) -> None:
        """Add delta to the integer at key, starting from zero if absent.

        A leaf of any other kind (string, float, nested object) is left
        unchanged and the delta is dropped.
        """
        coerced = _coerce(int, key, delta)
        if coerced is not None:
            self._add(key, coerced, int)

    def add_float(self, key: str, delta: float) -> None:
        """Add delta to the float at key, starting from zero if absent.

        A leaf of any other kind (string, int, nested object) is left
        unchanged and the delta is dropped.
        """
        coerced = _coerce(float, key, delta)
        if coerced is not None:
            self._add(key, coerced, float)

    def to_dict(self) -> JsonObject:
        """Return a consistent plain-dict snapshot of the store."""
        with self._lock:
            return self._root.to_dict()

    def marshal_json(self) -> str:
        """Render the store as a compact JSON object in insertion order.

        Returns:
            str: JSON text such as ``{"foo":{"bar":1}}``.
        """
        snapshot = self.to_dict()
        try:
            return orjson.dumps(snapshot).decode("utf-8")
        except orjson.JSONEncodeError as e:
            # Integers beyond 64 bits and lone surrogates
            logger.trace(f"orjson rejected canonical log, using json module: {e}")
            return json.dumps(snapshot, ensure_ascii=False, separators=(",", ":"))

    def _walk(self, parts: list[str]) -> Node:
        node = self._root
        for part in parts[:-1]:
            node = node.child(part)
        return node

    def _set(self, key: str, value: Scalar) -> None:
        parts = _split_key(key)
        if parts is None:
            return
        with self._lock:
            self._walk(parts).set(parts[-1], value)

    def _add(self, key: str, delta: Scalar, kind: type[Scalar]) -> None:
        parts = _split_key(key)
        if parts is None:
            return
        with self._lock:
            node = self._walk(parts)
            leaf = parts[-1]
            existing = node.get(leaf)
            if existing is None:
                node.set(leaf, delta)
            elif type(existing) is kind:
                total = existing + delta  # type: ignore[operator]
                if isinstance(total, float) and not math.isfinite(total):
                    logger.trace(f"Dropping float delta for {key}: sum overflows")
                    return
                node.set(leaf, total)

    def __repr__(self) -> str:
        return f"CanonicalLog({self.marshal_json()})"
