"""Type aliases for dynamic data structures throughout the application.

This module centralizes type definitions for data that cannot be statically
typed, providing clear semantic meaning and documentation for these types.

All types defined here should be JSON-serializable to support logging
and canonical log rendering.
"""

from collections.abc import Callable
from typing import Any

# Plain-dict snapshot of a canonical log; leaves are str, int or float
type JsonObject = dict[str, Any]

# Sink receiving the rendered canonical log line once per unit of work
type LogFn = Callable[[str], None]
