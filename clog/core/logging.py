"""Loguru configuration and the default canonical log sink.

This module configures Loguru for the application and provides the sink
that the canonical logging middleware hands each rendered wide event to.

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: One JSON object per line (staging/production)

Standard library logging (uvicorn, starlette, third-party libraries) is
routed through Loguru via ``InterceptHandler`` so every line shares one
format.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Final, Protocol, cast

from loguru import logger

from clog.core.types import LogFn


class _LoggingState:
    """Simple state holder to track if logging has been configured."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def debug(self) -> bool:
        """Debug mode flag."""
        ...

    @property
    def log_config(self) -> LogConfigProtocol:
        """Log configuration."""
        ...


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str:
        """Logging level."""
        ...

    @property
    def log_formatter_type(self) -> str | None:
        """Log formatter type."""
        ...


DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
MAX_FIELD_VALUE_LENGTH: Final[int] = 100


def _escape_braces(value: object) -> str:
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_extra_field(key: str, value: object) -> str:
    """Format an extra field for display, truncating long values.

    Args:
        key: The field name.
        value: The field value.

    Returns:
        str: ``key=value`` with braces escaped.
    """
    str_value = str(value)
    if len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape_braces(key)}={_escape_braces(str_value)}"


def format_console_with_context(record: dict[str, Any]) -> str:
    """Format log record for console with all context fields visible.

    Args:
        record: Loguru record to format.

    Returns:
        str: Format string for Loguru with the message and context inlined.
    """
    try:
        time_str = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level_name = record["level"].name
        location = f"{record['name']}:{record['function']}:{record['line']}"

        parts = [
            f"<green>{time_str}</green>",
            f"<level>{level_name: <8}</level>",
            f"<cyan>{location}</cyan>",
        ]

        context_parts = [
            f"<dim>{_format_extra_field(key, value)}</dim>"
            for key, value in record.get("extra", {}).items()
            if not key.startswith("_") and value is not None
        ]
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))

        parts.append(_escape_braces(record.get("message", "")))

        if record.get("exception"):
            parts.append("\n{{exception}}")

        return " | ".join(parts) + "\n"
    except (AttributeError, TypeError, ValueError, KeyError) as e:
        logger.trace(f"Failed to format log record: {e}")
        return DEFAULT_LOG_FORMAT + "\n"


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format log record as one JSON object per line.

    Canonical log lines (bound with ``canonical=True``) are embedded as a
    parsed object under ``canonical`` rather than as an escaped string.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    extra = {k: v for k, v in record.get("extra", {}).items() if not k.startswith("_")}
    if extra.pop("canonical", False):
        try:
            log_entry["canonical"] = json.loads(record["message"])
            log_entry["message"] = "canonical"
        except ValueError as e:
            logger.trace(f"Canonical log line is not valid JSON: {e}")
    log_entry.update(extra)

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return json.dumps(log_entry, default=str) + "\n"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        try:
            frame = sys._getframe(6)
            depth = 6
            while frame and frame.f_code.co_filename == logging.__file__:
                next_frame = frame.f_back
                if next_frame is None:
                    break
                frame = next_frame
                depth += 1
        except ValueError:
            # _getframe can fail if there aren't enough frames
            depth = 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru with the formatter selected in settings.

    Args:
        settings: Application settings containing log configuration.

    Note:
        This function ensures it's only called once using module state.
    """
    if _state.configured:
        return

    logger.remove()

    formatter_type = settings.log_config.log_formatter_type or "console"

    if formatter_type == "json":

        def structured_sink(message: object) -> None:
            """Write each record as a JSON line."""
            if hasattr(message, "record"):
                sys.stdout.write(serialize_for_json(message.record))
                sys.stdout.flush()

        logger.add(
            structured_sink,
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        formatter_type=formatter_type,
        log_level=settings.log_config.log_level,
    )

    _state.configured = True


def make_loguru_sink(level: str = "INFO") -> LogFn:
    """Build a canonical log sink that writes through Loguru.

    The rendered JSON is passed as the message without format arguments,
    so braces in it are never interpreted by Loguru.

    Args:
        level: Loguru level name for the canonical log line.

    Returns:
        LogFn: Callable accepting the rendered canonical log line.
    """
    canonical_logger = logger.bind(canonical=True)

    def log_fn(line: str) -> None:
        canonical_logger.log(level, line)

    return log_fn
