"""
Structured logging for tex2typst.

The library itself only logs at debug level. Loggers are bound to stdlib
loggers, so a host application that never calls configure_logging() sees
nothing, while the CLI (or a test) can switch on console or JSON output.

Fun fact: structlog's first release (2013) predates Typst by almost a decade -
both share the idea that output should be structured, not just printed!
"""

import logging
import os
import sys
import time
from typing import Any

import structlog


def configure_logging(
    *,
    json_output: bool = False,
    log_level: str = "WARNING",
) -> None:
    """
    Configure structured logging for the application.

    Args:
        json_output: If True, output JSON logs (for machine consumption).
                    If False, output human-readable console logs.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper())

    # Logs go to stderr so converted output on stdout stays clean
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
    logging.getLogger("tex2typst").setLevel(level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.ExceptionRenderer(),
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger for the given module.

    The logger wraps the stdlib logger of the same name, so the stdlib level
    decides what is emitted even before configure_logging() runs.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def is_debug_enabled() -> bool:
    """True when TEX2TYPST_DEBUG is set to a truthy value"""
    return os.getenv("TEX2TYPST_DEBUG", "").lower() in {"1", "true", "yes"}


def summarize_input(text: str, limit: int = 40) -> str:
    """Shorten conversion input for log context"""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class LogOperation:
    """Context manager for logging operations with automatic timing."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        operation: str,
        **context: Any,
    ):
        """
        Initialize operation logger.

        Args:
            logger: Structured logger instance
            operation: Operation name (e.g., "tex2typst", "expand_macros")
            **context: Additional context to include in logs
        """
        self.logger = logger
        self.operation = operation
        self.context = context
        self.start_time: float = 0.0

    def __enter__(self) -> "LogOperation":
        self.start_time = time.perf_counter()
        self.logger.debug(
            f"{self.operation} started",
            operation=self.operation,
            **self.context,
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Log completion or failure with duration; exceptions always propagate."""
        duration_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type is None:
            self.logger.debug(
                f"{self.operation} completed",
                operation=self.operation,
                duration_ms=round(duration_ms, 2),
                **self.context,
            )
        else:
            self.logger.debug(
                f"{self.operation} failed",
                operation=self.operation,
                duration_ms=round(duration_ms, 2),
                error_type=exc_type.__name__,
                error=str(exc_val),
                exc_info=is_debug_enabled(),
                **self.context,
            )
