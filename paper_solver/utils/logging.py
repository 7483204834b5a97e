"""
Logging configuration for the question paper solver.

Console output goes through Rich; an optional log file receives one JSON
object per record. Per-request fields (request id, upload name, content
type) are attached to every record emitted inside a ``LogContext``.
"""

import asyncio
import functools
import json
import logging
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

from paper_solver.config import get_settings

# Attributes every LogRecord carries; anything else came in through `extra`
# or the context filter.
_RESERVED_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    ]
)

_log_context: ContextVar[dict[str, Any]] = ContextVar("paper_solver_log_context", default={})


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ContextFilter(logging.Filter):
    """Copy the current request context onto each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_log_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


context_filter = ContextFilter()


def get_log_context() -> dict[str, Any]:
    """Return a copy of the fields currently attached to log records."""
    return dict(_log_context.get())


def setup_logging(
    log_level: Optional[str] = None,
    log_file_path: Optional[Path] = None,
    use_structured_logging: bool = True,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Logging level (defaults to settings)
        log_file_path: Path to log file (defaults to settings)
        use_structured_logging: Use JSON structured logging for files
    """
    settings = get_settings()

    log_level = log_level or settings.log_level
    log_file_path = log_file_path or settings.get_log_file_path()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=settings.dev_mode,
    )
    console_handler.setLevel(log_level)
    console_handler.addFilter(context_filter)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    if log_file_path:
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.addFilter(context_filter)

        if use_structured_logging:
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        root_logger.addHandler(file_handler)

    # Third-party loggers
    for noisy in ("httpx", "httpcore", "urllib3", "google", "grpc", "PIL", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={
            "log_level": log_level,
            "log_file": str(log_file_path) if log_file_path else None,
            "structured_logging": use_structured_logging,
        },
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class LogContext:
    """
    Context manager for temporary logging context.

    Usage:
        with LogContext(request_id="abc", upload_name="paper.pdf"):
            logger.info("Processing")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._token = None

    def __enter__(self) -> "LogContext":
        merged = {**get_log_context(), **self.context}
        self._token = _log_context.set(merged)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


def log_performance(func):
    """
    Decorator to log function performance.

    Usage:
        @log_performance
        async def extract(self, data: bytes) -> str:
            ...
    """

    @functools.wraps(func)
    async def async_wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.perf_counter()

        try:
            with LogContext(timed_function=func.__qualname__):
                logger.debug(f"Starting {func.__qualname__}")
                result = await func(*args, **kwargs)
                duration = time.perf_counter() - start_time
                logger.info(
                    f"Completed {func.__qualname__} in {duration:.2f}s",
                    extra={"duration_seconds": duration},
                )
                return result
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"Failed {func.__qualname__} after {duration:.2f}s: {e}",
                extra={"duration_seconds": duration, "error": str(e)},
            )
            raise

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.perf_counter()

        try:
            with LogContext(timed_function=func.__qualname__):
                logger.debug(f"Starting {func.__qualname__}")
                result = func(*args, **kwargs)
                duration = time.perf_counter() - start_time
                logger.info(
                    f"Completed {func.__qualname__} in {duration:.2f}s",
                    extra={"duration_seconds": duration},
                )
                return result
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"Failed {func.__qualname__} after {duration:.2f}s: {e}",
                extra={"duration_seconds": duration, "error": str(e)},
            )
            raise

    if asyncio.iscoroutinefunction(func):
        return async_wrapper
    return sync_wrapper
