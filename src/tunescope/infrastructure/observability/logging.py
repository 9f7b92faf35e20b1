"""Structured logging configuration with JSON formatting and correlation IDs."""

import contextvars
import logging
import sys
import traceback
import uuid
from pathlib import Path
from types import TracebackType
from typing import Any

from pythonjsonlogger import jsonlogger

# Hey future me, every request gets ONE correlation id and every log line written while handling
# it carries that id. ContextVar (not a global, not threading.local) because each asyncio task
# gets its own copy. Default "" covers startup logs that happen outside any request.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

# Packages whose frames show up in compact tracebacks. Everything else is library noise.
_OWN_PACKAGE = "tunescope"


def get_correlation_id() -> str:
    """Get the current correlation ID, or "" outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set correlation ID in context.

    Args:
        correlation_id: ID from the caller's X-Correlation-ID header. A blank
            or missing value gets a fresh UUID4.

    Returns:
        The correlation ID that was set
    """
    if not correlation_id or not correlation_id.strip():
        correlation_id = str(uuid.uuid4())
    correlation_id_var.set(correlation_id.strip())
    return correlation_id_var.get()


class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation ID to every record. Never drops a record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


class CompactExceptionFormatter(logging.Formatter):
    """Human-readable formatter that prints exception chains root-cause first.

    Only frames from our own package are kept. An upstream timeout then reads as:

        WARNING │ tunescope.infrastructure.integrations.base_client:121 │ spotify request timed out
        ╰─► ReadTimeout: timed out
        ╰─► ProviderTimeoutError: spotify request timed out after 12s
            File "base_client.py", line 127, in _send
              raise ProviderTimeoutError(
    """

    def formatException(
        self,
        ei: tuple[type[BaseException], BaseException, TracebackType | None]
        | tuple[None, None, None],
    ) -> str:
        exc_value = ei[1]
        if exc_value is None:
            return ""

        chain: list[BaseException] = []
        current: BaseException | None = exc_value
        while current is not None and current not in chain:
            chain.append(current)
            current = current.__cause__ or current.__context__
        chain.reverse()

        lines: list[str] = []
        for exc in chain:
            lines.append(f"╰─► {type(exc).__name__}: {exc}")
            for frame in traceback.extract_tb(exc.__traceback__):
                if _OWN_PACKAGE not in frame.filename or "/site-packages/" in frame.filename:
                    continue
                lines.append(
                    f'    File "{Path(frame.filename).name}", line {frame.lineno}, in {frame.name}'
                )
                if frame.line:
                    lines.append(f"      {frame.line.strip()}")
        return "\n".join(lines)


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined,misc]
    """JSON formatter adding level, logger, source location and correlation ID."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        correlation_id = getattr(record, "correlation_id", "")
        if correlation_id:
            log_record["correlation_id"] = correlation_id

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)


# Listen future me, call this ONCE at startup (create_app does). It replaces every handler on
# the root logger, so calling it again in tests is safe and won't double-print.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "tunescope",
) -> None:
    """Configure root logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit one JSON object per line (for log shippers)
        app_name: Application name included in the startup record
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())

    if json_format:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = CompactExceptionFormatter(
            fmt="%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s",
            datefmt="%H:%M:%S",
        )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # httpx logs every request URL at INFO - including Spotify's token endpoint
    for noisy in ("httpx", "httpcore", "asyncio", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"app_name": app_name, "log_level": log_level, "json_format": json_format},
    )
