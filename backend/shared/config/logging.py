"""
Structured logging for the API and the offline client.

Log calls take keyword fields next to the message:

    logger.info("Order status changed", order_id=12, to_status="PAID")

Production renders one JSON object per line with the fields at top level.
Elsewhere a compact console line is printed, coloured when attached to a
terminal. Both include the request correlation ID when one is set.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from shared.config.settings import Settings, get_settings

# Attribute of the LogRecord that carries the keyword fields
FIELDS_ATTR = "fields"

_RESERVED_KEYS = ("ts", "level", "logger", "msg", "request_id", "exc")


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, FIELDS_ATTR, None) or {}


def _request_id(record: logging.LogRecord) -> str | None:
    request_id = getattr(record, "request_id", None)
    return request_id if request_id and request_id != "-" else None


class JsonLineFormatter(logging.Formatter):
    """One JSON document per record, for log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        request_id = _request_id(record)
        if request_id:
            line["request_id"] = request_id

        for key, value in _record_fields(record).items():
            # Fields never overwrite the envelope
            line[f"field_{key}" if key in _RESERVED_KEYS else key] = value

        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """``12:04:05 INFO  rest_api.orders [1a2b3c4d] Order created order_id=7``"""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = False) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<5}"
        if self.use_color:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}{self.RESET}"

        parts = [
            datetime.fromtimestamp(record.created).strftime("%H:%M:%S"),
            level,
            record.name,
        ]
        request_id = _request_id(record)
        if request_id:
            parts.append(f"[{request_id[:8]}]")
        parts.append(record.getMessage())

        fields = _record_fields(record)
        if fields:
            parts.append(" ".join(f"{key}={value}" for key, value in fields.items()))

        text = " ".join(parts)
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


class StructuredLogger(logging.Logger):
    """Logger whose level methods accept keyword fields."""

    def _log_fields(self, level: int, msg: str, args: tuple, exc_info: Any = None, **fields: Any) -> None:
        if self.isEnabledFor(level):
            self._log(level, msg, args, exc_info=exc_info, extra={FIELDS_ATTR: fields}, stacklevel=2)

    def debug(self, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        self._log_fields(logging.DEBUG, msg, args, exc_info, **fields)

    def info(self, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        self._log_fields(logging.INFO, msg, args, exc_info, **fields)

    def warning(self, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        self._log_fields(logging.WARNING, msg, args, exc_info, **fields)

    def error(self, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        self._log_fields(logging.ERROR, msg, args, exc_info, **fields)

    def critical(self, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        self._log_fields(logging.CRITICAL, msg, args, exc_info, **fields)


logging.setLoggerClass(StructuredLogger)


def _resolve_level(settings: Settings) -> int:
    if settings.log_level:
        return logging.getLevelName(settings.log_level.upper())
    return logging.DEBUG if settings.debug else logging.INFO


def setup_logging(settings: Settings | None = None, stream: TextIO | None = None) -> None:
    """Install the root handler. Called once by the application lifespan."""
    # Imported late: correlation pulls in starlette, which the offline client may not need
    from shared.infrastructure.correlation import CorrelationIdFilter

    settings = settings or get_settings()
    stream = stream or sys.stdout
    level = _resolve_level(settings)

    handler = logging.StreamHandler(stream)
    handler.addFilter(CorrelationIdFilter())
    if settings.environment == "production":
        handler.setFormatter(JsonLineFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(use_color=stream.isatty()))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.warning("Login failed", email=mask_email(email))
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def mask_email(email: str | None) -> str:
    """``"maria@bistro.fr"`` -> ``"ma***@bistro.fr"``."""
    if not email or "@" not in email:
        return "<no-email>" if not email else "***@invalid"
    local, domain = email.split("@", 1)
    return f"{local[:2] or '*'}***@{domain}"


rest_api_logger = get_logger("rest_api")
auth_logger = get_logger("rest_api.auth")
order_logger = get_logger("rest_api.orders")
stock_logger = get_logger("rest_api.stock")
offline_logger = get_logger("offline_client")
