"""
Structured logging for the dashboard

Loggers carry bound context (domain, shortcode, cache scope, ...) that ends
up on every record: as top-level keys in JSON output, and as a trailing
``key=value`` list in text output. Call-site ``extra`` values override the
bound context for that one record.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pythonjsonlogger import jsonlogger

from core.config import settings

# Record attributes shown as context, in this order
CONTEXT_FIELDS: Tuple[str, ...] = (
    "domain",
    "shortcode",
    "scope",
    "template",
    "identity",
    "rows",
    "duration_ms",
)


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Context fields present on a record"""
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if getattr(record, name, None) is not None}


class DashboardJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines with service fields; the message is kept as ``message``"""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["app"] = settings.app_name
        log_record["environment"] = settings.environment
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record.update(record_context(record))
        log_record.pop("msg", None)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


class ContextTextFormatter(logging.Formatter):
    """Human-readable lines ending in the record's context"""

    def __init__(self):
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{name}={value}" for name, value in context.items())
        # Keep a traceback, if any, below the context
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return DashboardJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", timestamp=True)
    return ContextTextFormatter()


def setup_logging() -> None:
    """Configure the root logger from the settings"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(build_formatter(settings.log_format))
    root_logger.addHandler(console_handler)

    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    # SQL is only interesting when DATABASE_ECHO asks for it
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.database_echo else logging.WARNING)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger with bound context"""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def with_context(self, **context) -> "LoggerAdapter":
        """Child logger with more bound context"""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger with bound context

    Example:
        logger = get_logger(__name__, domain="report_table")
        logger.info("Rendered report", extra={"template": "list", "rows": 12})
    """
    return LoggerAdapter(logging.getLogger(name), context)


setup_logging()
