"""Structured logging with redaction helpers."""

import logging
import json
import re
from typing import Any
from datetime import datetime, timezone

# Key patterns whose values never reach the logs
SENSITIVE_PATTERNS = [
    r"api[_-]?key",
    r"^key$",
    r"token",
    r"secret",
    r"pass(word)?",
    r"credential",
    r"auth",
    r"zsessionid",
    r"cookie",
]

REDACTED = "***REDACTED***"


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Request context attached through `extra=`
        for field in ("method", "url", "status_code", "params"):
            if hasattr(record, field):
                log_obj[field] = getattr(record, field)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def redact_sensitive(data: Any) -> Any:
    """Redact sensitive information from data.

    Args:
        data: Data to redact (dict, list, or string)

    Returns:
        Redacted copy of the data
    """
    if isinstance(data, dict):
        return {k: redact_value(k, v) for k, v in data.items()}
    elif isinstance(data, list):
        return [redact_sensitive(item) for item in data]
    elif isinstance(data, str):
        # key=value pairs inside URLs and messages
        return re.sub(
            r"((?:api[_-]?key|key|token|zsessionid|password)=)[^&\s]+",
            rf"\1{REDACTED}",
            data,
            flags=re.IGNORECASE,
        )
    return data


def redact_value(key: str, value: Any) -> Any:
    """Redact value if key matches sensitive pattern.

    Args:
        key: Dictionary key
        value: Value to potentially redact

    Returns:
        Original or redacted value
    """
    key_lower = str(key).lower()
    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, key_lower):
            return REDACTED

    if isinstance(value, (dict, list, str)):
        return redact_sensitive(value)

    return value


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_logging(
    level: str = "INFO",
    structured: bool = True
) -> None:
    """Set up application logging.

    Args:
        level: Log level
        structured: Use structured JSON logging
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers = []

    handler = logging.StreamHandler()

    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )

    root_logger.addHandler(handler)

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
