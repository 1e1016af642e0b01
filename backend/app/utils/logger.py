"""Structured logging configuration"""
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict

# Fields passed through `extra=` that are copied into the JSON line
EXTRA_FIELDS = (
    "user_id",
    "request_id",
    "action",
    "session_state",
    "method",
    "path",
    "endpoint",
    "status",
    "duration",
    "client",
    "error",
    "environment",
)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields
        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Setup structured JSON logging"""
    logger = logging.getLogger("codecoach")
    logger.setLevel(log_level)

    # Remove existing handlers
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

    return logger


# Global logger instance
logger = setup_logging()
