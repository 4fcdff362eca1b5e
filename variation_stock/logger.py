"""
Structured logging setup.
One JSON object per line on stdout.
"""
import logging
import sys
import json
from datetime import datetime

from variation_stock.config import config

SERVICE_NAME = "variation-stock-cache"


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "service": SERVICE_NAME,
            "environment": config.ENVIRONMENT,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Structured context passed as extra={"extra": {...}}
        context = getattr(record, "extra", None)
        if isinstance(context, dict):
            log_data.update(context)

        # Ids may be ints, decimals or other non-JSON types
        return json.dumps(log_data, default=str)


def setup_logger(level: str = config.LOG_LEVEL) -> logging.Logger:
    """Configure the root logger once for the whole service."""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())

    logger.handlers.clear()
    logger.addHandler(console_handler)

    # Uvicorn writes its own access log lines
    logging.getLogger("uvicorn.access").propagate = False

    return logger


# Global logger instance
logger = setup_logger()
