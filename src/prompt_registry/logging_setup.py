"""
Process logging configuration.

Text output uses the plain ``logging`` format; JSON output uses
python-json-logger so that ``extra=`` fields become top-level keys.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger.json import JsonFormatter

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class RegistryJsonFormatter(JsonFormatter):
    """JSON formatter with ISO timestamp, level and logger name."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def configure_logging(level: str = "info", fmt: str = "text") -> None:
    """
    Configure the root logger.

    Args:
        level: debug, info, warning or error
        fmt: "text" or "json"
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(RegistryJsonFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    # Request logging middleware already covers access logs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
