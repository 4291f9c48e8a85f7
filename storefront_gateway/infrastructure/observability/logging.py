"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from storefront_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_report(request_id: str, user_id: str, report: str, row_count: int, duration_ms: float) -> None:
    """Log an admin report computation"""
    logging.info(
        "Report computed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "report_complete",
            "report": report,
            "row_count": row_count,
            "duration_ms": duration_ms,
        },
    )


def log_upstream_error(request_id: str, service: str, error: Exception) -> None:
    """Log the upstream message server-side; clients only see a generic error"""
    logging.error(
        f"{service} error: {error}",
        extra={"request_id": request_id, "step": "upstream_error", "upstream": service},
    )
