"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from payment_proxy.config import settings


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

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_charge(
    transaction_id: str,
    provider: str,
    status: str,
    risk_score: float,
    risk_factors: list,
    duration_ms: float,
) -> None:
    """Log structured routing outcome for analysis"""
    logging.getLogger("payment_proxy.charges").info(
        "Charge processed",
        extra={
            "transaction_id": transaction_id,
            "step": "charge_complete",
            "provider": provider,
            "charge_status": status,
            "risk_score": round(risk_score, 4),
            "risk_factors": risk_factors,
            "duration_ms": duration_ms,
        },
    )


def log_sweep(due: int, succeeded: int, failed: int, skipped: int, duration_ms: float) -> None:
    """Log recurrence sweep totals"""
    logging.getLogger("payment_proxy.recurring").info(
        "Recurrence sweep completed",
        extra={
            "step": "sweep_complete",
            "due": due,
            "succeeded": succeeded,
            "failed": failed,
            "skipped": skipped,
            "duration_ms": duration_ms,
        },
    )
