"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from barber_ledger.domain.models import CreditSale, Installment, RefreshReport


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "barber-ledger"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_credit_sale_created(request_id: str, sale: CreditSale) -> None:
    logging.info(
        "Credit sale created",
        extra={
            "request_id": request_id,
            "step": "credit_sale_created",
            "credit_sale_id": str(sale.id),
            "total_cents": sale.total_cents,
            "number_of_installments": sale.number_of_installments,
        },
    )


def log_payment_recorded(request_id: str, installment: Installment, duration_ms: float) -> None:
    """Log structured payment outcome for reconciliation"""
    logging.info(
        "Installment payment recorded",
        extra={
            "request_id": request_id,
            "step": "installment_paid",
            "credit_sale_id": str(installment.credit_sale_id),
            "installment_id": str(installment.id),
            "installment_number": installment.installment_number,
            "amount_cents": installment.amount_cents,
            "payment_method": installment.payment_method.value if installment.payment_method else None,
            "paid_date": installment.paid_date.isoformat() if installment.paid_date else None,
            "duration_ms": duration_ms,
        },
    )


def log_refresh(request_id: str, report: RefreshReport) -> None:
    """Log a status refresh pass; inconsistent sales are reported at ERROR"""
    if report.changed:
        logging.info(
            "Credit sale statuses refreshed",
            extra={
                "request_id": request_id,
                "step": "status_refresh",
                "today": report.today.isoformat(),
                "scanned_installments": report.scanned_installments,
                "overdue_installments": len(report.overdue_installment_ids),
                "sale_status_changes": len(report.sale_status_changes),
            },
        )

    for sale_id in report.inconsistent_sale_ids:
        logging.error(
            "Credit sale installments do not reconcile with sale total",
            extra={"request_id": request_id, "step": "status_refresh", "credit_sale_id": str(sale_id)},
        )
