"""POST /v1/installments/{installment_id}/payments - settle one installment"""

import time
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barber_ledger.api.v1.credit_sales import credit_sale_response, installment_schema
from barber_ledger.api.v1.schemas import PaymentRequest, PaymentResponse
from barber_ledger.api.dependencies import get_request_id, get_today, parse_id
from barber_ledger.config import settings
from barber_ledger.domain.exceptions import DuplicatePaymentError, InstallmentNotFoundError, ValidationError
from barber_ledger.domain.installments import record_payment
from barber_ledger.domain.refresh import refresh_all
from barber_ledger.infrastructure.database.session import get_db
from barber_ledger.infrastructure.database.repositories import CreditSaleRepository, TransactionRepository
from barber_ledger.infrastructure.observability.logging import log_payment_recorded
from barber_ledger.infrastructure.observability.metrics import (
    duplicate_payment_counter,
    overdue_transition_counter,
    record_payment as record_payment_metric,
)

router = APIRouter()


@router.post("/installments/{installment_id}/payments", response_model=PaymentResponse)
def pay_installment(
    installment_id: str,
    request_body: PaymentRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Record the full payment of one installment.

    Flow:
    1. Load the installment and apply the pending/overdue -> paid transition
    2. Persist it with a conditional update (a second payment loses)
    3. Bring the other installments of the sale up to date (overdue)
    4. Optionally write the tagged transaction row for the sales report
    5. Return the installment and its sale with re-derived totals
    """
    start_time = time.time()
    request_id = get_request_id(request)
    installment_uuid = parse_id(installment_id, "installment")
    repo = CreditSaleRepository(db)

    try:
        installment = repo.get_installment(installment_uuid)
        record_payment(
            installment,
            request_body.payment_method,
            paid_date=request_body.paid_date,
            amount_cents=request_body.amount_cents,
            today=today,
        )
        repo.persist_installment_payment(installment.id, installment.paid_date, installment.payment_method)

        sale = repo.get_credit_sale(installment.credit_sale_id)
        report = refresh_all([sale], today)
        repo.mark_installments_overdue(report.overdue_installment_ids, today)

        if settings.record_installment_payment_transactions:
            TransactionRepository(db).record_installment_payment(sale, installment)

        db.commit()

    except InstallmentNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Installment not found")

    except DuplicatePaymentError as e:
        db.rollback()
        duplicate_payment_counter.inc()
        logging.warning(f"Duplicate payment rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail="Installment is already paid")

    except ValidationError as e:
        db.rollback()
        logging.warning(f"Invalid payment: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error recording payment: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_payment_metric(installment.payment_method.value)
    overdue_transition_counter.inc(len(report.overdue_installment_ids))
    log_payment_recorded(request_id, installment, duration_ms)

    return PaymentResponse(
        installment=installment_schema(installment),
        credit_sale=credit_sale_response(sale),
    )
