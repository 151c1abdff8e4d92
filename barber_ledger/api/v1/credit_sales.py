"""Credit sale endpoints - creation, listing, detail, status refresh and deletion"""

import logging
from datetime import date
from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barber_ledger.api.v1.schemas import (
    CreditSaleCreateRequest,
    CreditSaleListResponse,
    CreditSaleResponse,
    InstallmentSchema,
    ReceivablesSummaryResponse,
    RefreshResponse,
    SaleStatusChange,
)
from barber_ledger.api.dependencies import get_request_id, get_today, parse_id
from barber_ledger.config import settings
from barber_ledger.domain.credit_sales import build_credit_sale, check_consistency, summarize_receivables
from barber_ledger.domain.exceptions import CreditSaleNotFoundError, InconsistentLedgerError, ValidationError
from barber_ledger.domain.models import CreditSale, CreditSaleStatus, Installment, RefreshReport
from barber_ledger.domain.refresh import refresh_all
from barber_ledger.infrastructure.database.session import get_db
from barber_ledger.infrastructure.database.repositories import CreditSaleRepository
from barber_ledger.infrastructure.observability.logging import log_credit_sale_created, log_refresh
from barber_ledger.infrastructure.observability.metrics import (
    ledger_inconsistency_counter,
    overdue_transition_counter,
    record_credit_sale,
)
from barber_ledger.utils.date_utils import add_months

router = APIRouter()


def installment_schema(inst: Installment) -> InstallmentSchema:
    return InstallmentSchema(
        id=str(inst.id),
        installment_number=inst.installment_number,
        amount_cents=inst.amount_cents,
        due_date=inst.due_date,
        status=inst.status.value,
        paid_date=inst.paid_date,
        payment_method=inst.payment_method.value if inst.payment_method else None,
    )


def credit_sale_response(sale: CreditSale) -> CreditSaleResponse:
    next_due = sale.next_due_installment
    return CreditSaleResponse(
        id=str(sale.id),
        client_name=sale.client_name,
        client_id=sale.client_id,
        products=sale.products,
        subtotal_cents=sale.subtotal_cents,
        discount_cents=sale.discount_cents,
        total_cents=sale.total_cents,
        number_of_installments=sale.number_of_installments,
        first_due_date=sale.first_due_date,
        date=sale.date,
        status=sale.status.value,
        total_paid_cents=sale.total_paid_cents,
        remaining_cents=sale.remaining_cents,
        next_due_date=next_due.due_date if next_due else None,
        created_at=sale.created_at.isoformat() if sale.created_at else None,
        installments=[
            installment_schema(inst)
            for inst in sorted(sale.installments, key=lambda inst: inst.installment_number)
        ],
    )


def refresh_statuses(db: Session, today: date, request_id: str) -> Tuple[RefreshReport, List[CreditSale]]:
    """
    Run the status refresh over every credit sale and persist the overdue transitions.

    Returns the report and the refreshed sales so read paths can reuse them.
    """
    repo = CreditSaleRepository(db)
    sales = repo.fetch_credit_sales()
    report = refresh_all(sales, today)

    repo.mark_installments_overdue(report.overdue_installment_ids, today)
    db.commit()

    overdue_transition_counter.inc(len(report.overdue_installment_ids))
    ledger_inconsistency_counter.inc(len(report.inconsistent_sale_ids))
    log_refresh(request_id, report)
    return report, sales


@router.post("/credit-sales", response_model=CreditSaleResponse, status_code=201)
def create_credit_sale(
    request_body: CreditSaleCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Register a sale paid in installments.

    Flow:
    1. Compute total (subtotal - discount, floored at zero)
    2. Generate the monthly installment schedule
    3. Persist sale + installments in one transaction
    """
    request_id = get_request_id(request)
    sale_date = request_body.sale_date or today
    first_due_date = request_body.first_due_date or add_months(sale_date, 1)

    try:
        sale = build_credit_sale(
            client_name=request_body.client_name,
            client_id=request_body.client_id,
            products=request_body.products,
            subtotal_cents=request_body.subtotal_cents,
            discount_cents=request_body.discount_cents,
            number_of_installments=request_body.number_of_installments,
            first_due_date=first_due_date,
            sale_date=sale_date,
            max_installments=settings.max_installments,
        )
        saved = CreditSaleRepository(db).persist_credit_sale_with_installments(sale)
        db.commit()

    except ValidationError as e:
        db.rollback()
        logging.warning(f"Invalid credit sale: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error creating credit sale: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_credit_sale(saved.total_cents)
    log_credit_sale_created(request_id, saved)
    return credit_sale_response(saved)


@router.get("/credit-sales", response_model=CreditSaleListResponse)
def list_credit_sales(
    request: Request,
    status: Optional[CreditSaleStatus] = Query(None, description="Filter by derived sale status"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """List credit sales newest first, after bringing statuses up to date"""
    _, sales = refresh_statuses(db, today, get_request_id(request))

    # Sales without installments are corrupt and already reported by the refresh
    sales = [sale for sale in sales if sale.installments]
    if status is not None:
        sales = [sale for sale in sales if sale.status == status]

    return CreditSaleListResponse(
        credit_sales=[credit_sale_response(sale) for sale in sales],
        count=len(sales),
        overdue_count=sum(1 for sale in sales if sale.status == CreditSaleStatus.OVERDUE),
        total_cents=sum(sale.total_cents for sale in sales),
        total_paid_cents=sum(sale.total_paid_cents for sale in sales),
        remaining_cents=sum(sale.remaining_cents for sale in sales),
    )


@router.get("/credit-sales/summary", response_model=ReceivablesSummaryResponse)
def get_receivables_summary(
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Outstanding balances across all credit sales"""
    _, sales = refresh_statuses(db, today, get_request_id(request))
    summary = summarize_receivables(
        [sale for sale in sales if sale.installments],
        today,
        upcoming_window_days=settings.upcoming_window_days,
    )
    return ReceivablesSummaryResponse(**vars(summary))


@router.post("/credit-sales/refresh", response_model=RefreshResponse)
def refresh_credit_sales(
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Recompute overdue statuses; safe to call repeatedly"""
    report, _ = refresh_statuses(db, today, get_request_id(request))

    return RefreshResponse(
        today=report.today,
        scanned_installments=report.scanned_installments,
        overdue_installment_ids=[str(inst_id) for inst_id in report.overdue_installment_ids],
        sale_status_changes=[
            SaleStatusChange(credit_sale_id=str(sale_id), previous_status=before.value, status=after.value)
            for sale_id, (before, after) in report.sale_status_changes.items()
        ],
        inconsistent_sale_ids=[str(sale_id) for sale_id in report.inconsistent_sale_ids],
    )


@router.get("/credit-sales/{credit_sale_id}", response_model=CreditSaleResponse)
def get_credit_sale(
    credit_sale_id: str,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Retrieve a credit sale with its installment schedule"""
    sale_uuid = parse_id(credit_sale_id, "credit sale")
    request_id = get_request_id(request)
    refresh_statuses(db, today, request_id)

    try:
        sale = CreditSaleRepository(db).get_credit_sale(sale_uuid)
        check_consistency(sale)
    except CreditSaleNotFoundError:
        raise HTTPException(status_code=404, detail="Credit sale not found")
    except InconsistentLedgerError as e:
        logging.error(f"Ledger inconsistency: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return credit_sale_response(sale)


@router.delete("/credit-sales/{credit_sale_id}", status_code=204)
def delete_credit_sale(
    credit_sale_id: str,
    request: Request,
    db: Session = Depends(get_db),
):
    """Delete a credit sale and all of its installments"""
    sale_uuid = parse_id(credit_sale_id, "credit sale")
    request_id = get_request_id(request)

    try:
        CreditSaleRepository(db).delete_credit_sale(sale_uuid)
        db.commit()
    except CreditSaleNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Credit sale not found")
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error deleting credit sale: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info("Credit sale deleted", extra={"request_id": request_id, "credit_sale_id": credit_sale_id})
    return Response(status_code=204)
