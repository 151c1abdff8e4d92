"""Point-of-sale transaction endpoints"""

import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barber_ledger.api.v1.schemas import TransactionCreateRequest, TransactionSchema
from barber_ledger.api.dependencies import get_request_id, optional_range
from barber_ledger.domain.credit_sales import compute_total
from barber_ledger.domain.exceptions import ValidationError
from barber_ledger.domain.models import Transaction, TransactionOrigin, TransactionType
from barber_ledger.infrastructure.database.session import get_db
from barber_ledger.infrastructure.database.repositories import TransactionRepository

router = APIRouter()


def transaction_schema(tx: Transaction) -> TransactionSchema:
    return TransactionSchema(
        id=str(tx.id),
        date=tx.date,
        client_name=tx.client_name,
        client_id=tx.client_id,
        description=tx.description,
        payment_method=tx.payment_method,
        value_cents=tx.value_cents,
        subtotal_cents=tx.subtotal_cents,
        discount_cents=tx.discount_cents,
        type=tx.type.value,
        origin=tx.origin.value,
        credit_sale_id=str(tx.credit_sale_id) if tx.credit_sale_id else None,
        installment_number=tx.installment_number,
    )


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
def create_transaction(
    request_body: TransactionCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Record a completed service or product sale"""
    request_id = get_request_id(request)

    try:
        value_cents = compute_total(request_body.subtotal_cents, request_body.discount_cents)
        saved = TransactionRepository(db).create_transaction(
            Transaction(
                id=None,
                date=request_body.date,
                client_name=request_body.client_name,
                client_id=request_body.client_id,
                description=request_body.description,
                payment_method=request_body.payment_method,
                value_cents=value_cents,
                subtotal_cents=request_body.subtotal_cents,
                discount_cents=request_body.discount_cents,
                type=TransactionType(request_body.type),
                origin=TransactionOrigin.SALE,
            )
        )
        db.commit()

    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error creating transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return transaction_schema(saved)


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(
    start_date: Optional[date] = Query(None, description="First day, inclusive (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Last day, inclusive (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    """Transactions newest first, including installment payment rows"""
    transactions = TransactionRepository(db).fetch_transactions(optional_range(start_date, end_date))
    return [transaction_schema(tx) for tx in transactions]
