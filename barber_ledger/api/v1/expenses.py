"""Expense endpoints"""

import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barber_ledger.api.v1.schemas import ExpenseCreateRequest, ExpenseSchema
from barber_ledger.api.dependencies import get_request_id, optional_range, parse_id
from barber_ledger.domain.exceptions import ExpenseNotFoundError
from barber_ledger.domain.models import Expense
from barber_ledger.infrastructure.database.session import get_db
from barber_ledger.infrastructure.database.repositories import ExpenseRepository

router = APIRouter()


def expense_schema(expense: Expense) -> ExpenseSchema:
    return ExpenseSchema(
        id=str(expense.id),
        date=expense.date,
        amount_cents=expense.amount_cents,
        description=expense.description,
        category=expense.category,
    )


@router.post("/expenses", response_model=ExpenseSchema, status_code=201)
def create_expense(
    request_body: ExpenseCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        saved = ExpenseRepository(db).create_expense(
            Expense(
                id=None,
                date=request_body.date,
                amount_cents=request_body.amount_cents,
                description=request_body.description,
                category=request_body.category,
            )
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error creating expense: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    return expense_schema(saved)


@router.get("/expenses", response_model=List[ExpenseSchema])
def list_expenses(
    start_date: Optional[date] = Query(None, description="First day, inclusive (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Last day, inclusive (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    expenses = ExpenseRepository(db).fetch_expenses(optional_range(start_date, end_date))
    return [expense_schema(expense) for expense in expenses]


@router.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(expense_id: str, request: Request, db: Session = Depends(get_db)):
    expense_uuid = parse_id(expense_id, "expense")
    try:
        ExpenseRepository(db).delete_expense(expense_uuid)
        db.commit()
    except ExpenseNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Expense not found")
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error deleting expense: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    return Response(status_code=204)
