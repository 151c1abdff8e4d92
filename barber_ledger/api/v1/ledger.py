"""GET /v1/ledger - combined revenue/expense balance view"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from barber_ledger.api.v1.schemas import BalanceItemSchema, DailyBalanceSchema, LedgerResponse, LedgerTotalsSchema
from barber_ledger.api.dependencies import get_today, optional_range
from barber_ledger.domain.exceptions import ValidationError
from barber_ledger.domain.ledger import build_ledger, group_by_date
from barber_ledger.domain.money import from_cents
from barber_ledger.infrastructure.database.session import get_db
from barber_ledger.infrastructure.database.repositories import (
    CreditSaleRepository,
    ExpenseRepository,
    TransactionRepository,
)
from barber_ledger.utils.date_utils import resolve_period

router = APIRouter()


@router.get("/ledger", response_model=LedgerResponse)
def get_ledger(
    period: str = Query("month", description="day, week, month (default) or year, ending today; all for every record"),
    start_date: Optional[date] = Query(None, description="First day, inclusive; overrides period"),
    end_date: Optional[date] = Query(None, description="Last day, inclusive; overrides period"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Sales, paid installments and expenses merged into one list, newest first.

    With no parameters the view covers the current month (1st up to today),
    not all time. An explicit start/end range wins over the period preset;
    `period=all` returns every record.
    """
    date_range = optional_range(start_date, end_date)
    if date_range is None:
        try:
            date_range = resolve_period(period, today)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))

    ledger = build_ledger(
        TransactionRepository(db).fetch_transactions(date_range),
        CreditSaleRepository(db).fetch_installments(),
        ExpenseRepository(db).fetch_expenses(date_range),
        date_range,
    )
    totals = ledger.totals

    return LedgerResponse(
        start_date=date_range.start if date_range else None,
        end_date=date_range.end if date_range else None,
        items=[
            BalanceItemSchema(
                id=item.item_id,
                type=item.type.value,
                source=item.source.value,
                description=item.description,
                amount_cents=item.amount_cents,
                date=item.date,
                payment_method=item.payment_method,
                client_name=item.client_name,
                category=item.category,
                reference_id=str(item.reference_id) if item.reference_id else None,
            )
            for item in ledger.items
        ],
        totals=LedgerTotalsSchema(
            total_revenue_cents=totals.total_revenue_cents,
            total_expenses_cents=totals.total_expenses_cents,
            net_profit_cents=totals.net_profit_cents,
            total_revenue=from_cents(totals.total_revenue_cents),
            total_expenses=from_cents(totals.total_expenses_cents),
            net_profit=from_cents(totals.net_profit_cents),
        ),
        daily=[
            DailyBalanceSchema(
                date=day.date,
                revenue_cents=day.revenue_cents,
                expenses_cents=day.expenses_cents,
                net_cents=day.net_cents,
            )
            for day in group_by_date(ledger.items)
        ],
    )
