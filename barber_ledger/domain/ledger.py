"""Ledger aggregator - merges sales, paid installments and expenses into one balance view"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from barber_ledger.domain.models import (
    BalanceItem,
    BalanceItemType,
    BalanceSource,
    DailyBalance,
    DateRange,
    Expense,
    Installment,
    InstallmentStatus,
    Ledger,
    LedgerTotals,
    Transaction,
    TransactionOrigin,
)

# Same-day ordering: losses are listed before gains
_TYPE_ORDER = {BalanceItemType.EXPENSE: 0, BalanceItemType.REVENUE: 1}


def _in_range(day, date_range: Optional[DateRange]) -> bool:
    return date_range is None or date_range.contains(day)


def _installment_description(inst: Installment) -> str:
    if inst.total_installments:
        label = f"Credit sale installment {inst.installment_number}/{inst.total_installments}"
    else:
        label = f"Credit sale installment {inst.installment_number}"
    return f"{label} - {inst.client_name}" if inst.client_name else label


def transaction_items(transactions: Iterable[Transaction], date_range: Optional[DateRange] = None) -> List[BalanceItem]:
    """
    Revenue items for point-of-sale transactions.

    Rows mirroring an installment payment are left out: the paid installment
    is the revenue record for that money.
    """
    return [
        BalanceItem(
            item_id=f"tx-{tx.id}",
            type=BalanceItemType.REVENUE,
            source=BalanceSource.TRANSACTION,
            description=tx.description,
            amount_cents=tx.value_cents,
            date=tx.date,
            payment_method=tx.payment_method,
            client_name=tx.client_name,
            reference_id=tx.id,
        )
        for tx in transactions
        if tx.origin == TransactionOrigin.SALE and _in_range(tx.date, date_range)
    ]


def installment_items(installments: Iterable[Installment], date_range: Optional[DateRange] = None) -> List[BalanceItem]:
    """Revenue items for paid installments, recognized on the day the money came in"""
    return [
        BalanceItem(
            item_id=f"inst-{inst.id}",
            type=BalanceItemType.REVENUE,
            source=BalanceSource.INSTALLMENT,
            description=_installment_description(inst),
            amount_cents=inst.amount_cents,
            date=inst.paid_date,
            payment_method=inst.payment_method.value if inst.payment_method else None,
            client_name=inst.client_name,
            reference_id=inst.id,
        )
        for inst in installments
        if inst.status == InstallmentStatus.PAID
        and inst.paid_date is not None
        and _in_range(inst.paid_date, date_range)
    ]


def expense_items(expenses: Iterable[Expense], date_range: Optional[DateRange] = None) -> List[BalanceItem]:
    return [
        BalanceItem(
            item_id=f"exp-{exp.id}",
            type=BalanceItemType.EXPENSE,
            source=BalanceSource.EXPENSE,
            description=exp.description,
            amount_cents=exp.amount_cents,
            date=exp.date,
            category=exp.category,
            reference_id=exp.id,
        )
        for exp in expenses
        if _in_range(exp.date, date_range)
    ]


def compute_totals(items: Iterable[BalanceItem]) -> LedgerTotals:
    """Revenue, expense and net totals; independent of item order"""
    revenue = 0
    expenses = 0
    for item in items:
        if item.type == BalanceItemType.REVENUE:
            revenue += item.amount_cents
        else:
            expenses += item.amount_cents

    return LedgerTotals(
        total_revenue_cents=revenue,
        total_expenses_cents=expenses,
        net_profit_cents=revenue - expenses,
    )


def sort_items(items: Iterable[BalanceItem]) -> List[BalanceItem]:
    """
    Newest first; on the same day expenses before revenues; then by item id
    (descending) so identical inputs always come out in the same order.
    """
    ordered = sorted(items, key=lambda item: item.item_id, reverse=True)
    ordered.sort(key=lambda item: _TYPE_ORDER[item.type])
    ordered.sort(key=lambda item: item.date, reverse=True)
    return ordered


def build_ledger(
    transactions: Iterable[Transaction],
    installments: Iterable[Installment],
    expenses: Iterable[Expense],
    date_range: Optional[DateRange] = None,
) -> Ledger:
    """
    Main entry point: merge the three event sources into one sorted balance view.

    `date_range` is inclusive on both ends; None means all time. Pure function,
    callers fetch the collections beforehand.
    """
    items = (
        transaction_items(transactions, date_range)
        + installment_items(installments, date_range)
        + expense_items(expenses, date_range)
    )
    totals = compute_totals(items)

    return Ledger(items=sort_items(items), totals=totals, date_range=date_range)


def group_by_date(items: Iterable[BalanceItem]) -> List[DailyBalance]:
    """Per-day revenue/expense buckets, keeping the order the items arrive in"""
    days: Dict[date, DailyBalance] = {}
    for item in items:
        bucket = days.get(item.date)
        if bucket is None:
            bucket = days[item.date] = DailyBalance(date=item.date, revenue_cents=0, expenses_cents=0)
        if item.type == BalanceItemType.REVENUE:
            bucket.revenue_cents += item.amount_cents
        else:
            bucket.expenses_cents += item.amount_cents
    return list(days.values())
