"""Credit sale aggregate - derived status, totals and consistency checks"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from barber_ledger.domain.exceptions import InconsistentLedgerError, ValidationError
from barber_ledger.domain.installments import MAX_INSTALLMENTS, generate_installments
from barber_ledger.domain.models import (
    CreditSale,
    CreditSaleStatus,
    Installment,
    InstallmentStatus,
    ReceivablesSummary,
)


def compute_total(subtotal_cents: int, discount_cents: int) -> int:
    """Sale total after discount, never below zero"""
    if subtotal_cents < 0:
        raise ValidationError("Subtotal cannot be negative")
    if discount_cents < 0:
        raise ValidationError("Discount cannot be negative")
    return max(0, subtotal_cents - discount_cents)


def build_credit_sale(
    client_name: str,
    products: str,
    subtotal_cents: int,
    discount_cents: int,
    number_of_installments: int,
    first_due_date: date,
    sale_date: date,
    client_id: Optional[str] = None,
    max_installments: int = MAX_INSTALLMENTS,
) -> CreditSale:
    """
    Assemble a new credit sale together with its installment schedule.

    The sale and its installments are produced as one unit; nothing here is
    persisted.
    """
    if not client_name or not client_name.strip():
        raise ValidationError("Client name is required")
    if not products or not products.strip():
        raise ValidationError("Sold products are required")

    total_cents = compute_total(subtotal_cents, discount_cents)
    drafts = generate_installments(total_cents, number_of_installments, first_due_date, max_installments)

    return CreditSale(
        id=None,
        client_name=client_name.strip(),
        client_id=client_id,
        products=products.strip(),
        subtotal_cents=subtotal_cents,
        discount_cents=discount_cents,
        total_cents=total_cents,
        number_of_installments=number_of_installments,
        first_due_date=first_due_date,
        date=sale_date,
        installments=[
            Installment(
                id=None,
                credit_sale_id=None,
                installment_number=draft.installment_number,
                amount_cents=draft.amount_cents,
                due_date=draft.due_date,
                total_installments=number_of_installments,
                client_name=client_name.strip(),
            )
            for draft in drafts
        ],
    )


def recompute_sale_status(installments: Iterable[Installment], credit_sale_id=None) -> CreditSaleStatus:
    """
    Derive a sale's status from its installments.

    Paid needs every installment paid and is checked first, so a settled sale
    is never reported overdue. Otherwise any overdue installment makes the
    sale overdue; everything else is active.
    """
    statuses = [inst.status for inst in installments]
    if not statuses:
        raise InconsistentLedgerError(credit_sale_id, "sale has no installments")

    if all(status == InstallmentStatus.PAID for status in statuses):
        return CreditSaleStatus.PAID
    if any(status == InstallmentStatus.OVERDUE for status in statuses):
        return CreditSaleStatus.OVERDUE
    return CreditSaleStatus.ACTIVE


def total_paid(installments: Iterable[Installment]) -> int:
    return sum(inst.amount_cents for inst in installments if inst.status == InstallmentStatus.PAID)


def remaining_amount(total_cents: int, installments: Iterable[Installment]) -> int:
    return max(0, total_cents - total_paid(installments))


def check_consistency(sale: CreditSale) -> None:
    """
    Verify the stored installments still reconstruct the sale.

    Raises:
        InconsistentLedgerError: an amount is not positive, amounts do not add up to the total, numbering
            is not 1..N, or the count differs from number_of_installments
    """
    installments = sale.installments
    if not installments:
        raise InconsistentLedgerError(sale.id, "sale has no installments")

    empty = [inst.installment_number for inst in installments if inst.amount_cents <= 0]
    if empty:
        raise InconsistentLedgerError(sale.id, f"installments {empty} have no positive amount")

    installment_sum = sum(inst.amount_cents for inst in installments)
    if installment_sum != sale.total_cents:
        raise InconsistentLedgerError(
            sale.id,
            f"installments sum to {installment_sum} cents but sale total is {sale.total_cents} cents",
        )

    numbers = sorted(inst.installment_number for inst in installments)
    if numbers != list(range(1, len(numbers) + 1)):
        raise InconsistentLedgerError(sale.id, f"installment numbers are not contiguous: {numbers}")

    if len(installments) != sale.number_of_installments:
        raise InconsistentLedgerError(
            sale.id,
            f"expected {sale.number_of_installments} installments, found {len(installments)}",
        )


def summarize_receivables(
    sales: Iterable[CreditSale],
    today: date,
    upcoming_window_days: int = 7,
) -> ReceivablesSummary:
    """Totals across credit sales: sold, received, outstanding and what falls due soon"""
    sales = list(sales)
    installments: List[Installment] = [inst for sale in sales for inst in sale.installments]
    horizon = today + timedelta(days=upcoming_window_days)

    overdue = [inst for inst in installments if inst.status == InstallmentStatus.OVERDUE]
    pending = [inst for inst in installments if inst.status == InstallmentStatus.PENDING]

    return ReceivablesSummary(
        sale_count=len(sales),
        overdue_sale_count=sum(1 for sale in sales if sale.status == CreditSaleStatus.OVERDUE),
        total_sold_cents=sum(sale.total_cents for sale in sales),
        total_received_cents=sum(sale.total_paid_cents for sale in sales),
        total_outstanding_cents=sum(sale.remaining_cents for sale in sales),
        overdue_outstanding_cents=sum(inst.amount_cents for inst in overdue),
        pending_installment_count=len(pending),
        overdue_installment_count=len(overdue),
        due_soon_cents=sum(inst.amount_cents for inst in pending if today <= inst.due_date <= horizon),
    )
