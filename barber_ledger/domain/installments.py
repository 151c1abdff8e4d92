"""Installment schedule generation and the installment status state machine"""

from datetime import date
from typing import List, Optional

from barber_ledger.domain.exceptions import DuplicatePaymentError, ValidationError
from barber_ledger.domain.models import Installment, InstallmentDraft, InstallmentStatus, PaymentMethod
from barber_ledger.domain.money import allocate, format_brl
from barber_ledger.utils.date_utils import add_months

MAX_INSTALLMENTS = 24


def generate_installments(
    total_cents: int,
    number_of_installments: int,
    first_due_date: date,
    max_installments: int = MAX_INSTALLMENTS,
) -> List[InstallmentDraft]:
    """
    Generate the monthly installment schedule for a credit sale.

    Requirements:
    - 1..max_installments installments, total strictly positive and at
      least one cent per installment
    - amounts sum exactly to the total; the last installment absorbs the
      rounding remainder
    - one calendar month apart starting at first_due_date (day clamped to the
      end of shorter months)

    Example:
        R$ 100,00 in 3 from 2024-01-10 ->
        33.33 on 2024-01-10, 33.33 on 2024-02-10, 33.34 on 2024-03-10
    """
    if not 1 <= number_of_installments <= max_installments:
        raise ValidationError(
            f"Number of installments must be between 1 and {max_installments}, got {number_of_installments}"
        )
    if total_cents <= 0:
        raise ValidationError(f"Total amount must be positive, got {format_brl(total_cents)}")
    # Every installment must be worth at least one cent
    if total_cents < number_of_installments:
        raise ValidationError(
            f"{format_brl(total_cents)} cannot be split into {number_of_installments} installments"
        )

    amounts = allocate(total_cents, number_of_installments)

    return [
        InstallmentDraft(
            installment_number=i + 1,
            amount_cents=amount,
            due_date=add_months(first_due_date, i),
        )
        for i, amount in enumerate(amounts)
    ]


def mark_overdue(installment: Installment, today: date) -> bool:
    """
    Move a pending installment past its due date to overdue.

    Returns True only when the status changed, so re-running is a no-op.
    """
    if installment.status == InstallmentStatus.PENDING and installment.due_date < today:
        installment.status = InstallmentStatus.OVERDUE
        return True
    return False


def parse_payment_method(value) -> PaymentMethod:
    """Validate a method used to settle an installment"""
    if not value:
        raise ValidationError("A payment method is required")
    try:
        method = PaymentMethod(value)
    except ValueError as e:
        raise ValidationError(f"Unknown payment method '{value}'") from e
    if method == PaymentMethod.STORE_CREDIT:
        raise ValidationError("An installment cannot be paid with store credit")
    return method


def record_payment(
    installment: Installment,
    payment_method,
    paid_date: Optional[date] = None,
    amount_cents: Optional[int] = None,
    today: Optional[date] = None,
) -> Installment:
    """
    Settle one installment in full.

    Raises:
        DuplicatePaymentError: installment is already paid (left untouched)
        ValidationError: missing/invalid method or amount differing from the installment
    """
    if installment.status == InstallmentStatus.PAID:
        raise DuplicatePaymentError(installment.id)

    method = parse_payment_method(payment_method)

    if amount_cents is not None and amount_cents != installment.amount_cents:
        raise ValidationError(
            f"Payment of {format_brl(amount_cents)} does not match installment amount "
            f"{format_brl(installment.amount_cents)}"
        )

    installment.status = InstallmentStatus.PAID
    installment.paid_date = paid_date or today or date.today()
    installment.payment_method = method
    return installment
