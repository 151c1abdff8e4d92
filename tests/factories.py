"""Builders for domain objects used across tests"""

import uuid
from datetime import date
from typing import List
from barber_ledger.domain.models import CreditSale, Installment, InstallmentStatus, PaymentMethod


def make_installment(
    number: int,
    amount_cents: int,
    due_date: date,
    status: InstallmentStatus = InstallmentStatus.PENDING,
    paid_date: date | None = None,
    payment_method: PaymentMethod | None = None,
    credit_sale_id: uuid.UUID | None = None,
) -> Installment:
    return Installment(
        id=uuid.uuid4(),
        credit_sale_id=credit_sale_id,
        installment_number=number,
        amount_cents=amount_cents,
        due_date=due_date,
        status=status,
        paid_date=paid_date,
        payment_method=payment_method,
    )


def make_sale(installments: List[Installment], total_cents: int | None = None) -> CreditSale:
    sale_id = uuid.uuid4()
    for inst in installments:
        inst.credit_sale_id = sale_id
    total = sum(inst.amount_cents for inst in installments) if total_cents is None else total_cents
    return CreditSale(
        id=sale_id,
        client_name="João Silva",
        products="Pomada modeladora",
        subtotal_cents=total,
        discount_cents=0,
        total_cents=total,
        number_of_installments=len(installments),
        first_due_date=installments[0].due_date if installments else date(2024, 1, 10),
        date=date(2023, 12, 10),
        installments=installments,
    )
