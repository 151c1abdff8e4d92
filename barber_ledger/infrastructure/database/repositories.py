"""Data access layer for credit sales, transactions and expenses"""

import uuid
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from barber_ledger.infrastructure.database.models import (
    CreditSaleRecord,
    InstallmentRecord,
    TransactionRecord,
    ExpenseRecord,
)
from barber_ledger.domain.exceptions import (
    CreditSaleNotFoundError,
    DuplicatePaymentError,
    ExpenseNotFoundError,
    InstallmentNotFoundError,
)
from barber_ledger.domain.models import (
    CreditSale,
    CreditSaleStatus,
    DateRange,
    Expense,
    Installment,
    InstallmentStatus,
    PaymentMethod,
    Transaction,
    TransactionOrigin,
    TransactionType,
)


def to_installment(record: InstallmentRecord, sale: Optional[CreditSaleRecord] = None) -> Installment:
    sale = sale or record.credit_sale
    return Installment(
        id=record.id,
        credit_sale_id=record.credit_sale_id,
        installment_number=record.installment_number,
        amount_cents=record.amount_cents,
        due_date=record.due_date,
        status=InstallmentStatus(record.status),
        paid_date=record.paid_date,
        payment_method=PaymentMethod(record.payment_method) if record.payment_method else None,
        total_installments=sale.number_of_installments if sale is not None else None,
        client_name=sale.client_name if sale is not None else None,
    )


def to_credit_sale(record: CreditSaleRecord) -> CreditSale:
    return CreditSale(
        id=record.id,
        client_name=record.client_name,
        client_id=record.client_id,
        products=record.products,
        subtotal_cents=record.subtotal_cents,
        discount_cents=record.discount_cents,
        total_cents=record.total_cents,
        number_of_installments=record.number_of_installments,
        first_due_date=record.first_due_date,
        date=record.date,
        created_at=record.created_at,
        installments=[to_installment(inst, record) for inst in record.installments],
    )


def to_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        date=record.date,
        client_name=record.client_name,
        client_id=record.client_id,
        description=record.description,
        payment_method=record.payment_method,
        value_cents=record.value_cents,
        subtotal_cents=record.subtotal_cents,
        discount_cents=record.discount_cents,
        type=TransactionType(record.type),
        origin=TransactionOrigin(record.origin),
        credit_sale_id=record.credit_sale_id,
        installment_number=record.installment_number,
    )


def to_expense(record: ExpenseRecord) -> Expense:
    return Expense(
        id=record.id,
        date=record.date,
        amount_cents=record.amount_cents,
        description=record.description,
        category=record.category,
    )


class CreditSaleRepository:
    """Repository for credit sales and their installments"""

    def __init__(self, db: Session):
        self.db = db

    def _sales_query(self):
        return self.db.query(CreditSaleRecord).options(selectinload(CreditSaleRecord.installments))

    def fetch_credit_sales(self, status: Optional[CreditSaleStatus] = None) -> List[CreditSale]:
        """All credit sales, newest first, optionally filtered by derived status"""
        records = self._sales_query().order_by(
            CreditSaleRecord.date.desc(), CreditSaleRecord.created_at.desc()
        ).all()
        sales = [to_credit_sale(record) for record in records]

        if status is not None:
            sales = [sale for sale in sales if sale.installments and sale.status == status]
        return sales

    def get_credit_sale(self, credit_sale_id: uuid.UUID) -> CreditSale:
        record = self._sales_query().filter(CreditSaleRecord.id == credit_sale_id).first()
        if record is None:
            raise CreditSaleNotFoundError(f"Credit sale {credit_sale_id} not found")
        return to_credit_sale(record)

    def fetch_installments(self) -> List[Installment]:
        records = (
            self.db.query(InstallmentRecord)
            .options(selectinload(InstallmentRecord.credit_sale))
            .order_by(InstallmentRecord.due_date, InstallmentRecord.installment_number)
            .all()
        )
        return [to_installment(record) for record in records]

    def get_installment(self, installment_id: uuid.UUID) -> Installment:
        record = self.db.get(InstallmentRecord, installment_id)
        if record is None:
            raise InstallmentNotFoundError(f"Installment {installment_id} not found")
        return to_installment(record)

    def persist_credit_sale_with_installments(self, sale: CreditSale) -> CreditSale:
        """Insert a sale and all of its installments in one flush; the caller commits"""
        db_sale = CreditSaleRecord(
            client_name=sale.client_name,
            client_id=sale.client_id,
            products=sale.products,
            subtotal_cents=sale.subtotal_cents,
            discount_cents=sale.discount_cents,
            total_cents=sale.total_cents,
            number_of_installments=sale.number_of_installments,
            first_due_date=sale.first_due_date,
            date=sale.date,
            installments=[
                InstallmentRecord(
                    installment_number=inst.installment_number,
                    amount_cents=inst.amount_cents,
                    due_date=inst.due_date,
                    status=inst.status.value,
                )
                for inst in sale.installments
            ],
        )
        self.db.add(db_sale)
        self.db.flush()  # Get IDs without committing
        self.db.refresh(db_sale)
        return to_credit_sale(db_sale)

    def persist_installment_payment(
        self,
        installment_id: uuid.UUID,
        paid_date: date,
        payment_method: PaymentMethod,
    ) -> None:
        """
        Mark an installment paid, atomically.

        The update only matches rows that are not paid yet, so of two
        concurrent payments on the same installment exactly one succeeds.

        Raises:
            DuplicatePaymentError: installment was already paid
            InstallmentNotFoundError: no such installment
        """
        updated = (
            self.db.query(InstallmentRecord)
            .filter(
                InstallmentRecord.id == installment_id,
                InstallmentRecord.status != InstallmentStatus.PAID.value,
            )
            .update(
                {
                    InstallmentRecord.status: InstallmentStatus.PAID.value,
                    InstallmentRecord.paid_date: paid_date,
                    InstallmentRecord.payment_method: payment_method.value,
                },
                synchronize_session="fetch",
            )
        )
        if updated == 0:
            if self.db.get(InstallmentRecord, installment_id) is None:
                raise InstallmentNotFoundError(f"Installment {installment_id} not found")
            raise DuplicatePaymentError(installment_id)

    def mark_installments_overdue(self, installment_ids: List[uuid.UUID], today: date) -> int:
        """Flip still-pending, past-due installments to overdue; returns rows changed"""
        if not installment_ids:
            return 0
        return (
            self.db.query(InstallmentRecord)
            .filter(
                InstallmentRecord.id.in_(installment_ids),
                InstallmentRecord.status == InstallmentStatus.PENDING.value,
                InstallmentRecord.due_date < today,
            )
            .update({InstallmentRecord.status: InstallmentStatus.OVERDUE.value}, synchronize_session="fetch")
        )

    def delete_credit_sale(self, credit_sale_id: uuid.UUID) -> None:
        """Delete a sale together with all of its installments"""
        record = self.db.get(CreditSaleRecord, credit_sale_id)
        if record is None:
            raise CreditSaleNotFoundError(f"Credit sale {credit_sale_id} not found")
        self.db.delete(record)
        self.db.flush()


class TransactionRepository:
    """Repository for point-of-sale transactions"""

    def __init__(self, db: Session):
        self.db = db

    def fetch_transactions(self, date_range: Optional[DateRange] = None) -> List[Transaction]:
        query = self.db.query(TransactionRecord)
        if date_range is not None:
            query = query.filter(
                TransactionRecord.date >= date_range.start,
                TransactionRecord.date <= date_range.end,
            )
        records = query.order_by(TransactionRecord.date.desc(), TransactionRecord.created_at.desc()).all()
        return [to_transaction(record) for record in records]

    def create_transaction(self, transaction: Transaction) -> Transaction:
        db_transaction = TransactionRecord(
            date=transaction.date,
            client_name=transaction.client_name,
            client_id=transaction.client_id,
            description=transaction.description,
            payment_method=transaction.payment_method,
            value_cents=transaction.value_cents,
            subtotal_cents=transaction.subtotal_cents,
            discount_cents=transaction.discount_cents,
            type=transaction.type.value,
            origin=transaction.origin.value,
            credit_sale_id=transaction.credit_sale_id,
            installment_number=transaction.installment_number,
        )
        self.db.add(db_transaction)
        self.db.flush()
        return to_transaction(db_transaction)

    def record_installment_payment(self, sale: CreditSale, installment: Installment) -> Transaction:
        """Write the tagged transaction row that lists an installment payment in the sales report"""
        return self.create_transaction(
            Transaction(
                id=None,
                date=installment.paid_date,
                client_name=sale.client_name,
                client_id=sale.client_id,
                description=(
                    f"Credit sale installment {installment.installment_number}/{sale.number_of_installments}"
                    f" - {sale.products}"
                ),
                payment_method=installment.payment_method.value,
                value_cents=installment.amount_cents,
                subtotal_cents=installment.amount_cents,
                discount_cents=0,
                type=TransactionType.PRODUCT,
                origin=TransactionOrigin.INSTALLMENT_PAYMENT,
                credit_sale_id=sale.id,
                installment_number=installment.installment_number,
            )
        )


class ExpenseRepository:
    """Repository for expenses"""

    def __init__(self, db: Session):
        self.db = db

    def fetch_expenses(self, date_range: Optional[DateRange] = None) -> List[Expense]:
        query = self.db.query(ExpenseRecord)
        if date_range is not None:
            query = query.filter(
                ExpenseRecord.date >= date_range.start,
                ExpenseRecord.date <= date_range.end,
            )
        records = query.order_by(ExpenseRecord.date.desc(), ExpenseRecord.created_at.desc()).all()
        return [to_expense(record) for record in records]

    def create_expense(self, expense: Expense) -> Expense:
        db_expense = ExpenseRecord(
            date=expense.date,
            amount_cents=expense.amount_cents,
            description=expense.description,
            category=expense.category,
        )
        self.db.add(db_expense)
        self.db.flush()
        return to_expense(db_expense)

    def delete_expense(self, expense_id: uuid.UUID) -> None:
        record = self.db.get(ExpenseRecord, expense_id)
        if record is None:
            raise ExpenseNotFoundError(f"Expense {expense_id} not found")
        self.db.delete(record)
        self.db.flush()
