"""SQLAlchemy ORM models for credit sales, installments, transactions and expenses"""

import uuid
from sqlalchemy import Column, String, BigInteger, Date, DateTime, Integer, ForeignKey, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class CreditSaleRecord(Base):
    """Sale paid in installments; status and balances are derived from its installments"""

    __tablename__ = "credit_sale"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_name = Column(Text, nullable=False, index=True)
    client_id = Column(Text, nullable=True, index=True)
    products = Column(Text, nullable=False)
    subtotal_cents = Column(BigInteger, nullable=False)
    discount_cents = Column(BigInteger, nullable=False, default=0)
    total_cents = Column(BigInteger, nullable=False)
    number_of_installments = Column(Integer, nullable=False)
    first_due_date = Column(Date, nullable=False)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    installments = relationship(
        "InstallmentRecord",
        back_populates="credit_sale",
        cascade="all, delete-orphan",
        order_by="InstallmentRecord.installment_number",
    )


class InstallmentRecord(Base):
    """One scheduled payment of a credit sale"""

    __tablename__ = "installment"
    __table_args__ = (UniqueConstraint("credit_sale_id", "installment_number", name="uq_installment_per_sale"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    credit_sale_id = Column(Uuid, ForeignKey("credit_sale.id", ondelete="CASCADE"), nullable=False, index=True)
    installment_number = Column(Integer, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    paid_date = Column(Date, nullable=True)
    payment_method = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    credit_sale = relationship("CreditSaleRecord", back_populates="installments")


class TransactionRecord(Base):
    """Completed point-of-sale transaction"""

    __tablename__ = "sale_transaction"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, index=True)
    client_name = Column(Text, nullable=False)
    client_id = Column(Text, nullable=True)
    description = Column(Text, nullable=False)
    payment_method = Column(String(64), nullable=False)
    value_cents = Column(BigInteger, nullable=False)
    subtotal_cents = Column(BigInteger, nullable=False)
    discount_cents = Column(BigInteger, nullable=False, default=0)
    type = Column(String(16), nullable=False, default="service")
    origin = Column(String(32), nullable=False, default="sale")
    # Set only for origin == "installment_payment"
    credit_sale_id = Column(Uuid, ForeignKey("credit_sale.id", ondelete="SET NULL"), nullable=True)
    installment_number = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ExpenseRecord(Base):
    """Shop expense"""

    __tablename__ = "expense"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(Text, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
