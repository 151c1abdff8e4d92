"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from barber_ledger.domain.exceptions import ValidationError


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"


class CreditSaleStatus(str, Enum):
    ACTIVE = "active"
    OVERDUE = "overdue"
    PAID = "paid"


class PaymentMethod(str, Enum):
    PIX = "pix"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    CASH = "cash"
    STORE_CREDIT = "store_credit"  # "fiado": selling on credit, never a way to pay an installment


class TransactionType(str, Enum):
    SERVICE = "service"
    PRODUCT = "product"


class TransactionOrigin(str, Enum):
    SALE = "sale"
    INSTALLMENT_PAYMENT = "installment_payment"


class BalanceItemType(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class BalanceSource(str, Enum):
    TRANSACTION = "transaction"
    INSTALLMENT = "installment"
    EXPENSE = "expense"


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date interval"""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValidationError(f"Invalid date range: {self.start} is after {self.end}")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class InstallmentDraft:
    """Generated installment, not yet persisted"""

    installment_number: int
    amount_cents: int
    due_date: date


@dataclass
class Installment:
    """Single scheduled payment of a credit sale"""

    id: Optional[uuid.UUID]
    credit_sale_id: Optional[uuid.UUID]
    installment_number: int
    amount_cents: int
    due_date: date
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    # Copied from the parent sale for display
    total_installments: Optional[int] = None
    client_name: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID


@dataclass
class CreditSale:
    """A sale paid over time, owning its installments"""

    id: Optional[uuid.UUID]
    client_name: str
    products: str
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    number_of_installments: int
    first_due_date: date
    date: date
    client_id: Optional[str] = None
    created_at: Optional[datetime] = None
    installments: List[Installment] = field(default_factory=list)

    @property
    def status(self) -> CreditSaleStatus:
        from barber_ledger.domain.credit_sales import recompute_sale_status

        return recompute_sale_status(self.installments, credit_sale_id=self.id)

    @property
    def total_paid_cents(self) -> int:
        from barber_ledger.domain.credit_sales import total_paid

        return total_paid(self.installments)

    @property
    def remaining_cents(self) -> int:
        from barber_ledger.domain.credit_sales import remaining_amount

        return remaining_amount(self.total_cents, self.installments)

    @property
    def next_due_installment(self) -> Optional[Installment]:
        """Earliest unpaid installment, if any"""
        open_installments = [inst for inst in self.installments if not inst.is_paid]
        if not open_installments:
            return None
        return min(open_installments, key=lambda inst: (inst.due_date, inst.installment_number))


@dataclass
class Transaction:
    """Completed point-of-sale event"""

    id: Optional[uuid.UUID]
    date: date
    client_name: str
    description: str
    payment_method: str
    value_cents: int
    subtotal_cents: int
    discount_cents: int = 0
    type: TransactionType = TransactionType.SERVICE
    origin: TransactionOrigin = TransactionOrigin.SALE
    client_id: Optional[str] = None
    credit_sale_id: Optional[uuid.UUID] = None
    installment_number: Optional[int] = None


@dataclass
class Expense:
    """Money spent by the shop"""

    id: Optional[uuid.UUID]
    date: date
    amount_cents: int
    description: str
    category: Optional[str] = None


@dataclass(frozen=True)
class BalanceItem:
    """Normalized revenue/expense line of the combined ledger (never persisted)"""

    item_id: str
    type: BalanceItemType
    source: BalanceSource
    description: str
    amount_cents: int
    date: date
    payment_method: Optional[str] = None
    client_name: Optional[str] = None
    category: Optional[str] = None
    reference_id: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class LedgerTotals:
    total_revenue_cents: int
    total_expenses_cents: int
    net_profit_cents: int


@dataclass
class DailyBalance:
    """Revenue/expense totals for one calendar day"""

    date: date
    revenue_cents: int
    expenses_cents: int

    @property
    def net_cents(self) -> int:
        return self.revenue_cents - self.expenses_cents


@dataclass
class Ledger:
    """Output of the ledger aggregator"""

    items: List[BalanceItem]
    totals: LedgerTotals
    date_range: Optional[DateRange] = None


@dataclass
class RefreshReport:
    """Outcome of one status refresh pass"""

    today: date
    scanned_installments: int = 0
    overdue_installment_ids: List[uuid.UUID] = field(default_factory=list)
    sale_status_changes: Dict[uuid.UUID, Tuple[CreditSaleStatus, CreditSaleStatus]] = field(default_factory=dict)
    inconsistent_sale_ids: List[uuid.UUID] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.overdue_installment_ids or self.sale_status_changes)


@dataclass
class ReceivablesSummary:
    """Outstanding-balance overview across credit sales"""

    sale_count: int
    overdue_sale_count: int
    total_sold_cents: int
    total_received_cents: int
    total_outstanding_cents: int
    overdue_outstanding_cents: int
    pending_installment_count: int
    overdue_installment_count: int
    due_soon_cents: int
