"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import List, Optional


class CreditSaleCreateRequest(BaseModel):
    """Request body for POST /v1/credit-sales"""

    client_name: str = Field(..., min_length=1, description="Client name")
    client_id: Optional[str] = Field(None, description="Client record reference, if the client is registered")
    products: str = Field(..., min_length=1, description="What was sold")
    subtotal_cents: int = Field(..., ge=0, description="Amount before discount in cents")
    discount_cents: int = Field(0, ge=0, description="Discount in cents")
    number_of_installments: int = Field(..., description="Installment count (1-24)")
    first_due_date: Optional[date] = Field(None, description="First due date (default: one month after the sale)")
    sale_date: Optional[date] = Field(None, description="Sale date (default: today)")


class InstallmentSchema(BaseModel):
    """Single installment of a credit sale"""

    id: str
    installment_number: int
    amount_cents: int
    due_date: date
    status: str
    paid_date: Optional[date] = None
    payment_method: Optional[str] = None


class CreditSaleResponse(BaseModel):
    """Credit sale with derived status and balances"""

    id: str
    client_name: str
    client_id: Optional[str] = None
    products: str
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    number_of_installments: int
    first_due_date: date
    date: date
    status: str
    total_paid_cents: int
    remaining_cents: int
    next_due_date: Optional[date] = None
    created_at: Optional[str] = None
    installments: List[InstallmentSchema]


class CreditSaleListResponse(BaseModel):
    """Response for GET /v1/credit-sales"""

    credit_sales: List[CreditSaleResponse]
    count: int
    overdue_count: int
    total_cents: int
    total_paid_cents: int
    remaining_cents: int


class PaymentRequest(BaseModel):
    """Request body for POST /v1/installments/{installment_id}/payments"""

    payment_method: str = Field(..., min_length=1, description="pix, credit_card, debit_card or cash")
    paid_date: Optional[date] = Field(None, description="Day the money was received (default: today)")
    amount_cents: Optional[int] = Field(None, gt=0, description="Must equal the installment amount when given")


class PaymentResponse(BaseModel):
    installment: InstallmentSchema
    credit_sale: CreditSaleResponse


class SaleStatusChange(BaseModel):
    credit_sale_id: str
    previous_status: str
    status: str


class RefreshResponse(BaseModel):
    """Response for POST /v1/credit-sales/refresh"""

    today: date
    scanned_installments: int
    overdue_installment_ids: List[str]
    sale_status_changes: List[SaleStatusChange]
    inconsistent_sale_ids: List[str]


class ReceivablesSummaryResponse(BaseModel):
    """Response for GET /v1/credit-sales/summary"""

    sale_count: int
    overdue_sale_count: int
    total_sold_cents: int
    total_received_cents: int
    total_outstanding_cents: int
    overdue_outstanding_cents: int
    pending_installment_count: int
    overdue_installment_count: int
    due_soon_cents: int


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    date: date
    client_name: str = Field(..., min_length=1)
    client_id: Optional[str] = None
    description: str = Field(..., min_length=1, description="Services or products sold")
    payment_method: str = Field(..., min_length=1)
    subtotal_cents: int = Field(..., ge=0)
    discount_cents: int = Field(0, ge=0)
    type: str = Field("service", pattern="^(service|product)$")


class TransactionSchema(BaseModel):
    id: str
    date: date
    client_name: str
    client_id: Optional[str] = None
    description: str
    payment_method: str
    value_cents: int
    subtotal_cents: int
    discount_cents: int
    type: str
    origin: str
    credit_sale_id: Optional[str] = None
    installment_number: Optional[int] = None


class ExpenseCreateRequest(BaseModel):
    """Request body for POST /v1/expenses"""

    date: date
    amount_cents: int = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    category: Optional[str] = None


class ExpenseSchema(BaseModel):
    id: str
    date: date
    amount_cents: int
    description: str
    category: Optional[str] = None


class BalanceItemSchema(BaseModel):
    """Single line of the combined ledger"""

    id: str
    type: str
    source: str
    description: str
    amount_cents: int
    date: date
    payment_method: Optional[str] = None
    client_name: Optional[str] = None
    category: Optional[str] = None
    reference_id: Optional[str] = None


class LedgerTotalsSchema(BaseModel):
    total_revenue_cents: int
    total_expenses_cents: int
    net_profit_cents: int
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal


class DailyBalanceSchema(BaseModel):
    date: date
    revenue_cents: int
    expenses_cents: int
    net_cents: int


class LedgerResponse(BaseModel):
    """Response for GET /v1/ledger"""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    items: List[BalanceItemSchema]
    totals: LedgerTotalsSchema
    daily: List[DailyBalanceSchema]
