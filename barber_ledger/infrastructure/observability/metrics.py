"""Prometheus metrics for monitoring credit sales, installment payments and ledger health"""

from prometheus_client import Counter, Histogram

# Credit sale metrics
credit_sale_counter = Counter(
    "barber_credit_sales_total",
    "Credit sales created",
)

credit_sale_amount_histogram = Histogram(
    "barber_credit_sale_amount_cents",
    "Credit sale totals in cents",
    buckets=[5_000, 10_000, 25_000, 50_000, 100_000, 250_000, 500_000],
)

# Installment metrics
installment_payment_counter = Counter(
    "barber_installment_payments_total",
    "Installment payments recorded",
    ["payment_method"],
)

duplicate_payment_counter = Counter(
    "barber_duplicate_payments_total",
    "Payments rejected because the installment was already paid",
)

overdue_transition_counter = Counter(
    "barber_installments_overdue_total",
    "Installments moved from pending to overdue by the status refresh",
)

# Data integrity
ledger_inconsistency_counter = Counter(
    "barber_ledger_inconsistencies_total",
    "Credit sales whose installments do not reconcile with the sale total",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_credit_sale(total_cents: int) -> None:
    credit_sale_counter.inc()
    credit_sale_amount_histogram.observe(total_cents)


def record_payment(payment_method: str) -> None:
    installment_payment_counter.labels(payment_method=payment_method).inc()
