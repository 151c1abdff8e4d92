"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input to a domain operation is invalid and must be corrected by the caller"""

    pass


class DuplicatePaymentError(DomainException):
    """Installment is already paid"""

    def __init__(self, installment_id, message: str | None = None):
        self.installment_id = installment_id
        super().__init__(message or f"Installment {installment_id} is already paid")


class InconsistentLedgerError(DomainException):
    """Stored credit sale data violates an invariant (upstream corruption, not user error)"""

    def __init__(self, credit_sale_id, message: str):
        self.credit_sale_id = credit_sale_id
        super().__init__(f"Credit sale {credit_sale_id}: {message}")


class NotFoundError(DomainException):
    """Requested record does not exist"""

    pass


class CreditSaleNotFoundError(NotFoundError):
    pass


class InstallmentNotFoundError(NotFoundError):
    pass


class ExpenseNotFoundError(NotFoundError):
    pass
