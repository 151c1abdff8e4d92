"""Status refresh engine - time-driven overdue transitions across all open credit sales"""

from datetime import date
from typing import Iterable

from barber_ledger.domain.credit_sales import check_consistency, recompute_sale_status
from barber_ledger.domain.exceptions import InconsistentLedgerError
from barber_ledger.domain.installments import mark_overdue
from barber_ledger.domain.models import CreditSale, RefreshReport


def refresh_all(sales: Iterable[CreditSale], today: date) -> RefreshReport:
    """
    Recompute installment and sale statuses against `today`.

    - Pending installments due before today become overdue
    - Paid installments are never touched and nothing is ever marked paid
    - Sale status is re-derived; only sales whose status moved are reported
    - Sales failing the consistency check are listed but still refreshed

    Running it twice for the same day returns an empty second report.
    """
    report = RefreshReport(today=today)

    for sale in sales:
        try:
            check_consistency(sale)
        except InconsistentLedgerError:
            report.inconsistent_sale_ids.append(sale.id)

        open_installments = [inst for inst in sale.installments if not inst.is_paid]
        if not open_installments:
            continue

        before = recompute_sale_status(sale.installments, credit_sale_id=sale.id)
        report.scanned_installments += len(open_installments)

        for inst in open_installments:
            if mark_overdue(inst, today):
                report.overdue_installment_ids.append(inst.id)

        after = recompute_sale_status(sale.installments, credit_sale_id=sale.id)
        if after != before:
            report.sale_status_changes[sale.id] = (before, after)

    return report
