"""Exact currency arithmetic over integer cents"""

from decimal import Decimal
from typing import List

from barber_ledger.domain.exceptions import ValidationError

CENTS = Decimal("0.01")


def allocate(total_cents: int, parts: int) -> List[int]:
    """
    Split an amount into `parts` shares that sum back to it exactly.

    Every share but the last is the raw share rounded down to the cent; the
    last one takes whatever is left, so rounding residue lands in the final
    installment instead of being lost.

    Example:
        R$ 100,00 in 3 parts -> [33.33, 33.33, 33.34]
        10000 // 3 = 3333, last = 10000 - 6666 = 3334
    """
    if parts < 1:
        raise ValidationError(f"Cannot split an amount into {parts} parts")
    if parts == 1:
        return [total_cents]

    share = total_cents // parts
    shares = [share] * (parts - 1)
    shares.append(total_cents - sum(shares))
    return shares


def from_cents(cents: int) -> Decimal:
    """Two-place Decimal for an integer cents amount"""
    return (Decimal(cents) / 100).quantize(CENTS)


def format_brl(cents: int) -> str:
    """Render cents as Brazilian reais, e.g. 123456 -> 'R$ 1.234,56'"""
    sign = "-" if cents < 0 else ""
    reais, centavos = divmod(abs(cents), 100)
    grouped = f"{reais:,}".replace(",", ".")
    return f"{sign}R$ {grouped},{centavos:02d}"
