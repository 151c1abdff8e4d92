"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from barber_ledger.domain.exceptions import ValidationError
from barber_ledger.domain.models import DateRange

PERIODS = ("day", "week", "month", "year", "all")


def add_months(start: date, months: int) -> date:
    """
    Advance a date by calendar months.

    Days past the end of the target month are clamped to its last day:
    Jan 31 + 1 month -> Feb 28 (Feb 29 in leap years).
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def resolve_period(period: str, today: date) -> Optional[DateRange]:
    """
    Map a balance-view preset to a date range ending today.

    - day:   today only
    - week:  the last 7 days, today included
    - month: first day of the current month up to today
    - year:  January 1st up to today
    - all:   no range (None)
    """
    if period == "day":
        return DateRange(today, today)
    if period == "week":
        return DateRange(today - timedelta(days=6), today)
    if period == "month":
        return DateRange(today.replace(day=1), today)
    if period == "year":
        return DateRange(today.replace(month=1, day=1), today)
    if period == "all":
        return None
    raise ValidationError(f"Unknown period '{period}', expected one of {', '.join(PERIODS)}")


def business_today(tz_name: str) -> date:
    """Current calendar date in the shop's timezone"""
    return datetime.now(ZoneInfo(tz_name)).date()
