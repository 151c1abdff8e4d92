"""Dependency injection for FastAPI endpoints"""

import uuid
from datetime import date
from typing import Optional
from fastapi import HTTPException, Request
from barber_ledger.config import settings
from barber_ledger.domain.exceptions import ValidationError
from barber_ledger.domain.models import DateRange
from barber_ledger.utils.date_utils import business_today


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Today's date in the shop's timezone"""
    return business_today(settings.business_timezone)


def optional_range(start_date: Optional[date], end_date: Optional[date]) -> Optional[DateRange]:
    """Inclusive range from query parameters; an open end defaults to the other bound"""
    if start_date is None and end_date is None:
        return None
    try:
        return DateRange(start_date or end_date, end_date or start_date)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


def parse_id(value: str, label: str) -> uuid.UUID:
    """Parse a path identifier, answering 400 when it is malformed"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID format")
