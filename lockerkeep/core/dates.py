"""
Contract date arithmetic.

All functions take an explicit reference `today` so callers decide what "now" means (see `Clock`).
"""
from __future__ import annotations

import math
from datetime import date, datetime
from enum import Enum

_SECONDS_PER_DAY = 86400


class Urgency(str, Enum):
    OVERDUE = "OVERDUE"
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    OK = "OK"


def _midnight(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime(value.year, value.month, value.day)


def remaining_days(end_date: date | datetime, today: date | datetime) -> int:
    """
    Whole calendar days from `today` to `end_date`, both truncated to midnight.

    Negative means overdue by abs(value) days, zero means due today.
    """
    delta = _midnight(end_date) - _midnight(today)
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


def is_overdue(end_date: date | datetime, today: date | datetime) -> bool:
    """Permanent contracts have no end date and must be excluded before calling this."""
    return remaining_days(end_date, today) < 0


def classify_urgency(days: int) -> Urgency:
    if days < 0:
        return Urgency.OVERDUE
    if days <= 7:
        return Urgency.CRITICAL
    if days <= 30:
        return Urgency.WARNING
    return Urgency.OK


def format_remaining_days(days: int) -> str:
    if days < 0:
        return f"{abs(days)} days overdue"
    if days == 0:
        return "Expires today"
    if days == 1:
        return "1 day remaining"
    return f"{days} days remaining"
