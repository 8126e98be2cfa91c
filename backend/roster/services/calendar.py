from __future__ import annotations

from datetime import date, timedelta
import calendar as pycal
from typing import List, Tuple

# ========= Calendar helpers =========

def sundays_in_month(year: int, month: int) -> List[date]:
    """Lists the Sundays of the given month, in ascending order.

    Starts at the first Sunday on or after the 1st and steps by seven days up
    to and including the last day of the month.

    Args:
        year (int): The year.
        month (int): The month (1-12).

    Returns:
        List[date]: The month's Sundays.
    """
    first, last = month_bounds(year, month)
    current = first + timedelta(days=(6 - first.weekday()) % 7)
    out: List[date] = []
    while current <= last:
        out.append(current)
        current += timedelta(days=7)
    return out

def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Returns the first and last day of the month."""
    return date(year, month, 1), date(year, month, pycal.monthrange(year, month)[1])
