# finote/utils.py
import math
from calendar import monthrange
from datetime import date, datetime


def parse_date(value):
    """
    Coerce a date, datetime or ISO string to a date.
    Returns None when the value cannot be read as a calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def parse_amount(value):
    """Return value as a finite float, or None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_half_up(value):
    return int(math.floor(value + 0.5))


def add_months(original_date, months):
    """Shift by whole months, clamping to the last day of the target month."""
    month_index = original_date.month - 1 + months
    year = original_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(original_date.day, monthrange(year, month)[1])
    return date(year, month, day)
