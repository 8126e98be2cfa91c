from datetime import date, datetime
from typing import Tuple, Any
import json

from django.http import HttpRequest
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.conf import settings
from rest_framework import serializers

from roster.exceptions import ValidationError

# =========================
# Helpers
# =========================

def _get_ym_from_request(request: HttpRequest, default_today: bool = True) -> Tuple[int, int, str | None]:
    """Extracts year and month from the query string or body."""
    if hasattr(request, "query_params"):
        qp = request.query_params
        dp = getattr(request, "data", {}) or {}
    else:
        qp = getattr(request, "GET", {}) or {}
        dp = {}
        if request.META.get("CONTENT_TYPE", "").startswith("application/json"):
            try:
                dp = json.loads((request.body or b"{}").decode("utf-8")) or {}
            except ValueError:
                dp = {}
    y = qp.get("year") or dp.get("year")
    m = qp.get("month") or dp.get("month")

    if y is None or m is None:
        if not default_today:
            return None, None, "Parameters 'year' and 'month' are required."
        today = timezone.localdate()
        y = y or today.year
        m = m or today.month
    try:
        y = int(y)
        m = int(m)
    except (TypeError, ValueError):
        return None, None, "Parameters 'year' and 'month' must be integers."
    if not (1 <= m <= 12):
        return None, None, "Parameter 'month' must be between 1 and 12."
    return y, m, None

def _get_setting(name: str, default: Any = None) -> Any:
    """Reads a Django setting with a fallback."""
    return getattr(settings, name, default)

def parse_service_date(value: Any) -> date:
    """Normalizes a date or an ISO 'YYYY-MM-DD' string.

    Args:
        value (Any): A date, or a string such as "2024-06-02".

    Raises:
        ValidationError: If the value is not a valid calendar date.

    Returns:
        date: The parsed date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value).strip()) if value else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"Invalid date: {value!r}. Use YYYY-MM-DD.")
    return parsed

def date_from_parts(year: int, month: int, day: int) -> date:
    """Builds a date from URL parts, raising ValidationError for impossible dates."""
    try:
        return date(int(year), int(month), int(day))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {year}-{month}-{day}.")

def parse_flag(value: Any, field: str) -> bool:
    """Reads a boolean input the way DRF does ("false", "0", "off" are False).

    Raises:
        ValidationError: If the value is not a recognised boolean.
    """
    try:
        return serializers.BooleanField().to_internal_value(value)
    except serializers.ValidationError:
        raise ValidationError(f"Field '{field}' must be a boolean.")
