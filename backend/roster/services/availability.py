from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from django.db.models import QuerySet
from django.utils import timezone

from roster.domain.models import Availability, Member
from roster.domain.repositories import AvailabilityRepository, SettingsRepository
from roster.exceptions import DeadlineExceededNotice, UnauthorizedError
from roster.utils import parse_service_date

log = logging.getLogger(__name__)

def is_locked(d: date, deadline_day: int, today: Optional[date] = None) -> bool:
    """Checks whether members can no longer change their availability for the date.

    Dates of the current month lock once the deadline day has passed; dates of
    earlier months are always locked.

    Args:
        d (date): The service date.
        deadline_day (int): Day of the month the lock starts after.
        today (Optional[date], optional): Reference day. Defaults to the local date.

    Returns:
        bool: True if a non-admin write must be refused.
    """
    today = today or timezone.localdate()
    if (d.year, d.month) < (today.year, today.month):
        return True
    if (d.year, d.month) == (today.year, today.month):
        return today.day > deadline_day
    return False

def set_availability(
    actor: Member, target: Member, service_date: Any, is_available: bool, *, today: Optional[date] = None
) -> Availability:
    """Stores a member's availability for a date.

    Args:
        actor (Member): The member performing the change.
        target (Member): The member whose availability changes.
        service_date (Any): The date (date or "YYYY-MM-DD").
        is_available (bool): Willing to serve.
        today (Optional[date], optional): Reference day for the deadline. Defaults to None.

    Raises:
        UnauthorizedError: A non-admin tried to change someone else's availability.
        DeadlineExceededNotice: The date is locked for non-admins.

    Returns:
        Availability: The stored row.
    """
    d = parse_service_date(service_date)
    if not actor.is_admin and actor.id != target.id:
        raise UnauthorizedError("Members can only change their own availability.")
    if not actor.is_admin:
        deadline_day = SettingsRepository.load().deadline_day
        if is_locked(d, deadline_day, today):
            log.info("Availability change by %s for %s refused after deadline", actor, d)
            raise DeadlineExceededNotice(deadline_day)
    return AvailabilityRepository.upsert(target, d, bool(is_available))

def list_availability(
    member: Optional[Member] = None, year: Optional[int] = None, month: Optional[int] = None
) -> QuerySet[Availability]:
    if year is not None and month is not None:
        return AvailabilityRepository.for_month(year, month, member)
    qs = Availability.objects.select_related("member").order_by("service_date", "member__last_name")
    if member is not None:
        qs = qs.filter(member=member)
    return qs
