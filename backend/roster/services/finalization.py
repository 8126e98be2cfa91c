from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth.models import User
from django.utils import timezone

from roster.domain.models import FinalizedRoster, Member
from roster.domain.repositories import FinalizedRosterRepository
from roster.exceptions import ValidationError

log = logging.getLogger(__name__)

def _check(year: int, month: int) -> None:
    if not (1 <= int(month) <= 12):
        raise ValidationError("Parameter 'month' must be between 1 and 12.")

def finalize(year: int, month: int, *, user: Optional[User] = None, message: Optional[str] = None) -> FinalizedRoster:
    """Publishes a month's roster to members.

    Finalizing an already finalized month keeps it finalized and replaces the message.

    Args:
        year (int): The year.
        month (int): The month (1-12).
        user (Optional[User], optional): The admin finalizing. Defaults to None.
        message (Optional[str], optional): Note shown with the published roster. Defaults to None.

    Returns:
        FinalizedRoster: The stored state.
    """
    _check(year, month)
    roster, _ = FinalizedRoster.objects.get_or_create(
        year=int(year), month=int(month), defaults={"created_by": user},
    )
    roster.is_finalized = True
    roster.message = (message or "").strip() or None
    roster.finalized_at = timezone.now()
    roster.finalized_by = user
    roster.save()
    log.info("Roster %04d-%02d finalized by %s", roster.year, roster.month, user or "system")
    return roster

def revise(year: int, month: int, *, user: Optional[User] = None) -> Optional[FinalizedRoster]:
    """Turns a finalized month back into a draft.

    A month without a stored state is already a draft; nothing is written.

    Returns:
        Optional[FinalizedRoster]: The stored state, or None when there was none.
    """
    _check(year, month)
    roster = FinalizedRosterRepository.get(int(year), int(month))
    if roster is None:
        return None
    if roster.is_finalized:
        roster.is_finalized = False
        roster.finalized_at = None
        roster.finalized_by = None
        roster.save(update_fields=["is_finalized", "finalized_at", "finalized_by"])
        log.info("Roster %04d-%02d reopened for revision by %s", roster.year, roster.month, user or "system")
    return roster

def can_view(member: Optional[Member], year: int, month: int) -> bool:
    """Admins see drafts; everyone else only sees finalized months."""
    if member is not None and member.is_admin:
        return True
    return FinalizedRosterRepository.is_finalized(int(year), int(month))
