from __future__ import annotations

import logging
import re
from typing import Optional

from django.contrib.auth.models import User
from django.db import transaction

from roster.domain.models import Member
from roster.domain.repositories import MemberRepository
from roster.exceptions import ConflictOnDelete, NotFoundError, UnauthorizedError, ValidationError
from roster.utils import _get_setting

log = logging.getLogger(__name__)

PIN_RE = re.compile(r"^\d{4,6}$")
INITIALS_RE = re.compile(r"^[A-Za-z0-9]{1,5}$")

# =========================
# Members
# =========================

def _get_member(member_id: int) -> Member:
    member = MemberRepository.get(member_id)
    if member is None:
        raise NotFoundError(f"Member {member_id} not found.")
    return member

def _sync_user(member: Member) -> None:
    user = member.user
    user.username = member.initials
    user.first_name = member.first_name
    user.last_name = member.last_name
    user.email = member.email or ""
    user.is_staff = member.is_admin
    user.is_superuser = member.is_admin
    user.save()

def _clean_name(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"Field '{field}' is required.")
    if len(value) > 80:
        raise ValidationError(f"Field '{field}' must have at most 80 characters.")
    return value

@transaction.atomic
def create_member(
    first_name: str, last_name: str, *, email: Optional[str] = None, is_admin: bool = False
) -> Member:
    """Creates a member with generated initials and the default PIN.

    Args:
        first_name (str): First name.
        last_name (str): Last name.
        email (Optional[str], optional): Contact e-mail. Defaults to None.
        is_admin (bool, optional): Grants admin rights. Defaults to False.

    Returns:
        Member: The new member, flagged for PIN change on first login.
    """
    first_name = _clean_name(first_name, "firstName")
    last_name = _clean_name(last_name, "lastName")
    initials = MemberRepository.unique_initials(first_name, last_name)
    user = User(username=initials)
    user.set_password(_get_setting("ROSTER_DEFAULT_PIN", "000000"))
    user.save()
    member = Member.objects.create(
        user=user, first_name=first_name, last_name=last_name, initials=initials,
        email=(email or "").strip() or None, is_admin=bool(is_admin), first_login=True,
    )
    _sync_user(member)
    log.info("Member %s created (initials=%s, admin=%s)", member, initials, member.is_admin)
    return member

@transaction.atomic
def delete_member(member_id: int) -> None:
    """Deletes a member with their login, availability and assignments.

    Raises:
        NotFoundError: Unknown member.
        ConflictOnDelete: The member is the last admin.
    """
    member = _get_member(member_id)
    if member.is_admin and MemberRepository.admins().exclude(id=member.id).count() == 0:
        raise ConflictOnDelete("The last administrator cannot be deleted.")
    log.info("Deleting member %s", member)
    member.user.delete()

def reset_pin(member_id: int) -> Member:
    member = _get_member(member_id)
    member.user.set_password(_get_setting("ROSTER_DEFAULT_PIN", "000000"))
    member.user.save(update_fields=["password"])
    member.first_login = True
    member.save(update_fields=["first_login"])
    log.info("PIN reset for %s", member)
    return member

def change_pin(member: Member, current_pin: str, new_pin: str) -> Member:
    """Replaces the member's PIN after checking the current one.

    Raises:
        UnauthorizedError: The current PIN is wrong.
        ValidationError: The new PIN is not 4 to 6 digits.
    """
    if not member.user.check_password(str(current_pin or "")):
        raise UnauthorizedError("Current PIN is incorrect.")
    new_pin = str(new_pin or "")
    if not PIN_RE.match(new_pin):
        raise ValidationError("PIN must be 4 to 6 digits.")
    member.user.set_password(new_pin)
    member.user.save(update_fields=["password"])
    member.first_login = False
    member.save(update_fields=["first_login"])
    return member

@transaction.atomic
def rename(member_id: int, first_name: str, last_name: str) -> Member:
    """Changes a member's name and regenerates the initials.

    When the regenerated initials would collide with another member's, the
    current initials are kept.
    """
    member = _get_member(member_id)
    member.first_name = _clean_name(first_name, "firstName")
    member.last_name = _clean_name(last_name, "lastName")
    candidate = f"{member.first_name[:1]}{member.last_name[:1]}".upper()
    if not MemberRepository.initials_taken(candidate, exclude_id=member.id):
        member.initials = candidate
    member.save()
    _sync_user(member)
    return member

@transaction.atomic
def set_initials(member_id: int, initials: str) -> Member:
    """Sets custom initials (1 to 5 letters or digits, unique)."""
    member = _get_member(member_id)
    initials = (initials or "").strip().upper()
    if not INITIALS_RE.match(initials):
        raise ValidationError("Initials must be 1 to 5 letters or digits.")
    if MemberRepository.initials_taken(initials, exclude_id=member.id):
        raise ValidationError(f"Initials '{initials}' are already used by another member.")
    member.initials = initials
    member.save(update_fields=["initials"])
    _sync_user(member)
    return member
