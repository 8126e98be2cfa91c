from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from django.contrib.auth.models import User
from django.db import IntegrityError, transaction

from roster.domain.models import Member, RosterAssignment, ServiceRole, SpecialDay
from roster.domain.repositories import (
    AssignmentRepository,
    AvailabilityRepository,
    MemberRepository,
    ServiceRoleRepository,
    SettingsRepository,
    SpecialDayRepository,
)
from roster.exceptions import (
    DuplicateAssignmentConflict,
    MemberUnavailable,
    NotFoundError,
    RoleCapacityExceeded,
    RosterError,
    ValidationError,
)
from roster.services.calendar import sundays_in_month
from roster.utils import parse_service_date

log = logging.getLogger(__name__)

# ===== Data Classes =====

@dataclass
class AssignmentOutcome:
    """Result of a single proposal: what happened and the date's assignments afterwards."""
    action: str
    service_date: date
    role: ServiceRole
    member: Member
    assignment_id: Optional[int]
    assignments: List[RosterAssignment] = field(default_factory=list)

@dataclass
class StagedResult:
    """Per-pairing result of a batch save."""
    role_id: int
    member_id: int
    status: str
    code: Optional[str] = None
    message: Optional[str] = None
    assignment_id: Optional[int] = None

@dataclass
class SundayRoster:
    """One Sunday of the builder view."""
    date: date
    available_people: List[Member]
    assignments: List[RosterAssignment]
    special_day: Optional[SpecialDay]
    roles: List[ServiceRole]
    name_format: str

    def formatted_people(self) -> List[Tuple[Member, str]]:
        return [(m, m.formatted_name(self.name_format)) for m in self.available_people]

# ===== Helpers =====

def _check_year_month(year: int, month: int) -> None:
    if not (1 <= int(month) <= 12):
        raise ValidationError("Parameter 'month' must be between 1 and 12.")
    if not (1 <= int(year) <= 9999):
        raise ValidationError("Parameter 'year' is out of range.")

def _duplicate_message(member: Member, current: Optional[RosterAssignment], d: date) -> str:
    if current is None:
        return f"{member} is already assigned to another role on {d:%Y-%m-%d}."
    return f"{member} is already assigned as {current.role.name} on {d:%Y-%m-%d}."

# ===== Operations =====

def check_assignment(
    role: ServiceRole, member: Member, d: date, *, exclude_id: Optional[int] = None
) -> None:
    """Applies the rules a new or edited assignment must satisfy.

    Args:
        role (ServiceRole): The role to fill.
        member (Member): The member to place.
        d (date): The service date.
        exclude_id (Optional[int], optional): Assignment being edited, left out of the checks. Defaults to None.

    Raises:
        ValidationError: The role is inactive.
        MemberUnavailable: The member is not available on the date.
        DuplicateAssignmentConflict: The member already holds another role on the date.
        RoleCapacityExceeded: The role is full on the date.
    """
    if not role.is_active:
        raise ValidationError(f"Service role '{role.name}' is not active.")
    if not AvailabilityRepository.is_available(member.id, d):
        raise MemberUnavailable(f"{member} is not available on {d:%Y-%m-%d}.")
    current = AssignmentRepository.of_member_on(member.id, d)
    if current is not None and current.id != exclude_id:
        raise DuplicateAssignmentConflict(_duplicate_message(member, current, d))

    count = AssignmentRepository.count_for_role(role.id, d, exclude_id=exclude_id)
    if not role.has_room(count):
        raise RoleCapacityExceeded(
            f"{role.name} is full on {d:%Y-%m-%d} ({count} of {role.max_occupants})."
        )

def propose_assignment(
    service_date: Any, role_id: int, member_id: int, *, user: Optional[User] = None, toggle: bool = True
) -> AssignmentOutcome:
    """Assigns a member to a role on a date, or removes the pairing if it already exists.

    Proposing a pairing that is already stored un-assigns it. Otherwise the
    member must be available on the date, must not hold another role that
    day, and the role must still have room.

    Args:
        service_date (Any): The service date (date or "YYYY-MM-DD").
        role_id (int): The role's ID.
        member_id (int): The member's ID.
        user (Optional[User], optional): The acting user, stored as creator. Defaults to None.
        toggle (bool, optional): When False a stored pairing is left in place and
            reported as "skipped". Defaults to True.

    Raises:
        ValidationError: Bad date, or inactive role.
        NotFoundError: Unknown role or member.
        MemberUnavailable: The member is not available on the date.
        DuplicateAssignmentConflict: The member already holds another role on the date.
        RoleCapacityExceeded: The role is full on the date.

    Returns:
        AssignmentOutcome: "created", "removed" or "skipped", plus the date's assignments.
    """
    d = parse_service_date(service_date)
    with transaction.atomic():
        # Lock the role row so concurrent proposals for it count one at a time.
        role = ServiceRole.objects.select_for_update().filter(id=role_id).first()
        if role is None:
            raise NotFoundError(f"Service role {role_id} not found.")
        member = MemberRepository.get(member_id)
        if member is None:
            raise NotFoundError(f"Member {member_id} not found.")

        current = AssignmentRepository.of_member_on(member.id, d)
        if current is not None and current.role_id == role.id:
            if not toggle:
                return AssignmentOutcome(
                    action="skipped", service_date=d, role=role, member=member,
                    assignment_id=current.id, assignments=list(AssignmentRepository.for_date(d)),
                )
            removed_id = current.id
            current.delete()
            log.info("Unassigned %s from %s on %s", member, role, d)
            return AssignmentOutcome(
                action="removed", service_date=d, role=role, member=member,
                assignment_id=removed_id, assignments=list(AssignmentRepository.for_date(d)),
            )

        check_assignment(role, member, d)
        try:
            with transaction.atomic():
                assignment = RosterAssignment.objects.create(
                    service_date=d, role=role, member=member, created_by=user,
                )
        except IntegrityError:
            raise DuplicateAssignmentConflict(_duplicate_message(member, None, d))

    log.info("Assigned %s as %s on %s", member, role, d)
    return AssignmentOutcome(
        action="created", service_date=d, role=role, member=member,
        assignment_id=assignment.id, assignments=list(AssignmentRepository.for_date(d)),
    )

def save_staged_assignments(
    service_date: Any, pairings: Sequence[Tuple[int, int]], *, user: Optional[User] = None
) -> List[StagedResult]:
    """Saves the pairings staged in the builder, each one on its own.

    Pairings already stored are skipped (never toggled off). A failing pairing
    does not undo the ones saved before it; every pairing gets its own result.

    Args:
        service_date (Any): The service date.
        pairings (Sequence[Tuple[int, int]]): (role_id, member_id) pairs.
        user (Optional[User], optional): The acting user. Defaults to None.

    Returns:
        List[StagedResult]: One result per pairing, in input order.
    """
    d = parse_service_date(service_date)
    results: List[StagedResult] = []
    for role_id, member_id in pairings:
        key = (int(role_id), int(member_id))
        try:
            outcome = propose_assignment(d, key[0], key[1], user=user, toggle=False)
        except RosterError as exc:
            results.append(StagedResult(*key, status="failed", code=exc.code, message=exc.message))
            continue
        results.append(StagedResult(*key, status=outcome.action, assignment_id=outcome.assignment_id))

    failed = sum(1 for r in results if r.status == "failed")
    if failed:
        log.warning("Batch save on %s: %d of %d pairing(s) failed", d, failed, len(results))
    return results

def remove_assignment(assignment_id: int) -> RosterAssignment:
    """Deletes one assignment.

    Raises:
        NotFoundError: No assignment with this ID.
    """
    assignment = AssignmentRepository.base_qs().filter(id=assignment_id).first()
    if assignment is None:
        raise NotFoundError(f"Roster assignment {assignment_id} not found.")
    assignment.delete()
    return assignment

def clear_assignments_for_date(service_date: Any) -> int:
    """Deletes every assignment of the date.

    Args:
        service_date (Any): The service date.

    Returns:
        int: Rows removed; 0 when there was nothing to clear.
    """
    d = parse_service_date(service_date)
    _, per_model = RosterAssignment.objects.filter(service_date=d).delete()
    deleted = per_model.get(RosterAssignment._meta.label, 0)
    log.info("Cleared %d assignment(s) on %s", deleted, d)
    return deleted

def list_available_sundays(year: int, month: int) -> List[SundayRoster]:
    """Builds the roster-builder view of a month: every Sunday with its people.

    Each Sunday carries the members available on that exact date, the
    assignments already stored, the special day (if any) and the active roles.
    Sundays with nobody available are kept.

    Args:
        year (int): The year.
        month (int): The month (1-12).

    Returns:
        List[SundayRoster]: One entry per Sunday, ascending.
    """
    _check_year_month(year, month)
    sundays = sundays_in_month(int(year), int(month))
    available = AvailabilityRepository.available_member_ids_by_date(sundays)
    assignments = AssignmentRepository.for_dates(sundays)
    specials = SpecialDayRepository.by_dates(sundays)
    roles = list(ServiceRoleRepository.actives())
    name_format = SettingsRepository.name_format()

    all_ids = set().union(*available.values()) if available else set()
    members = {m.id: m for m in MemberRepository.by_ids(all_ids)}

    out: List[SundayRoster] = []
    for d in sundays:
        people = [members[mid] for mid in available.get(d, set()) if mid in members]
        people.sort(key=lambda m: (m.last_name, m.first_name))
        out.append(SundayRoster(
            date=d,
            available_people=people,
            assignments=assignments.get(d, []),
            special_day=specials.get(d),
            roles=roles,
            name_format=name_format,
        ))
    return out

def month_assignments(year: int, month: int) -> List[RosterAssignment]:
    _check_year_month(year, month)
    return list(AssignmentRepository.month(int(year), int(month)))

def roster_matrix(year: int, month: int) -> "OrderedDict[date, OrderedDict[str, List[Member]]]":
    """Groups the month's assignments as {date: {role name: [members]}} for exporters.

    Every Sunday appears even without assignments; other dates appear only
    when they have assignments. Roles follow the registry order.

    Args:
        year (int): The year.
        month (int): The month (1-12).

    Returns:
        OrderedDict[date, OrderedDict[str, List[Member]]]: The roster grid.
    """
    _check_year_month(year, month)
    items = month_assignments(year, month)
    dates: Iterable[date] = sorted(set(sundays_in_month(int(year), int(month))) | {a.service_date for a in items})
    matrix: "OrderedDict[date, OrderedDict[str, List[Member]]]" = OrderedDict((d, OrderedDict()) for d in dates)
    for a in items:
        matrix[a.service_date].setdefault(a.role.name, []).append(a.member)
    return matrix
