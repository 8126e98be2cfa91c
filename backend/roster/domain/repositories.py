from __future__ import annotations

import random
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from roster.domain.models import (
    Availability,
    FinalizedRoster,
    Member,
    RosterAssignment,
    RosterSettings,
    ServiceRole,
    SpecialDay,
    Verse,
)
from roster.utils import _get_setting

# ==========================================================
# Member Repository
# ==========================================================
class MemberRepository:
    """Queries for Member."""

    @classmethod
    def all_members(cls) -> QuerySet[Member]:
        return Member.objects.select_related("user").order_by("last_name", "first_name")

    @classmethod
    def get(cls, member_id: int) -> Optional[Member]:
        return Member.objects.select_related("user").filter(id=member_id).first()

    @classmethod
    def by_ids(cls, ids: Iterable[int]) -> QuerySet[Member]:
        return Member.objects.filter(id__in=ids).order_by("last_name", "first_name")

    @classmethod
    def admins(cls) -> QuerySet[Member]:
        return Member.objects.filter(is_admin=True)

    @classmethod
    def initials_taken(cls, initials: str, exclude_id: Optional[int] = None) -> bool:
        """Checks whether the initials are already used by another member.

        Args:
            initials (str): The initials to check.
            exclude_id (Optional[int], optional): A member to ignore (the one being edited). Defaults to None.

        Returns:
            bool: True if some other member already has these initials.
        """
        qs = Member.objects.filter(initials=initials)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

    @classmethod
    def unique_initials(cls, first_name: str, last_name: str, exclude_id: Optional[int] = None) -> str:
        """Generates initials from the name, adding a numeric suffix on collision ("JS", "JS2", ...).

        Args:
            first_name (str): First name.
            last_name (str): Last name.
            exclude_id (Optional[int], optional): A member to ignore. Defaults to None.

        Returns:
            str: Initials not used by any other member.
        """
        base = f"{first_name[:1]}{last_name[:1]}".upper()
        taken: Set[str] = set(
            Member.objects.filter(initials__startswith=base)
            .exclude(id=exclude_id or 0)
            .values_list("initials", flat=True)
        )
        if base not in taken:
            return base
        counter = 2
        while f"{base}{counter}" in taken:
            counter += 1
        return f"{base}{counter}"

# ==========================================================
# Availability Repository
# ==========================================================
class AvailabilityRepository:
    """Queries and upserts for Availability."""

    @classmethod
    def for_member(cls, member: Member) -> QuerySet[Availability]:
        return Availability.objects.filter(member=member).order_by("service_date")

    @classmethod
    def for_month(cls, year: int, month: int, member: Optional[Member] = None) -> QuerySet[Availability]:
        qs = Availability.objects.filter(service_date__year=year, service_date__month=month)
        if member is not None:
            qs = qs.filter(member=member)
        return qs.select_related("member").order_by("service_date", "member__last_name")

    @classmethod
    def is_available(cls, member_id: int, d: date) -> bool:
        """Checks whether the member marked themselves available on the exact date.

        Args:
            member_id (int): The member's ID.
            d (date): The service date.

        Returns:
            bool: True only if an availability row exists with is_available set.
        """
        return Availability.objects.filter(member_id=member_id, service_date=d, is_available=True).exists()

    @classmethod
    def available_member_ids_by_date(cls, dates: Iterable[date]) -> Dict[date, Set[int]]:
        """Groups available member IDs by date.

        Args:
            dates (Iterable[date]): The dates to look up.

        Returns:
            Dict[date, Set[int]]: For each date, the IDs of members available on it.
        """
        out: Dict[date, Set[int]] = defaultdict(set)
        qs = Availability.objects.filter(service_date__in=list(dates), is_available=True)
        for mid, d in qs.values_list("member_id", "service_date"):
            out[d].add(int(mid))
        return out

    @classmethod
    def upsert(cls, member: Member, d: date, is_available: bool) -> Availability:
        """Updates the member's row for the date, creating it if needed.

        The (member, service_date) unique constraint makes a concurrent insert
        fail; in that case the row written by the other request is updated.

        Args:
            member (Member): The member.
            d (date): The service date.
            is_available (bool): The new availability.

        Returns:
            Availability: The stored row.
        """
        try:
            with transaction.atomic():
                obj, _ = Availability.objects.update_or_create(
                    member=member, service_date=d, defaults={"is_available": is_available}
                )
        except IntegrityError:
            obj = Availability.objects.get(member=member, service_date=d)
            obj.is_available = is_available
            obj.save(update_fields=["is_available", "last_updated"])
        return obj

# ==========================================================
# Service Role Repository
# ==========================================================
class ServiceRoleRepository:
    """Queries for ServiceRole."""

    @classmethod
    def all_roles(cls) -> QuerySet[ServiceRole]:
        return ServiceRole.objects.all().order_by("order", "id")

    @classmethod
    def actives(cls) -> QuerySet[ServiceRole]:
        return ServiceRole.objects.filter(is_active=True).order_by("order", "id")

    @classmethod
    def next_order(cls) -> int:
        last = ServiceRole.objects.order_by("-order").values_list("order", flat=True).first()
        return 0 if last is None else int(last) + 1

    @classmethod
    def is_referenced(cls, role: ServiceRole) -> bool:
        return RosterAssignment.objects.filter(role=role).exists()

# ==========================================================
# Assignment Repository
# ==========================================================
class AssignmentRepository:
    """Queries for RosterAssignment."""

    @classmethod
    def base_qs(cls) -> QuerySet[RosterAssignment]:
        return RosterAssignment.objects.select_related("role", "member")

    @classmethod
    def for_date(cls, d: date) -> QuerySet[RosterAssignment]:
        return cls.base_qs().filter(service_date=d).order_by("role__order", "role_id", "id")

    @classmethod
    def for_dates(cls, dates: Iterable[date]) -> Dict[date, List[RosterAssignment]]:
        """Groups assignments by date.

        Args:
            dates (Iterable[date]): The dates to look up.

        Returns:
            Dict[date, List[RosterAssignment]]: Assignments per date, in role order.
        """
        out: Dict[date, List[RosterAssignment]] = defaultdict(list)
        qs = cls.base_qs().filter(service_date__in=list(dates)).order_by("service_date", "role__order", "id")
        for a in qs:
            out[a.service_date].append(a)
        return out

    @classmethod
    def month(cls, year: int, month: int) -> QuerySet[RosterAssignment]:
        return (
            cls.base_qs()
            .filter(service_date__year=year, service_date__month=month)
            .order_by("service_date", "role__order", "member__last_name", "member__first_name")
        )

    @classmethod
    def of_member_on(cls, member_id: int, d: date) -> Optional[RosterAssignment]:
        return cls.base_qs().filter(member_id=member_id, service_date=d).first()

    @classmethod
    def count_for_role(cls, role_id: int, d: date, exclude_id: Optional[int] = None) -> int:
        qs = RosterAssignment.objects.filter(role_id=role_id, service_date=d)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.count()

# ==========================================================
# Special Day Repository
# ==========================================================
class SpecialDayRepository:
    """Exact-date lookups for SpecialDay."""

    @classmethod
    def all_days(cls) -> QuerySet[SpecialDay]:
        return SpecialDay.objects.all().order_by("date")

    @classmethod
    def for_month(cls, year: int, month: int) -> QuerySet[SpecialDay]:
        return SpecialDay.objects.filter(date__year=year, date__month=month).order_by("date")

    @classmethod
    def by_dates(cls, dates: Iterable[date]) -> Dict[date, SpecialDay]:
        """Maps each annotated date to its special day (the first one if several exist)."""
        out: Dict[date, SpecialDay] = {}
        for sd in SpecialDay.objects.filter(date__in=list(dates)).order_by("date", "id"):
            out.setdefault(sd.date, sd)
        return out

# ==========================================================
# Finalized Roster Repository
# ==========================================================
class FinalizedRosterRepository:
    """Queries for FinalizedRoster."""

    @classmethod
    def get(cls, year: int, month: int) -> Optional[FinalizedRoster]:
        return FinalizedRoster.objects.filter(year=year, month=month).first()

    @classmethod
    def is_finalized(cls, year: int, month: int) -> bool:
        return FinalizedRoster.objects.filter(year=year, month=month, is_finalized=True).exists()

# ==========================================================
# Settings Repository
# ==========================================================
class SettingsRepository:
    """Access to the single RosterSettings row."""

    @classmethod
    def load(cls) -> RosterSettings:
        """Returns the settings row, creating it with configured defaults on first use.

        Returns:
            RosterSettings: The settings singleton.
        """
        obj = RosterSettings.objects.order_by("id").first()
        if obj is None:
            obj = RosterSettings.objects.create(
                deadline_day=_get_setting("ROSTER_DEFAULT_DEADLINE_DAY", 20),
            )
        return obj

    @classmethod
    def name_format(cls) -> str:
        return cls.load().name_format

# ==========================================================
# Verse Repository
# ==========================================================
class VerseRepository:
    """Queries for Verse."""

    @classmethod
    def random(cls, category: str = "serving") -> Optional[Verse]:
        ids = list(Verse.objects.filter(category=category).values_list("id", flat=True))
        if not ids:
            return None
        return Verse.objects.get(id=random.choice(ids))
