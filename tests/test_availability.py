from datetime import date

import pytest

from roster.domain.models import Availability
from roster.exceptions import DeadlineExceededNotice, UnauthorizedError
from roster.services.availability import is_locked, list_availability, set_availability
from roster.services.preferences import update_settings

def test_lock_rules():
    today = date(2024, 6, 21)
    assert is_locked(date(2024, 6, 30), 20, today) is True
    assert is_locked(date(2024, 6, 30), 21, today) is False
    assert is_locked(date(2024, 7, 7), 20, today) is False
    assert is_locked(date(2024, 5, 26), 31, today) is True

@pytest.mark.django_db
def test_member_sets_own_availability(member):
    row = set_availability(member, member, "2024-07-07", True, today=date(2024, 6, 1))
    assert row.is_available is True
    set_availability(member, member, "2024-07-07", False, today=date(2024, 6, 1))
    assert Availability.objects.get(member=member, service_date=date(2024, 7, 7)).is_available is False
    assert Availability.objects.count() == 1

@pytest.mark.django_db
def test_deadline_blocks_members_but_not_admins(member, admin_member):
    update_settings(deadline_day=20)
    with pytest.raises(DeadlineExceededNotice) as exc:
        set_availability(member, member, "2024-06-30", True, today=date(2024, 6, 21))
    assert exc.value.deadline_day == 20
    assert not Availability.objects.exists()

    set_availability(admin_member, member, "2024-06-30", True, today=date(2024, 6, 21))
    assert Availability.objects.get(member=member).is_available is True

@pytest.mark.django_db
def test_members_cannot_edit_others(member, make_member):
    other = make_member("Olga", "Other")
    with pytest.raises(UnauthorizedError):
        set_availability(member, other, "2024-07-07", True, today=date(2024, 6, 1))

@pytest.mark.django_db
def test_list_availability_by_month(member, mark_available):
    mark_available(member, date(2024, 6, 2))
    mark_available(member, date(2024, 7, 7))
    assert [a.service_date for a in list_availability(member, 2024, 6)] == [date(2024, 6, 2)]
    assert len(list_availability(member)) == 2
