import pytest
from django.contrib.auth import authenticate

from roster.domain.models import Availability, Member
from roster.exceptions import ConflictOnDelete, UnauthorizedError, ValidationError
from roster.services import members

@pytest.mark.django_db
def test_initials_get_numeric_suffix_on_collision(make_member):
    assert make_member("John", "Smith").initials == "JS"
    assert make_member("Jane", "Stone").initials == "JS2"
    assert make_member("Jack", "Sparrow").initials == "JS3"

@pytest.mark.django_db
def test_new_member_has_default_pin_and_first_login(member, settings):
    assert member.first_login is True
    assert member.user.username == member.initials
    assert member.user.check_password(settings.ROSTER_DEFAULT_PIN)

@pytest.mark.django_db
def test_pin_backend_authenticates_by_member_id(member, settings):
    assert authenticate(None, member_id=member.id, pin=settings.ROSTER_DEFAULT_PIN) == member.user
    assert authenticate(None, member_id=member.id, pin="999999") is None
    assert authenticate(None, member_id=424242, pin=settings.ROSTER_DEFAULT_PIN) is None

@pytest.mark.django_db
def test_change_pin(member, settings):
    with pytest.raises(UnauthorizedError):
        members.change_pin(member, "111111", "1234")
    with pytest.raises(ValidationError):
        members.change_pin(member, settings.ROSTER_DEFAULT_PIN, "12ab")
    members.change_pin(member, settings.ROSTER_DEFAULT_PIN, "4321")
    member.refresh_from_db()
    assert member.first_login is False
    assert member.user.check_password("4321")

@pytest.mark.django_db
def test_reset_pin_restores_default(member, settings):
    members.change_pin(member, settings.ROSTER_DEFAULT_PIN, "4321")
    members.reset_pin(member.id)
    member.refresh_from_db()
    assert member.first_login is True
    assert member.user.check_password(settings.ROSTER_DEFAULT_PIN)

@pytest.mark.django_db
def test_rename_regenerates_initials_unless_taken(make_member):
    john = make_member("John", "Smith")
    make_member("Mary", "Jones")

    renamed = members.rename(john.id, "Mark", "Jones")
    assert renamed.initials == "JS"
    renamed = members.rename(john.id, "Luke", "Brown")
    assert renamed.initials == "LB"
    assert renamed.user.username == "LB"

@pytest.mark.django_db
def test_set_initials(make_member):
    john = make_member("John", "Smith")
    make_member("Mary", "Jones")

    assert members.set_initials(john.id, "jsm").initials == "JSM"
    with pytest.raises(ValidationError):
        members.set_initials(john.id, "MJ")
    with pytest.raises(ValidationError):
        members.set_initials(john.id, "TOOLONG")

@pytest.mark.django_db
def test_last_admin_cannot_be_deleted(admin_member, make_member):
    with pytest.raises(ConflictOnDelete):
        members.delete_member(admin_member.id)
    other = make_member("Olga", "Other", is_admin=True)
    members.delete_member(admin_member.id)
    assert not Member.objects.filter(id=admin_member.id).exists()
    assert Member.objects.filter(id=other.id).exists()

@pytest.mark.django_db
def test_delete_member_cascades(member, mark_available):
    from datetime import date
    mark_available(member, date(2024, 6, 2))
    members.delete_member(member.id)
    assert not Availability.objects.exists()
