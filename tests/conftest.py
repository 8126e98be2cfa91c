import pytest
from rest_framework.test import APIClient

from roster.domain.models import Availability, ServiceRole
from roster.services.members import create_member

@pytest.fixture
def make_member(db):
    def _make(first_name, last_name, **kwargs):
        return create_member(first_name, last_name, **kwargs)
    return _make

@pytest.fixture
def admin_member(make_member):
    return make_member("Ada", "Admin", email="ada@example.com", is_admin=True)

@pytest.fixture
def member(make_member):
    return make_member("John", "Smith", email="john@example.com")

@pytest.fixture
def make_role(db):
    def _make(name, max_occupants=1, order=None, is_active=True):
        if order is None:
            order = ServiceRole.objects.count()
        return ServiceRole.objects.create(name=name, max_occupants=max_occupants, order=order, is_active=is_active)
    return _make

@pytest.fixture
def mark_available(db):
    def _mark(member, d, is_available=True):
        return Availability.objects.create(member=member, service_date=d, is_available=is_available)
    return _mark

@pytest.fixture
def admin_client(admin_member):
    client = APIClient()
    client.force_login(admin_member.user)
    return client

@pytest.fixture
def member_client(member):
    client = APIClient()
    client.force_login(member.user)
    return client
