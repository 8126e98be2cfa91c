from datetime import date

import pytest

from roster.domain.forms import RosterAssignmentForm
from roster.domain.models import AuditLog, RosterAssignment
from roster.exceptions import (
    DuplicateAssignmentConflict,
    MemberUnavailable,
    NotFoundError,
    RoleCapacityExceeded,
    ValidationError,
)
from roster.services.roster_engine import (
    clear_assignments_for_date,
    list_available_sundays,
    month_assignments,
    propose_assignment,
    remove_assignment,
    roster_matrix,
    save_staged_assignments,
)

SUNDAY = date(2024, 6, 2)

@pytest.mark.django_db
def test_capacity_then_toggle_frees_slot(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    b = make_member("Ben", "Cole")
    drummer = make_role("Drummer", max_occupants=1)
    mark_available(a, SUNDAY)
    mark_available(b, SUNDAY)

    assert propose_assignment(SUNDAY, drummer.id, a.id).action == "created"
    with pytest.raises(RoleCapacityExceeded):
        propose_assignment(SUNDAY, drummer.id, b.id)
    assert propose_assignment(SUNDAY, drummer.id, a.id).action == "removed"
    assert propose_assignment(SUNDAY, drummer.id, b.id).action == "created"
    assert list(RosterAssignment.objects.values_list("member_id", flat=True)) == [b.id]

@pytest.mark.django_db
def test_second_role_same_date_is_duplicate(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    singer = make_role("Singer", max_occupants=4)
    mark_available(a, SUNDAY)

    propose_assignment(SUNDAY, usher.id, a.id)
    with pytest.raises(DuplicateAssignmentConflict):
        propose_assignment(SUNDAY, singer.id, a.id)
    assert RosterAssignment.objects.filter(member=a, service_date=SUNDAY).count() == 1

@pytest.mark.django_db
def test_toggle_returns_to_previous_state(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    mark_available(a, SUNDAY)

    before = RosterAssignment.objects.count()
    propose_assignment(SUNDAY, usher.id, a.id)
    outcome = propose_assignment(SUNDAY, usher.id, a.id)
    assert outcome.action == "removed"
    assert outcome.assignments == []
    assert RosterAssignment.objects.count() == before

@pytest.mark.django_db
def test_unavailable_member_is_rejected(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    c = make_member("Carl", "Dunn")
    usher = make_role("Usher", max_occupants=2)
    mark_available(a, SUNDAY, is_available=False)

    with pytest.raises(MemberUnavailable):
        propose_assignment(SUNDAY, usher.id, a.id)
    with pytest.raises(MemberUnavailable):
        propose_assignment(SUNDAY, usher.id, c.id)

@pytest.mark.django_db
def test_unassign_does_not_require_availability(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    row = mark_available(a, SUNDAY)
    propose_assignment(SUNDAY, usher.id, a.id)
    row.is_available = False
    row.save()

    assert propose_assignment(SUNDAY, usher.id, a.id).action == "removed"

@pytest.mark.django_db
def test_unknown_ids_and_inactive_role(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    retired = make_role("Retired", is_active=False)
    mark_available(a, SUNDAY)

    with pytest.raises(NotFoundError):
        propose_assignment(SUNDAY, 9999, a.id)
    with pytest.raises(NotFoundError):
        propose_assignment(SUNDAY, usher.id, 9999)
    with pytest.raises(ValidationError):
        propose_assignment(SUNDAY, retired.id, a.id)
    with pytest.raises(ValidationError):
        propose_assignment("2024-02-30", usher.id, a.id)

@pytest.mark.django_db
def test_unlimited_role_accepts_everyone(make_member, make_role, mark_available):
    open_role = make_role("Choir", max_occupants=None)
    people = [make_member(f"P{i}", f"Person{i}") for i in range(5)]
    for p in people:
        mark_available(p, SUNDAY)
        propose_assignment(SUNDAY, open_role.id, p.id)
    assert RosterAssignment.objects.filter(role=open_role).count() == 5

@pytest.mark.django_db
def test_no_member_twice_and_no_role_over_capacity(make_member, make_role, mark_available):
    people = [make_member(f"P{i}", f"Person{i}") for i in range(6)]
    roles = [make_role("Usher", 2), make_role("Drummer", 1), make_role("Singer", 3)]
    for p in people:
        mark_available(p, SUNDAY)

    for p in people:
        for r in roles:
            try:
                propose_assignment(SUNDAY, r.id, p.id)
            except (RoleCapacityExceeded, DuplicateAssignmentConflict):
                pass

    rows = RosterAssignment.objects.filter(service_date=SUNDAY)
    member_ids = list(rows.values_list("member_id", flat=True))
    assert len(member_ids) == len(set(member_ids))
    for r in roles:
        assert rows.filter(role=r).count() <= r.max_occupants

@pytest.mark.django_db
def test_clear_is_idempotent(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    b = make_member("Ben", "Cole")
    usher = make_role("Usher", max_occupants=2)
    for p in (a, b):
        mark_available(p, SUNDAY)
        propose_assignment(SUNDAY, usher.id, p.id)

    assert clear_assignments_for_date(SUNDAY) == 2
    assert clear_assignments_for_date(SUNDAY) == 0

@pytest.mark.django_db
def test_remove_assignment(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    mark_available(a, SUNDAY)
    outcome = propose_assignment(SUNDAY, usher.id, a.id)

    remove_assignment(outcome.assignment_id)
    assert not RosterAssignment.objects.exists()
    with pytest.raises(NotFoundError):
        remove_assignment(outcome.assignment_id)

@pytest.mark.django_db
def test_list_available_sundays_march_2024(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    b = make_member("Ben", "Cole")
    make_role("Usher", max_occupants=2)
    mark_available(a, date(2024, 3, 10))
    mark_available(b, date(2024, 3, 10), is_available=False)

    sundays = list_available_sundays(2024, 3)
    assert [s.date for s in sundays] == [
        date(2024, 3, 3), date(2024, 3, 10), date(2024, 3, 17), date(2024, 3, 24), date(2024, 3, 31),
    ]
    by_date = {s.date: s for s in sundays}
    assert by_date[date(2024, 3, 3)].available_people == []
    assert by_date[date(2024, 3, 10)].available_people == [a]
    assert [r.name for r in by_date[date(2024, 3, 10)].roles] == ["Usher"]

@pytest.mark.django_db
def test_unavailable_member_hidden_even_when_assigned(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    row = mark_available(a, SUNDAY)
    propose_assignment(SUNDAY, usher.id, a.id)
    row.is_available = False
    row.save()

    entry = next(s for s in list_available_sundays(2024, 6) if s.date == SUNDAY)
    assert a not in entry.available_people
    assert [x.member_id for x in entry.assignments] == [a.id]

@pytest.mark.django_db
def test_save_staged_assignments_reports_each_item(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    b = make_member("Ben", "Cole")
    c = make_member("Carl", "Dunn")
    drummer = make_role("Drummer", max_occupants=1)
    usher = make_role("Usher", max_occupants=2)
    for p in (a, b):
        mark_available(p, SUNDAY)
    propose_assignment(SUNDAY, usher.id, a.id)

    results = save_staged_assignments(SUNDAY, [
        (usher.id, a.id),
        (drummer.id, b.id),
        (usher.id, c.id),
    ])
    assert [r.status for r in results] == ["skipped", "created", "failed"]
    assert results[2].code == "member_unavailable"
    assert RosterAssignment.objects.filter(service_date=SUNDAY).count() == 2

@pytest.mark.django_db
def test_month_views(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    mark_available(a, SUNDAY)
    propose_assignment(SUNDAY, usher.id, a.id)

    assert [x.member_id for x in month_assignments(2024, 6)] == [a.id]
    matrix = roster_matrix(2024, 6)
    assert list(matrix.keys())[0] == SUNDAY
    assert matrix[SUNDAY] == {"Usher": [a]}
    assert matrix[date(2024, 6, 9)] == {}
    with pytest.raises(ValidationError):
        month_assignments(2024, 13)

@pytest.mark.django_db
def test_assignment_changes_are_audited(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    mark_available(a, SUNDAY)
    propose_assignment(SUNDAY, usher.id, a.id)
    propose_assignment(SUNDAY, usher.id, a.id)

    actions = list(
        AuditLog.objects.filter(table=RosterAssignment._meta.db_table).order_by("id").values_list("action", flat=True)
    )
    assert actions == ["create", "delete"]

@pytest.mark.django_db
def test_batch_save_never_removes_a_stored_pairing(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    usher = make_role("Usher", max_occupants=2)
    mark_available(a, SUNDAY)
    stored = propose_assignment(SUNDAY, usher.id, a.id)

    outcome = propose_assignment(SUNDAY, usher.id, a.id, toggle=False)
    assert outcome.action == "skipped"
    assert outcome.assignment_id == stored.assignment_id

    results = save_staged_assignments(SUNDAY, [(usher.id, a.id), (usher.id, a.id)])
    assert [r.status for r in results] == ["skipped", "skipped"]
    assert RosterAssignment.objects.filter(service_date=SUNDAY, member=a).count() == 1

@pytest.mark.django_db
def test_admin_form_applies_roster_rules(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    b = make_member("Ben", "Cole")
    drummer = make_role("Drummer", max_occupants=1)
    mark_available(a, SUNDAY)
    propose_assignment(SUNDAY, drummer.id, a.id)

    form = RosterAssignmentForm(data={"service_date": "2024-06-02", "role": drummer.id, "member": b.id})
    assert not form.is_valid()
    assert "not available" in form.errors["__all__"][0]

    mark_available(b, SUNDAY)
    form = RosterAssignmentForm(data={"service_date": "2024-06-02", "role": drummer.id, "member": b.id})
    assert not form.is_valid()
    assert "full" in form.errors["__all__"][0]
    assert RosterAssignment.objects.filter(role=drummer, service_date=SUNDAY).count() == 1

    existing = RosterAssignment.objects.get(member=a, service_date=SUNDAY)
    form = RosterAssignmentForm(
        data={"service_date": "2024-06-02", "role": drummer.id, "member": a.id, "notes": "brings sticks"},
        instance=existing,
    )
    assert form.is_valid(), form.errors
    form.save()
    existing.refresh_from_db()
    assert existing.notes == "brings sticks"

@pytest.mark.django_db
def test_admin_form_rejects_inactive_role(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell")
    retired = make_role("Retired", is_active=False)
    mark_available(a, SUNDAY)
    form = RosterAssignmentForm(data={"service_date": "2024-06-02", "role": retired.id, "member": a.id})
    assert not form.is_valid()
    assert "not active" in form.errors["__all__"][0]
