import logging

from django.contrib.auth import authenticate, login, logout, update_session_auth_hash
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.forms.models import model_to_dict
from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from roster.domain.forms import SpecialDayForm
from roster.domain.models import FinalizedRoster, Member, SpecialDay
from roster.domain.repositories import (
    FinalizedRosterRepository,
    MemberRepository,
    ServiceRoleRepository,
    SettingsRepository,
    SpecialDayRepository,
    VerseRepository,
)
from roster.exceptions import (
    DeadlineExceededNotice,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from roster.services import availability, finalization, members, preferences, roles, roster_engine
from roster.services.exporters.export_ics import export_roster_ics
from roster.services.exporters.export_pdf import export_roster_pdf
from roster.services.exporters.export_xlsx import export_roster_xlsx
from roster.tasks import email_roster_pdf
from roster.utils import _get_ym_from_request, date_from_parts, parse_flag

from .filters import SpecialDayFilter
from .permissions import IsRosterAdmin
from .serializers import (
    AvailabilitySerializer,
    FinalizedRosterSerializer,
    MemberPublicSerializer,
    MemberSerializer,
    RosterAssignmentSerializer,
    RosterSettingsSerializer,
    ServiceRoleSerializer,
    SpecialDaySerializer,
    VerseSerializer,
    staged_result,
    sunday_roster,
)

log = logging.getLogger(__name__)

# =========================
# Helpers
# =========================

def _current_member(request) -> Member:
    member = getattr(request.user, "member", None)
    if member is None:
        raise UnauthorizedError("This account is not linked to a member.")
    return member

def _int_field(data, name: str) -> int:
    try:
        return int(data.get(name))
    except (TypeError, ValueError):
        raise ValidationError(f"Field '{name}' must be an integer.")

def _ym(request):
    year, month, err = _get_ym_from_request(request)
    if err:
        raise ValidationError(err)
    return year, month

def _check_month(month: int) -> None:
    if not (1 <= month <= 12):
        raise ValidationError("Parameter 'month' must be between 1 and 12.")

def _attachment(content: bytes, content_type: str, filename: str) -> HttpResponse:
    resp = HttpResponse(content, content_type=content_type)
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp

def _require_visible(request, year: int, month: int) -> None:
    if not finalization.can_view(_current_member(request), year, month):
        raise UnauthorizedError("This month's roster has not been finalized yet.")

def _form_error(form) -> ValidationError:
    messages = [str(e) for errors in form.errors.values() for e in errors]
    return ValidationError(" ".join(messages) or "Invalid input.")

# =========================
# Auth
# =========================

@api_view(["POST"])
@permission_classes([AllowAny])
def auth_login(request):
    member_id = request.data.get("memberId")
    pin = request.data.get("pin")
    if member_id in (None, "") or not pin:
        raise ValidationError("Fields 'memberId' and 'pin' are required.")
    user = authenticate(request, member_id=member_id, pin=str(pin))
    if user is None:
        return Response(
            {"message": "Invalid member or PIN.", "code": "invalid_credentials"},
            status=status.HTTP_401_UNAUTHORIZED,
        )
    login(request, user)
    return Response(MemberSerializer(user.member).data)

@api_view(["POST"])
def auth_logout(request):
    logout(request)
    return Response(status=status.HTTP_204_NO_CONTENT)

@api_view(["GET"])
def auth_me(request):
    return Response(MemberSerializer(_current_member(request)).data)

@api_view(["POST"])
def auth_change_pin(request):
    member = _current_member(request)
    members.change_pin(member, request.data.get("currentPin"), request.data.get("newPin"))
    update_session_auth_hash(request, member.user)
    return Response(MemberSerializer(member).data)

@api_view(["GET"])
@permission_classes([AllowAny])
def member_list(request):
    return Response(MemberPublicSerializer(MemberRepository.all_members(), many=True).data)

# =========================
# Roster builder / assignments
# =========================

@api_view(["GET"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def available_sundays(request, year: int, month: int):
    sundays = roster_engine.list_available_sundays(year, month)
    return Response([sunday_roster(s) for s in sundays])

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def propose_assignment(request):
    outcome = roster_engine.propose_assignment(
        request.data.get("serviceDate"),
        _int_field(request.data, "roleId"),
        _int_field(request.data, "userId"),
        user=request.user,
    )
    created = outcome.action == "created"
    assignment = next((a for a in outcome.assignments if a.id == outcome.assignment_id), None)
    return Response(
        {
            "action": outcome.action,
            "assignment": RosterAssignmentSerializer(assignment).data if created and assignment else None,
            "assignments": RosterAssignmentSerializer(outcome.assignments, many=True).data,
        },
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def save_staged_assignments(request):
    items = request.data.get("assignments")
    if not isinstance(items, list):
        raise ValidationError("Field 'assignments' must be a list.")
    pairings = [(_int_field(item, "roleId"), _int_field(item, "userId")) for item in items]
    results = roster_engine.save_staged_assignments(request.data.get("serviceDate"), pairings, user=request.user)
    return Response({
        "results": [staged_result(r) for r in results],
        "created": sum(1 for r in results if r.status == "created"),
        "skipped": sum(1 for r in results if r.status == "skipped"),
        "failed": sum(1 for r in results if r.status == "failed"),
    })

@api_view(["DELETE"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def remove_assignment(request, assignment_id: int):
    roster_engine.remove_assignment(assignment_id)
    return Response(status=status.HTTP_204_NO_CONTENT)

@api_view(["DELETE"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def clear_assignments_for_date(request, year: int, month: int, day: int):
    deleted = roster_engine.clear_assignments_for_date(date_from_parts(year, month, day))
    return Response({"deleted": deleted})

@api_view(["GET"])
def month_assignments(request, year: int, month: int):
    _check_month(month)
    finalized = FinalizedRosterRepository.is_finalized(year, month)
    visible = finalization.can_view(_current_member(request), year, month)
    items = roster_engine.month_assignments(year, month) if visible else []
    return Response({
        "year": year,
        "month": month,
        "finalized": finalized,
        "assignments": RosterAssignmentSerializer(items, many=True).data,
    })

# =========================
# Finalization
# =========================

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def finalize_roster(request):
    year, month, err = _get_ym_from_request(request, default_today=False)
    if err:
        raise ValidationError(err)
    roster = finalization.finalize(year, month, user=request.user, message=request.data.get("message"))
    return Response(FinalizedRosterSerializer(roster).data)

@api_view(["DELETE"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def revise_roster(request, year: int, month: int):
    roster = finalization.revise(year, month, user=request.user)
    return Response(FinalizedRosterSerializer(roster or FinalizedRoster(year=year, month=month)).data)

@api_view(["GET"])
def finalized_roster(request, year: int, month: int):
    _check_month(month)
    roster = FinalizedRosterRepository.get(year, month) or FinalizedRoster(year=year, month=month)
    return Response(FinalizedRosterSerializer(roster).data)

# =========================
# Special days
# =========================

@api_view(["GET"])
def special_day_list(request):
    qs = SpecialDayFilter(request.query_params, queryset=SpecialDayRepository.all_days()).qs
    return Response(SpecialDaySerializer(qs, many=True).data)

@api_view(["GET"])
def special_day_month(request):
    year, month, err = _get_ym_from_request(request, default_today=False)
    if err:
        raise ValidationError(err)
    return Response(SpecialDaySerializer(SpecialDayRepository.for_month(year, month), many=True).data)

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def special_day_create(request):
    form = SpecialDayForm(data=request.data)
    if not form.is_valid():
        raise _form_error(form)
    return Response(SpecialDaySerializer(form.save()).data, status=status.HTTP_201_CREATED)

@api_view(["PATCH", "DELETE"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def special_day_detail(request, special_day_id: int):
    special = SpecialDay.objects.filter(id=special_day_id).first()
    if special is None:
        raise NotFoundError(f"Special day {special_day_id} not found.")
    if request.method == "DELETE":
        special.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    data = model_to_dict(special, fields=["date", "name", "description", "color"])
    data.update({k: v for k, v in request.data.items() if k in data})
    form = SpecialDayForm(data=data, instance=special)
    if not form.is_valid():
        raise _form_error(form)
    return Response(SpecialDaySerializer(form.save()).data)

# =========================
# Service roles
# =========================

ROLE_FIELDS = {"name": "name", "description": "description", "isActive": "is_active", "maxOccupants": "max_occupants"}

@api_view(["GET"])
def service_role_list(request):
    return Response(ServiceRoleSerializer(ServiceRoleRepository.all_roles(), many=True).data)

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def service_role_create(request):
    role = roles.create_role(
        request.data.get("name"),
        description=request.data.get("description"),
        is_active=parse_flag(request.data.get("isActive", True), "isActive"),
        max_occupants=request.data.get("maxOccupants", 1),
    )
    return Response(ServiceRoleSerializer(role).data, status=status.HTTP_201_CREATED)

@api_view(["PATCH", "DELETE"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def service_role_detail(request, role_id: int):
    if request.method == "DELETE":
        roles.delete_role(role_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
    changes = {attr: request.data[key] for key, attr in ROLE_FIELDS.items() if key in request.data}
    role = roles.update_role(role_id, **changes)
    return Response(ServiceRoleSerializer(role).data)

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def service_role_reorder(request):
    role_ids = request.data.get("roleIds")
    if not isinstance(role_ids, list):
        raise ValidationError("Field 'roleIds' must be a list.")
    return Response(ServiceRoleSerializer(roles.reorder_roles(role_ids), many=True).data)

# =========================
# Availability
# =========================

@api_view(["GET", "POST"])
def availability_view(request):
    actor = _current_member(request)
    if request.method == "GET":
        target = actor
        if actor.is_admin and request.query_params.get("memberId"):
            target = MemberRepository.get(_int_field(request.query_params, "memberId"))
            if target is None:
                raise NotFoundError("Member not found.")
        year, month, err = _get_ym_from_request(request, default_today=False)
        qs = availability.list_availability(target, year, month) if not err else availability.list_availability(target)
        return Response(AvailabilitySerializer(qs, many=True).data)

    target = actor
    if request.data.get("memberId") not in (None, ""):
        target = MemberRepository.get(_int_field(request.data, "memberId"))
        if target is None:
            raise NotFoundError("Member not found.")
    try:
        row = availability.set_availability(
            actor, target, request.data.get("serviceDate"),
            parse_flag(request.data.get("isAvailable"), "isAvailable"),
        )
    except DeadlineExceededNotice as notice:
        return Response({
            "accepted": False,
            "message": notice.message,
            "code": notice.code,
            "deadlineDay": notice.deadline_day,
        })
    return Response({"accepted": True, "availability": AvailabilitySerializer(row).data})

# =========================
# Settings
# =========================

@api_view(["GET", "PATCH"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def settings_view(request):
    if request.method == "PATCH":
        obj = preferences.update_settings(
            deadline_day=request.data.get("deadlineDay"),
            name_format=request.data.get("nameFormat"),
        )
    else:
        obj = SettingsRepository.load()
    return Response(RosterSettingsSerializer(obj).data)

@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def name_format_view(request):
    if request.method == "POST":
        name_format = request.data.get("nameFormat")
        if not name_format:
            raise ValidationError("Field 'nameFormat' is required.")
        preferences.update_settings(name_format=name_format)
    return Response({"nameFormat": SettingsRepository.name_format()})

# =========================
# Member administration
# =========================

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def member_create(request):
    member = members.create_member(
        request.data.get("firstName"),
        request.data.get("lastName"),
        email=request.data.get("email"),
        is_admin=parse_flag(request.data.get("isAdmin", False), "isAdmin"),
    )
    return Response(MemberSerializer(member).data, status=status.HTTP_201_CREATED)

@api_view(["DELETE"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def member_delete(request, member_id: int):
    if _current_member(request).id == member_id:
        raise ValidationError("You cannot delete your own account.")
    members.delete_member(member_id)
    return Response(status=status.HTTP_204_NO_CONTENT)

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def member_reset_pin(request, member_id: int):
    return Response(MemberSerializer(members.reset_pin(member_id)).data)

@api_view(["PATCH"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def member_rename(request, member_id: int):
    member = members.rename(member_id, request.data.get("firstName"), request.data.get("lastName"))
    return Response(MemberSerializer(member).data)

@api_view(["PATCH"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def member_set_initials(request, member_id: int):
    member = members.set_initials(member_id, request.data.get("initials"))
    return Response(MemberSerializer(member).data)

# =========================
# Exports / notification
# =========================

@api_view(["GET"])
def export_pdf(request):
    year, month = _ym(request)
    _require_visible(request, year, month)
    return _attachment(export_roster_pdf(year, month), "application/pdf", f"roster-{year}-{month:02d}.pdf")

@api_view(["GET"])
def export_xlsx(request):
    year, month = _ym(request)
    _require_visible(request, year, month)
    return _attachment(
        export_roster_xlsx(year, month),
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        f"roster-{year}-{month:02d}.xlsx",
    )

@api_view(["GET"])
def export_ics(request):
    year, month = _ym(request)
    _require_visible(request, year, month)
    return _attachment(export_roster_ics(year, month), "text/calendar", f"roster-{year}-{month:02d}.ics")

@api_view(["POST"])
@permission_classes([IsAuthenticated, IsRosterAdmin])
def email_roster(request):
    year, month, err = _get_ym_from_request(request, default_today=False)
    if err:
        raise ValidationError(err)
    email = (request.data.get("email") or "").strip()
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError("Field 'email' must be a valid e-mail address.")
    email_roster_pdf.delay(year, month, email)
    log.info("Roster %04d-%02d e-mail to %s queued by %s", year, month, email, request.user)
    return Response({"queued": True}, status=status.HTTP_202_ACCEPTED)

# =========================
# Verses
# =========================

@api_view(["GET"])
def random_verse(request):
    verse = VerseRepository.random(request.query_params.get("category") or "serving")
    if verse is None:
        raise NotFoundError("No verse found for this category.")
    return Response(VerseSerializer(verse).data)
