from __future__ import annotations

from django.contrib import admin
from django.db.models import Count

from roster.domain.forms import RosterAssignmentForm, ServiceRoleForm, SpecialDayForm
from roster.domain.models import (
    AuditLog,
    Availability,
    FinalizedRoster,
    Member,
    RosterAssignment,
    RosterSettings,
    ServiceRole,
    SpecialDay,
    Verse,
)
from roster.services import finalization

# =========================
# Filters
# =========================

class ServiceMonthFilter(admin.SimpleListFilter):
    title = "Month"
    parameter_name = "ym"

    def lookups(self, request, model_admin):
        pairs = (
            model_admin.model.objects
            .values_list("service_date__year", "service_date__month")
            .distinct()
            .order_by("service_date__year", "service_date__month")
        )
        return [(f"{y}-{m}", f"{m:02d}/{y}") for (y, m) in pairs]

    def queryset(self, request, qs):
        val = self.value()
        if not val:
            return qs
        y, m = val.split("-")
        return qs.filter(service_date__year=int(y), service_date__month=int(m))

# =========================
# Inlines
# =========================

class AvailabilityInline(admin.TabularInline):
    model = Availability
    extra = 0
    fields = ("service_date", "is_available")
    classes = ("collapse",)

# =========================
# Member
# =========================

@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ("full_name", "initials", "email", "is_admin", "first_login")
    list_filter = ("is_admin", "first_login")
    search_fields = ("first_name", "last_name", "initials", "email")
    ordering = ("last_name", "first_name")
    list_per_page = 50
    inlines = (AvailabilityInline,)

    actions = ["require_pin_change"]

    @admin.action(description="Require a PIN change on next login")
    def require_pin_change(self, request, qs):
        qs.update(first_login=True)

# =========================
# Availability
# =========================

@admin.register(Availability)
class AvailabilityAdmin(admin.ModelAdmin):
    list_display = ("member", "service_date", "is_available", "last_updated")
    list_filter = ("is_available", ServiceMonthFilter)
    search_fields = ("member__first_name", "member__last_name", "member__initials")
    autocomplete_fields = ("member",)
    date_hierarchy = "service_date"
    list_per_page = 50

# =========================
# Service role
# =========================

@admin.register(ServiceRole)
class ServiceRoleAdmin(admin.ModelAdmin):
    form = ServiceRoleForm
    list_display = ("name", "order", "max_occupants", "is_active", "assignment_count")
    list_filter = ("is_active",)
    list_editable = ("order", "max_occupants", "is_active")
    search_fields = ("name",)
    ordering = ("order", "id")

    actions = ["activate_roles", "deactivate_roles"]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_assignments=Count("assignments"))

    @admin.display(description="Assignments", ordering="_assignments")
    def assignment_count(self, obj: ServiceRole) -> int:
        return obj._assignments

    @admin.action(description="Activate selected roles")
    def activate_roles(self, request, qs):
        qs.update(is_active=True)

    @admin.action(description="Deactivate selected roles")
    def deactivate_roles(self, request, qs):
        qs.update(is_active=False)

# =========================
# Roster assignment
# =========================

@admin.register(RosterAssignment)
class RosterAssignmentAdmin(admin.ModelAdmin):
    form = RosterAssignmentForm
    list_display = ("service_date", "role", "member", "created_at", "created_by")
    list_filter = ("role", ServiceMonthFilter)
    search_fields = ("member__first_name", "member__last_name", "role__name")
    date_hierarchy = "service_date"
    ordering = ("-service_date", "role__order")
    list_select_related = ("role", "member", "created_by")
    autocomplete_fields = ("member", "created_by")
    readonly_fields = ("created_at", "updated_at")
    list_per_page = 50

# =========================
# Special day
# =========================

@admin.register(SpecialDay)
class SpecialDayAdmin(admin.ModelAdmin):
    form = SpecialDayForm
    list_display = ("date", "name", "color")
    search_fields = ("name", "description")
    date_hierarchy = "date"
    ordering = ("-date",)

# =========================
# Finalized roster
# =========================

@admin.register(FinalizedRoster)
class FinalizedRosterAdmin(admin.ModelAdmin):
    list_display = ("year", "month", "is_finalized", "finalized_at", "finalized_by")
    list_filter = ("year", "is_finalized")
    readonly_fields = ("created_at", "created_by", "finalized_at", "finalized_by")
    ordering = ("-year", "-month")

    actions = ["finalize_months", "revise_months"]

    @admin.action(description="Finalize selected months")
    def finalize_months(self, request, qs):
        for roster in qs:
            finalization.finalize(roster.year, roster.month, user=request.user, message=roster.message)

    @admin.action(description="Reopen selected months for revision")
    def revise_months(self, request, qs):
        for roster in qs:
            finalization.revise(roster.year, roster.month, user=request.user)

# =========================
# Settings / Verse
# =========================

@admin.register(RosterSettings)
class RosterSettingsAdmin(admin.ModelAdmin):
    list_display = ("deadline_day", "name_format")

    def has_add_permission(self, request):
        return not RosterSettings.objects.exists()

@admin.register(Verse)
class VerseAdmin(admin.ModelAdmin):
    list_display = ("reference", "category")
    list_filter = ("category",)
    search_fields = ("reference", "text")

# =========================
# AuditLog
# =========================

@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action", "table", "record_id", "created_at", "author")
    list_filter = ("table", "action")
    search_fields = ("table", "record_id", "author__username")
    readonly_fields = ("action", "table", "record_id", "before", "after", "author", "created_at")
    date_hierarchy = "created_at"
    ordering = ("-created_at",)
    list_per_page = 50
