from django.urls import path

from . import views

urlpatterns = [
    # Auth
    path("auth/login", views.auth_login, name="auth_login"),
    path("auth/logout", views.auth_logout, name="auth_logout"),
    path("auth/me", views.auth_me, name="auth_me"),
    path("auth/change-pin", views.auth_change_pin, name="auth_change_pin"),
    path("members", views.member_list, name="member_list"),

    # Roster builder / assignments
    path("roster-builder/available-sundays/<int:year>/<int:month>", views.available_sundays, name="available_sundays"),
    path("admin/roster-assignments", views.propose_assignment, name="propose_assignment"),
    path("admin/roster-assignments/batch", views.save_staged_assignments, name="save_staged_assignments"),
    path("admin/roster-assignments/<int:assignment_id>", views.remove_assignment, name="remove_assignment"),
    path(
        "admin/roster-assignments/date/<int:year>/<int:month>/<int:day>",
        views.clear_assignments_for_date,
        name="clear_assignments_for_date",
    ),
    path("roster-assignments/month/<int:year>/<int:month>", views.month_assignments, name="month_assignments"),

    # Finalization
    path("admin/finalize-roster", views.finalize_roster, name="finalize_roster"),
    path("admin/finalize-roster/<int:year>/<int:month>", views.revise_roster, name="revise_roster"),
    path("finalized-roster/<int:year>/<int:month>", views.finalized_roster, name="finalized_roster"),

    # Special days
    path("special-days", views.special_day_list, name="special_day_list"),
    path("special-days/month", views.special_day_month, name="special_day_month"),
    path("admin/special-days", views.special_day_create, name="special_day_create"),
    path("admin/special-days/<int:special_day_id>", views.special_day_detail, name="special_day_detail"),

    # Service roles
    path("service-roles", views.service_role_list, name="service_role_list"),
    path("admin/service-roles", views.service_role_create, name="service_role_create"),
    path("admin/service-roles/reorder", views.service_role_reorder, name="service_role_reorder"),
    path("admin/service-roles/<int:role_id>", views.service_role_detail, name="service_role_detail"),

    # Availability
    path("availability", views.availability_view, name="availability"),

    # Settings
    path("admin/settings", views.settings_view, name="settings"),
    path("admin/name-format", views.name_format_view, name="name_format"),

    # Member administration
    path("admin/members", views.member_create, name="member_create"),
    path("admin/members/<int:member_id>", views.member_delete, name="member_delete"),
    path("admin/members/<int:member_id>/reset-pin", views.member_reset_pin, name="member_reset_pin"),
    path("admin/members/<int:member_id>/name", views.member_rename, name="member_rename"),
    path("admin/members/<int:member_id>/initials", views.member_set_initials, name="member_set_initials"),

    # Exports / notification
    path("export/pdf", views.export_pdf, name="export_pdf"),
    path("export/xlsx", views.export_xlsx, name="export_xlsx"),
    path("export/ics", views.export_ics, name="export_ics"),
    path("admin/roster/email", views.email_roster, name="email_roster"),

    # Verses
    path("verses/random", views.random_verse, name="random_verse"),
]
