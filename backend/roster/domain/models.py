from __future__ import annotations

from django.contrib.auth.models import User
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

# =========================
# Canonical choices
# =========================

class NameFormat(models.TextChoices):
    FULL = "full", "Full name"
    FIRST = "first", "First name"
    LAST = "last", "Last name"
    INITIALS = "initials", "Initials"

# =========================
# Models
# =========================

class Member(models.Model):
    """A church member who can log in with a PIN and be rostered."""
    first_name = models.CharField(max_length=80)
    last_name = models.CharField(max_length=80)
    initials = models.CharField(max_length=8, unique=True)
    email = models.EmailField(blank=True, null=True)
    is_admin = models.BooleanField(default=False, db_index=True)
    first_login = models.BooleanField(default=True)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="member")

    class Meta:
        verbose_name = "Member"
        verbose_name_plural = "Members"
        ordering = ["last_name", "first_name"]
        indexes = [
            models.Index(fields=["last_name", "first_name"], name="member_name_idx"),
        ]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def formatted_name(self, name_format: str) -> str:
        """Display name according to the roster name format setting."""
        if name_format == NameFormat.FIRST:
            return self.first_name
        if name_format == NameFormat.LAST:
            return self.last_name
        if name_format == NameFormat.INITIALS:
            return self.initials or f"{self.first_name[:1]}{self.last_name[:1]}".upper()
        return self.full_name

class Availability(models.Model):
    """A member's willingness to serve on a specific date."""
    member = models.ForeignKey(Member, on_delete=models.CASCADE, related_name="availabilities")
    service_date = models.DateField(db_index=True)
    is_available = models.BooleanField(default=False)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Availability"
        verbose_name_plural = "Availabilities"
        ordering = ["service_date"]
        constraints = [
            models.UniqueConstraint(
                fields=("member", "service_date"), name="uniq_availability_member_date"
            ),
        ]
        indexes = [
            models.Index(fields=["service_date", "is_available"], name="availability_date_avail_idx"),
        ]

    def __str__(self):
        state = "available" if self.is_available else "unavailable"
        return f"{self.member} {self.service_date} {state}"

class ServiceRole(models.Model):
    """A role that can be filled on a service day (e.g. Worship Leader)."""
    name = models.CharField(max_length=80)
    description = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True, db_index=True)
    order = models.PositiveIntegerField(default=0, db_index=True)
    max_occupants = models.PositiveIntegerField(
        default=1, null=True, blank=True,
        validators=[MinValueValidator(1)],
        help_text="Maximum people per service. Empty means unlimited.",
    )

    class Meta:
        verbose_name = "Service role"
        verbose_name_plural = "Service roles"
        ordering = ["order", "id"]

    def __str__(self):
        return self.name

    def has_room(self, current: int) -> bool:
        return self.max_occupants is None or current < self.max_occupants

class RosterAssignment(models.Model):
    """A member holding a role on a service date."""
    service_date = models.DateField(db_index=True)
    role = models.ForeignKey(ServiceRole, on_delete=models.PROTECT, related_name="assignments")
    member = models.ForeignKey(Member, on_delete=models.CASCADE, related_name="assignments")
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Roster assignment"
        verbose_name_plural = "Roster assignments"
        ordering = ["service_date", "role__order", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=("member", "service_date"), name="uniq_assignment_member_date"
            ),
        ]
        indexes = [
            models.Index(fields=["service_date", "role"], name="assignment_date_role_idx"),
        ]

    def __str__(self):
        return f"{self.service_date} {self.role} -> {self.member}"

class SpecialDay(models.Model):
    """Display annotation for a calendar date (e.g. Easter Sunday)."""
    date = models.DateField(db_index=True)
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True, null=True)
    color = models.CharField(max_length=20, default="#FFD700")

    class Meta:
        verbose_name = "Special day"
        verbose_name_plural = "Special days"
        ordering = ["date"]

    def __str__(self):
        return f"{self.date} {self.name}"

class FinalizedRoster(models.Model):
    """Publication state of a month's roster."""
    year = models.PositiveIntegerField(db_index=True)
    month = models.PositiveIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)], db_index=True)
    is_finalized = models.BooleanField(default=False)
    message = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="rosters_created"
    )
    finalized_at = models.DateTimeField(blank=True, null=True)
    finalized_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="rosters_finalized"
    )

    class Meta:
        verbose_name = "Finalized roster"
        verbose_name_plural = "Finalized rosters"
        ordering = ["-year", "-month"]
        constraints = [
            models.UniqueConstraint(fields=("year", "month"), name="uniq_finalized_roster_month"),
        ]

    def __str__(self):
        return f"{self.year}-{self.month:02d} ({'final' if self.is_finalized else 'draft'})"

class RosterSettings(models.Model):
    """Process-wide settings, stored as a single row."""
    deadline_day = models.PositiveIntegerField(
        default=20, validators=[MinValueValidator(1), MaxValueValidator(31)],
        help_text="Day of month after which members can no longer change this month's availability.",
    )
    name_format = models.CharField(max_length=10, choices=NameFormat.choices, default=NameFormat.FULL)

    class Meta:
        verbose_name = "Settings"
        verbose_name_plural = "Settings"

    def __str__(self):
        return f"deadline={self.deadline_day} format={self.name_format}"

class Verse(models.Model):
    """Scripture text printed on exported rosters."""
    text = models.TextField()
    reference = models.CharField(max_length=80)
    category = models.CharField(max_length=40, default="serving", db_index=True)

    class Meta:
        verbose_name = "Verse"
        verbose_name_plural = "Verses"
        ordering = ["reference"]

    def __str__(self):
        return self.reference

class AuditLog(models.Model):
    """Records create, update and delete actions on roster models."""
    action = models.CharField(max_length=50, db_index=True)
    table = models.CharField(max_length=50, db_index=True)
    record_id = models.CharField(max_length=50)
    before = models.JSONField(blank=True, null=True, encoder=DjangoJSONEncoder)
    after = models.JSONField(blank=True, null=True, encoder=DjangoJSONEncoder)
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = "Audit entry"
        verbose_name_plural = "Audit log"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["table", "created_at"], name="audit_table_created_idx"),
            models.Index(fields=["action", "created_at"], name="audit_action_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.created_at:%Y-%m-%d %H:%M:%S} | {self.table}:{self.record_id} | {self.action}"
