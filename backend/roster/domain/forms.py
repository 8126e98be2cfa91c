from __future__ import annotations

from typing import Optional

from django import forms

from roster.domain.models import RosterAssignment, ServiceRole, SpecialDay
from roster.exceptions import RosterError
from roster.services.roster_engine import check_assignment

# ===== Special day =====

class SpecialDayForm(forms.ModelForm):
    class Meta:
        model = SpecialDay
        fields = ["date", "name", "description", "color"]
        widgets = {
            "date": forms.DateInput(format="%Y-%m-%d", attrs={"type": "date"}),
            "color": forms.TextInput(attrs={"type": "color"}),
        }
        help_texts = {
            "color": "Highlight color shown on the roster (e.g. #FFD700).",
        }

    def clean_name(self) -> str:
        name = (self.cleaned_data.get("name") or "").strip()
        if not name:
            raise forms.ValidationError("Name is required.")
        return name

    def clean_color(self) -> str:
        color = (self.cleaned_data.get("color") or "").strip()
        if not color:
            raise forms.ValidationError("Color is required.")
        return color

    def clean_description(self) -> Optional[str]:
        desc = self.cleaned_data.get("description")
        return (desc or "").strip() or None

    def clean(self):
        data = super().clean()
        d = data.get("date")
        if d:
            qs = SpecialDay.objects.filter(date=d).exclude(pk=self.instance.pk or 0)
            if qs.exists():
                raise forms.ValidationError("A special day already exists for this date.")
        return data

# ===== Service role =====

class ServiceRoleForm(forms.ModelForm):
    class Meta:
        model = ServiceRole
        fields = ["name", "description", "is_active", "order", "max_occupants"]
        help_texts = {
            "max_occupants": "Leave empty for no limit.",
        }

    def clean_name(self) -> str:
        return (self.cleaned_data.get("name") or "").strip()

    def clean_max_occupants(self) -> Optional[int]:
        val = self.cleaned_data.get("max_occupants")
        if val is not None and val < 1:
            raise forms.ValidationError("The limit must be at least 1.")
        return val

# ===== Roster assignment =====

class RosterAssignmentForm(forms.ModelForm):
    """Admin form for assignments; applies the same rules as the roster builder."""

    class Meta:
        model = RosterAssignment
        fields = ["service_date", "role", "member", "notes", "created_by"]
        widgets = {
            "service_date": forms.DateInput(format="%Y-%m-%d", attrs={"type": "date"}),
        }

    def clean(self):
        data = super().clean()
        role, member, d = data.get("role"), data.get("member"), data.get("service_date")
        if role and member and d:
            try:
                check_assignment(role, member, d, exclude_id=self.instance.pk)
            except RosterError as exc:
                raise forms.ValidationError(exc.message, code=exc.code)
        return data
