from __future__ import annotations

from typing import Optional

from roster.domain.models import NameFormat, RosterSettings
from roster.domain.repositories import SettingsRepository
from roster.exceptions import ValidationError

def update_settings(*, deadline_day: Optional[int] = None, name_format: Optional[str] = None) -> RosterSettings:
    obj = SettingsRepository.load()
    if deadline_day is not None:
        try:
            deadline_day = int(deadline_day)
        except (TypeError, ValueError):
            raise ValidationError("Field 'deadlineDay' must be an integer.")
        if not (1 <= deadline_day <= 31):
            raise ValidationError("Field 'deadlineDay' must be between 1 and 31.")
        obj.deadline_day = deadline_day
    if name_format is not None:
        if name_format not in NameFormat.values:
            raise ValidationError(f"Field 'nameFormat' must be one of: {', '.join(NameFormat.values)}.")
        obj.name_format = name_format
    obj.save()
    return obj
