from __future__ import annotations

import logging
import re
from typing import List

from django.apps import AppConfig
from django.core.checks import Error, Tags, register

from roster.utils import _get_setting

log = logging.getLogger(__name__)

# =========================
# System checks
# =========================

@register(Tags.compatibility)
def roster_settings_check(app_configs, **kwargs):
    """Validates the roster settings read from the environment."""
    errors: List[Error] = []

    deadline = _get_setting("ROSTER_DEFAULT_DEADLINE_DAY", 20)
    if not isinstance(deadline, int) or not (1 <= deadline <= 31):
        errors.append(
            Error(
                f"ROSTER_DEFAULT_DEADLINE_DAY must be an integer between 1 and 31. Current value: {deadline!r}",
                id="roster.E001",
            )
        )

    pin = _get_setting("ROSTER_DEFAULT_PIN", "000000")
    if not re.fullmatch(r"\d{4,6}", str(pin)):
        errors.append(
            Error(
                "ROSTER_DEFAULT_PIN must be 4 to 6 digits.",
                id="roster.E002",
            )
        )

    hour = _get_setting("DEADLINE_REMINDER_HOUR", 8)
    if not isinstance(hour, int) or not (0 <= hour <= 23):
        errors.append(
            Error(
                f"DEADLINE_REMINDER_HOUR must be an integer between 0 and 23. Current value: {hour!r}",
                id="roster.E003",
            )
        )

    return errors

# =========================
# AppConfig
# =========================

class RosterConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'roster'
    verbose_name = "Sunday Roster"

    def ready(self):
        """Connects the audit signals."""
        from .domain import signals  # noqa: F401
