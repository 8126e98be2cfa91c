from __future__ import annotations

from datetime import timedelta

from django.utils.timezone import get_current_timezone_name, now as tz_now
from icalendar import Calendar, Event, vCalAddress, vText

from roster.domain.repositories import SettingsRepository, SpecialDayRepository
from roster.services.roster_engine import roster_matrix
from roster.utils import _get_setting

def export_roster_ics(year: int, month: int) -> bytes:
    """Exports a month's roster as an iCalendar file.

    Each date with assignments becomes an all-day event listing who serves in
    which role.

    Args:
        year (int): The year.
        month (int): The month (1-12).

    Returns:
        bytes: The ICS content.
    """
    app_name = _get_setting("ROSTER_APP_NAME", "ElServe")
    cal = Calendar()
    cal.add("prodid", f"-//{app_name}//Sunday Roster//EN")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", f"{app_name} roster {year}-{month:02d}")
    cal.add("X-WR-TIMEZONE", get_current_timezone_name())

    matrix = roster_matrix(year, month)
    specials = SpecialDayRepository.by_dates(matrix.keys())
    name_format = SettingsRepository.name_format()
    now = tz_now()

    for d, roles in matrix.items():
        if not roles:
            continue
        ev = Event()
        ev.add("uid", f"roster-{d:%Y%m%d}@sunday-roster.local")
        ev.add("dtstamp", now)
        ev.add("dtstart", d)
        ev.add("dtend", d + timedelta(days=1))

        special = specials.get(d)
        summary = f"{app_name} service"
        if special:
            summary += f" ({special.name})"
        ev.add("summary", summary)

        desc_lines = [
            f"{role}: {', '.join(m.formatted_name(name_format) for m in members)}"
            for role, members in roles.items()
        ]
        ev.add("description", "\n".join(desc_lines))
        ev.add("categories", list(roles.keys()))

        loc = _get_setting("ROSTER_CHURCH_NAME", None)
        if loc:
            ev.add("location", loc)

        for members in roles.values():
            for m in members:
                if m.email:
                    attendee = vCalAddress(f"MAILTO:{m.email}")
                    attendee.params["cn"] = vText(m.full_name)
                    attendee.params["role"] = vText("REQ-PARTICIPANT")
                    ev.add("attendee", attendee, encode=0)

        cal.add_component(ev)

    return cal.to_ical()
