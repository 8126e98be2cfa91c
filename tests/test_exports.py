from datetime import date
from io import BytesIO

import pytest
from django.core import mail
from django.utils import timezone
from icalendar import Calendar
from openpyxl import load_workbook

from roster.domain.models import SpecialDay, Verse
from roster.services.exporters.export_ics import export_roster_ics
from roster.services.exporters.export_pdf import export_roster_pdf
from roster.services.exporters.export_xlsx import export_roster_xlsx
from roster.services.preferences import update_settings
from roster.services.roster_engine import propose_assignment
from roster.tasks import deadline_reminder, email_roster_pdf

SUNDAY = date(2024, 6, 2)

@pytest.fixture
def june_roster(make_member, make_role, mark_available):
    a = make_member("Anna", "Bell", email="anna@example.com")
    usher = make_role("Usher", max_occupants=2)
    mark_available(a, SUNDAY)
    propose_assignment(SUNDAY, usher.id, a.id)
    SpecialDay.objects.create(date=SUNDAY, name="Pentecost")
    Verse.objects.create(text="Serve one another humbly in love.", reference="Galatians 5:13")
    return a

@pytest.mark.django_db
def test_pdf_export(june_roster):
    content = export_roster_pdf(2024, 6)
    assert content.startswith(b"%PDF")

@pytest.mark.django_db
def test_xlsx_export(june_roster):
    wb = load_workbook(BytesIO(export_roster_xlsx(2024, 6)))
    detail, summary = wb.worksheets
    rows = list(detail.iter_rows(min_row=2, values_only=True))
    assert rows == [(rows[0][0], "Pentecost", "Usher", "Anna Bell")]
    assert [c.value for c in summary[1]] == ["June", "Usher"]
    assert summary.max_row == 1 + 5

@pytest.mark.django_db
def test_ics_export(june_roster):
    cal = Calendar.from_ical(export_roster_ics(2024, 6))
    events = [c for c in cal.walk() if c.name == "VEVENT"]
    assert len(events) == 1
    assert "Pentecost" in str(events[0]["summary"])
    assert "Usher: Anna Bell" in str(events[0]["description"])

@pytest.mark.django_db
def test_export_endpoints(admin_client, june_roster):
    resp = admin_client.get("/api/export/xlsx?year=2024&month=6")
    assert resp.status_code == 200
    assert resp["Content-Disposition"] == 'attachment; filename="roster-2024-06.xlsx"'
    assert admin_client.get("/api/export/ics?year=2024&month=6")["Content-Type"] == "text/calendar"

@pytest.mark.django_db
def test_email_roster_endpoint_sends_pdf(admin_client, june_roster):
    resp = admin_client.post("/api/admin/roster/email", {"year": 2024, "month": 6, "email": "team@example.com"}, format="json")
    assert resp.status_code == 202
    assert len(mail.outbox) == 1
    msg = mail.outbox[0]
    assert msg.to == ["team@example.com"]
    filename, _, mimetype = msg.attachments[0]
    assert (filename, mimetype) == ("roster-2024-06.pdf", "application/pdf")

    bad = admin_client.post("/api/admin/roster/email", {"year": 2024, "month": 6, "email": "nope"}, format="json")
    assert bad.status_code == 400

@pytest.mark.django_db
def test_email_task_direct(june_roster):
    assert email_roster_pdf(2024, 6, "team@example.com") == 1

@pytest.mark.django_db
def test_deadline_reminder_only_on_deadline_day(admin_member):
    today = timezone.localdate()
    update_settings(deadline_day=today.day % 28 + 1)
    assert deadline_reminder() == 0

    update_settings(deadline_day=today.day)
    assert deadline_reminder() == 1
    assert mail.outbox[0].to == ["ada@example.com"]

@pytest.mark.django_db
def test_deadline_past_month_end_reminds_on_last_day(admin_member, monkeypatch):
    update_settings(deadline_day=31)
    monkeypatch.setattr(timezone, "localdate", lambda: date(2024, 6, 29))
    assert deadline_reminder() == 0

    monkeypatch.setattr(timezone, "localdate", lambda: date(2024, 6, 30))
    assert deadline_reminder() == 1
    assert "06/2024" in mail.outbox[0].body
    assert "locked" in mail.outbox[0].body
