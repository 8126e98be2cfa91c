from __future__ import annotations

import logging
from typing import Iterable, List

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMessage, send_mail
from django.utils import timezone

from roster.domain.models import Member
from roster.domain.repositories import MemberRepository, SettingsRepository
from roster.services.calendar import month_bounds
from roster.services.exporters.export_pdf import export_roster_pdf

log = logging.getLogger(__name__)

# =========================
# Helpers
# =========================

def _distinct_valid_emails(members: Iterable[Member]) -> List[str]:
    emails = {m.email.strip().lower() for m in members if m.email}
    return sorted(e for e in emails if e)

# =========================
# Tasks
# =========================

@shared_task
def email_roster_pdf(year: int, month: int, email: str) -> int:
    """Renders a month's roster as PDF and mails it as an attachment.

    Args:
        year (int): Year of the roster.
        month (int): Month of the roster.
        email (str): Recipient address.

    Returns:
        int: Number of messages sent (0 or 1).
    """
    app_name = getattr(settings, "ROSTER_APP_NAME", "ElServe")
    content = export_roster_pdf(year, month)
    message = EmailMessage(
        subject=f"{app_name} roster {year}-{month:02d}",
        body=f"Attached is the service roster for {month:02d}/{year}.",
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[email],
    )
    message.attach(f"roster-{year}-{month:02d}.pdf", content, "application/pdf")
    sent = message.send()
    log.info("email_roster_pdf: roster %04d-%02d sent to %s", year, month, email)
    return sent

@shared_task
def deadline_reminder() -> int:
    """Reminds admins on the deadline day that availability closes tonight.

    A deadline day past the end of the month falls on its last day.

    Returns:
        int: Number of recipients notified.
    """
    today = timezone.localdate()
    deadline_day = SettingsRepository.load().deadline_day
    if today.day != min(deadline_day, month_bounds(today.year, today.month)[1].day):
        return 0
    recipients = _distinct_valid_emails(MemberRepository.admins())
    if not recipients:
        log.info("deadline_reminder: no admin with an e-mail address.")
        return 0
    subject = f"Availability deadline reached for {today:%B}"
    msg = (
        f"Members can change their availability for {today:%m/%Y} until the end of today.\n"
        f"From tomorrow the dates left in {today:%m/%Y} are locked for members, "
        f"so their availability there is final."
    )
    send_mail(subject, msg, settings.DEFAULT_FROM_EMAIL, recipients)
    log.info("deadline_reminder: sent to %d recipient(s).", len(recipients))
    return len(recipients)
