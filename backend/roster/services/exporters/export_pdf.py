from __future__ import annotations

import calendar as pycal
from io import BytesIO
from typing import List, Tuple

from django.utils import timezone
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from roster.domain.repositories import SettingsRepository, SpecialDayRepository, VerseRepository
from roster.services.roster_engine import roster_matrix
from roster.utils import _get_setting

MARGIN = 40
LINE = 14

def _roster_lines(year: int, month: int) -> List[Tuple[str, str]]:
    """Builds (font, text) lines: one bold heading per date, one line per role."""
    matrix = roster_matrix(year, month)
    specials = SpecialDayRepository.by_dates(matrix.keys())
    name_format = SettingsRepository.name_format()

    lines: List[Tuple[str, str]] = []
    for d, roles in matrix.items():
        heading = d.strftime("%A, %d %B %Y")
        special = specials.get(d)
        if special:
            heading += f" - {special.name}"
        lines.append(("Helvetica-Bold", heading))
        if not roles:
            lines.append(("Helvetica-Oblique", "No assignments."))
        for role, members in roles.items():
            names = ", ".join(m.formatted_name(name_format) for m in members)
            lines.append(("Helvetica", f"{role}: {names}"))
        lines.append(("", ""))
    return lines

def export_roster_pdf(year: int, month: int) -> bytes:
    """Renders a month's roster as a plain A4 PDF.

    Args:
        year (int): The year.
        month (int): The month (1-12).

    Returns:
        bytes: The PDF content.
    """
    lines = _roster_lines(year, month)

    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    pdf.setTitle(f"Roster {year}-{month:02d}")

    y = height - MARGIN
    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(MARGIN, y, _get_setting("ROSTER_APP_NAME", "ElServe"))
    pdf.setFont("Helvetica", 10)
    pdf.drawString(MARGIN, y - LINE, _get_setting("ROSTER_CHURCH_NAME", ""))
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(MARGIN, y - 2 * LINE - 4, f"Roster for {pycal.month_name[month]} {year}")
    pdf.setFont("Helvetica", 8)
    pdf.drawString(MARGIN, y - 3 * LINE - 4, f"Generated {timezone.localtime(timezone.now()):%d/%m/%Y %H:%M}")
    y -= 4 * LINE + 16

    for font, text in lines:
        if y < 2 * MARGIN:
            pdf.showPage()
            y = height - MARGIN
        if not text:
            y -= 8
            continue
        pdf.setFont(font, 10)
        pdf.drawString(MARGIN, y, text)
        y -= LINE

    verse = VerseRepository.random()
    if verse:
        pdf.setFont("Helvetica-Oblique", 9)
        pdf.drawString(MARGIN, MARGIN, f"\"{verse.text}\" ({verse.reference})"[:120])

    pdf.save()
    return buffer.getvalue()
