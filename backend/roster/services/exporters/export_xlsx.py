from __future__ import annotations

import calendar as pycal
from io import BytesIO
from typing import Iterable, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from roster.domain.repositories import ServiceRoleRepository, SettingsRepository, SpecialDayRepository
from roster.services.roster_engine import roster_matrix

# =========================
# Helpers
# =========================

def _autosize_columns(ws, max_width: int = 60):
    """Fits each column width to its longest value.

    Args:
        ws (Worksheet): The sheet.
        max_width (int, optional): Upper bound for a column width. Defaults to 60.
    """
    for col_idx, column_cells in enumerate(ws.columns, start=1):
        length = 0
        for cell in column_cells:
            v = "" if cell.value is None else str(cell.value)
            length = max(length, len(v))
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(10, length + 2), max_width)

def _header(ws, labels: Iterable[str]):
    ws.append(list(labels))
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")
    ws.freeze_panes = "A2"

# =========================
# Export
# =========================

def export_roster_xlsx(year: int, month: int) -> bytes:
    """Exports a month's roster as an XLSX workbook.

    The first sheet lists one row per assigned person; the second is a
    Sunday by role grid.

    Args:
        year (int): The year.
        month (int): The month (1-12).

    Returns:
        bytes: The workbook content.
    """
    matrix = roster_matrix(year, month)
    specials = SpecialDayRepository.by_dates(matrix.keys())
    name_format = SettingsRepository.name_format()

    wb = Workbook()

    ws = wb.active
    ws.title = f"Roster ({year}-{month:02d})"
    _header(ws, ["Date", "Special day", "Role", "Member"])
    for d, roles in matrix.items():
        special = specials.get(d)
        for role_name, members in roles.items():
            for m in members:
                c_date = ws.cell(row=ws.max_row + 1, column=1, value=d)
                ws.cell(row=ws.max_row, column=2, value=special.name if special else "")
                ws.cell(row=ws.max_row, column=3, value=role_name)
                ws.cell(row=ws.max_row, column=4, value=m.formatted_name(name_format))
                c_date.number_format = "DD/MM/YYYY"
                c_date.alignment = Alignment(horizontal="center")
    _autosize_columns(ws)

    ws2 = wb.create_sheet(title="Summary")
    role_names: List[str] = [r.name for r in ServiceRoleRepository.actives()]
    for roles in matrix.values():
        for name in roles:
            if name not in role_names:
                role_names.append(name)
    _header(ws2, [pycal.month_name[month], *role_names])
    for d, roles in matrix.items():
        c_date = ws2.cell(row=ws2.max_row + 1, column=1, value=d)
        c_date.number_format = "DD/MM/YYYY"
        for col, name in enumerate(role_names, start=2):
            names = ", ".join(m.formatted_name(name_format) for m in roles.get(name, []))
            ws2.cell(row=ws2.max_row, column=col, value=names)
    _autosize_columns(ws2)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
