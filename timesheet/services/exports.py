from __future__ import annotations

import csv
from io import BytesIO, StringIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from timesheet.services.team_audit import AttendanceGrid

CSV_DELIMITER = ";"
CSV_BOM = "\ufeff"

HEADER_FILL = PatternFill(fill_type="solid", fgColor="0B4F73")
SUBHEADER_FILL = PatternFill(fill_type="solid", fgColor="DCEBF3")
ZEBRA_FILL = PatternFill(fill_type="solid", fgColor="F7FBFE")
SMART_FILL = PatternFill(fill_type="solid", fgColor="E6F4EA")
ABSENCE_FILL = PatternFill(fill_type="solid", fgColor="FFF3CD")
CLOSED_FILL = PatternFill(fill_type="solid", fgColor="E2E8F0")

HEADER_FONT = Font(bold=True, color="FFFFFF")
BOLD_FONT = Font(bold=True, color="0F172A")

THIN_SIDE = Side(style="thin", color="D5E2EC")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)

CODE_FILLS = {
    "SW": SMART_FILL,
    "AG": ABSENCE_FILL,
}


def build_attendance_csv_bytes(grid: AttendanceGrid) -> bytes:
    stream = StringIO()
    writer = csv.writer(stream, delimiter=CSV_DELIMITER, lineterminator="\n")
    writer.writerows(grid.all_rows())
    return (CSV_BOM + stream.getvalue()).encode("utf-8")


def _style_grid_header(ws: Worksheet) -> None:
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = THIN_BORDER
    for cell in ws[2]:
        cell.font = BOLD_FONT
        cell.fill = SUBHEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = THIN_BORDER


def _style_grid_body(ws: Worksheet, *, days_in_month: int) -> None:
    for row_idx in range(3, ws.max_row + 1):
        name_cell = ws.cell(row=row_idx, column=1)
        name_cell.font = BOLD_FONT
        name_cell.border = THIN_BORDER
        if row_idx % 2 == 0:
            name_cell.fill = ZEBRA_FILL
        for col_idx in range(2, ws.max_column + 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            cell.border = THIN_BORDER
            cell.alignment = Alignment(horizontal="center", vertical="center")
            if col_idx - 1 > days_in_month:
                continue
            if cell.value in {None, ""}:
                cell.fill = CLOSED_FILL
            elif cell.value in CODE_FILLS:
                cell.fill = CODE_FILLS[str(cell.value)]


def _auto_width(ws: Worksheet) -> None:
    for column_cells in ws.iter_cols(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column):
        max_len = max(len("" if cell.value is None else str(cell.value)) for cell in column_cells)
        ws.column_dimensions[get_column_letter(column_cells[0].column)].width = min(max_len + 2, 30)


def build_attendance_xlsx_bytes(grid: AttendanceGrid) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = f"Presenze {grid.year}-{grid.month:02d}"
    for row in grid.all_rows():
        ws.append(row)

    days_in_month = sum(1 for label in grid.weekday_row[1:] if label)
    _style_grid_header(ws)
    _style_grid_body(ws, days_in_month=days_in_month)
    _auto_width(ws)
    ws.freeze_panes = "B3"

    stream = BytesIO()
    wb.save(stream)
    return stream.getvalue()
