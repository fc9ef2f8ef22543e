"""
Spreadsheet Renderer (xlsx)

One worksheet. Per populated section: a title row, a column-header row,
then one row per item. Amounts are written as numbers and dates as dates
so the cells stay sortable; formatting is left to the spreadsheet.
A blank row separates sections.
"""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from src.exports.base import ExportFormat, ReportRenderer
from src.exports.formatting import (
    BUDGET_SECTION,
    EXPENSE_SECTION,
    INCOME_SECTION,
    REPORT_TITLE,
    populated_sections,
)
from src.models.ledger import ReportData


SECTION_COLUMNS = {
    INCOME_SECTION: ["Source", "Amount", "Date", "Category"],
    EXPENSE_SECTION: ["Description", "Amount", "Date", "Category"],
    BUDGET_SECTION: ["Category", "Planned Amount", "Actual Amount", "Period"],
}

BOLD = Font(bold=True)


def entry_row(entry) -> list:
    return [entry.label, entry.amount, entry.entry_date, entry.category or ""]


def budget_row(budget) -> list:
    return [budget.category, budget.planned_amount, budget.actual_amount, budget.period.value]


class SpreadsheetRenderer(ReportRenderer):

    format = ExportFormat.XLSX
    content_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    def render(self, data: ReportData) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = REPORT_TITLE

        for index, (title, items) in enumerate(populated_sections(data)):
            if index:
                sheet.append([])

            sheet.append([title])
            sheet.cell(row=sheet.max_row, column=1).font = BOLD

            sheet.append(SECTION_COLUMNS[title])
            for cell in sheet[sheet.max_row]:
                cell.font = BOLD

            to_row = budget_row if title == BUDGET_SECTION else entry_row
            for item in items:
                sheet.append(to_row(item))

        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
