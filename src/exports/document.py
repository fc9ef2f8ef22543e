"""
Document Renderer (PDF)

A paginated document: a centered title, then per populated section a
subheading followed by one line per item:

    <label>: <currency code> <amount> - <date>

Budget lines read "<category>: <actual> of <planned> (<period>)".
"""

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from src.exports.base import ExportFormat, ReportRenderer
from src.exports.formatting import (
    BUDGET_SECTION,
    REPORT_TITLE,
    format_currency,
    format_display_date,
    populated_sections,
)
from src.models.ledger import ReportData


class DocumentRenderer(ReportRenderer):

    format = ExportFormat.PDF
    content_type = "application/pdf"

    def __init__(self, currency_code: str = "RWF"):
        super().__init__(currency_code)
        styles = getSampleStyleSheet()
        self._title_style = ParagraphStyle("ReportTitle", parent=styles["Title"], alignment=TA_CENTER)
        self._heading_style = styles["Heading2"]
        self._body_style = styles["BodyText"]

    def entry_line(self, entry) -> str:
        amount = format_currency(entry.amount, self.currency_code)
        return f"{entry.label}: {amount} - {format_display_date(entry.entry_date)}"

    def budget_line(self, budget) -> str:
        actual = format_currency(budget.actual_amount, self.currency_code)
        planned = format_currency(budget.planned_amount, self.currency_code)
        return f"{budget.category}: {actual} of {planned} ({budget.period.value})"

    def render(self, data: ReportData) -> bytes:
        buffer = BytesIO()
        document = SimpleDocTemplate(buffer, pagesize=A4, title=REPORT_TITLE)

        story = [Paragraph(REPORT_TITLE, self._title_style), Spacer(1, 12)]
        for title, items in populated_sections(data):
            story.append(Paragraph(escape(title), self._heading_style))
            to_line = self.budget_line if title == BUDGET_SECTION else self.entry_line
            for item in items:
                # Paragraph text is mini-markup; labels are user input.
                story.append(Paragraph(escape(to_line(item)), self._body_style))
            story.append(Spacer(1, 12))

        document.build(story)
        return buffer.getvalue()
