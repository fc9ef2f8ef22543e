"""Report export package: one renderer per format over a shared dataset."""

from src.exports.base import ExportFormat, RenderedExport, ReportRenderer
from src.exports.document import DocumentRenderer
from src.exports.service import ExportService, default_renderers
from src.exports.spreadsheet import SpreadsheetRenderer

__all__ = [
    "DocumentRenderer",
    "ExportFormat",
    "ExportService",
    "RenderedExport",
    "ReportRenderer",
    "SpreadsheetRenderer",
    "default_renderers",
]
