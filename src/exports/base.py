"""
Report Renderer Interface

One abstract renderer, one implementation per export format. Every
renderer consumes the same ReportData produced by the Report Assembler.
"""

from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel

from src.models.ledger import ReportData


class ExportFormat(str, Enum):
    XLSX = "xlsx"
    PDF = "pdf"


class RenderedExport(BaseModel):
    """Finished export bytes plus what a download needs to present them."""

    content: bytes
    content_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


class ReportRenderer(ABC):
    """
    Turns a report dataset into a binary document.

    Implementations must either return complete bytes or raise; a partial
    document is never returned.
    """

    format: ExportFormat
    content_type: str

    def __init__(self, currency_code: str = "RWF"):
        self.currency_code = currency_code

    @property
    def filename(self) -> str:
        return f"report.{self.format.value}"

    @abstractmethod
    def render(self, data: ReportData) -> bytes:
        pass
