"""
Export Service

Reassembles the report dataset through the Report Assembler and hands it
to the renderer for the requested format. Exports do not write a report
record; only `ReportAssembler.assemble` does.
"""

from typing import Any, Iterable, Optional

import structlog

from src.audit import AuditLogger
from src.errors import RenderError
from src.exports.base import ExportFormat, RenderedExport, ReportRenderer
from src.exports.document import DocumentRenderer
from src.exports.spreadsheet import SpreadsheetRenderer
from src.ledger.reports import ReportAssembler
from src.validation import LedgerValidator


logger = structlog.get_logger(__name__)


def default_renderers(currency_code: str = "RWF") -> list[ReportRenderer]:
    return [SpreadsheetRenderer(currency_code), DocumentRenderer(currency_code)]


class ExportService:
    """
    Produces downloadable report files.

    A renderer failure surfaces as RenderError with no bytes at all.
    """

    def __init__(
        self,
        assembler: ReportAssembler,
        renderers: Optional[Iterable[ReportRenderer]] = None,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._assembler = assembler
        self._renderers = {
            renderer.format: renderer
            for renderer in (renderers if renderers is not None else default_renderers())
        }
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger

    @property
    def formats(self) -> list[ExportFormat]:
        return list(self._renderers)

    def renderer_for(self, export_format: Any) -> ReportRenderer:
        """
        Raises:
            RenderError: If no renderer handles the format
        """
        try:
            return self._renderers[ExportFormat(export_format)]
        except (ValueError, KeyError):
            raise RenderError(
                f"Unsupported export format: {export_format}",
                details={"format": str(export_format)},
            )

    async def export(
        self,
        user_id: str,
        report_type: Any,
        start_date: Any,
        end_date: Any,
        export_format: Any,
    ) -> RenderedExport:
        """
        Render a report in the requested format.

        Raises:
            ValidationError: Bad report type or date range
            RenderError: Unsupported format, or the renderer failed
            StoreUnavailableError: If report data cannot be read
        """
        request = self._validator.report_request(report_type, start_date, end_date)
        renderer = self.renderer_for(export_format)
        data = await self._assembler.collect(user_id, request)

        try:
            content = renderer.render(data)
        except Exception as e:
            logger.error(
                "export_failed",
                user_id=user_id,
                format=renderer.format.value,
                error=str(e),
            )
            if self._audit_logger:
                await self._audit_logger.log_export_failed(user_id, renderer.format.value, str(e))
            raise RenderError(
                f"Failed to render {renderer.format.value} export",
                details={"format": renderer.format.value, "reason": str(e)},
            ) from e

        rendered = RenderedExport(
            content=content,
            content_type=renderer.content_type,
            filename=renderer.filename,
        )
        logger.info(
            "export_rendered",
            user_id=user_id,
            report_type=request.report_type.value,
            format=renderer.format.value,
            size_bytes=rendered.size,
        )
        if self._audit_logger:
            await self._audit_logger.log_report_exported(
                user_id, request.report_type.value, renderer.format.value, rendered.size
            )
        return rendered
