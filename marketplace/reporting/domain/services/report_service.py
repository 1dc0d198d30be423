"""
ReportService - Shared plumbing for filtered admin/seller reports

A report is a row source plus a criteria type. Subclasses fill in defaults
(date windows, retention cutoffs, seller scoping) in ``prepare_criteria``
and declare their CSV columns; listing, exporting and CSV rendering are
shared.
"""

import csv
import io
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from django.utils import timezone

from marketplace.querying.engine import PagedQueryService
from marketplace.querying.filters import FilterCriteria
from marketplace.querying.paging import ExportResult, PagedResult
from marketplace.querying.sources import RowSource
from marketplace.services.base import BaseService, ServiceResult, service_ok


@dataclass(frozen=True)
class CsvExport:
    content: str
    row_count: int
    total_matching: int
    truncated: bool
    filename: str = "report.csv"

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "row_count": self.row_count,
            "total_matching": self.total_matching,
            "truncated": self.truncated,
        }


def format_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ReportService(BaseService):
    report_kind = "report"
    criteria_class = FilterCriteria
    # (header, row key) pairs in column order
    csv_columns: Sequence[Tuple[str, str]] = ()

    def __init__(self, query_service: Optional[PagedQueryService] = None, source: Optional[RowSource] = None):
        super().__init__()
        self.query_service = query_service or PagedQueryService()
        self.source = source or self.create_source()

    def create_source(self) -> RowSource:
        raise NotImplementedError

    def prepare_criteria(self, criteria: FilterCriteria) -> FilterCriteria:
        return criteria

    def list(
        self, criteria: FilterCriteria, page_number: int = 1, page_size: Optional[int] = None, cancel_event=None
    ) -> ServiceResult[PagedResult]:
        return self.query_service.query(
            self.source,
            self.prepare_criteria(criteria),
            page_number=page_number,
            page_size=page_size,
            cancel_event=cancel_event,
        )

    def export(
        self, criteria: FilterCriteria, cap: Optional[int] = None, cancel_event=None
    ) -> ServiceResult[ExportResult]:
        return self.query_service.export(
            self.source, self.prepare_criteria(criteria), cap=cap, cancel_event=cancel_event
        )

    def render_csv(self, rows) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow([header for header, _ in self.csv_columns])
        for row in rows:
            writer.writerow([format_cell(row.get(key)) for _, key in self.csv_columns])
        return buffer.getvalue()

    def export_csv(
        self, criteria: FilterCriteria, cap: Optional[int] = None, cancel_event=None
    ) -> ServiceResult[CsvExport]:
        """
        Export the filtered report as CSV text.

        Returns:
            ServiceResult with a CsvExport; ``truncated`` is set when the row
            cap cut the export short.
        """
        result = self.export(criteria, cap=cap, cancel_event=cancel_event)
        if not result.ok:
            return result

        exported = result.value
        content = self.render_csv(exported.rows)
        self.logger.info(
            f"Rendered {self.report_kind} CSV: rows={exported.row_count}, matching={exported.total_matching}"
        )
        return service_ok(
            CsvExport(
                content=content,
                row_count=exported.row_count,
                total_matching=exported.total_matching,
                truncated=exported.truncated,
                filename=f"{self.report_kind}-{timezone.now():%Y%m%d%H%M%S}.csv",
            )
        )
