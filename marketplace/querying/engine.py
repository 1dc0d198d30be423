"""
PagedQueryService - Paged report queries and capped exports

Every admin/seller report and moderation queue goes through this service.
The row source does the storage work; this service clamps paging input,
enforces the export row cap and turns the source's answer into
PagedResult / ExportResult values.
"""

import math
from typing import Optional

from marketplace.conf import ReportOptions, get_report_options
from marketplace.domain.exceptions import TransientUnavailable
from marketplace.infra.observability.metrics import report_exports_truncated_total, report_queries_total
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, check_cancelled, service_err, service_ok

from .filters import FilterCriteria
from .paging import ExportResult, PagedResult, clamp_page_number, clamp_page_size
from .sources import RowSource


class PagedQueryService(BaseService):
    """
    Stateless executor for paged queries.

    Expected failures come back as ServiceResult errors. TransientUnavailable
    (store timeout or caller cancellation) propagates unchanged and is never
    retried here.
    """

    def __init__(self, options: Optional[ReportOptions] = None):
        super().__init__()
        self._options = options

    @property
    def options(self) -> ReportOptions:
        return self._options or get_report_options()

    @BaseService.log_performance
    def query(
        self,
        source: RowSource,
        criteria: FilterCriteria,
        page_number: Optional[int] = 1,
        page_size: Optional[int] = None,
        cancel_event=None,
    ) -> ServiceResult[PagedResult]:
        """
        Run one page of a report.

        Args:
            source: Row source for the report
            criteria: Normalized filter criteria
            page_number: Requested page; values below 1 are treated as 1
            page_size: Requested size; clamped into the configured range
            cancel_event: Optional object with ``is_set()``

        Returns:
            ServiceResult with a PagedResult. An empty result always reports
            page 1; a page past the end is empty, keeps the real totals and
            reports the last page as its page number.
        """
        options = self.options
        page_number = clamp_page_number(page_number)
        page_size = clamp_page_size(page_size, options.default_page_size, options.min_page_size, options.max_page_size)

        check_cancelled(cancel_event)
        try:
            page = source.query_page(criteria, page_number, page_size, cancel_event=cancel_event)
        except TransientUnavailable:
            report_queries_total.labels(report=source.report_kind, outcome="unavailable").inc()
            raise
        except Exception as e:
            report_queries_total.labels(report=source.report_kind, outcome="error").inc()
            self.logger.error(f"Error querying {source.report_kind} page {page_number}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Report query failed")

        report_queries_total.labels(report=source.report_kind, outcome="ok").inc()

        if page.total_count == 0:
            return service_ok(
                PagedResult(items=(), page_number=1, page_size=page_size, total_count=0, aggregates=page.aggregates)
            )

        # Past the end: rows stay empty, the reported page is the last one
        total_pages = math.ceil(page.total_count / page_size)
        return service_ok(
            PagedResult(
                items=tuple(page.rows),
                page_number=min(page_number, total_pages),
                page_size=page_size,
                total_count=page.total_count,
                aggregates=page.aggregates,
            )
        )

    @BaseService.log_performance
    def export(
        self, source: RowSource, criteria: FilterCriteria, cap: Optional[int] = None, cancel_event=None
    ) -> ServiceResult[ExportResult]:
        """
        Fetch the unpaged filtered set for an export, bounded by a row cap.

        Hitting the cap is not an error: the result is flagged ``truncated``
        and ``total_matching`` reports the real size of the filtered set.
        """
        limit = self.options.export_row_limit
        if cap is not None and cap > 0:
            limit = min(cap, limit)

        check_cancelled(cancel_event)
        try:
            batch = source.query_all(criteria, limit, cancel_event=cancel_event)
        except TransientUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error exporting {source.report_kind}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Report export failed")

        rows = tuple(batch.rows)
        result = ExportResult(rows=rows, row_count=len(rows), total_matching=batch.total_matching)

        if result.truncated:
            report_exports_truncated_total.labels(report=source.report_kind).inc()
            self.logger.warning(
                f"{source.report_kind} export truncated: exported={result.row_count}, matching={result.total_matching}"
            )

        return service_ok(result)
