"""Report kinds that can be exported in the background."""

from typing import Dict, Optional, Type

from .report_service import ReportService


def report_services() -> Dict[str, Type[ReportService]]:
    from marketplace.ordering.domain.services import OrderReportService, PayoutReportService, ReturnCaseService

    from .audit_service import AuditLogService

    return {
        OrderReportService.report_kind: OrderReportService,
        PayoutReportService.report_kind: PayoutReportService,
        ReturnCaseService.report_kind: ReturnCaseService,
        AuditLogService.report_kind: AuditLogService,
    }


def exportable_report_kinds():
    return tuple(report_services())


def get_report_service(report_kind: str, **kwargs) -> Optional[ReportService]:
    service_class = report_services().get(report_kind)
    return service_class(**kwargs) if service_class else None
