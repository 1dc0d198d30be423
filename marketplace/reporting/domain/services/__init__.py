from .audit_service import AuditLogService
from .export_service import ExportService
from .registry import exportable_report_kinds, get_report_service
from .report_service import CsvExport, ReportService

__all__ = [
    "AuditLogService",
    "CsvExport",
    "ExportService",
    "ReportService",
    "exportable_report_kinds",
    "get_report_service",
]
