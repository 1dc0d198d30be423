from .audit import AuditLogEntry
from .export_job import ReportExportJob


__all__ = ["AuditLogEntry", "ReportExportJob"]
