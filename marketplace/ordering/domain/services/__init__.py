from .report_service import OrderReportService, PayoutReportService, ReturnCaseService

__all__ = ["OrderReportService", "PayoutReportService", "ReturnCaseService"]
