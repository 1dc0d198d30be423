from .engine import PagedQueryService
from .filters import (
    AuditLogCriteria,
    FilterCriteria,
    OrderReportCriteria,
    PayoutCriteria,
    ProductModerationCriteria,
    ProductSearchCriteria,
    ReturnCaseCriteria,
    ReviewModerationCriteria,
)
from .paging import ExportResult, PagedResult
from .sources import InMemoryRowSource, QuerySetRowSource, RowBatch, RowPage, RowSource

__all__ = [
    "PagedQueryService",
    "FilterCriteria",
    "AuditLogCriteria",
    "OrderReportCriteria",
    "PayoutCriteria",
    "ProductModerationCriteria",
    "ProductSearchCriteria",
    "ReturnCaseCriteria",
    "ReviewModerationCriteria",
    "PagedResult",
    "ExportResult",
    "RowSource",
    "RowPage",
    "RowBatch",
    "InMemoryRowSource",
    "QuerySetRowSource",
]
