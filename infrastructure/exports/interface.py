"""
Export Queue Interface
======================

Abstract base class for handing report exports to a background worker.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ExportQueueInterface(ABC):
    """
    Abstract interface for export queues.

    Concrete implementations:
        - CeleryExportQueue: dispatches the export task to a Celery worker
        - MockExportQueue: records jobs in memory for tests
    """

    def create_job(self, report_kind: str, criteria, requested_by=None):
        """Persist a queued ReportExportJob for ``criteria``."""
        from marketplace.reporting.domain.models import ReportExportJob

        job = ReportExportJob.objects.create(
            report_kind=report_kind,
            criteria=criteria.to_payload() if hasattr(criteria, "to_payload") else dict(criteria or {}),
            requested_by=requested_by,
        )
        logger.debug(f"Created export job {job.pk} for {report_kind}")
        return job

    @abstractmethod
    def enqueue(self, report_kind: str, criteria, requested_by=None) -> str:
        """
        Queue an export.

        Args:
            report_kind: Registered report kind (e.g. "orders")
            criteria: FilterCriteria for the report
            requested_by: User requesting the export (optional)

        Returns:
            The export job id

        Raises:
            ExportQueueException: If the job cannot be dispatched
        """
        pass


class ExportQueueException(Exception):
    """Base exception for export queue operations."""

    pass
