"""
Mock Export Queue
=================

Records export jobs instead of dispatching them. Tests run the recorded
jobs explicitly with ``run_pending``.
"""

import logging
from typing import List

from .interface import ExportQueueInterface

logger = logging.getLogger(__name__)


class MockExportQueue(ExportQueueInterface):
    def __init__(self):
        self.enqueued: List[str] = []

    def enqueue(self, report_kind: str, criteria, requested_by=None) -> str:
        job = self.create_job(report_kind, criteria, requested_by=requested_by)
        self.enqueued.append(str(job.pk))
        logger.info(f"[MOCK EXPORT] Queued {report_kind} job {job.pk}")
        return str(job.pk)

    def run_pending(self, export_service=None) -> int:
        """Run every recorded job in order; returns how many ran."""
        from marketplace.reporting.domain.services import ExportService

        service = export_service or ExportService(queue=self)
        pending, self.enqueued = self.enqueued, []
        for job_id in pending:
            service.run_job(job_id)
        return len(pending)

    def clear(self):
        self.enqueued.clear()
