"""
Celery Export Queue
===================

Production export queue: creates the job row and dispatches
``marketplace.tasks.run_report_export_task`` with its id.
"""

import logging

from celery.exceptions import CeleryError
from kombu.exceptions import OperationalError as BrokerUnavailable

from .interface import ExportQueueException, ExportQueueInterface

logger = logging.getLogger(__name__)


class CeleryExportQueue(ExportQueueInterface):
    def __init__(self, queue_name: str = "marketplace_tasks"):
        self.queue_name = queue_name

    def enqueue(self, report_kind: str, criteria, requested_by=None) -> str:
        from marketplace.reporting.domain.models import ReportExportJob
        from marketplace.tasks import run_report_export_task

        job = self.create_job(report_kind, criteria, requested_by=requested_by)
        try:
            run_report_export_task.apply_async(args=[str(job.pk)], queue=self.queue_name)
        except (CeleryError, BrokerUnavailable) as e:
            job.status = ReportExportJob.STATUS_FAILED
            job.error = f"Dispatch failed: {e}"
            job.save(update_fields=["status", "error"])
            logger.error(f"Failed to dispatch export job {job.pk}: {e}")
            raise ExportQueueException(str(e)) from e

        logger.info(f"Dispatched {report_kind} export job {job.pk} to {self.queue_name}")
        return str(job.pk)
