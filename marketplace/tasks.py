"""
Celery Tasks for the marketplace

Report exports run here so that large CSV renders never block a request.
"""

import logging

from celery import shared_task

from marketplace.reporting.domain.services import ExportService


logger = logging.getLogger(__name__)


@shared_task(name="marketplace.tasks.run_report_export_task")
def run_report_export_task(job_id: str):
    """
    Render one queued report export.

    TransientUnavailable propagates so the failure is visible to the worker;
    the job row is already marked failed by then.
    """
    logger.info(f"Starting report export job {job_id}")
    try:
        result = ExportService().run_job(job_id)

        if result.ok:
            job = result.value
            logger.info(f"Export job {job_id} completed. Rows: {job.row_count}, truncated: {job.truncated}")
            return {"job_id": str(job.pk), "status": job.status, "row_count": job.row_count}
        else:
            logger.error(f"Export job {job_id} failed: {result.error}")
            return {"job_id": str(job_id), "status": "failed", "error": result.error}

    except Exception as e:
        logger.error(f"Error in run_report_export_task for {job_id}: {e}", exc_info=True)
        raise
