"""
ExportService - Background report exports

Exports are recorded as ReportExportJob rows. The export queue creates the
job and hands its id to a worker; the worker calls ``run_job`` which
renders the CSV through the report's own service and stores the outcome.
"""

from typing import Optional

from django.core.exceptions import ValidationError
from django.utils import timezone

from marketplace.domain.exceptions import TransientUnavailable
from marketplace.infra.observability.metrics import report_export_jobs_total
from marketplace.querying.filters import FilterCriteria
from marketplace.reporting.domain.models import ReportExportJob
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .registry import exportable_report_kinds, get_report_service


class ExportService(BaseService):
    def __init__(self, queue=None):
        super().__init__()
        self._queue = queue

    @property
    def queue(self):
        if self._queue is None:
            from infrastructure.container import container

            self._queue = container.export_queue()
        return self._queue

    @BaseService.log_performance
    def request_export(self, report_kind: str, criteria: FilterCriteria, requested_by=None) -> ServiceResult[str]:
        """
        Queue a CSV export of a report.

        Returns:
            ServiceResult with the job id (str)
        """
        if report_kind not in exportable_report_kinds():
            return service_err(ErrorCodes.UNKNOWN_REPORT, f"Report '{report_kind}' cannot be exported")

        try:
            job_id = self.queue.enqueue(report_kind, criteria, requested_by=requested_by)
        except TransientUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error enqueuing {report_kind} export: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not queue the export")

        report_export_jobs_total.labels(report=report_kind, status=ReportExportJob.STATUS_QUEUED).inc()
        return service_ok(str(job_id))

    def get_job(self, job_id, requested_by=None) -> ServiceResult[ReportExportJob]:
        """Look up a job. With ``requested_by`` only that user's jobs are visible."""
        try:
            jobs = ReportExportJob.objects.filter(pk=job_id)
            if requested_by is not None:
                jobs = jobs.filter(requested_by=requested_by)
            job = jobs.first()
        except ValidationError:
            job = None
        if job is None:
            return service_err(ErrorCodes.EXPORT_JOB_NOT_FOUND, f"Export job {job_id} not found")
        return service_ok(job)

    @BaseService.log_performance
    def run_job(self, job_id, cancel_event=None) -> ServiceResult[ReportExportJob]:
        """
        Execute a queued export job.

        A failed export is recorded on the job (status ``failed``) and
        returned as an error. TransientUnavailable is recorded the same way
        and then re-raised so the worker sees it.
        """
        found = self.get_job(job_id)
        if not found.ok:
            return found
        job = found.value

        service = get_report_service(job.report_kind)
        if service is None:
            self._finish(job, ReportExportJob.STATUS_FAILED, error=f"Unknown report '{job.report_kind}'")
            return service_err(ErrorCodes.UNKNOWN_REPORT, job.error)

        job.status = ReportExportJob.STATUS_RUNNING
        job.started_at = timezone.now()
        job.save(update_fields=["status", "started_at"])

        try:
            criteria = service.criteria_class.from_payload(job.criteria or {})
            result = service.export_csv(criteria, cancel_event=cancel_event)
        except TransientUnavailable as e:
            self._finish(job, ReportExportJob.STATUS_FAILED, error=str(e) or type(e).__name__)
            raise
        except Exception as e:
            self.logger.error(f"Export job {job.pk} crashed: {e}", exc_info=True)
            self._finish(job, ReportExportJob.STATUS_FAILED, error=str(e))
            return service_err(ErrorCodes.INTERNAL_ERROR, "Export failed")

        if not result.ok:
            self._finish(job, ReportExportJob.STATUS_FAILED, error=result.error_detail or result.error)
            return service_err(result.error, result.error_detail)

        export = result.value
        job.content = export.content
        job.row_count = export.row_count
        job.total_matching = export.total_matching
        job.truncated = export.truncated
        self._finish(job, ReportExportJob.STATUS_COMPLETED)
        return service_ok(job)

    def _finish(self, job: ReportExportJob, status: str, error: Optional[str] = None):
        job.status = status
        job.error = error or ""
        job.completed_at = timezone.now()
        job.save()
        report_export_jobs_total.labels(report=job.report_kind, status=status).inc()
        if status == ReportExportJob.STATUS_FAILED:
            self.logger.warning(f"Export job {job.pk} ({job.report_kind}) failed: {job.error}")
        else:
            self.logger.info(f"Export job {job.pk} ({job.report_kind}) completed: rows={job.row_count}")
