import uuid
from decimal import Decimal

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.models import ReportExportJob
from marketplace.querying.statuses import OrderStatus
from marketplace.tasks import run_report_export_task
from marketplace.tests.factories import AdminFactory, PayoutFactory, SellerFactory, SubOrderFactory, UserFactory


class ReportExportViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = AdminFactory(username="admin1")
        self.seller = SellerFactory(username="seller1")
        self.client.force_authenticate(user=self.admin)

        SubOrderFactory(seller=self.seller, status=OrderStatus.PAID, order_value=Decimal("100.00"))
        SubOrderFactory(seller=self.seller, status=OrderStatus.SHIPPED, order_value=Decimal("40.00"))

        self.create_url = reverse("marketplace:admin-export-list")

    def detail_url(self, job_id):
        return reverse("marketplace:admin-export-detail", kwargs={"pk": job_id})

    def download_url(self, job_id):
        return reverse("marketplace:admin-export-download", kwargs={"pk": job_id})

    def request_export(self, report_kind="orders", filters=None):
        return self.client.post(self.create_url, {"report_kind": report_kind, "filters": filters or {}}, format="json")

    def test_create_queues_job(self):
        response = self.request_export(filters={"status": ["shipped"]})

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(response.data["status"], ReportExportJob.STATUS_QUEUED)
        self.assertEqual(response.data["report_kind"], "orders")
        self.assertEqual(container.export_queue().enqueued, [response.data["id"]])

        job = ReportExportJob.objects.get(pk=response.data["id"])
        self.assertEqual(job.requested_by, self.admin)
        self.assertEqual(job.criteria["statuses"], ["shipped"])

    def test_download_before_completion_is_conflict(self):
        job_id = self.request_export().data["id"]

        response = self.client.get(self.download_url(job_id))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "export_not_ready")

    def test_completed_export_can_be_downloaded(self):
        job_id = self.request_export(filters={"status": ["shipped"]}).data["id"]

        self.assertEqual(container.export_queue().run_pending(), 1)

        detail = self.client.get(self.detail_url(job_id))
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(detail.data["status"], ReportExportJob.STATUS_COMPLETED)
        self.assertEqual(detail.data["row_count"], 1)
        self.assertEqual(detail.data["total_matching"], 1)
        self.assertFalse(detail.data["truncated"])

        response = self.client.get(self.download_url(job_id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response["X-Export-Truncated"], "false")
        lines = response.content.decode("utf-8").strip().splitlines()
        self.assertTrue(lines[0].startswith("OrderNumber,SubOrderNumber"))
        self.assertEqual(len(lines), 2)
        self.assertIn(",shipped,", lines[1])

    @override_settings(MARKETPLACE={"REPORTS": {"EXPORT_ROW_LIMIT": 1}})
    def test_export_is_capped_and_flagged(self):
        PayoutFactory(seller=self.seller)
        PayoutFactory(seller=self.seller)
        job_id = self.request_export("payouts").data["id"]

        container.export_queue().run_pending()

        job = ReportExportJob.objects.get(pk=job_id)
        self.assertEqual(job.status, ReportExportJob.STATUS_COMPLETED)
        self.assertEqual(job.row_count, 1)
        self.assertEqual(job.total_matching, 2)
        self.assertTrue(job.truncated)

        response = self.client.get(self.download_url(job_id))
        self.assertEqual(response["X-Export-Truncated"], "true")
        self.assertEqual(response["X-Total-Matching"], "2")

    def test_unknown_report_kind(self):
        response = self.request_export("inventory")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_job(self):
        self.assertEqual(self.client.get(self.detail_url(uuid.uuid4())).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get(self.detail_url("not-a-uuid")).status_code, status.HTTP_404_NOT_FOUND)

    def test_non_admin_cannot_export(self):
        self.client.force_authenticate(user=UserFactory())
        response = self.request_export()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class RunReportExportTaskTest(TestCase):
    def setUp(self):
        self.admin = AdminFactory(username="admin1")
        SubOrderFactory()

    def test_task_completes_job(self):
        job_id = container.export_queue().enqueue("orders", {}, requested_by=self.admin)

        outcome = run_report_export_task(job_id)

        self.assertEqual(outcome["status"], ReportExportJob.STATUS_COMPLETED)
        self.assertEqual(outcome["row_count"], 1)
        self.assertTrue(ReportExportJob.objects.get(pk=job_id).content.startswith("OrderNumber"))

    def test_task_reports_unknown_job(self):
        outcome = run_report_export_task(str(uuid.uuid4()))

        self.assertEqual(outcome["status"], "failed")
        self.assertEqual(outcome["error"], "export_job_not_found")

    def test_unknown_report_kind_fails_job(self):
        job = ReportExportJob.objects.create(report_kind="inventory")

        outcome = run_report_export_task(str(job.pk))

        job.refresh_from_db()
        self.assertEqual(outcome["status"], "failed")
        self.assertEqual(job.status, ReportExportJob.STATUS_FAILED)
        self.assertIn("inventory", job.error)
