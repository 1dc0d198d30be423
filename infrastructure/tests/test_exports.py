"""
Export Queue Infrastructure Tests
==================================

Unit tests for the export queue abstraction layer.
"""

from unittest.mock import patch

from django.test import TestCase, override_settings
from kombu.exceptions import OperationalError

from infrastructure.exports import (
    CeleryExportQueue,
    ExportQueueException,
    ExportQueueFactory,
    ExportQueueInterface,
    MockExportQueue,
)
from marketplace.models import ReportExportJob
from marketplace.querying.filters import build_order_report_criteria
from marketplace.tests.factories import AdminFactory, SubOrderFactory


class ExportQueueInterfaceTest(TestCase):
    """Test ExportQueueInterface contract."""

    def test_interface_is_abstract(self):
        """ExportQueueInterface should not be instantiable."""
        with self.assertRaises(TypeError):
            ExportQueueInterface()


class MockExportQueueTest(TestCase):
    """Test MockExportQueue implementation."""

    def setUp(self):
        """Set up test fixtures."""
        self.queue = MockExportQueue()
        self.admin = AdminFactory()

    def test_enqueue_creates_job(self):
        criteria = build_order_report_criteria(statuses=["paid"], query=" ORD ")

        job_id = self.queue.enqueue("orders", criteria, requested_by=self.admin)

        job = ReportExportJob.objects.get(pk=job_id)
        self.assertEqual(job.status, ReportExportJob.STATUS_QUEUED)
        self.assertEqual(job.requested_by, self.admin)
        self.assertEqual(job.criteria["statuses"], ["paid"])
        self.assertEqual(job.criteria["query"], "ORD")
        self.assertEqual(self.queue.enqueued, [job_id])

    def test_run_pending(self):
        SubOrderFactory()
        job_id = self.queue.enqueue("orders", build_order_report_criteria())

        self.assertEqual(self.queue.run_pending(), 1)
        self.assertEqual(self.queue.enqueued, [])

        job = ReportExportJob.objects.get(pk=job_id)
        self.assertEqual(job.status, ReportExportJob.STATUS_COMPLETED)
        self.assertEqual(job.row_count, 1)
        self.assertIsNotNone(job.completed_at)

    def test_clear(self):
        self.queue.enqueue("orders", {})
        self.queue.clear()
        self.assertEqual(self.queue.run_pending(), 0)


class CeleryExportQueueTest(TestCase):
    """Test CeleryExportQueue implementation."""

    def setUp(self):
        self.queue = CeleryExportQueue(queue_name="reports")

    @patch("marketplace.tasks.run_report_export_task.apply_async")
    def test_enqueue_dispatches_task(self, mock_apply_async):
        job_id = self.queue.enqueue("payouts", {})

        mock_apply_async.assert_called_once_with(args=[job_id], queue="reports")
        self.assertEqual(ReportExportJob.objects.get(pk=job_id).status, ReportExportJob.STATUS_QUEUED)

    @patch("marketplace.tasks.run_report_export_task.apply_async")
    def test_broker_failure_marks_job_failed(self, mock_apply_async):
        mock_apply_async.side_effect = OperationalError("connection refused")

        with self.assertRaises(ExportQueueException):
            self.queue.enqueue("payouts", {})

        job = ReportExportJob.objects.get()
        self.assertEqual(job.status, ReportExportJob.STATUS_FAILED)
        self.assertIn("connection refused", job.error)


class ExportQueueFactoryTest(TestCase):
    """Test ExportQueueFactory."""

    def test_create_mock(self):
        self.assertIsInstance(ExportQueueFactory.create("mock"), MockExportQueue)

    def test_create_celery(self):
        self.assertIsInstance(ExportQueueFactory.create("celery"), CeleryExportQueue)

    @override_settings(INFRASTRUCTURE={})
    def test_testing_defaults_to_mock(self):
        self.assertIsInstance(ExportQueueFactory.create(), MockExportQueue)

    @override_settings(INFRASTRUCTURE={}, TESTING=False)
    def test_production_defaults_to_celery(self):
        self.assertIsInstance(ExportQueueFactory.create(), CeleryExportQueue)

    def test_invalid_backend(self):
        with self.assertRaises(ValueError):
            ExportQueueFactory.create("carrier-pigeon")
