"""
Service Container Tests
========================

Unit tests for dependency injection container.
"""

from django.test import TestCase, override_settings

from infrastructure.container import ServiceContainer, container, get_export_queue
from infrastructure.exports import CeleryExportQueue, ExportQueueInterface, MockExportQueue
from marketplace.cart.domain.services import CartService, PromoCodeService
from marketplace.catalog.domain.services import ModerationService, SearchService
from marketplace.querying import PagedQueryService
from marketplace.reporting.domain.services import AuditLogService, ExportService


class ServiceContainerTest(TestCase):
    """Test ServiceContainer implementation."""

    def setUp(self):
        """Set up test fixtures."""
        # Reset container before each test
        container.reset()

    def tearDown(self):
        container.reset()

    def test_container_is_singleton(self):
        """Test that ServiceContainer is a singleton."""
        container1 = ServiceContainer()
        container2 = ServiceContainer()

        self.assertIs(container1, container2)
        self.assertIs(container1, container)

    def test_export_queue_follows_settings(self):
        """Test settings backend (mock under test settings) and caching."""
        queue = container.export_queue()

        self.assertIsInstance(queue, ExportQueueInterface)
        self.assertIsInstance(queue, MockExportQueue)

        # Second call should return cached instance
        self.assertIs(queue, container.export_queue())

    @override_settings(INFRASTRUCTURE={"EXPORT_QUEUE_BACKEND": "celery", "EXPORT_QUEUE_NAME": "reports"})
    def test_celery_export_queue(self):
        queue = container.export_queue()

        self.assertIsInstance(queue, CeleryExportQueue)
        self.assertEqual(queue.queue_name, "reports")

    def test_export_queue_with_explicit_backend(self):
        """Test getting export queue with explicit backend."""
        queue = container.export_queue("celery")
        self.assertIsInstance(queue, CeleryExportQueue)

    def test_services_are_cached(self):
        cart = container.cart_service()

        self.assertIsInstance(cart, CartService)
        self.assertIs(cart, container.cart_service())
        self.assertIs(cart.promo_service, container.promo_service())
        self.assertIsInstance(container.promo_service(), PromoCodeService)

    def test_services_share_query_service(self):
        query_service = container.query_service()

        self.assertIsInstance(query_service, PagedQueryService)
        self.assertIsInstance(container.search_service(), SearchService)
        self.assertIs(container.search_service().query_service, query_service)
        self.assertIs(container.order_report_service().query_service, query_service)
        self.assertIs(container.audit_log_service().query_service, query_service)

    def test_moderation_writes_through_shared_audit_service(self):
        moderation = container.moderation_service()

        self.assertIsInstance(moderation, ModerationService)
        self.assertIsInstance(moderation.audit_service, AuditLogService)
        self.assertIs(moderation.audit_service, container.audit_log_service())

    def test_export_service_uses_container_queue(self):
        export_service = container.export_service()

        self.assertIsInstance(export_service, ExportService)
        self.assertIs(export_service.queue, container.export_queue())

    def test_reset_container(self):
        """Test resetting container clears cached instances."""
        queue1 = container.export_queue()
        cart1 = container.cart_service()

        container.reset()

        self.assertIsNot(queue1, container.export_queue())
        self.assertIsNot(cart1, container.cart_service())

    @override_settings(INFRASTRUCTURE={"EXPORT_QUEUE_BACKEND": "celery"})
    def test_configure_for_testing(self):
        """Test configuring container for testing."""
        container.configure_for_testing()

        self.assertIsInstance(container.export_queue(), MockExportQueue)


class ConvenienceFunctionsTest(TestCase):
    """Test convenience functions for service access."""

    def setUp(self):
        """Set up test fixtures."""
        container.reset()

    def test_get_export_queue_function(self):
        """Test get_export_queue convenience function."""
        queue = get_export_queue()

        self.assertIsInstance(queue, ExportQueueInterface)
        self.assertIs(queue, container.export_queue())
