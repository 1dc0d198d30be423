"""
Dependency Injection Container
================================

Simple service locator for infrastructure dependencies and the stateless
marketplace services built on them.

Usage:
    from infrastructure.container import container

    queue = container.export_queue()
    cart = container.cart_service()
"""

import logging
from typing import Optional

from .exports import ExportQueueFactory, ExportQueueInterface

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for infrastructure dependencies.

    Implements lazy initialization and caching of service instances.
    Services read their options from settings on every call, so cached
    instances stay valid under ``override_settings``.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._export_queue: Optional[ExportQueueInterface] = None

            # Domain Services
            self._query_service = None
            self._cart_service = None
            self._promo_service = None
            self._search_service = None
            self._moderation_service = None
            self._audit_log_service = None
            self._order_report_service = None
            self._payout_report_service = None
            self._return_case_service = None
            self._export_service = None

            self._initialized = True
            logger.info("Service container initialized")

    def export_queue(self, backend: Optional[str] = None) -> ExportQueueInterface:
        """
        Get export queue instance.

        Args:
            backend: Queue backend type ('celery' or 'mock')
                    If None, uses configuration from settings

        Returns:
            ExportQueueInterface implementation (cached)
        """
        if self._export_queue is None or backend is not None:
            self._export_queue = ExportQueueFactory.create(backend)
            logger.debug(f"Created export queue: {type(self._export_queue).__name__}")

        return self._export_queue

    def query_service(self):
        """Get PagedQueryService instance."""
        if self._query_service is None:
            from marketplace.querying import PagedQueryService

            self._query_service = PagedQueryService()
            logger.debug("Created PagedQueryService")
        return self._query_service

    def promo_service(self):
        if self._promo_service is None:
            from marketplace.cart.domain.services import PromoCodeService

            self._promo_service = PromoCodeService()
            logger.debug("Created PromoCodeService")
        return self._promo_service

    def cart_service(self):
        """Get CartService instance."""
        if self._cart_service is None:
            from marketplace.cart.domain.services import CartService

            self._cart_service = CartService(promo_service=self.promo_service())
            logger.debug("Created CartService")
        return self._cart_service

    def search_service(self):
        """Get SearchService instance."""
        if self._search_service is None:
            from marketplace.catalog.domain.services import SearchService

            self._search_service = SearchService(query_service=self.query_service())
            logger.debug("Created SearchService")
        return self._search_service

    def audit_log_service(self):
        if self._audit_log_service is None:
            from marketplace.reporting.domain.services import AuditLogService

            self._audit_log_service = AuditLogService(query_service=self.query_service())
            logger.debug("Created AuditLogService")
        return self._audit_log_service

    def moderation_service(self):
        """Get ModerationService instance."""
        if self._moderation_service is None:
            from marketplace.catalog.domain.services import ModerationService

            self._moderation_service = ModerationService(
                query_service=self.query_service(), audit_service=self.audit_log_service()
            )
            logger.debug("Created ModerationService")
        return self._moderation_service

    def order_report_service(self):
        if self._order_report_service is None:
            from marketplace.ordering.domain.services import OrderReportService

            self._order_report_service = OrderReportService(query_service=self.query_service())
            logger.debug("Created OrderReportService")
        return self._order_report_service

    def payout_report_service(self):
        if self._payout_report_service is None:
            from marketplace.ordering.domain.services import PayoutReportService

            self._payout_report_service = PayoutReportService(query_service=self.query_service())
            logger.debug("Created PayoutReportService")
        return self._payout_report_service

    def return_case_service(self):
        if self._return_case_service is None:
            from marketplace.ordering.domain.services import ReturnCaseService

            self._return_case_service = ReturnCaseService(query_service=self.query_service())
            logger.debug("Created ReturnCaseService")
        return self._return_case_service

    def export_service(self):
        """Get ExportService instance, bound to the configured export queue."""
        if self._export_service is None:
            from marketplace.reporting.domain.services import ExportService

            self._export_service = ExportService(queue=self.export_queue())
            logger.debug("Created ExportService")
        return self._export_service

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        self._export_queue = None
        self._query_service = None
        self._cart_service = None
        self._promo_service = None
        self._search_service = None
        self._moderation_service = None
        self._audit_log_service = None
        self._order_report_service = None
        self._payout_report_service = None
        self._return_case_service = None
        self._export_service = None
        logger.info("Service container reset")

    def configure_for_testing(self):
        """Configure container with the in-memory export queue."""
        self.reset()
        self._export_queue = ExportQueueFactory.create("mock")
        logger.info("Service container configured for testing")


# Global singleton instance
container = ServiceContainer()


def get_export_queue() -> ExportQueueInterface:
    """Get export queue from global container."""
    return container.export_queue()
