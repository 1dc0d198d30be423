"""
Export Queue Factory
====================

Creates the export queue configured in ``settings.INFRASTRUCTURE``.
"""

import logging
from typing import Literal, Optional

from django.conf import settings

from .celery_queue import CeleryExportQueue
from .interface import ExportQueueInterface
from .mock_queue import MockExportQueue

logger = logging.getLogger(__name__)

ExportQueueBackend = Literal["celery", "mock"]


class ExportQueueFactory:
    """
    Usage:
        # In settings.py
        INFRASTRUCTURE = {"EXPORT_QUEUE_BACKEND": "celery"}  # or "mock"

        queue = ExportQueueFactory.create()
    """

    @staticmethod
    def create(backend: Optional[ExportQueueBackend] = None) -> ExportQueueInterface:
        # Default to 'celery' in production, 'mock' in testing
        is_testing = getattr(settings, "TESTING", False)
        default_backend = "mock" if is_testing else "celery"

        infrastructure = getattr(settings, "INFRASTRUCTURE", {}) or {}
        backend_type = backend or infrastructure.get("EXPORT_QUEUE_BACKEND", default_backend)

        logger.info(f"Creating export queue backend: {backend_type}")

        if backend_type == "celery":
            return CeleryExportQueue(queue_name=infrastructure.get("EXPORT_QUEUE_NAME", "marketplace_tasks"))
        elif backend_type == "mock":
            return MockExportQueue()
        else:
            raise ValueError(f"Invalid export queue backend: {backend_type}. Must be 'celery' or 'mock'")
