"""
Export queue abstraction for background report exports.
"""

from .celery_queue import CeleryExportQueue
from .factory import ExportQueueFactory
from .interface import ExportQueueException, ExportQueueInterface
from .mock_queue import MockExportQueue

__all__ = [
    "CeleryExportQueue",
    "ExportQueueException",
    "ExportQueueFactory",
    "ExportQueueInterface",
    "MockExportQueue",
]
