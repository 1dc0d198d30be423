"""
Infrastructure Package
======================

Pluggable backends the marketplace services depend on.

Modules:
    - exports: Report export queue (Celery worker, in-process mock for tests)
    - container: Builds and caches the queue and the marketplace services

Select the export backend with ``settings.INFRASTRUCTURE["EXPORT_QUEUE_BACKEND"]``.
"""
