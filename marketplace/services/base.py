"""
Base classes and utilities for the service layer.

Services return a ServiceResult for every expected outcome, including
rejections such as an unknown product or an invalid moderation status.
Only TransientUnavailable (store timeout or caller cancellation) escapes
as an exception.
"""

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Generic, Optional, TypeVar

from marketplace.domain.exceptions import OperationCancelled, TransientUnavailable

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """
    Success value or error code of a service operation.

    Examples:
        >>> result = service_ok(summary)
        >>> result = service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Product 123 does not exist")
        >>> result.error, result.error_detail
        ('product_not_found', 'Product 123 does not exist')
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None


def service_ok(value: T) -> ServiceResult[T]:
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "") -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: One of ErrorCodes
        error_detail: Human-readable message; defaults to the code
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error)


def check_cancelled(cancel_event=None) -> None:
    """
    Raise OperationCancelled when the caller's cancellation signal is set.

    Args:
        cancel_event: Any object exposing ``is_set()`` (e.g. threading.Event), or None
    """
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelled("Operation cancelled by caller")


class BaseService:
    """
    Base class for the marketplace services.

    Provides a logger named after the concrete service and the
    ``log_performance`` timing decorator.

    Usage:
        class PayoutReportService(ReportService):
            @BaseService.log_performance
            def list(self, criteria, page_number=1, page_size=None):
                self.logger.debug(f"Payout report for {criteria.actor_or_seller_id}")
                ...
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Log how long a service method took and how it ended.

        Rejections are logged as warnings. TransientUnavailable is logged
        without a traceback and re-raised; any other exception is logged
        with one and re-raised.
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            started = time.perf_counter()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                result = func(self, *args, **kwargs)
            except TransientUnavailable as e:
                elapsed_ms = (time.perf_counter() - started) * 1000
                self.logger.warning(f"{method_name} unavailable after {elapsed_ms:.2f}ms: {e}")
                raise
            except Exception as e:
                elapsed_ms = (time.perf_counter() - started) * 1000
                self.logger.error(f"{method_name} raised after {elapsed_ms:.2f}ms: {e}", exc_info=True)
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000
            if isinstance(result, ServiceResult) and not result.ok:
                self.logger.warning(f"{method_name} rejected with '{result.error}' in {elapsed_ms:.2f}ms")
            else:
                self.logger.debug(f"{method_name} completed in {elapsed_ms:.2f}ms")
            return result

        return wrapper


class ErrorCodes:
    """Error codes carried by failed ServiceResults; the API maps them to HTTP statuses."""

    # Catalog
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_OUT_OF_STOCK = "product_out_of_stock"
    VARIANT_REQUIRED = "variant_required"
    VARIANT_UNAVAILABLE = "variant_unavailable"

    # Moderation
    REVIEW_NOT_FOUND = "review_not_found"
    INVALID_STATUS = "invalid_status"

    # Exports
    EXPORT_JOB_NOT_FOUND = "export_job_not_found"
    UNKNOWN_REPORT = "unknown_report"

    INVALID_INPUT = "invalid_input"
    INTERNAL_ERROR = "internal_error"
