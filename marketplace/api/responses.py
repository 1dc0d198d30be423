"""
Response helpers shared by the marketplace views.

Services return ServiceResult; views turn failures into HTTP responses
with one table of error code -> status.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from rest_framework import status
from rest_framework.response import Response

from marketplace.domain.exceptions import TransientUnavailable
from marketplace.services.base import ErrorCodes, ServiceResult

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCodes.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.REVIEW_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.EXPORT_JOB_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.PRODUCT_OUT_OF_STOCK: status.HTTP_409_CONFLICT,
    ErrorCodes.VARIANT_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.VARIANT_UNAVAILABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_STATUS: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.UNKNOWN_REPORT: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
}


def error_response(result: ServiceResult) -> Response:
    http_status = ERROR_STATUS.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({"error": result.error, "detail": result.error_detail}, status=http_status)


def jsonable(value):
    """Decimals as strings (no float rounding), datetimes as ISO 8601."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, dict):
        return {key: jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(item) for item in value]
    return value


class ServiceViewMixin:
    """Maps a storage outage or cancelled request to 503 instead of a 500."""

    def handle_exception(self, exc):
        if isinstance(exc, TransientUnavailable):
            logger.warning(f"{self.__class__.__name__}: service temporarily unavailable: {exc}")
            return Response(
                {"error": "temporarily_unavailable", "detail": "Please try again shortly."},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return super().handle_exception(exc)
