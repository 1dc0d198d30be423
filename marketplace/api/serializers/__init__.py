# Marketplace API Serializers

# Import response serializers for API documentation
from .response_serializers import (
    CartResponseSerializer,
    CartSummaryResponseSerializer,
    ErrorResponseSerializer,
    ExportJobResponseSerializer,
    PagedResponseSerializer,
    PromoResponseSerializer,
)


__all__ = [
    "CartResponseSerializer",
    "CartSummaryResponseSerializer",
    "ErrorResponseSerializer",
    "ExportJobResponseSerializer",
    "PagedResponseSerializer",
    "PromoResponseSerializer",
]
