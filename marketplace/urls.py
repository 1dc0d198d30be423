from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api.views import prometheus_metrics
from .cart.api.views.cart_views import CartViewSet
from .catalog.api.views.moderation_views import ModerationViewSet
from .catalog.api.views.search_views import SearchViewSet
from .reporting.api.views.report_views import (
    AuditLogViewSet,
    OrderReportViewSet,
    PayoutReportViewSet,
    ReportExportViewSet,
    ReturnCaseReportViewSet,
    SellerOrderReportViewSet,
)

# Create the main router
router = DefaultRouter()
router.register(r"cart", CartViewSet, basename="cart")
router.register(r"admin/reports/orders", OrderReportViewSet, basename="admin-order-report")
router.register(r"admin/reports/payouts", PayoutReportViewSet, basename="admin-payout-report")
router.register(r"admin/reports/returns", ReturnCaseReportViewSet, basename="admin-return-report")
router.register(r"admin/audit-log", AuditLogViewSet, basename="admin-audit-log")
router.register(r"admin/exports", ReportExportViewSet, basename="admin-export")
router.register(r"admin/moderation", ModerationViewSet, basename="admin-moderation")
router.register(r"seller/reports/orders", SellerOrderReportViewSet, basename="seller-order-report")

app_name = "marketplace"

urlpatterns = [
    path("products/search/", SearchViewSet.as_view({"get": "search"}), name="product-search"),
    # Main API routes
    path("", include(router.urls)),
    # Prometheus metrics endpoint
    path("metrics/", prometheus_metrics.marketplace_prometheus_metrics, name="marketplace-metrics"),
]
