"""
Order, payout and return-case reports.

Admin views see every seller; seller views are the same reports pinned to
the requesting seller's id, whatever seller filter the request carried.
"""

from dataclasses import replace
from datetime import timedelta
from typing import Optional

from django.utils import timezone

from marketplace.conf import get_report_options
from marketplace.querying.filters import OrderReportCriteria, PayoutCriteria, ReturnCaseCriteria
from marketplace.querying.normalization import end_of_day, start_of_day
from marketplace.querying.paging import PagedResult
from marketplace.reporting.domain.services.report_service import CsvExport, ReportService
from marketplace.services.base import ServiceResult
from utils.logging_utils import mask_value


def with_default_window(criteria, days: int):
    """Reports without any date bound cover the last ``days`` days, today included."""
    if criteria.from_date is not None or criteria.to_date is not None or days <= 0:
        return criteria
    today = timezone.now().date()
    return replace(criteria, from_date=start_of_day(today - timedelta(days=days)), to_date=end_of_day(today))


class OrderReportService(ReportService):
    """
    Order and commission report over seller sub-orders.

    Aggregates: total_order_value, total_commission, total_payout.
    """

    report_kind = "orders"
    criteria_class = OrderReportCriteria
    csv_columns = (
        ("OrderNumber", "order_number"),
        ("SubOrderNumber", "sub_order_number"),
        ("CreatedOn", "created_at"),
        ("Buyer", "buyer"),
        ("BuyerEmail", "buyer_email"),
        ("SellerId", "seller_id"),
        ("SellerName", "seller_name"),
        ("Status", "status"),
        ("PaymentStatus", "payment_status"),
        ("OrderValue", "order_value"),
        ("Commission", "commission"),
        ("PayoutAmount", "payout_amount"),
    )

    def create_source(self):
        from marketplace.infra.persistence import OrderReportRowSource

        return OrderReportRowSource()

    def prepare_criteria(self, criteria: OrderReportCriteria) -> OrderReportCriteria:
        return with_default_window(criteria, get_report_options().default_window_days)

    def list(self, criteria, page_number=1, page_size=None, cancel_event=None) -> ServiceResult[PagedResult]:
        if criteria.query:
            self.logger.debug(f"Order report search for {mask_value(criteria.query)}")
        return super().list(criteria, page_number=page_number, page_size=page_size, cancel_event=cancel_event)

    @staticmethod
    def scope_to_seller(criteria: OrderReportCriteria, seller_id) -> OrderReportCriteria:
        return replace(criteria, actor_or_seller_id=str(seller_id))

    def seller_report(
        self,
        seller_id,
        criteria: OrderReportCriteria,
        page_number: int = 1,
        page_size: Optional[int] = None,
        cancel_event=None,
    ) -> ServiceResult[PagedResult]:
        return self.list(
            self.scope_to_seller(criteria, seller_id),
            page_number=page_number,
            page_size=page_size,
            cancel_event=cancel_event,
        )

    def seller_export_csv(
        self, seller_id, criteria: OrderReportCriteria, cap: Optional[int] = None, cancel_event=None
    ) -> ServiceResult[CsvExport]:
        return self.export_csv(self.scope_to_seller(criteria, seller_id), cap=cap, cancel_event=cancel_event)


class PayoutReportService(ReportService):
    """Seller payouts. Aggregates: total_gross, total_commission, total_amount."""

    report_kind = "payouts"
    criteria_class = PayoutCriteria
    csv_columns = (
        ("Reference", "reference"),
        ("SellerId", "seller_id"),
        ("SellerName", "seller_name"),
        ("Status", "status"),
        ("GrossAmount", "gross_amount"),
        ("Commission", "commission"),
        ("Amount", "amount"),
        ("PeriodStart", "period_start"),
        ("PeriodEnd", "period_end"),
        ("PaidAt", "paid_at"),
        ("CreatedOn", "created_at"),
    )

    def create_source(self):
        from marketplace.infra.persistence import PayoutRowSource

        return PayoutRowSource()


class ReturnCaseService(ReportService):
    report_kind = "returns"
    criteria_class = ReturnCaseCriteria
    csv_columns = (
        ("CaseNumber", "case_number"),
        ("OrderNumber", "order_number"),
        ("BuyerId", "buyer_id"),
        ("Buyer", "buyer"),
        ("SellerId", "seller_id"),
        ("SellerName", "seller_name"),
        ("Status", "status"),
        ("Reason", "reason"),
        ("CreatedOn", "created_at"),
        ("UpdatedOn", "updated_at"),
    )

    def create_source(self):
        from marketplace.infra.persistence import ReturnCaseRowSource

        return ReturnCaseRowSource()

    def seller_cases(self, seller_id, criteria: ReturnCaseCriteria, page_number=1, page_size=None):
        return self.list(replace(criteria, actor_or_seller_id=str(seller_id)), page_number, page_size)

    def buyer_cases(self, buyer_id, criteria: ReturnCaseCriteria, page_number=1, page_size=None):
        return self.list(replace(criteria, buyer_id=str(buyer_id)), page_number, page_size)
