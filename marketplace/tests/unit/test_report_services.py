from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.test import override_settings

from marketplace.conf import ReportOptions
from marketplace.ordering.domain.services import OrderReportService
from marketplace.querying import InMemoryRowSource, PagedQueryService
from marketplace.querying.filters import AuditLogCriteria, OrderReportCriteria
from marketplace.reporting.domain.services import AuditLogService
from marketplace.reporting.domain.services.report_service import format_cell

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=dt_timezone.utc)


def order_row(index, seller_id="7", **overrides):
    row = {
        "id": index,
        "order_number": f"ORD-{index:04d}",
        "sub_order_number": f"SUB-{index:04d}",
        "created_at": NOW - timedelta(days=index),
        "buyer": "Ana Silva",
        "buyer_email": "ana@example.com",
        "seller_id": seller_id,
        "seller_name": "Lamp Co",
        "status": "paid",
        "payment_status": "paid",
        "order_value": Decimal("100.00"),
        "commission": Decimal("10.00"),
        "payout_amount": Decimal("90.00"),
    }
    row.update(overrides)
    return row


def seller_predicate(row, criteria):
    return criteria.actor_or_seller_id is None or row["seller_id"] == criteria.actor_or_seller_id


@pytest.mark.unit
class TestOrderReportServiceUnit:
    def setup_method(self):
        self.source = InMemoryRowSource(
            [order_row(1), order_row(2, seller_id="8", buyer="Smith, John"), order_row(3)],
            predicate=seller_predicate,
            aggregate_fields=["order_value", "commission", "payout_amount"],
            report_kind="orders",
        )
        options = ReportOptions(export_row_limit=2, default_page_size=10, min_page_size=1, max_page_size=50)
        self.service = OrderReportService(query_service=PagedQueryService(options=options), source=self.source)

    @patch("marketplace.ordering.domain.services.report_service.timezone.now", return_value=NOW)
    def test_default_window_without_dates(self, _now):
        criteria = self.service.prepare_criteria(OrderReportCriteria())

        assert criteria.from_date.date() == (NOW - timedelta(days=30)).date()
        assert criteria.to_date.date() == NOW.date()

    def test_explicit_bound_disables_default_window(self):
        start = NOW - timedelta(days=400)

        criteria = self.service.prepare_criteria(OrderReportCriteria(from_date=start))

        assert criteria.from_date == start
        assert criteria.to_date is None

    def test_seller_report_ignores_requested_seller(self):
        criteria = OrderReportCriteria(from_date=NOW - timedelta(days=10), actor_or_seller_id="8")

        result = self.service.seller_report("7", criteria)

        assert result.ok
        assert [row["id"] for row in result.value.items] == [1, 3]
        assert result.value.aggregates["order_value"] == Decimal("200.00")

    def test_export_csv_is_capped(self):
        result = self.service.export_csv(OrderReportCriteria(from_date=NOW - timedelta(days=10)))

        assert result.ok
        export = result.value
        assert export.row_count == 2
        assert export.total_matching == 3
        assert export.truncated
        lines = export.content.splitlines()
        assert lines[0].startswith("OrderNumber,SubOrderNumber,CreatedOn")
        assert '"Smith, John"' in lines[2]
        assert lines[1].endswith("100.00,10.00,90.00")

    def test_caller_cap_below_configured_limit(self):
        result = self.service.export_csv(OrderReportCriteria(from_date=NOW - timedelta(days=10)), cap=1)

        assert result.value.row_count == 1
        assert result.value.truncated

    def test_seller_export_is_scoped(self):
        result = self.service.seller_export_csv("8", OrderReportCriteria(from_date=NOW - timedelta(days=10)))

        assert result.value.total_matching == 1
        assert not result.value.truncated


@pytest.mark.unit
class TestAuditLogRetentionUnit:
    def setup_method(self):
        self.service = AuditLogService(source=InMemoryRowSource([], report_kind="audit_log"))

    @override_settings(MARKETPLACE={"REPORTS": {"AUDIT_RETENTION_DAYS": 30}})
    @patch("marketplace.reporting.domain.services.audit_service.timezone.now", return_value=NOW)
    def test_cutoff_applied_without_from_date(self, _now):
        criteria = self.service.prepare_criteria(AuditLogCriteria())
        assert criteria.from_date == NOW - timedelta(days=30)

    @override_settings(MARKETPLACE={"REPORTS": {"AUDIT_RETENTION_DAYS": 30}})
    @patch("marketplace.reporting.domain.services.audit_service.timezone.now", return_value=NOW)
    def test_explicit_from_date_is_kept(self, _now):
        start = NOW - timedelta(days=90)
        assert self.service.prepare_criteria(AuditLogCriteria(from_date=start)).from_date == start

    @override_settings(MARKETPLACE={"REPORTS": {"AUDIT_RETENTION_DAYS": 30}})
    @patch("marketplace.reporting.domain.services.audit_service.timezone.now", return_value=NOW)
    def test_range_ending_before_cutoff_is_kept(self, _now):
        end = NOW - timedelta(days=60)

        criteria = self.service.prepare_criteria(AuditLogCriteria(to_date=end))

        assert criteria.from_date is None
        assert criteria.to_date == end

    @override_settings(MARKETPLACE={"REPORTS": {"AUDIT_RETENTION_DAYS": 0}})
    def test_zero_retention_disables_cutoff(self):
        assert self.service.prepare_criteria(AuditLogCriteria()).from_date is None


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (Decimal("3.5"), "3.50"),
        (True, "true"),
        (False, "false"),
        (NOW, "2024-06-15T12:00:00+00:00"),
        ("paid", "paid"),
    ],
)
def test_format_cell(value, expected):
    assert format_cell(value) == expected
