import threading
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal

import pytest

from marketplace.conf import ReportOptions
from marketplace.domain.exceptions import OperationCancelled, TransientUnavailable
from marketplace.querying import FilterCriteria, InMemoryRowSource, PagedQueryService, RowSource
from marketplace.services.base import ErrorCodes

BASE_TIME = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)


def make_rows(count):
    return [
        {
            "id": index,
            "created_at": BASE_TIME + timedelta(hours=index),
            "status": "paid" if index % 2 else "new",
            "amount": Decimal("10.50") if index == 1 else Decimal(index),
        }
        for index in range(1, count + 1)
    ]


def status_predicate(row, criteria):
    return not criteria.statuses or row["status"] in criteria.statuses


class FailingSource(RowSource):
    report_kind = "failing"

    def __init__(self, exc):
        self.exc = exc

    def query_page(self, criteria, page_number, page_size, cancel_event=None):
        raise self.exc

    def query_all(self, criteria, cap, cancel_event=None):
        raise self.exc


@pytest.mark.unit
class TestPagedQueryServiceUnit:
    def setup_method(self):
        self.options = ReportOptions(
            export_row_limit=1000, default_page_size=10, min_page_size=2, max_page_size=20
        )
        self.service = PagedQueryService(options=self.options)
        self.source = InMemoryRowSource(
            make_rows(25), predicate=status_predicate, aggregate_fields=["amount"], report_kind="test"
        )

    def test_first_page_newest_first(self):
        result = self.service.query(self.source, FilterCriteria(), page_number=1, page_size=10)

        assert result.ok
        page = result.value
        assert [row["id"] for row in page.items] == list(range(25, 15, -1))
        assert page.total_count == 25
        assert page.total_pages == 3
        assert page.has_next and not page.has_previous

    def test_pages_do_not_overlap(self):
        seen = []
        for number in (1, 2, 3):
            seen.extend(row["id"] for row in self.service.query(self.source, FilterCriteria(), number, 10).value.items)

        assert sorted(seen) == list(range(1, 26))
        assert len(seen) == len(set(seen))

    def test_page_size_is_clamped(self):
        assert self.service.query(self.source, FilterCriteria(), 1, 500).value.page_size == 20
        assert self.service.query(self.source, FilterCriteria(), 1, 1).value.page_size == 2
        assert self.service.query(self.source, FilterCriteria(), 1, None).value.page_size == 10

    def test_page_number_below_one_is_first_page(self):
        page = self.service.query(self.source, FilterCriteria(), page_number=0, page_size=10).value
        assert page.page_number == 1
        assert page.items[0]["id"] == 25

    def test_page_past_the_end_is_empty_and_reports_last_page(self):
        page = self.service.query(self.source, FilterCriteria(), page_number=99, page_size=10).value

        assert page.items == ()
        assert page.page_number == 3
        assert page.total_count == 25
        assert page.total_pages == 3
        assert page.has_next is False
        assert page.has_previous is True

    def test_empty_result_reports_page_one(self):
        page = self.service.query(self.source, FilterCriteria(statuses=("refunded",)), page_number=4).value

        assert page.items == ()
        assert page.page_number == 1
        assert page.total_count == 0
        assert page.total_pages == 0

    def test_aggregates_cover_the_full_filtered_set(self):
        criteria = FilterCriteria(statuses=("new",))
        page = self.service.query(self.source, criteria, page_number=1, page_size=2).value

        expected = sum(Decimal(index) for index in range(2, 26, 2))
        assert page.aggregates["amount"] == expected
        assert len(page.items) == 2

    def test_aggregates_match_export_sum(self):
        page = self.service.query(self.source, FilterCriteria(), 1, 10).value
        export = self.service.export(self.source, FilterCriteria()).value

        exported_sum = sum((row["amount"] for row in export.rows), Decimal("0"))
        assert page.aggregates["amount"] == exported_sum.quantize(Decimal("0.01"))

    def test_export_is_capped_and_flagged(self):
        result = self.service.export(self.source, FilterCriteria(), cap=5)

        assert result.ok
        export = result.value
        assert export.row_count == 5
        assert export.total_matching == 25
        assert export.truncated is True
        assert [row["id"] for row in export.rows] == [25, 24, 23, 22, 21]

    def test_export_cap_never_exceeds_configured_limit(self):
        service = PagedQueryService(options=ReportOptions(export_row_limit=3))
        export = service.export(self.source, FilterCriteria(), cap=100).value
        assert export.row_count == 3

    def test_export_under_cap_is_not_truncated(self):
        export = self.service.export(self.source, FilterCriteria(statuses=("paid",))).value
        assert export.row_count == export.total_matching == 13
        assert export.truncated is False

    def test_cancelled_before_query_raises(self):
        event = threading.Event()
        event.set()

        with pytest.raises(OperationCancelled):
            self.service.query(self.source, FilterCriteria(), cancel_event=event)

    def test_transient_failure_propagates(self):
        with pytest.raises(TransientUnavailable):
            self.service.query(FailingSource(TransientUnavailable("timeout")), FilterCriteria())

    def test_unexpected_failure_becomes_internal_error(self):
        result = self.service.export(FailingSource(RuntimeError("boom")), FilterCriteria())

        assert not result.ok
        assert result.error == ErrorCodes.INTERNAL_ERROR

    def test_failure_detail_does_not_expose_exception_text(self):
        result = self.service.query(
            FailingSource(ValueError("invalid literal for int() with base 10: '²'")), FilterCriteria()
        )

        assert result.error == ErrorCodes.INTERNAL_ERROR
        assert result.error_detail == "Report query failed"
        assert "invalid literal" not in result.error_detail
