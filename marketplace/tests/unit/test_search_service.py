from decimal import Decimal

import pytest

from marketplace.catalog.domain.services import SearchService
from marketplace.conf import ReportOptions
from marketplace.domain.exceptions import TransientUnavailable
from marketplace.querying import InMemoryRowSource, PagedQueryService, RowSource
from marketplace.querying.filters import build_product_search_criteria


class UnavailableSource(RowSource):
    report_kind = "product_search"

    def query_page(self, criteria, page_number, page_size, cancel_event=None):
        raise TransientUnavailable("search backend timed out")

    def query_all(self, criteria, cap, cancel_event=None):
        raise TransientUnavailable("search backend timed out")


def matches(row, criteria):
    if criteria.query and criteria.query.lower() not in row["name"].lower():
        return False
    if criteria.max_price is not None and row["price"] > criteria.max_price:
        return False
    return True


@pytest.fixture
def products():
    return [
        {"id": index, "name": name, "price": Decimal(price), "created_at": index}
        for index, (name, price) in enumerate(
            [("Desk lamp", "35.00"), ("Floor lamp", "80.00"), ("Oak desk", "240.00")], start=1
        )
    ]


@pytest.fixture
def search_service(products):
    source = InMemoryRowSource(products, predicate=matches, report_kind="product_search")
    options = ReportOptions(default_page_size=2, min_page_size=1, max_page_size=10)
    return SearchService(query_service=PagedQueryService(options=options), source=source)


@pytest.mark.unit
def test_search_filters_and_pages(search_service):
    criteria = build_product_search_criteria(query=" LAMP ", max_price="100")

    result = search_service.search(criteria)

    assert result.ok
    page = result.value
    assert page.total_count == 2
    assert page.page_size == 2
    assert [row["name"] for row in page.items] == ["Floor lamp", "Desk lamp"]


@pytest.mark.unit
def test_search_second_page(search_service):
    result = search_service.search(build_product_search_criteria(), page_number=2)

    assert [row["id"] for row in result.value.items] == [1]
    assert result.value.has_previous
    assert not result.value.has_next


@pytest.mark.unit
def test_search_without_matches_reports_first_page(search_service):
    result = search_service.search(build_product_search_criteria(query="sofa"), page_number=3)

    assert result.value.page_number == 1
    assert result.value.items == ()


@pytest.mark.unit
def test_unavailable_backend_propagates():
    service = SearchService(source=UnavailableSource())

    with pytest.raises(TransientUnavailable):
        service.search(build_product_search_criteria(query="lamp"))
