"""
SearchService - Product Search & Filtering

Buyer-facing product search: free text, category, price range, condition,
seller and in-stock filters with a stable sort. Only published, approved
products are ever returned.
"""

from typing import Optional

from marketplace.querying.engine import PagedQueryService
from marketplace.querying.filters import ProductSearchCriteria
from marketplace.querying.paging import PagedResult
from marketplace.querying.sources import RowSource
from marketplace.services.base import BaseService, ServiceResult


class SearchService(BaseService):
    """
    Service for product search and filtering.

    Sorting:
    - newest: created_at desc, id desc
    - price_asc: price asc, id asc
    - price_desc: price desc, id desc

    Aggregates carry ``min_price``/``max_price`` over all matches (empty when
    nothing matches) so clients can render a price slider.
    """

    def __init__(self, query_service: Optional[PagedQueryService] = None, source: Optional[RowSource] = None):
        super().__init__()
        self.query_service = query_service or PagedQueryService()
        if source is None:
            from marketplace.infra.persistence import ProductSearchRowSource

            source = ProductSearchRowSource()
        self.source = source

    def search(
        self,
        criteria: ProductSearchCriteria,
        page_number: int = 1,
        page_size: Optional[int] = None,
        cancel_event=None,
    ) -> ServiceResult[PagedResult]:
        """
        Search products.

        Example:
            >>> criteria = build_product_search_criteria(query="lamp", max_price="80", sort="price_asc")
            >>> result = SearchService().search(criteria, page_number=1, page_size=20)
        """
        self.logger.debug(f"Product search: query={criteria.query!r}, sort={criteria.sort}")
        return self.query_service.query(
            self.source, criteria, page_number=page_number, page_size=page_size, cancel_event=cancel_event
        )
