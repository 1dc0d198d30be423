from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import ServiceViewMixin, error_response, jsonable
from marketplace.api.serializers import ErrorResponseSerializer, PagedResponseSerializer
from marketplace.catalog.domain.services import SearchService
from marketplace.reporting.api.serializers.report_serializers import ProductSearchQuerySerializer


class SearchViewSet(ServiceViewMixin, viewsets.ViewSet):
    """
    ViewSet for product search.
    Delegates logic to SearchService.
    """

    permission_classes = [AllowAny]

    def get_service(self) -> SearchService:
        return container.search_service()

    @extend_schema(
        operation_id="products_search",
        summary="Search products",
        description="""
        **What it receives:**
        - `q`, `category_id`, `min_price`, `max_price`, `condition`, `seller_id`, `in_stock`
        - `sort`: newest (default), price_asc, price_desc
        - `page`, `page_size`

        Unknown or malformed filter values are ignored rather than rejected.

        **What it returns:**
        - One page of listed products; `aggregates` carries min_price/max_price over all matches
        """,
        parameters=[ProductSearchQuerySerializer],
        responses={
            200: OpenApiResponse(response=PagedResponseSerializer, description="Search results"),
            503: OpenApiResponse(response=ErrorResponseSerializer, description="Search temporarily unavailable"),
        },
        tags=["Marketplace - Search"],
    )
    def search(self, request):
        query = ProductSearchQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        page_number, page_size = query.paging()

        result = self.get_service().search(query.criteria(), page_number=page_number, page_size=page_size)
        if not result.ok:
            return error_response(result)
        return Response(result.value.to_dict(serialize_item=jsonable), status=status.HTTP_200_OK)
