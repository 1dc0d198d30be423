from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import ServiceViewMixin, error_response, jsonable
from marketplace.api.serializers import ErrorResponseSerializer, PagedResponseSerializer
from marketplace.catalog.domain.services import ModerationService, ReviewTarget
from marketplace.permissions import IsMarketplaceAdmin
from marketplace.reporting.api.serializers.report_serializers import (
    ModerationDecisionSerializer,
    ProductModerationQuerySerializer,
    ReviewModerationQuerySerializer,
)


class ModerationViewSet(ServiceViewMixin, viewsets.ViewSet):
    """Admin moderation queues for product listings and reviews."""

    permission_classes = [IsMarketplaceAdmin]

    def get_service(self) -> ModerationService:
        return container.moderation_service()

    def _page(self, serializer_class, fetch):
        query = serializer_class(data=self.request.query_params)
        query.is_valid(raise_exception=True)
        page_number, page_size = query.paging()
        result = fetch(query.criteria(), page_number, page_size)
        if not result.ok:
            return error_response(result)
        return Response(result.value.to_dict(serialize_item=jsonable), status=status.HTTP_200_OK)

    def _decide(self, request, apply):
        serializer = ModerationDecisionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        result = apply(data["status"], data["reason"])
        if not result.ok:
            return error_response(result)
        return Response(jsonable(result.value), status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="moderation_products_queue",
        summary="Product moderation queue (pending first)",
        parameters=[ProductModerationQuerySerializer],
        responses={200: OpenApiResponse(response=PagedResponseSerializer, description="Queue page")},
        tags=["Admin - Moderation"],
    )
    @action(detail=False, methods=["get"])
    def products(self, request):
        return self._page(ProductModerationQuerySerializer, self.get_service().product_queue)

    @extend_schema(
        operation_id="moderation_reviews_queue",
        summary="Review moderation queue",
        parameters=[ReviewModerationQuerySerializer],
        responses={200: OpenApiResponse(response=PagedResponseSerializer, description="Queue page")},
        tags=["Admin - Moderation"],
    )
    @action(detail=False, methods=["get"])
    def reviews(self, request):
        return self._page(ReviewModerationQuerySerializer, self.get_service().review_queue)

    @extend_schema(
        operation_id="moderation_product_decide",
        summary="Approve or reject a product",
        parameters=[OpenApiParameter(name="product_id", type=str, location=OpenApiParameter.PATH)],
        request=ModerationDecisionSerializer,
        responses={
            200: OpenApiResponse(description="Decision applied"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown status"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Admin - Moderation"],
    )
    @action(detail=False, methods=["post"], url_path=r"products/(?P<product_id>[^/.]+)/decision")
    def product_decision(self, request, product_id=None):
        return self._decide(
            request,
            lambda new_status, reason: self.get_service().set_product_status(
                product_id, new_status, actor=request.user, reason=reason
            ),
        )

    @extend_schema(
        operation_id="moderation_review_decide",
        summary="Moderate a product review or seller rating",
        parameters=[
            OpenApiParameter(name="kind", type=str, location=OpenApiParameter.PATH, enum=["product", "seller"]),
            OpenApiParameter(name="review_id", type=int, location=OpenApiParameter.PATH),
        ],
        request=ModerationDecisionSerializer,
        responses={
            200: OpenApiResponse(description="Decision applied"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown status or target"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Review not found"),
        },
        tags=["Admin - Moderation"],
    )
    @action(detail=False, methods=["post"], url_path=r"reviews/(?P<kind>[a-z]+)/(?P<review_id>[0-9]+)/decision")
    def review_decision(self, request, kind=None, review_id=None):
        target = ReviewTarget(kind=kind, review_id=int(review_id))
        return self._decide(
            request,
            lambda new_status, reason: self.get_service().moderate(
                target, new_status, actor=request.user, reason=reason
            ),
        )
