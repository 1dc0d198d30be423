from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from infrastructure.container import container  # For DI
from marketplace.api.responses import ServiceViewMixin, error_response
from marketplace.api.serializers import CartResponseSerializer, ErrorResponseSerializer, PromoResponseSerializer
from marketplace.cart.api.serializers.cart_serializers import (
    AddToCartRequestSerializer,
    PromoCodeRequestSerializer,
    RemoveCartItemRequestSerializer,
    UpdateCartItemRequestSerializer,
)
from marketplace.cart.domain.lines import CartContext
from marketplace.cart.domain.services import CartService


def cart_context(request) -> CartContext:
    """Signed-in buyers get a user-bound cart; guests get a session cart."""
    if request.user and request.user.is_authenticated:
        return CartContext.for_user(request.user)
    if not request.session.session_key:
        # A modified session makes the middleware send the cookie back
        request.session["guest_cart"] = True
        request.session.save()
    return CartContext.for_session(request.session.session_key)


class CartViewSet(ServiceViewMixin, viewsets.ViewSet):
    permission_classes = [AllowAny]

    def get_service(self) -> CartService:
        # Inject CartService via DI container
        return container.cart_service()

    def _respond(self, result):
        if not result.ok:
            return error_response(result)
        return Response(result.value.to_dict(), status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_get",
        summary="Get the shopping cart",
        description="""
        **What it returns:**
        - Lines grouped by seller with subtotal, shipping and total per seller
        - Items subtotal, shipping, discount and grand total
        - Adjustments made while reconciling the cart with live stock
        """,
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Cart retrieved successfully"),
            503: OpenApiResponse(response=ErrorResponseSerializer, description="Storage temporarily unavailable"),
        },
        tags=["Marketplace - Cart"],
    )
    def list(self, request):
        return self._respond(self.get_service().get_summary(cart_context(request)))

    @extend_schema(
        operation_id="cart_add_item",
        summary="Add item to cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to add
        - `variant_attributes` (object, optional): Variant selection, e.g. {"Color": "Red"}
        - `quantity` (integer, optional): Quantity to add (default: 1)

        **What it returns:**
        - The recomputed cart; `adjusted` is true when less than requested fit in stock
        """,
        request=AddToCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Item added"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Variant missing or unavailable"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Out of stock"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"])
    def add_item(self, request):
        serializer = AddToCartRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = self.get_service().add_to_cart(
            cart_context(request), data["product_id"], data["variant_attributes"], data["quantity"]
        )
        return self._respond(result)

    @extend_schema(
        operation_id="cart_update_item",
        summary="Update item quantity in cart",
        description="""
        **What it receives:**
        - `product_id` (UUID) and optional `variant_attributes` identifying the line
        - `quantity` (integer): New quantity (0 to remove the line)

        **What it returns:**
        - The recomputed cart; `found` is false when the line was not in the cart
        """,
        request=UpdateCartItemRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Line updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["patch"])
    def update_item(self, request):
        serializer = UpdateCartItemRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = self.get_service().update_quantity(
            cart_context(request), data["product_id"], data["variant_attributes"], data["quantity"]
        )
        return self._respond(result)

    @extend_schema(
        operation_id="cart_remove_item",
        summary="Remove item from cart",
        request=RemoveCartItemRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Line removed (or was not present)"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid product_id"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["delete"])
    def remove_item(self, request):
        serializer = RemoveCartItemRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = self.get_service().remove_from_cart(
            cart_context(request), data["product_id"], data["variant_attributes"]
        )
        return self._respond(result)

    @extend_schema(
        operation_id="cart_clear",
        summary="Clear the cart",
        request=None,
        responses={200: OpenApiResponse(response=CartResponseSerializer, description="Cart cleared")},
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"])
    def clear(self, request):
        return self._respond(self.get_service().clear_cart(cart_context(request)))

    @extend_schema(
        operation_id="cart_apply_promo",
        summary="Apply a promo code",
        description="""
        A rejected code is not an HTTP error: the response has `success: false`,
        a message, and the unchanged cart summary.
        """,
        request=PromoCodeRequestSerializer,
        responses={200: OpenApiResponse(response=PromoResponseSerializer, description="Promo evaluated")},
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"], url_path="promo")
    def apply_promo(self, request):
        serializer = PromoCodeRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        return self._respond(self.get_service().apply_promo(cart_context(request), serializer.validated_data["code"]))

    @extend_schema(
        operation_id="cart_remove_promo",
        summary="Remove the active promo code",
        request=None,
        responses={200: OpenApiResponse(response=PromoResponseSerializer, description="Promo removed")},
        tags=["Marketplace - Cart"],
    )
    @apply_promo.mapping.delete
    def remove_promo(self, request):
        return self._respond(self.get_service().clear_promo(cart_context(request)))
