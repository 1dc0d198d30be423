"""
Response Serializers for Marketplace API Documentation

These serializers define the structure of API responses for OpenAPI schema generation.
They are NOT used for data validation, only for documentation in Swagger/ReDoc.
"""

from rest_framework import serializers

# ===== Common Response Serializers =====


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    error = serializers.CharField(help_text="Error code identifier")
    detail = serializers.CharField(help_text="Human-readable error message", required=False)


class PagedResponseSerializer(serializers.Serializer):
    """One page of a report, queue or search"""

    items = serializers.ListField(child=serializers.DictField(), help_text="Rows on this page")
    page_number = serializers.IntegerField(help_text="Current page (1 when the result is empty)")
    page_size = serializers.IntegerField(help_text="Rows per page after clamping")
    total_count = serializers.IntegerField(help_text="Rows matching the filters")
    total_pages = serializers.IntegerField(help_text="Number of pages (0 when empty)")
    has_next = serializers.BooleanField()
    has_previous = serializers.BooleanField()
    aggregates = serializers.DictField(
        child=serializers.CharField(), help_text="Decimal totals over all matching rows, as strings"
    )


# ===== Cart Response Serializers =====


class CartLineResponseSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    seller_id = serializers.CharField()
    title = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.CharField()
    line_total = serializers.CharField()
    available_stock = serializers.IntegerField()
    variant_attributes = serializers.DictField(child=serializers.CharField())
    variant_label = serializers.CharField(allow_null=True)


class SellerGroupResponseSerializer(serializers.Serializer):
    seller_id = serializers.CharField()
    seller_name = serializers.CharField()
    subtotal = serializers.CharField()
    shipping = serializers.CharField()
    total = serializers.CharField()
    lines = CartLineResponseSerializer(many=True)


class CartSummaryResponseSerializer(serializers.Serializer):
    seller_groups = SellerGroupResponseSerializer(many=True)
    items_subtotal = serializers.CharField()
    shipping_total = serializers.CharField()
    discount_total = serializers.CharField()
    grand_total = serializers.CharField()
    total_quantity = serializers.IntegerField()
    applied_promo_code = serializers.CharField(allow_null=True)
    settlement = serializers.DictField()


class CartAdjustmentResponseSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    reason = serializers.CharField(help_text="removed_unavailable, removed_out_of_stock or clamped_to_stock")
    previous_quantity = serializers.IntegerField()
    quantity = serializers.IntegerField()


class CartResponseSerializer(serializers.Serializer):
    """Result of any cart operation"""

    status = serializers.CharField()
    message = serializers.CharField()
    quantity = serializers.IntegerField(help_text="Quantity accepted by this request")
    line_quantity = serializers.IntegerField(help_text="Final quantity of the affected line")
    adjusted = serializers.BooleanField(help_text="Requested quantity was reduced to fit stock")
    removed = serializers.BooleanField()
    found = serializers.BooleanField()
    adjustments = CartAdjustmentResponseSerializer(many=True)
    summary = CartSummaryResponseSerializer()


class PromoResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    applied_code = serializers.CharField(allow_null=True)
    already_applied = serializers.BooleanField()
    summary = CartSummaryResponseSerializer()


# ===== Export Response Serializers =====


class ExportJobResponseSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    report_kind = serializers.CharField()
    status = serializers.CharField(help_text="queued, running, completed or failed")
    row_count = serializers.IntegerField()
    total_matching = serializers.IntegerField()
    truncated = serializers.BooleanField()
    error = serializers.CharField(allow_blank=True)
    created_at = serializers.DateTimeField()
    completed_at = serializers.DateTimeField(allow_null=True)
