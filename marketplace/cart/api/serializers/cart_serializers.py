from rest_framework import serializers


class CartLineRequestSerializer(serializers.Serializer):
    product_id = serializers.CharField(max_length=64)
    variant_attributes = serializers.DictField(
        child=serializers.CharField(allow_blank=True), required=False, default=dict
    )


class AddToCartRequestSerializer(CartLineRequestSerializer):
    # Quantities <= 0 are treated as 1 by the cart service
    quantity = serializers.IntegerField(required=False, default=1)


class UpdateCartItemRequestSerializer(CartLineRequestSerializer):
    quantity = serializers.IntegerField(help_text="New quantity; 0 or less removes the line")


class RemoveCartItemRequestSerializer(CartLineRequestSerializer):
    pass


class PromoCodeRequestSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50, allow_blank=True, trim_whitespace=True)
