from django.contrib.auth import get_user_model
from django.db import models

from marketplace.catalog.domain.models.catalog import Product


User = get_user_model()


class Cart(models.Model):
    # "user:<id>" for signed-in buyers, "session:<key>" for guests
    cart_key = models.CharField(max_length=100, unique=True)
    user = models.ForeignKey(User, on_delete=models.CASCADE, null=True, blank=True, related_name="carts")
    promo_code = models.CharField(max_length=50, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Shopping Cart"
        verbose_name_plural = "Shopping Carts"
        app_label = "marketplace"

    def __str__(self):
        return f"Cart {self.cart_key}"


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.CASCADE)
    seller_id = models.CharField(max_length=64)
    variant_attributes = models.JSONField(default=dict, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    # Newest line first
    position = models.PositiveIntegerField(default=0)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["position", "id"]
        app_label = "marketplace"

    def __str__(self):
        return f"{self.quantity}x {self.product_id} in {self.cart.cart_key}"
