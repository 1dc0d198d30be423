import uuid

from django.contrib.auth import get_user_model
from django.db import models
from django.utils import timezone

from marketplace.querying.statuses import OrderStatus, PaymentStatus, PayoutStatus

User = get_user_model()


class Order(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True)
    buyer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="orders")

    # Order Details
    status = models.CharField(max_length=20, choices=OrderStatus.CHOICES, default=OrderStatus.NEW)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.CHOICES, default=PaymentStatus.PENDING)

    # Pricing
    items_subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    shipping_total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount_total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    promo_code = models.CharField(max_length=50, blank=True)

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"

    def __str__(self):
        return f"Order {self.order_number} by {self.buyer.username}"


class SubOrder(models.Model):
    """The part of an order fulfilled by one seller; the unit of commission and payout."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="sub_orders")
    sub_order_number = models.CharField(max_length=40, unique=True)
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name="sub_orders")

    status = models.CharField(max_length=20, choices=OrderStatus.CHOICES, default=OrderStatus.NEW)
    order_value = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    commission = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    payout_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["seller", "-created_at"], name="mp_suborder_seller_idx"),
            models.Index(fields=["status", "-created_at"], name="mp_suborder_status_idx"),
        ]

    def __str__(self):
        return f"Sub-order {self.sub_order_number} ({self.seller_id})"


class Payout(models.Model):
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name="payouts")
    reference = models.CharField(max_length=40, unique=True)
    status = models.CharField(max_length=20, choices=PayoutStatus.CHOICES, default=PayoutStatus.SCHEDULED)

    gross_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    commission = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    period_start = models.DateTimeField(null=True, blank=True)
    period_end = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"

    def __str__(self):
        return f"Payout {self.reference} to {self.seller_id}"
