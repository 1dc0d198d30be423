from django.contrib.auth import get_user_model
from django.db import models
from django.utils import timezone

from marketplace.querying.statuses import ReturnStatus

from .order import Order, SubOrder

User = get_user_model()


class ReturnCase(models.Model):
    case_number = models.CharField(max_length=40, unique=True)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="return_cases")
    sub_order = models.ForeignKey(SubOrder, on_delete=models.SET_NULL, null=True, blank=True, related_name="return_cases")
    buyer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="return_cases")
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name="seller_return_cases")

    status = models.CharField(max_length=30, choices=ReturnStatus.CHOICES, default=ReturnStatus.REQUESTED)
    reason = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Return Case"
        verbose_name_plural = "Return Cases"
        ordering = ["-created_at"]
        app_label = "marketplace"

    def __str__(self):
        return f"Return case {self.case_number} for order {self.order.order_number} - Status: {self.status}"
