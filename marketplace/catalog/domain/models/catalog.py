import uuid

from django.contrib.auth import get_user_model
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from marketplace.querying.statuses import ModerationStatus

from .category import Category

User = get_user_model()


class Product(models.Model):
    CONDITION_CHOICES = [
        ("new", "New"),
        ("used", "Used"),
        ("refurbished", "Refurbished"),
    ]

    # Lifecycle stage, independent of moderation
    WORKFLOW_DRAFT = "draft"
    WORKFLOW_PUBLISHED = "published"
    WORKFLOW_ARCHIVED = "archived"
    WORKFLOW_CHOICES = [
        (WORKFLOW_DRAFT, "Draft"),
        (WORKFLOW_PUBLISHED, "Published"),
        (WORKFLOW_ARCHIVED, "Archived"),
    ]

    # Basic Information
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    # Seller and Category
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name="products")
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="products")

    # Pricing and Inventory
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0), MaxValueValidator(100000)]
    )
    stock_quantity = models.IntegerField(default=0)
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default="new")

    # Status
    workflow_state = models.CharField(max_length=20, choices=WORKFLOW_CHOICES, default=WORKFLOW_DRAFT)
    moderation_status = models.CharField(
        max_length=20, choices=ModerationStatus.CHOICES, default=ModerationStatus.PENDING
    )
    moderation_note = models.TextField(blank=True)
    moderated_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["workflow_state", "moderation_status", "-created_at"], name="mp_product_listed_idx"),
            models.Index(fields=["moderation_status", "-created_at"], name="mp_product_moderation_idx"),
            models.Index(fields=["category", "workflow_state"], name="mp_product_category_idx"),
            models.Index(fields=["seller", "-created_at"], name="mp_product_seller_idx"),
            models.Index(fields=["price"], name="mp_product_price_idx"),
        ]

    @property
    def is_listed(self) -> bool:
        """Visible to buyers: published and approved."""
        return self.workflow_state == self.WORKFLOW_PUBLISHED and self.moderation_status == ModerationStatus.APPROVED

    def __str__(self):
        return self.name


class ProductVariant(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="variants")
    sku = models.CharField(max_length=64, blank=True)
    attributes = models.JSONField(default=dict, help_text="Variant attributes, e.g. {'Color': 'Red', 'Size': 'M'}")
    stock_quantity = models.IntegerField(default=0)
    # Falls back to the product price when empty
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    class Meta:
        ordering = ["id"]
        app_label = "marketplace"

    def __str__(self):
        label = ", ".join(f"{key}: {value}" for key, value in (self.attributes or {}).items())
        return f"{self.product.name} ({label})"
