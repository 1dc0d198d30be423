from django.contrib.auth import get_user_model
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from marketplace.querying.statuses import ReviewStatus

from .catalog import Product


User = get_user_model()


class ReviewBase(models.Model):
    """Fields shared by product reviews and seller ratings; both go through one moderation workflow."""

    rating = models.PositiveIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=ReviewStatus.CHOICES, default=ReviewStatus.PENDING)
    is_flagged = models.BooleanField(default=False)
    flag_reason = models.CharField(max_length=200, blank=True)
    moderation_note = models.TextField(blank=True)
    moderated_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        abstract = True


class ProductReview(ReviewBase):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="reviews")
    reviewer = models.ForeignKey(User, on_delete=models.SET_NULL, related_name="reviews", null=True, blank=True)
    # Stores reviewer display name for GDPR compliance (when reviewer is deleted/anonymized)
    reviewer_name = models.CharField(max_length=150, blank=True, default="")
    title = models.CharField(max_length=200, blank=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"

    def get_reviewer_display_name(self):
        """Return the display name for the reviewer."""
        if self.reviewer:
            return self.reviewer.username
        return self.reviewer_name or "Deleted User"

    def __str__(self):
        return f"Review by {self.get_reviewer_display_name()} for {self.product.name}"


class SellerRating(ReviewBase):
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name="seller_ratings")
    rater = models.ForeignKey(User, on_delete=models.SET_NULL, related_name="given_ratings", null=True, blank=True)
    rater_name = models.CharField(max_length=150, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"

    def __str__(self):
        return f"Rating {self.rating} for seller {self.seller_id}"
