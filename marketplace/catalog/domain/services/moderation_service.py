"""
ModerationService - Product and review moderation

Serves the two moderation queues and applies moderator decisions. Every
decision is written to the audit log with the previous and new status.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from marketplace.catalog.domain.models import Product, ProductReview, SellerRating
from marketplace.domain.exceptions import TransientUnavailable
from marketplace.querying import statuses as families
from marketplace.querying.engine import PagedQueryService
from marketplace.querying.filters import (
    REVIEW_TARGET_KINDS,
    TARGET_SELLER,
    ProductModerationCriteria,
    ReviewModerationCriteria,
)
from marketplace.querying.normalization import normalize_status, normalize_text
from marketplace.querying.paging import PagedResult
from marketplace.querying.statuses import ReviewStatus
from marketplace.reporting.domain.services.audit_service import AuditLogService
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

MAX_REASON_LENGTH = 500


@dataclass(frozen=True)
class ReviewTarget:
    """A review to moderate: ``kind`` is "product" (product review) or "seller" (seller rating)."""

    kind: str
    review_id: int


class ModerationService(BaseService):
    def __init__(
        self,
        query_service: Optional[PagedQueryService] = None,
        audit_service: Optional[AuditLogService] = None,
        product_source=None,
        review_source=None,
    ):
        super().__init__()
        self.query_service = query_service or PagedQueryService()
        self.audit_service = audit_service or AuditLogService(query_service=self.query_service)
        if product_source is None or review_source is None:
            from marketplace.infra.persistence import ProductModerationRowSource, ReviewModerationRowSource

            product_source = product_source or ProductModerationRowSource()
            review_source = review_source or ReviewModerationRowSource()
        self.product_source = product_source
        self.review_source = review_source

    def product_queue(
        self, criteria: ProductModerationCriteria, page_number: int = 1, page_size: Optional[int] = None
    ) -> ServiceResult[PagedResult]:
        return self.query_service.query(self.product_source, criteria, page_number=page_number, page_size=page_size)

    def review_queue(
        self, criteria: ReviewModerationCriteria, page_number: int = 1, page_size: Optional[int] = None
    ) -> ServiceResult[PagedResult]:
        return self.query_service.query(self.review_source, criteria, page_number=page_number, page_size=page_size)

    @BaseService.log_performance
    def set_product_status(self, product_id, status: str, actor=None, reason: str = "") -> ServiceResult[Dict]:
        """
        Approve or reject a product listing.

        Args:
            product_id: Product UUID
            status: Moderation status (approved, rejected, pending; aliases accepted)
            actor: Moderating user, recorded in the audit log
            reason: Optional note shown to the seller

        Returns:
            ServiceResult with {"id", "previous_status", "status"}
        """
        new_status = normalize_status(status, families.MODERATION)
        if new_status is None:
            return service_err(ErrorCodes.INVALID_STATUS, f"Unknown moderation status '{status}'")

        note = normalize_text(reason, MAX_REASON_LENGTH) or ""

        try:
            with transaction.atomic():
                product = Product.objects.select_for_update().filter(id=product_id).first()
                if product is None:
                    return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

                previous = product.moderation_status
                product.moderation_status = new_status
                product.moderation_note = note
                product.moderated_at = timezone.now()
                product.save(update_fields=["moderation_status", "moderation_note", "moderated_at", "updated_at"])

                self.audit_service.record(
                    entity_type="Product",
                    resource_id=product.pk,
                    action=f"moderation_{new_status}",
                    actor=actor,
                    succeeded=True,
                    details={"from_status": previous, "to_status": new_status, "reason": note},
                )

            self.logger.info(f"Product {product.pk} moderation {previous} -> {new_status}")
            return service_ok({"id": str(product.pk), "previous_status": previous, "status": new_status})

        except ValidationError:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
        except TransientUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error moderating product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not record the moderation decision")

    @BaseService.log_performance
    def moderate(self, target: ReviewTarget, status: str, actor=None, reason: str = "") -> ServiceResult[Dict]:
        """
        Apply a moderation decision to a product review or a seller rating.

        Publishing a review clears its flag; other statuses keep it so the
        review stays visible in the flagged filter.
        """
        if target.kind not in REVIEW_TARGET_KINDS:
            return service_err(ErrorCodes.INVALID_INPUT, f"Unknown review target '{target.kind}'")

        new_status = normalize_status(status, families.REVIEW)
        if new_status is None:
            return service_err(ErrorCodes.INVALID_STATUS, f"Unknown review status '{status}'")

        model = SellerRating if target.kind == TARGET_SELLER else ProductReview
        note = normalize_text(reason, MAX_REASON_LENGTH) or ""

        try:
            with transaction.atomic():
                review = model.objects.select_for_update().filter(pk=target.review_id).first()
                if review is None:
                    return service_err(ErrorCodes.REVIEW_NOT_FOUND, f"Review {target.review_id} not found")

                previous = review.status
                review.status = new_status
                review.moderation_note = note
                review.moderated_at = timezone.now()
                if new_status == ReviewStatus.PUBLISHED:
                    review.is_flagged = False
                review.save(update_fields=["status", "moderation_note", "moderated_at", "is_flagged"])

                self.audit_service.record(
                    entity_type=model.__name__,
                    resource_id=review.pk,
                    action=f"moderation_{new_status}",
                    actor=actor,
                    succeeded=True,
                    details={"from_status": previous, "to_status": new_status, "reason": note},
                )

            self.logger.info(f"{model.__name__} {review.pk} moderation {previous} -> {new_status}")
            return service_ok(
                {
                    "id": review.pk,
                    "kind": target.kind,
                    "previous_status": previous,
                    "status": new_status,
                    "is_flagged": review.is_flagged,
                }
            )

        except TransientUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error moderating {target.kind} review {target.review_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not record the moderation decision")
