"""
Django row sources, one per report domain.

Each source narrows a queryset with ``Q`` filters built from normalized
criteria, orders it deterministically (``-created_at`` then ``-id`` unless the
domain has its own primary key) and maps model instances to plain dict rows.
"""

from typing import Dict

from django.db.models import Case, IntegerField, Max, Min, Q, Value, When

from marketplace.catalog.domain.models import Product, ProductReview, SellerRating
from marketplace.ordering.domain.models import Payout, ReturnCase, SubOrder
from marketplace.querying.filters import SORT_PRICE_ASC, SORT_PRICE_DESC, TARGET_SELLER
from marketplace.querying.sources import QuerySetRowSource, quantize_money
from marketplace.querying.statuses import ModerationStatus
from marketplace.reporting.domain.models import AuditLogEntry


def display_name(user, fallback: str = "") -> str:
    if user is None:
        return fallback
    return user.get_full_name() or user.username or fallback


def _user_pk(value):
    """User primary keys are integers; anything else cannot match."""
    if value is None:
        return None
    text = str(value).strip()
    return int(text) if text.isdecimal() else -1


def date_filter(criteria, field: str = "created_at") -> Q:
    condition = Q()
    if criteria.from_date is not None:
        condition &= Q(**{f"{field}__gte": criteria.from_date})
    if criteria.to_date is not None:
        condition &= Q(**{f"{field}__lte": criteria.to_date})
    return condition


class OrderReportRowSource(QuerySetRowSource):
    """Sub-orders with their parent order, one row per seller share of an order."""

    report_kind = "orders"
    aggregate_fields = {
        "total_order_value": "order_value",
        "total_commission": "commission",
        "total_payout": "payout_amount",
    }

    def get_queryset(self, criteria):
        return SubOrder.objects.select_related("order", "order__buyer", "seller")

    def apply_filters(self, queryset, criteria):
        queryset = queryset.filter(date_filter(criteria))
        if criteria.actor_or_seller_id:
            queryset = queryset.filter(seller_id=_user_pk(criteria.actor_or_seller_id))
        if criteria.statuses:
            queryset = queryset.filter(status__in=criteria.statuses)
        if getattr(criteria, "payment_statuses", ()):
            queryset = queryset.filter(order__payment_status__in=criteria.payment_statuses)
        if criteria.query:
            queryset = queryset.filter(
                Q(order__order_number__icontains=criteria.query)
                | Q(sub_order_number__icontains=criteria.query)
                | Q(order__buyer__email__icontains=criteria.query)
                | Q(order__buyer__username__icontains=criteria.query)
                | Q(seller__username__icontains=criteria.query)
            )
        return queryset

    def to_row(self, sub_order) -> Dict:
        order = sub_order.order
        return {
            "id": sub_order.pk,
            "order_number": order.order_number,
            "sub_order_number": sub_order.sub_order_number,
            "created_at": sub_order.created_at,
            "buyer": display_name(order.buyer, "Buyer"),
            "buyer_email": order.buyer.email if order.buyer else "",
            "seller_id": str(sub_order.seller_id),
            "seller_name": display_name(sub_order.seller, "Seller"),
            "status": sub_order.status,
            "payment_status": order.payment_status,
            "order_value": quantize_money(sub_order.order_value),
            "commission": quantize_money(sub_order.commission),
            "payout_amount": quantize_money(sub_order.payout_amount),
        }


class PayoutRowSource(QuerySetRowSource):
    report_kind = "payouts"
    aggregate_fields = {
        "total_gross": "gross_amount",
        "total_commission": "commission",
        "total_amount": "amount",
    }

    def get_queryset(self, criteria):
        return Payout.objects.select_related("seller")

    def apply_filters(self, queryset, criteria):
        queryset = queryset.filter(date_filter(criteria))
        if criteria.actor_or_seller_id:
            queryset = queryset.filter(seller_id=_user_pk(criteria.actor_or_seller_id))
        if criteria.statuses:
            queryset = queryset.filter(status__in=criteria.statuses)
        if criteria.query:
            queryset = queryset.filter(
                Q(reference__icontains=criteria.query)
                | Q(seller__username__icontains=criteria.query)
                | Q(seller__first_name__icontains=criteria.query)
                | Q(seller__last_name__icontains=criteria.query)
            )
        return queryset

    def to_row(self, payout) -> Dict:
        return {
            "id": payout.pk,
            "reference": payout.reference,
            "seller_id": str(payout.seller_id),
            "seller_name": display_name(payout.seller, "Seller"),
            "status": payout.status,
            "gross_amount": quantize_money(payout.gross_amount),
            "commission": quantize_money(payout.commission),
            "amount": quantize_money(payout.amount),
            "period_start": payout.period_start,
            "period_end": payout.period_end,
            "paid_at": payout.paid_at,
            "created_at": payout.created_at,
        }


class ReturnCaseRowSource(QuerySetRowSource):
    report_kind = "returns"

    def get_queryset(self, criteria):
        return ReturnCase.objects.select_related("order", "buyer", "seller")

    def apply_filters(self, queryset, criteria):
        queryset = queryset.filter(date_filter(criteria))
        if criteria.actor_or_seller_id:
            queryset = queryset.filter(seller_id=_user_pk(criteria.actor_or_seller_id))
        if getattr(criteria, "buyer_id", None):
            queryset = queryset.filter(buyer_id=_user_pk(criteria.buyer_id))
        if criteria.statuses:
            queryset = queryset.filter(status__in=criteria.statuses)
        if criteria.query:
            queryset = queryset.filter(
                Q(case_number__icontains=criteria.query)
                | Q(reason__icontains=criteria.query)
                | Q(order__order_number__icontains=criteria.query)
            )
        return queryset

    def to_row(self, case) -> Dict:
        return {
            "id": case.pk,
            "case_number": case.case_number,
            "order_number": case.order.order_number,
            "buyer_id": str(case.buyer_id),
            "buyer": display_name(case.buyer, "Buyer"),
            "seller_id": str(case.seller_id),
            "seller_name": display_name(case.seller, "Seller"),
            "status": case.status,
            "reason": case.reason,
            "created_at": case.created_at,
            "updated_at": case.updated_at,
        }


class AuditLogRowSource(QuerySetRowSource):
    report_kind = "audit_log"

    def get_queryset(self, criteria):
        return AuditLogEntry.objects.select_related("actor")

    def apply_filters(self, queryset, criteria):
        queryset = queryset.filter(date_filter(criteria))
        if criteria.actor_or_seller_id:
            queryset = queryset.filter(
                Q(actor_name__icontains=criteria.actor_or_seller_id)
                | Q(actor__username__icontains=criteria.actor_or_seller_id)
            )
        if getattr(criteria, "entity_type", None):
            queryset = queryset.filter(entity_type__iexact=criteria.entity_type)
        if getattr(criteria, "action_type", None):
            queryset = queryset.filter(action__icontains=criteria.action_type)
        if getattr(criteria, "resource_id", None):
            queryset = queryset.filter(resource_id=criteria.resource_id)
        if getattr(criteria, "succeeded", None) is not None:
            queryset = queryset.filter(succeeded=criteria.succeeded)
        return queryset

    def to_row(self, entry) -> Dict:
        return {
            "id": entry.pk,
            "created_at": entry.created_at,
            "entity_type": entry.entity_type,
            "action": entry.action,
            "resource_id": entry.resource_id or None,
            "actor_id": str(entry.actor_id) if entry.actor_id else None,
            "actor_name": entry.actor_name or display_name(entry.actor, "System"),
            "succeeded": entry.succeeded,
            "details": entry.details or {},
        }


class ProductModerationRowSource(QuerySetRowSource):
    """Moderation queue: pending products first, then newest."""

    report_kind = "product_moderation"
    ordering = ("queue_rank", "-created_at", "-id")

    def get_queryset(self, criteria):
        return Product.objects.select_related("seller", "category").annotate(
            queue_rank=Case(
                When(moderation_status=ModerationStatus.PENDING, then=Value(0)),
                default=Value(1),
                output_field=IntegerField(),
            )
        )

    def apply_filters(self, queryset, criteria):
        queryset = queryset.filter(date_filter(criteria))
        if criteria.statuses:
            queryset = queryset.filter(moderation_status__in=criteria.statuses)
        if getattr(criteria, "category_id", None):
            queryset = queryset.filter(category_id=criteria.category_id)
        if criteria.actor_or_seller_id:
            queryset = queryset.filter(seller_id=_user_pk(criteria.actor_or_seller_id))
        if criteria.query:
            queryset = queryset.filter(
                Q(name__icontains=criteria.query) | Q(seller__username__icontains=criteria.query)
            )
        return queryset

    def to_row(self, product) -> Dict:
        return {
            "id": str(product.pk),
            "name": product.name,
            "seller_id": str(product.seller_id),
            "seller_name": display_name(product.seller, "Seller"),
            "category": product.category.name if product.category else None,
            "price": quantize_money(product.price),
            "workflow_state": product.workflow_state,
            "moderation_status": product.moderation_status,
            "moderation_note": product.moderation_note,
            "created_at": product.created_at,
        }


class ReviewModerationRowSource(QuerySetRowSource):
    """Review queue over product reviews or seller ratings, picked by ``criteria.target_kind``."""

    report_kind = "review_moderation"

    def get_queryset(self, criteria):
        if getattr(criteria, "target_kind", None) == TARGET_SELLER:
            return SellerRating.objects.select_related("seller", "rater")
        return ProductReview.objects.select_related("product", "reviewer")

    def apply_filters(self, queryset, criteria):
        queryset = queryset.filter(date_filter(criteria))
        if criteria.statuses:
            queryset = queryset.filter(status__in=criteria.statuses)
        if getattr(criteria, "flagged_only", False):
            queryset = queryset.filter(is_flagged=True)
        if criteria.query:
            if queryset.model is SellerRating:
                text_filter = Q(rater_name__icontains=criteria.query) | Q(seller__username__icontains=criteria.query)
            else:
                text_filter = Q(title__icontains=criteria.query) | Q(product__name__icontains=criteria.query)
            queryset = queryset.filter(text_filter | Q(comment__icontains=criteria.query))
        return queryset

    def to_row(self, review) -> Dict:
        row = {
            "id": review.pk,
            "rating": review.rating,
            "comment": review.comment,
            "status": review.status,
            "is_flagged": review.is_flagged,
            "flag_reason": review.flag_reason,
            "created_at": review.created_at,
        }
        if isinstance(review, SellerRating):
            row.update(
                target_kind=TARGET_SELLER,
                target_id=str(review.seller_id),
                target_name=display_name(review.seller, "Seller"),
                author=review.rater.username if review.rater else review.rater_name or "Deleted User",
            )
        else:
            row.update(
                target_kind="product",
                target_id=str(review.product_id),
                target_name=review.product.name,
                author=review.get_reviewer_display_name(),
            )
        return row


class ProductSearchRowSource(QuerySetRowSource):
    """Buyer-facing search over listed products. Aggregates report the price range of all matches."""

    report_kind = "product_search"

    def get_queryset(self, criteria):
        return Product.objects.filter(
            workflow_state=Product.WORKFLOW_PUBLISHED, moderation_status=ModerationStatus.APPROVED
        ).select_related("seller", "category")

    def apply_filters(self, queryset, criteria):
        if criteria.query:
            queryset = queryset.filter(Q(name__icontains=criteria.query) | Q(description__icontains=criteria.query))
        if criteria.category_id:
            queryset = queryset.filter(category_id=criteria.category_id)
        if criteria.min_price is not None:
            queryset = queryset.filter(price__gte=criteria.min_price)
        if criteria.max_price is not None:
            queryset = queryset.filter(price__lte=criteria.max_price)
        if criteria.condition:
            queryset = queryset.filter(condition=criteria.condition)
        if criteria.actor_or_seller_id:
            queryset = queryset.filter(seller_id=_user_pk(criteria.actor_or_seller_id))
        if criteria.in_stock:
            queryset = queryset.filter(Q(stock_quantity__gt=0) | Q(variants__stock_quantity__gt=0)).distinct()
        return queryset

    def get_ordering(self, criteria):
        if criteria.sort == SORT_PRICE_ASC:
            return ("price", "id")
        if criteria.sort == SORT_PRICE_DESC:
            return ("-price", "-id")
        return ("-created_at", "-id")

    def aggregate(self, queryset) -> Dict:
        bounds = queryset.order_by().aggregate(min_price=Min("price"), max_price=Max("price"))
        if bounds["min_price"] is None:
            return {}
        return {name: quantize_money(value) for name, value in bounds.items()}

    def to_row(self, product) -> Dict:
        return {
            "id": str(product.pk),
            "name": product.name,
            "price": quantize_money(product.price),
            "condition": product.condition,
            "stock_quantity": max(product.stock_quantity, 0),
            "seller_id": str(product.seller_id),
            "seller_name": display_name(product.seller, "Seller"),
            "category": product.category.name if product.category else None,
            "created_at": product.created_at,
        }
