"""
Filter criteria value objects.

One immutable criteria type per queryable domain. Builders take raw request
input, run it through the normalization helpers and return criteria that the
paged query engine and row sources can consume as-is.
"""

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from django.utils.dateparse import parse_datetime

from . import statuses as families
from .normalization import (
    normalize_date_range,
    normalize_search_term,
    normalize_statuses,
    normalize_text,
    parse_bool,
    parse_positive_int,
    parse_result_filter,
)

TRACKED_ENTITY_TYPES = ("User", "Product", "ProductPhoto", "ProductReview", "SellerRating", "CommissionRule", "VatRule")

PRODUCT_CONDITIONS = ("new", "used", "refurbished")

SORT_NEWEST = "newest"
SORT_PRICE_ASC = "price_asc"
SORT_PRICE_DESC = "price_desc"
PRODUCT_SORTS = (SORT_NEWEST, SORT_PRICE_ASC, SORT_PRICE_DESC)

TARGET_PRODUCT = "product"
TARGET_SELLER = "seller"
REVIEW_TARGET_KINDS = (TARGET_PRODUCT, TARGET_SELLER)


@dataclass(frozen=True)
class FilterCriteria:
    """Fields shared by every queryable domain."""

    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    actor_or_seller_id: Optional[str] = None
    statuses: Tuple[str, ...] = ()
    query: Optional[str] = None

    def __post_init__(self):
        # from_date <= to_date always holds
        if self.from_date is not None and self.to_date is not None and self.from_date > self.to_date:
            from_date, to_date = self.to_date, self.from_date
            object.__setattr__(self, "from_date", from_date)
            object.__setattr__(self, "to_date", to_date)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe representation, used when handing criteria to export jobs."""
        payload = {}
        for key, value in asdict(self).items():
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            elif isinstance(value, tuple):
                value = list(value)
            payload[key] = value
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "FilterCriteria":
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in payload.items():
            if key not in known:
                continue
            if key.endswith("_date") and isinstance(value, str):
                value = parse_datetime(value)
            elif key.endswith("_price") and value is not None:
                value = Decimal(value)
            elif isinstance(value, list):
                value = tuple(value)
            values[key] = value
        return cls(**values)


@dataclass(frozen=True)
class AuditLogCriteria(FilterCriteria):
    entity_type: Optional[str] = None
    action_type: Optional[str] = None
    resource_id: Optional[str] = None
    succeeded: Optional[bool] = None


@dataclass(frozen=True)
class OrderReportCriteria(FilterCriteria):
    payment_statuses: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PayoutCriteria(FilterCriteria):
    pass


@dataclass(frozen=True)
class ReturnCaseCriteria(FilterCriteria):
    buyer_id: Optional[str] = None


@dataclass(frozen=True)
class ProductModerationCriteria(FilterCriteria):
    category_id: Optional[int] = None


@dataclass(frozen=True)
class ReviewModerationCriteria(FilterCriteria):
    target_kind: str = TARGET_PRODUCT
    flagged_only: bool = False


@dataclass(frozen=True)
class ProductSearchCriteria(FilterCriteria):
    category_id: Optional[int] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    condition: Optional[str] = None
    in_stock: bool = False
    sort: str = SORT_NEWEST

    def __post_init__(self):
        super().__post_init__()
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            min_price, max_price = self.max_price, self.min_price
            object.__setattr__(self, "min_price", min_price)
            object.__setattr__(self, "max_price", max_price)


def _choice(value, allowed, default=None):
    text = normalize_text(value)
    if text is None:
        return default
    for option in allowed:
        if option.lower() == text.lower():
            return option
    return default


def _price(value) -> Optional[Decimal]:
    text = normalize_text(value)
    if text is None:
        return None
    try:
        price = Decimal(text)
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


def build_audit_log_criteria(
    from_date=None, to_date=None, actor=None, entity_type=None, action_type=None, resource_id=None, result=None
) -> AuditLogCriteria:
    start, end = normalize_date_range(from_date, to_date)
    return AuditLogCriteria(
        from_date=start,
        to_date=end,
        actor_or_seller_id=normalize_search_term(actor),
        entity_type=_choice(entity_type, TRACKED_ENTITY_TYPES),
        action_type=normalize_search_term(action_type),
        resource_id=normalize_text(resource_id),
        succeeded=parse_result_filter(result),
    )


def build_order_report_criteria(
    from_date=None, to_date=None, seller_id=None, statuses=None, payment_statuses=None, query=None
) -> OrderReportCriteria:
    start, end = normalize_date_range(from_date, to_date)
    return OrderReportCriteria(
        from_date=start,
        to_date=end,
        actor_or_seller_id=normalize_text(seller_id),
        statuses=normalize_statuses(statuses, families.ORDER),
        payment_statuses=normalize_statuses(payment_statuses, families.PAYMENT),
        query=normalize_search_term(query),
    )


def build_payout_criteria(from_date=None, to_date=None, seller_id=None, statuses=None, query=None) -> PayoutCriteria:
    start, end = normalize_date_range(from_date, to_date)
    return PayoutCriteria(
        from_date=start,
        to_date=end,
        actor_or_seller_id=normalize_text(seller_id),
        statuses=normalize_statuses(statuses, families.PAYOUT),
        query=normalize_search_term(query),
    )


def build_return_case_criteria(
    from_date=None, to_date=None, seller_id=None, buyer_id=None, statuses=None, query=None
) -> ReturnCaseCriteria:
    start, end = normalize_date_range(from_date, to_date)
    return ReturnCaseCriteria(
        from_date=start,
        to_date=end,
        actor_or_seller_id=normalize_text(seller_id),
        buyer_id=normalize_text(buyer_id),
        statuses=normalize_statuses(statuses, families.RETURN),
        query=normalize_search_term(query),
    )


def build_product_moderation_criteria(statuses=None, category_id=None, query=None) -> ProductModerationCriteria:
    return ProductModerationCriteria(
        statuses=normalize_statuses(statuses, families.MODERATION),
        category_id=parse_positive_int(category_id),
        query=normalize_search_term(query),
    )


def build_review_moderation_criteria(
    target_kind=None, statuses=None, flagged_only=False, from_date=None, to_date=None, query=None
) -> ReviewModerationCriteria:
    start, end = normalize_date_range(from_date, to_date)
    return ReviewModerationCriteria(
        from_date=start,
        to_date=end,
        target_kind=_choice(target_kind, REVIEW_TARGET_KINDS, TARGET_PRODUCT),
        statuses=normalize_statuses(statuses, families.REVIEW),
        flagged_only=parse_bool(flagged_only),
        query=normalize_search_term(query),
    )


def build_product_search_criteria(
    query=None,
    category_id=None,
    min_price=None,
    max_price=None,
    condition=None,
    seller_id=None,
    in_stock=False,
    sort=None,
) -> ProductSearchCriteria:
    return ProductSearchCriteria(
        query=normalize_search_term(query),
        category_id=parse_positive_int(category_id),
        min_price=_price(min_price),
        max_price=_price(max_price),
        condition=_choice(condition, PRODUCT_CONDITIONS),
        actor_or_seller_id=normalize_text(seller_id),
        in_stock=parse_bool(in_stock),
        sort=_choice(sort, PRODUCT_SORTS, SORT_NEWEST),
    )
