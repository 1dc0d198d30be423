"""
Canonical status tokens per status family.

Each family maps case-insensitive input (including legacy and provider
aliases) onto the token stored in the database. Unknown input maps to None.
"""

from typing import Dict, Optional, Tuple

ORDER = "order"
PAYMENT = "payment"
REVIEW = "review"
MODERATION = "moderation"
PAYOUT = "payout"
RETURN = "return"


class OrderStatus:
    NEW = "new"
    PAID = "paid"
    PREPARING = "preparing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"

    CHOICES = [
        (NEW, "New"),
        (PAID, "Paid"),
        (PREPARING, "Preparing"),
        (SHIPPED, "Shipped"),
        (DELIVERED, "Delivered"),
        (CANCELLED, "Cancelled"),
        (REFUNDED, "Refunded"),
        (FAILED, "Failed"),
    ]


class PaymentStatus:
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

    CHOICES = [(PENDING, "Pending"), (PAID, "Paid"), (FAILED, "Failed"), (REFUNDED, "Refunded")]


class ReviewStatus:
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"
    HIDDEN = "hidden"

    CHOICES = [(PENDING, "Pending"), (PUBLISHED, "Published"), (REJECTED, "Rejected"), (HIDDEN, "Hidden")]


class ModerationStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    CHOICES = [(PENDING, "Pending"), (APPROVED, "Approved"), (REJECTED, "Rejected")]


class PayoutStatus:
    SCHEDULED = "scheduled"
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"

    CHOICES = [(SCHEDULED, "Scheduled"), (PROCESSING, "Processing"), (PAID, "Paid"), (FAILED, "Failed")]


class ReturnStatus:
    REQUESTED = "requested"
    PENDING_SELLER_REVIEW = "pending_seller_review"
    PENDING_BUYER_INFO = "pending_buyer_info"
    SELLER_PROPOSED = "seller_proposed"
    UNDER_ADMIN_REVIEW = "under_admin_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"

    CHOICES = [
        (REQUESTED, "Requested"),
        (PENDING_SELLER_REVIEW, "Pending seller review"),
        (PENDING_BUYER_INFO, "Pending buyer info"),
        (SELLER_PROPOSED, "Seller proposed"),
        (UNDER_ADMIN_REVIEW, "Under admin review"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
        (COMPLETED, "Completed"),
    ]


def _lookup(choices, aliases=None) -> Dict[str, str]:
    table = {}
    for token, label in choices:
        table[token] = token
        table[label.lower()] = token
    for alias, token in (aliases or {}).items():
        table[alias] = token
    return table


STATUS_TABLES: Dict[str, Dict[str, str]] = {
    ORDER: _lookup(OrderStatus.CHOICES, {"confirmed": OrderStatus.PAID}),
    PAYMENT: _lookup(
        PaymentStatus.CHOICES,
        {
            "waiting": PaymentStatus.PENDING,
            "processing": PaymentStatus.PENDING,
            "authorized": PaymentStatus.PAID,
            "succeeded": PaymentStatus.PAID,
            "error": PaymentStatus.FAILED,
            "declined": PaymentStatus.FAILED,
        },
    ),
    REVIEW: _lookup(ReviewStatus.CHOICES),
    MODERATION: _lookup(ModerationStatus.CHOICES),
    PAYOUT: _lookup(PayoutStatus.CHOICES),
    RETURN: _lookup(ReturnStatus.CHOICES),
}


def status_family_tokens(family: str) -> Tuple[str, ...]:
    """Return the canonical tokens of a family, in declaration order."""
    return tuple(dict.fromkeys(STATUS_TABLES[family].values()))


def canonical_status(value: str, family: str) -> Optional[str]:
    """Look up an already-trimmed value; None when the family does not know it."""
    table = STATUS_TABLES[family]
    key = value.lower()
    if key in table:
        return table[key]
    # Accept "Pending seller review" / "pending-seller-review" spellings
    return table.get(key.replace(" ", "_").replace("-", "_"))
