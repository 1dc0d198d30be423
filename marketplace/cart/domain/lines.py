"""
Cart line value objects and attribute matching.

Variant attributes are compared case-insensitively on both keys and values;
two lines are the same line when they reference the same product with equal
attribute maps under that comparison.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class CartContext:
    """
    Identifies whose cart an operation works on.

    ``cart_key`` is the stable key of the persisted cart (a user-bound key for
    signed-in buyers, a session key otherwise).
    """

    cart_key: str
    user_id: Optional[int] = None

    @classmethod
    def for_user(cls, user) -> "CartContext":
        return cls(cart_key=f"user:{user.pk}", user_id=user.pk)

    @classmethod
    def for_session(cls, session_key: str) -> "CartContext":
        return cls(cart_key=f"session:{session_key}")


@dataclass(frozen=True)
class CartLine:
    product_id: str
    seller_id: str
    quantity: int = 1
    variant_attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def attributes_key(self) -> FrozenSet[Tuple[str, str]]:
        return attributes_key(self.variant_attributes)

    @property
    def identity(self) -> Tuple[str, FrozenSet[Tuple[str, str]]]:
        return (str(self.product_id), self.attributes_key)

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)


def normalize_attributes(attributes: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """
    Trim keys and values and drop blank pairs.

    Keys differing only in case collapse onto one entry; the last one wins.
    """
    if not attributes:
        return {}

    normalized: Dict[str, str] = {}
    for key, value in attributes.items():
        key = str(key).strip() if key is not None else ""
        value = str(value).strip() if value is not None else ""
        if not key or not value:
            continue
        for existing in list(normalized):
            if existing.casefold() == key.casefold():
                del normalized[existing]
        normalized[key] = value
    return normalized


def attributes_key(attributes: Optional[Mapping[str, str]]) -> FrozenSet[Tuple[str, str]]:
    return frozenset((key.casefold(), value.casefold()) for key, value in normalize_attributes(attributes).items())


def attributes_match(left: Optional[Mapping[str, str]], right: Optional[Mapping[str, str]]) -> bool:
    """Same number of keys and each key's value equal ignoring case."""
    return attributes_key(left) == attributes_key(right)


def is_same_line(line: CartLine, product_id, attributes: Optional[Mapping[str, str]]) -> bool:
    return str(line.product_id) == str(product_id) and attributes_match(line.variant_attributes, attributes)


def find_line(lines: Iterable[CartLine], product_id, attributes: Optional[Mapping[str, str]]) -> Optional[CartLine]:
    for line in lines:
        if is_same_line(line, product_id, attributes):
            return line
    return None


def variant_label(attributes: Optional[Mapping[str, str]]) -> str:
    return ", ".join(f"{key}: {value}" for key, value in normalize_attributes(attributes).items())


def merge_lines(lines: Iterable[CartLine], max_items: int) -> List[CartLine]:
    """
    Collapse duplicate lines and cap the number of distinct lines.

    Duplicates add their quantities onto the first occurrence. Lines without a
    product or seller are skipped and non-positive quantities count as 1.
    """
    merged: List[CartLine] = []
    positions: Dict[Tuple[str, FrozenSet[Tuple[str, str]]], int] = {}

    for line in lines:
        if not line.product_id or not str(line.seller_id or "").strip():
            continue
        quantity = line.quantity if line.quantity > 0 else 1
        attributes = normalize_attributes(line.variant_attributes)
        key = (str(line.product_id), attributes_key(attributes))

        if key in positions:
            index = positions[key]
            merged[index] = merged[index].with_quantity(merged[index].quantity + quantity)
            continue

        if len(merged) >= max_items:
            continue

        positions[key] = len(merged)
        merged.append(
            CartLine(
                product_id=str(line.product_id),
                seller_id=str(line.seller_id),
                quantity=quantity,
                variant_attributes=attributes,
            )
        )

    return merged
