import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """One page of a filtered, deterministically ordered result set."""

    items: Tuple[T, ...]
    page_number: int
    page_size: int
    total_count: int
    aggregates: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        if self.total_count <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    def to_dict(self, serialize_item=None) -> dict:
        serialize_item = serialize_item or (lambda item: item)
        return {
            "items": [serialize_item(item) for item in self.items],
            "page_number": self.page_number,
            "page_size": self.page_size,
            "total_count": self.total_count,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_previous": self.has_previous,
            "aggregates": {key: str(value) for key, value in self.aggregates.items()},
        }


@dataclass(frozen=True)
class ExportResult(Generic[T]):
    """
    Unpaged rows for an export, bounded by a row cap.

    ``total_matching`` is the full size of the filtered set; ``truncated`` is
    set when it exceeds the number of rows actually returned.
    """

    rows: Tuple[T, ...]
    row_count: int
    total_matching: int

    @property
    def truncated(self) -> bool:
        return self.total_matching > self.row_count


def clamp_page_number(page_number: Optional[int]) -> int:
    if page_number is None or page_number < 1:
        return 1
    return page_number


def clamp_page_size(page_size: Optional[int], default: int, minimum: int, maximum: int) -> int:
    """Client-supplied sizes are never trusted: absent -> default, then forced into [minimum, maximum]."""
    if page_size is None or page_size <= 0:
        page_size = default
    return max(minimum, min(page_size, maximum))
