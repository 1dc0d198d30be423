"""
Row sources for the paged query engine.

A row source owns the storage side of one report or queue: applying
criteria, ordering, paging and aggregation. The engine only sees the two
calls declared on ``RowSource``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from django.db import OperationalError
from django.db.models import Sum

from marketplace.domain.exceptions import TransientUnavailable
from marketplace.services.base import check_cancelled

from .filters import FilterCriteria

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class RowPage:
    rows: Tuple[Any, ...]
    total_count: int
    aggregates: Dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class RowBatch:
    rows: Tuple[Any, ...]
    total_matching: int


def quantize_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class RowSource(ABC):
    """Storage-facing half of a report: filters, orders and slices rows."""

    report_kind = "report"

    @abstractmethod
    def query_page(self, criteria: FilterCriteria, page_number: int, page_size: int, cancel_event=None) -> RowPage:
        """
        Fetch one page of rows together with the total count and aggregates
        computed over the full filtered set.
        """
        pass

    @abstractmethod
    def query_all(self, criteria: FilterCriteria, cap: int, cancel_event=None) -> RowBatch:
        """Fetch at most ``cap`` rows in page order, plus the full matching count."""
        pass


def _field(row, name):
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


class InMemoryRowSource(RowSource):
    """
    Row source over an in-memory sequence.

    Used for tests and for small derived reports. ``predicate(row, criteria)``
    selects rows; ``sort_key`` with ``reverse`` gives the ordering and must
    end in a unique key so page boundaries are stable.
    """

    def __init__(
        self,
        rows: Iterable[Any],
        predicate: Optional[Callable[[Any, FilterCriteria], bool]] = None,
        sort_key: Optional[Callable[[Any], Any]] = None,
        reverse: bool = True,
        aggregate_fields: Sequence[str] = (),
        report_kind: str = "in_memory",
    ):
        self.rows = list(rows)
        self.predicate = predicate or (lambda row, criteria: True)
        self.sort_key = sort_key or (lambda row: (_field(row, "created_at"), _field(row, "id")))
        self.reverse = reverse
        self.aggregate_fields = tuple(aggregate_fields)
        self.report_kind = report_kind

    def _filtered(self, criteria):
        matching = [row for row in self.rows if self.predicate(row, criteria)]
        return sorted(matching, key=self.sort_key, reverse=self.reverse)

    def _aggregate(self, rows) -> Dict[str, Decimal]:
        totals = {}
        for name in self.aggregate_fields:
            total = sum((Decimal(_field(row, name) or 0) for row in rows), Decimal("0"))
            totals[name] = quantize_money(total)
        return totals

    def query_page(self, criteria, page_number, page_size, cancel_event=None) -> RowPage:
        check_cancelled(cancel_event)
        rows = self._filtered(criteria)
        offset = (page_number - 1) * page_size
        return RowPage(
            rows=tuple(rows[offset : offset + page_size]),
            total_count=len(rows),
            aggregates=self._aggregate(rows),
        )

    def query_all(self, criteria, cap, cancel_event=None) -> RowBatch:
        check_cancelled(cancel_event)
        rows = self._filtered(criteria)
        return RowBatch(rows=tuple(rows[:cap]), total_matching=len(rows))


class QuerySetRowSource(RowSource):
    """
    Row source backed by a Django queryset.

    Subclasses provide ``get_queryset`` and ``apply_filters`` and may override
    ``get_ordering`` and ``to_row``. ``aggregate_fields`` maps an output name
    to a model field summed over the filtered queryset.
    """

    ordering: Tuple[Any, ...] = ("-created_at", "-id")
    aggregate_fields: Dict[str, str] = {}

    @abstractmethod
    def get_queryset(self, criteria: FilterCriteria):
        pass

    def apply_filters(self, queryset, criteria: FilterCriteria):
        return queryset

    def get_ordering(self, criteria: FilterCriteria) -> Tuple[Any, ...]:
        return self.ordering

    def to_row(self, instance):
        return instance

    def filtered(self, criteria: FilterCriteria):
        queryset = self.apply_filters(self.get_queryset(criteria), criteria)
        return queryset.order_by(*self.get_ordering(criteria))

    def aggregate(self, queryset) -> Dict[str, Decimal]:
        if not self.aggregate_fields:
            return {}
        sums = queryset.order_by().aggregate(**{name: Sum(column) for name, column in self.aggregate_fields.items()})
        return {name: quantize_money(sums[name]) for name in self.aggregate_fields}

    def query_page(self, criteria, page_number, page_size, cancel_event=None) -> RowPage:
        queryset = self.filtered(criteria)
        offset = (page_number - 1) * page_size
        try:
            check_cancelled(cancel_event)
            total_count = queryset.count()
            check_cancelled(cancel_event)
            aggregates = self.aggregate(queryset)
            if total_count == 0 or offset >= total_count:
                return RowPage(rows=(), total_count=total_count, aggregates=aggregates)
            check_cancelled(cancel_event)
            rows = tuple(self.to_row(instance) for instance in queryset[offset : offset + page_size])
        except OperationalError as e:
            raise TransientUnavailable(f"{self.report_kind} query failed: {e}") from e
        return RowPage(rows=rows, total_count=total_count, aggregates=aggregates)

    def query_all(self, criteria, cap, cancel_event=None) -> RowBatch:
        queryset = self.filtered(criteria)
        try:
            check_cancelled(cancel_event)
            total_matching = queryset.count()
            check_cancelled(cancel_event)
            rows = tuple(self.to_row(instance) for instance in queryset[:cap])
        except OperationalError as e:
            raise TransientUnavailable(f"{self.report_kind} export failed: {e}") from e
        return RowBatch(rows=rows, total_matching=total_matching)
