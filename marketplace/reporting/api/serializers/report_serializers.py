"""
Query-string binding for reports, queues and search.

Fields accept raw strings; normalization (date windows, status aliases,
trimming) happens in the criteria builders so that unknown values are
dropped instead of rejected.
"""

from rest_framework import serializers

from marketplace.querying.filters import (
    build_audit_log_criteria,
    build_order_report_criteria,
    build_payout_criteria,
    build_product_moderation_criteria,
    build_product_search_criteria,
    build_return_case_criteria,
    build_review_moderation_criteria,
)
from marketplace.querying.normalization import parse_positive_int


def _text(**kwargs):
    return serializers.CharField(required=False, allow_blank=True, **kwargs)


def _multi(help_text: str):
    return serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False, help_text=help_text
    )


class PagedQuerySerializer(serializers.Serializer):
    page = _text(help_text="Page number (values below 1 mean 1)")
    page_size = _text(help_text="Rows per page (clamped to the configured range)")

    def paging(self):
        data = self.validated_data
        return parse_positive_int(data.get("page")) or 1, parse_positive_int(data.get("page_size"))

    def criteria(self):
        raise NotImplementedError


class DateRangeQuerySerializer(PagedQuerySerializer):
    from_date = _text(help_text="Start day, YYYY-MM-DD (inclusive)")
    to_date = _text(help_text="End day, YYYY-MM-DD (inclusive)")
    q = _text(help_text="Free-text search")


class OrderReportQuerySerializer(DateRangeQuerySerializer):
    seller_id = _text()
    status = _multi("Order statuses; repeat or comma-separate")
    payment_status = _multi("Payment statuses; repeat or comma-separate")

    def criteria(self):
        data = self.validated_data
        return build_order_report_criteria(
            from_date=data.get("from_date"),
            to_date=data.get("to_date"),
            seller_id=data.get("seller_id"),
            statuses=data.get("status"),
            payment_statuses=data.get("payment_status"),
            query=data.get("q"),
        )


class PayoutQuerySerializer(DateRangeQuerySerializer):
    seller_id = _text()
    status = _multi("Payout statuses")

    def criteria(self):
        data = self.validated_data
        return build_payout_criteria(
            from_date=data.get("from_date"),
            to_date=data.get("to_date"),
            seller_id=data.get("seller_id"),
            statuses=data.get("status"),
            query=data.get("q"),
        )


class ReturnCaseQuerySerializer(DateRangeQuerySerializer):
    seller_id = _text()
    buyer_id = _text()
    status = _multi("Return case statuses")

    def criteria(self):
        data = self.validated_data
        return build_return_case_criteria(
            from_date=data.get("from_date"),
            to_date=data.get("to_date"),
            seller_id=data.get("seller_id"),
            buyer_id=data.get("buyer_id"),
            statuses=data.get("status"),
            query=data.get("q"),
        )


class AuditLogQuerySerializer(PagedQuerySerializer):
    from_date = _text(help_text="Start day, YYYY-MM-DD; defaults to the retention cutoff")
    to_date = _text()
    actor = _text(help_text="Actor name contains")
    entity_type = _text(help_text="User, Product, ProductPhoto, ProductReview, SellerRating, ...")
    action = _text(help_text="Action contains")
    resource_id = _text()
    result = _text(help_text="success or failure")

    def criteria(self):
        data = self.validated_data
        return build_audit_log_criteria(
            from_date=data.get("from_date"),
            to_date=data.get("to_date"),
            actor=data.get("actor"),
            entity_type=data.get("entity_type"),
            action_type=data.get("action"),
            resource_id=data.get("resource_id"),
            result=data.get("result"),
        )


class ProductModerationQuerySerializer(PagedQuerySerializer):
    status = _multi("Moderation statuses")
    category_id = _text()
    q = _text()

    def criteria(self):
        data = self.validated_data
        return build_product_moderation_criteria(
            statuses=data.get("status"), category_id=data.get("category_id"), query=data.get("q")
        )


class ReviewModerationQuerySerializer(DateRangeQuerySerializer):
    target_kind = _text(help_text="product (default) or seller")
    status = _multi("Review statuses")
    flagged_only = _text(help_text="true to list flagged reviews only")

    def criteria(self):
        data = self.validated_data
        return build_review_moderation_criteria(
            target_kind=data.get("target_kind"),
            statuses=data.get("status"),
            flagged_only=data.get("flagged_only"),
            from_date=data.get("from_date"),
            to_date=data.get("to_date"),
            query=data.get("q"),
        )


class ProductSearchQuerySerializer(PagedQuerySerializer):
    q = _text(help_text="Search in name and description")
    category_id = _text()
    min_price = _text()
    max_price = _text()
    condition = _text(help_text="new, used or refurbished")
    seller_id = _text()
    in_stock = _text(help_text="true to hide sold-out products")
    sort = _text(help_text="newest (default), price_asc or price_desc")

    def criteria(self):
        data = self.validated_data
        return build_product_search_criteria(
            query=data.get("q"),
            category_id=data.get("category_id"),
            min_price=data.get("min_price"),
            max_price=data.get("max_price"),
            condition=data.get("condition"),
            seller_id=data.get("seller_id"),
            in_stock=data.get("in_stock"),
            sort=data.get("sort"),
        )


class ModerationDecisionSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=40)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500, default="")


EXPORT_QUERY_SERIALIZERS = {
    "orders": OrderReportQuerySerializer,
    "payouts": PayoutQuerySerializer,
    "returns": ReturnCaseQuerySerializer,
    "audit_log": AuditLogQuerySerializer,
}


class ExportRequestSerializer(serializers.Serializer):
    report_kind = serializers.ChoiceField(choices=sorted(EXPORT_QUERY_SERIALIZERS))
    filters = serializers.DictField(required=False, default=dict, help_text="Same filters as the report's list endpoint")

    def criteria(self):
        data = self.validated_data
        query_serializer = EXPORT_QUERY_SERIALIZERS[data["report_kind"]](data=data["filters"])
        query_serializer.is_valid(raise_exception=True)
        return query_serializer.criteria()
