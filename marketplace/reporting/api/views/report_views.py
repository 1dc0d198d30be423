from django.http import HttpResponse
from drf_spectacular.utils import OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import ServiceViewMixin, error_response, jsonable
from marketplace.api.serializers import ErrorResponseSerializer, ExportJobResponseSerializer, PagedResponseSerializer
from marketplace.permissions import IsMarketplaceAdmin, IsSeller
from marketplace.reporting.api.serializers.report_serializers import (
    AuditLogQuerySerializer,
    ExportRequestSerializer,
    OrderReportQuerySerializer,
    PayoutQuerySerializer,
    ReturnCaseQuerySerializer,
)
from marketplace.reporting.domain.models import ReportExportJob


def csv_response(export) -> HttpResponse:
    response = HttpResponse(export.content, content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{export.filename}"'
    response["X-Total-Matching"] = str(export.total_matching)
    response["X-Export-Truncated"] = "true" if export.truncated else "false"
    return response


class ReportViewSet(ServiceViewMixin, viewsets.ViewSet):
    """
    Admin report: paged listing plus a synchronous CSV download.

    Subclasses set ``query_serializer_class`` and ``get_service``.
    """

    permission_classes = [IsMarketplaceAdmin]
    query_serializer_class = None

    def get_service(self):
        raise NotImplementedError

    def bind_query(self, request):
        serializer = self.query_serializer_class(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer

    def list_page(self, criteria, page_number, page_size):
        return self.get_service().list(criteria, page_number=page_number, page_size=page_size)

    def export_rows(self, criteria):
        return self.get_service().export_csv(criteria)

    def list(self, request):
        query = self.bind_query(request)
        page_number, page_size = query.paging()
        result = self.list_page(query.criteria(), page_number, page_size)
        if not result.ok:
            return error_response(result)
        return Response(result.value.to_dict(serialize_item=jsonable), status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"])
    def csv(self, request):
        result = self.export_rows(self.bind_query(request).criteria())
        if not result.ok:
            return error_response(result)
        return csv_response(result.value)


def report_schema(name: str, serializer, tag: str):
    """Schema decorators shared by every report's list and CSV endpoints."""
    return extend_schema_view(
        list=extend_schema(
            operation_id=f"{name}_list",
            parameters=[serializer],
            responses={
                200: OpenApiResponse(response=PagedResponseSerializer, description="One page of the report"),
                403: OpenApiResponse(response=ErrorResponseSerializer, description="Not allowed"),
                503: OpenApiResponse(response=ErrorResponseSerializer, description="Storage temporarily unavailable"),
            },
            tags=[tag],
        ),
        csv=extend_schema(
            operation_id=f"{name}_csv",
            parameters=[serializer],
            responses={
                200: OpenApiResponse(response=OpenApiTypes.BINARY, description="CSV, capped at the export limit")
            },
            tags=[tag],
        ),
    )


@report_schema("admin_order_report", OrderReportQuerySerializer, "Admin - Reports")
class OrderReportViewSet(ReportViewSet):
    """Orders and commissions across all sellers. Defaults to the last 30 days."""

    query_serializer_class = OrderReportQuerySerializer

    def get_service(self):
        return container.order_report_service()


@report_schema("admin_payouts", PayoutQuerySerializer, "Admin - Reports")
class PayoutReportViewSet(ReportViewSet):
    query_serializer_class = PayoutQuerySerializer

    def get_service(self):
        return container.payout_report_service()


@report_schema("admin_return_cases", ReturnCaseQuerySerializer, "Admin - Reports")
class ReturnCaseReportViewSet(ReportViewSet):
    query_serializer_class = ReturnCaseQuerySerializer

    def get_service(self):
        return container.return_case_service()


@report_schema("admin_audit_log", AuditLogQuerySerializer, "Admin - Reports")
class AuditLogViewSet(ReportViewSet):
    query_serializer_class = AuditLogQuerySerializer

    def get_service(self):
        return container.audit_log_service()


@report_schema("seller_order_report", OrderReportQuerySerializer, "Seller - Reports")
class SellerOrderReportViewSet(ReportViewSet):
    """
    The order report of the requesting seller. Any ``seller_id`` in the query
    string is ignored.
    """

    permission_classes = [IsAuthenticated, IsSeller]
    query_serializer_class = OrderReportQuerySerializer

    def get_service(self):
        return container.order_report_service()

    def list_page(self, criteria, page_number, page_size):
        return self.get_service().seller_report(
            self.request.user.pk, criteria, page_number=page_number, page_size=page_size
        )

    def export_rows(self, criteria):
        return self.get_service().seller_export_csv(self.request.user.pk, criteria)


def job_payload(job: ReportExportJob) -> dict:
    return jsonable(
        {
            "id": job.pk,
            "report_kind": job.report_kind,
            "status": job.status,
            "row_count": job.row_count,
            "total_matching": job.total_matching,
            "truncated": job.truncated,
            "error": job.error,
            "created_at": job.created_at,
            "completed_at": job.completed_at,
        }
    )


class ReportExportViewSet(ServiceViewMixin, viewsets.ViewSet):
    """Background CSV exports for large reports."""

    permission_classes = [IsMarketplaceAdmin]

    def get_service(self):
        return container.export_service()

    @extend_schema(
        operation_id="report_export_create",
        summary="Queue a report export",
        request=ExportRequestSerializer,
        responses={
            202: OpenApiResponse(response=ExportJobResponseSerializer, description="Export queued"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown report or bad filters"),
        },
        tags=["Admin - Exports"],
    )
    def create(self, request):
        serializer = ExportRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = self.get_service()
        result = service.request_export(
            serializer.validated_data["report_kind"], serializer.criteria(), requested_by=request.user
        )
        if not result.ok:
            return error_response(result)

        job = service.get_job(result.value)
        if not job.ok:
            return error_response(job)
        return Response(job_payload(job.value), status=status.HTTP_202_ACCEPTED)

    @extend_schema(
        operation_id="report_export_status",
        responses={
            200: OpenApiResponse(response=ExportJobResponseSerializer, description="Job status"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown job"),
        },
        tags=["Admin - Exports"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_job(pk)
        if not result.ok:
            return error_response(result)
        return Response(job_payload(result.value), status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="report_export_download",
        responses={
            200: OpenApiResponse(response=OpenApiTypes.BINARY, description="CSV content"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown job"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Export not finished"),
        },
        tags=["Admin - Exports"],
    )
    @action(detail=True, methods=["get"])
    def download(self, request, pk=None):
        result = self.get_service().get_job(pk)
        if not result.ok:
            return error_response(result)

        job = result.value
        if job.status != ReportExportJob.STATUS_COMPLETED:
            return Response(
                {"error": "export_not_ready", "detail": f"Export is {job.status}."}, status=status.HTTP_409_CONFLICT
            )

        response = HttpResponse(job.content, content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{job.report_kind}-{job.pk}.csv"'
        response["X-Total-Matching"] = str(job.total_matching)
        response["X-Export-Truncated"] = "true" if job.truncated else "false"
        return response
