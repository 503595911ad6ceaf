"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.utils import timezone
from rest_framework import serializers, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from reports.domain import ReportStatus
from reports.domain.errors import ErrorCode
from reports.handlers import dependencies
from reports.handlers.serializers import (
    AttractionInputDefinitionSerializer,
    AttractionSerializer,
    AttractionUpdateSerializer,
    DailyReportSerializer,
    EditLogEntrySerializer,
    ReasonSerializer,
    ReportEditSerializer,
    ReportFilterSerializer,
    ReportInputSerializer,
    SiteDayStatusSerializer,
    SiteInputSerializer,
    SiteSerializer,
    SiteUpdateSerializer,
    TicketUsageSerializer,
)
from reports.services.results import OperationResult

ERROR_STATUS = {
    ErrorCode.REPORT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SITE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ATTRACTION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.ALREADY_SUBMITTED: status.HTTP_409_CONFLICT,
    ErrorCode.REPORT_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.SITE_CODE_TAKEN: status.HTTP_409_CONFLICT,
    ErrorCode.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.NO_REASON_GIVEN: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
}


def render_result(
    result: OperationResult,
    serializer_class: type[serializers.Serializer] | None = None,
    *,
    many: bool = False,
    success_status: int = status.HTTP_200_OK,
) -> Response:
    """Map an OperationResult onto the response envelope."""
    if not result.ok:
        return Response(
            {"success": False, "error": result.error.to_dict()},
            status=ERROR_STATUS[result.error.code],
        )
    data = None
    if serializer_class is not None and result.data is not None:
        data = serializer_class(result.data, many=many).data
    body = {"success": True, "data": data}
    if result.warnings:
        body["warnings"] = list(result.warnings)
    if result.message:
        body["message"] = result.message
    return Response(body, status=success_status)


def invalid_input(serializer: serializers.Serializer) -> Response:
    return Response(
        {
            "success": False,
            "error": {
                "code": ErrorCode.INVALID_INPUT.value,
                "message": "Invalid input",
                "fields": serializer.errors,
            },
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class ReportCollectionView(APIView):
    """Handler for GET/POST /api/reports"""

    def get(self, request: Request) -> Response:
        filters = ReportFilterSerializer(data=request.query_params)
        if not filters.is_valid():
            return invalid_input(filters)
        params = filters.validated_data
        result = dependencies.get_query_service().list_reports(
            dependencies.caller_id(request),
            site_id=params.get("site_id"),
            date_from=params.get("date_from"),
            date_to=params.get("date_to"),
            status=ReportStatus(params["status"]) if params.get("status") else None,
            limit=params["limit"],
        )
        return render_result(result, DailyReportSerializer, many=True)

    def post(self, request: Request) -> Response:
        """Save the draft for the caller's site and date."""
        serializer = ReportInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)
        result = dependencies.get_lifecycle().save_draft(
            dependencies.caller_id(request), serializer.to_input()
        )
        return render_result(result, DailyReportSerializer)


class ManualReportView(APIView):
    """Handler for POST /api/reports/manual"""

    def post(self, request: Request) -> Response:
        serializer = ReportInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)
        result = dependencies.get_lifecycle().create_manual_report(
            dependencies.caller_id(request), serializer.to_input()
        )
        return render_result(result, DailyReportSerializer, success_status=status.HTTP_201_CREATED)


class ReportDetailView(APIView):
    """Handler for GET/DELETE /api/reports/{report_id}"""

    def get(self, request: Request, report_id: str) -> Response:
        result = dependencies.get_query_service().get_report(
            dependencies.caller_id(request), report_id
        )
        return render_result(result, DailyReportSerializer)

    def delete(self, request: Request, report_id: str) -> Response:
        serializer = ReasonSerializer(data=request.data or request.query_params)
        if not serializer.is_valid():
            return invalid_input(serializer)
        result = dependencies.get_lifecycle().delete(
            dependencies.caller_id(request),
            report_id,
            reason=serializer.validated_data.get("reason"),
        )
        return render_result(result)


class ReportSubmitView(APIView):
    """Handler for POST /api/reports/{report_id}/submit"""

    def post(self, request: Request, report_id: str) -> Response:
        result = dependencies.get_lifecycle().submit(dependencies.caller_id(request), report_id)
        return render_result(result, DailyReportSerializer)


class ReportEditView(APIView):
    """Handler for PATCH /api/reports/{report_id}/edit"""

    def patch(self, request: Request, report_id: str) -> Response:
        serializer = ReportEditSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)
        result = dependencies.get_lifecycle().privileged_edit(
            dependencies.caller_id(request),
            report_id,
            serializer.updates(),
            serializer.validated_data.get("reason"),
        )
        return render_result(result, DailyReportSerializer)


class ReportEditHistoryView(APIView):
    """Handler for GET /api/reports/{report_id}/edits"""

    def get(self, request: Request, report_id: str) -> Response:
        result = dependencies.get_query_service().edit_history(
            dependencies.caller_id(request), report_id
        )
        return render_result(result, EditLogEntrySerializer, many=True)


class SiteDailyStatusView(APIView):
    """Handler for GET /api/sites/{site_id}/status?date=YYYY-MM-DD"""

    def get(self, request: Request, site_id: str) -> Response:
        field = serializers.DateField(required=False)
        raw_date = request.query_params.get("date")
        try:
            report_date = field.to_internal_value(raw_date) if raw_date else timezone.localdate()
        except serializers.ValidationError as exc:
            return Response(
                {
                    "success": False,
                    "error": {
                        "code": ErrorCode.INVALID_INPUT.value,
                        "message": "Invalid input",
                        "fields": {"date": exc.detail},
                    },
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        result = dependencies.get_query_service().daily_status(
            dependencies.caller_id(request), site_id, report_date
        )
        return render_result(result, SiteDayStatusSerializer)


class TicketUsageView(APIView):
    """Handler for GET /api/tickets/usage"""

    def get(self, request: Request) -> Response:
        filters = ReportFilterSerializer(data=request.query_params)
        if not filters.is_valid():
            return invalid_input(filters)
        params = filters.validated_data
        result = dependencies.get_query_service().ticket_usage(
            dependencies.caller_id(request),
            site_id=params.get("site_id"),
            date_from=params.get("date_from"),
            date_to=params.get("date_to"),
        )
        return render_result(result, TicketUsageSerializer, many=True)


class SiteCollectionView(APIView):
    """Handler for GET/POST /api/sites"""

    def get(self, request: Request) -> Response:
        result = dependencies.get_catalog_service().list_sites(dependencies.caller_id(request))
        return render_result(result, SiteSerializer, many=True)

    def post(self, request: Request) -> Response:
        serializer = SiteInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)
        result = dependencies.get_catalog_service().create_site(
            dependencies.caller_id(request), **serializer.validated_data
        )
        return render_result(result, SiteSerializer, success_status=status.HTTP_201_CREATED)


class SiteDetailView(APIView):
    """Handler for PATCH /api/sites/{site_id}"""

    def patch(self, request: Request, site_id: str) -> Response:
        serializer = SiteUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)
        result = dependencies.get_catalog_service().update_site(
            dependencies.caller_id(request), site_id, **serializer.validated_data
        )
        return render_result(result, SiteSerializer)


class SiteAttractionsView(APIView):
    """Handler for GET/POST /api/sites/{site_id}/attractions"""

    def get(self, request: Request, site_id: str) -> Response:
        include_inactive = request.query_params.get("include_inactive") in ("1", "true")
        result = dependencies.get_catalog_service().list_attractions(
            dependencies.caller_id(request), site_id, include_inactive=include_inactive
        )
        return render_result(result, AttractionSerializer, many=True)

    def post(self, request: Request, site_id: str) -> Response:
        serializer = AttractionInputDefinitionSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)
        result = dependencies.get_catalog_service().create_attraction(
            dependencies.caller_id(request), site_id, **serializer.validated_data
        )
        return render_result(result, AttractionSerializer, success_status=status.HTTP_201_CREATED)


class AttractionDetailView(APIView):
    """Handler for PATCH/DELETE /api/attractions/{attraction_id}"""

    def patch(self, request: Request, attraction_id: str) -> Response:
        serializer = AttractionUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)
        result = dependencies.get_catalog_service().update_attraction(
            dependencies.caller_id(request), attraction_id, **serializer.validated_data
        )
        return render_result(result, AttractionSerializer)

    def delete(self, request: Request, attraction_id: str) -> Response:
        result = dependencies.get_catalog_service().remove_attraction(
            dependencies.caller_id(request), attraction_id
        )
        return render_result(result, AttractionSerializer)
