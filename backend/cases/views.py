"""
Cases app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

No database queries, lifecycle logic or role checks live here.

ViewSets
--------
- ``CaseViewSet`` — The single ViewSet for all case-related endpoints.
  Custom @action methods handle the lifecycle, assignment and export
  operations so the URL structure stays clean and discoverable.
"""

from __future__ import annotations

import logging

from django.http import HttpResponse
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .reports import CaseReportRenderer
from .serializers import (
    AssignOfficerSerializer,
    CaseCreateSerializer,
    CaseDetailSerializer,
    CaseFilterSerializer,
    CaseListSerializer,
    CaseTransitionSerializer,
    CaseUpdateSerializer,
    FlagOverdueSerializer,
)
from .services import CaseQueryService, CaseWorkflowService

logger = logging.getLogger(__name__)


class CaseViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the cases app.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined, preventing accidental exposure of update or
    delete endpoints: cases change only through the lifecycle actions.

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  Role checks (victim
    creates, police/admin transition, admin escalates) and victim
    ownership are enforced inside the service layer, never in the view.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    # ── Standard endpoints ───────────────────────────────────────────
    @extend_schema(
        summary="List cases",
        description=(
            "List cases visible to the authenticated user, newest first. "
            "Victims see only their own cases."
        ),
        parameters=[
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Match on case number or type."),
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Filter by lifecycle status."),
            OpenApiParameter(name="status_label", type=str, location=OpenApiParameter.QUERY, description="Completed, In Progress or Overdue."),
            OpenApiParameter(name="priority", type=str, location=OpenApiParameter.QUERY, description="low, medium or high."),
            OpenApiParameter(name="type", type=str, location=OpenApiParameter.QUERY, description="Crime category."),
        ],
        responses={
            200: OpenApiResponse(response=CaseListSerializer(many=True), description="Filtered list of cases."),
        },
        tags=["Cases"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/cases/"""
        filter_serializer = CaseFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        cases = CaseQueryService.get_filtered_cases(request.user, filter_serializer.validated_data)
        serializer = CaseListSerializer(cases, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Report a new case",
        description=(
            "Create a case for the authenticated victim. The case starts in "
            "'submitted' with one timeline entry and a generated case number."
        ),
        request=CaseCreateSerializer,
        responses={
            201: OpenApiResponse(response=CaseDetailSerializer, description="Case created."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Only victims can report cases."),
            409: OpenApiResponse(description="No free case number could be allocated."),
        },
        tags=["Cases"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/cases/"""
        serializer = CaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseWorkflowService().create_case(request.user, serializer.validated_data)
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve case details",
        description="Return the case with its chronological timeline.",
        responses={
            200: OpenApiResponse(response=CaseDetailSerializer, description="Full case detail."),
            404: OpenApiResponse(description="Case not found or not visible."),
        },
        tags=["Cases"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        """GET /api/cases/{id}/"""
        case = CaseQueryService.get_case_detail(request.user, pk)
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_200_OK)

    # ── Lifecycle @actions ────────────────────────────────────────────

    @action(detail=True, methods=["post"], url_path="transition")
    @extend_schema(
        summary="Move case to a new status",
        description=(
            "Set the lifecycle status, append a timeline entry and notify the "
            "victim. Requires the police or admin role. A note is mandatory."
        ),
        request=CaseTransitionSerializer,
        responses={
            200: OpenApiResponse(response=CaseDetailSerializer, description="Status updated."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Role not permitted."),
            404: OpenApiResponse(description="Case not found."),
        },
        tags=["Cases – Lifecycle"],
    )
    def transition(self, request: Request, pk: int = None) -> Response:
        """POST /api/cases/{id}/transition/"""
        serializer = CaseTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseWorkflowService().transition(
            request.user,
            int(pk),
            serializer.validated_data["status"],
            serializer.validated_data["note"],
        )
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="escalate")
    @extend_schema(
        summary="Escalate case",
        description=(
            "Raise the case to high priority, append a 'Case Escalated' entry "
            "and notify the victim. Requires the admin role."
        ),
        request=None,
        responses={
            200: OpenApiResponse(response=CaseDetailSerializer, description="Case escalated."),
            403: OpenApiResponse(description="Role not permitted."),
            404: OpenApiResponse(description="Case not found."),
        },
        tags=["Cases – Lifecycle"],
    )
    def escalate(self, request: Request, pk: int = None) -> Response:
        """POST /api/cases/{id}/escalate/"""
        case = CaseWorkflowService().escalate(request.user, int(pk))
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="assign-officer")
    @extend_schema(
        summary="Assign investigating officer",
        description="Set or clear (null) the investigating officer. Requires police or admin.",
        request=AssignOfficerSerializer,
        responses={
            200: OpenApiResponse(response=CaseDetailSerializer, description="Officer assigned."),
            400: OpenApiResponse(description="Unknown or non-police officer."),
            403: OpenApiResponse(description="Role not permitted."),
            404: OpenApiResponse(description="Case not found."),
        },
        tags=["Cases – Assignment"],
    )
    def assign_officer(self, request: Request, pk: int = None) -> Response:
        """POST /api/cases/{id}/assign-officer/"""
        serializer = AssignOfficerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseWorkflowService().assign_officer(
            request.user, int(pk), serializer.validated_data["officer_id"],
        )
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="flag-overdue")
    @extend_schema(
        summary="Flag case as overdue",
        description=(
            "Mark an open case as stalled (label 'Overdue') or clear the flag. "
            "Requires the admin role."
        ),
        request=FlagOverdueSerializer,
        responses={
            200: OpenApiResponse(response=CaseDetailSerializer, description="Flag updated."),
            403: OpenApiResponse(description="Role not permitted."),
            404: OpenApiResponse(description="Case not found."),
        },
        tags=["Cases – Lifecycle"],
    )
    def flag_overdue(self, request: Request, pk: int = None) -> Response:
        """POST /api/cases/{id}/flag-overdue/"""
        serializer = FlagOverdueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseWorkflowService().flag_overdue(
            request.user, int(pk), serializer.validated_data["overdue"],
        )
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_200_OK)

    # ── Sub-resource @actions ─────────────────────────────────────────

    @action(detail=True, methods=["get"], url_path="timeline")
    @extend_schema(
        summary="Get case timeline",
        description="Return the case's timeline entries in chronological order.",
        responses={
            200: OpenApiResponse(response=CaseUpdateSerializer(many=True), description="Timeline."),
            404: OpenApiResponse(description="Case not found or not visible."),
        },
        tags=["Cases"],
    )
    def timeline(self, request: Request, pk: int = None) -> Response:
        """GET /api/cases/{id}/timeline/"""
        case = CaseQueryService.get_case_detail(request.user, pk)
        serializer = CaseUpdateSerializer(case.updates, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"], url_path="report")
    @extend_schema(
        summary="Download case report",
        description="Plain-text report with the case summary and full timeline.",
        responses={
            (200, "text/plain"): OpenApiResponse(description="Report file."),
            404: OpenApiResponse(description="Case not found or not visible."),
        },
        tags=["Cases"],
    )
    def report(self, request: Request, pk: int = None) -> HttpResponse:
        """GET /api/cases/{id}/report/"""
        case = CaseQueryService.get_case_detail(request.user, pk)
        response = HttpResponse(
            CaseReportRenderer.render(case),
            content_type="text/plain; charset=utf-8",
        )
        response["Content-Disposition"] = (
            f'attachment; filename="{CaseReportRenderer.filename(case)}"'
        )
        logger.info("Report for case %s downloaded by user=%s", case.case_number, request.user.pk)
        return response
