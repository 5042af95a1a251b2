"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Extracting and validating input from the request.
2. Calling the service with the authenticated user and parameters.
3. Serialising the result and returning an HTTP ``Response``.

No model imports, no aggregation logic, no cross-app queries.
"""

from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    OpenApiResponse,
    extend_schema,
)

from .serializers import (
    BroadcastNoticeSerializer,
    DashboardStatsSerializer,
    MarkAllReadResponseSerializer,
    NotificationSerializer,
    SystemConstantsSerializer,
    UnreadCountSerializer,
)
from .services import (
    DashboardAggregationService,
    NotificationService,
    SystemConstantsService,
)


class DashboardStatsView(APIView):
    """
    **GET /api/core/dashboard/**

    Return aggregated dashboard statistics for the authenticated user.

    The response payload is **role-aware** — police officers and
    administrators see portal-wide metrics with per-type and per-station
    breakdowns, while a victim sees only the stats of their own cases.
    See ``DashboardAggregationService`` for the full scoping logic.

    **Authentication**: Required (``IsAuthenticated``).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Dashboard statistics",
        description=(
            "Return role-aware case statistics: victims see their own cases, "
            "police and administrators see every case."
        ),
        responses={200: OpenApiResponse(response=DashboardStatsSerializer, description="Dashboard stats.")},
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        service = DashboardAggregationService(user=request.user)
        data = service.get_stats()
        serializer = DashboardStatsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return the status table and all choice enumerations so the frontend
    can build dropdowns, filters and progress bars without hardcoding
    values.

    **Authentication**: Not required (``AllowAny``).
    These constants are public configuration data.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="System constants",
        description=(
            "Return the case status table (progress, label, timeline title), "
            "case types, priorities, provinces and roles."
        ),
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class NotificationViewSet(viewsets.ViewSet):
    """
    **Notification API** — inbox of the authenticated user.

    Endpoints
    ---------
    GET  /api/core/notifications/                → list, most recent first
    GET  /api/core/notifications/unread-count/   → unread badge count
    POST /api/core/notifications/{id}/read/      → mark one as read
    POST /api/core/notifications/read-all/       → mark all as read
    POST /api/core/notifications/broadcast/      → notice to all victims (admin)

    **Authentication**: Required (``IsAuthenticated``).
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List notifications",
        description="Return all notifications for the authenticated user, most recent first.",
        responses={200: OpenApiResponse(response=NotificationSerializer(many=True), description="Notification list.")},
        tags=["Notifications"],
    )
    def list(self, request: Request) -> Response:
        service = NotificationService(user=request.user)
        notifications = service.list_notifications()
        serializer = NotificationSerializer(notifications, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="read")
    @extend_schema(
        summary="Mark notification as read",
        description="Mark a single notification as read by ID. Repeating the call is harmless.",
        request=None,
        responses={
            200: OpenApiResponse(response=NotificationSerializer, description="Updated notification."),
            404: OpenApiResponse(description="Notification not found."),
        },
        tags=["Notifications"],
    )
    def mark_as_read(self, request: Request, pk: int = None) -> Response:
        """**POST /api/core/notifications/{id}/read/**"""
        service = NotificationService(user=request.user)
        notification = service.mark_as_read(notification_id=int(pk))
        serializer = NotificationSerializer(notification)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="read-all")
    @extend_schema(
        summary="Mark all notifications as read",
        request=None,
        responses={200: OpenApiResponse(response=MarkAllReadResponseSerializer, description="Number updated.")},
        tags=["Notifications"],
    )
    def mark_all_as_read(self, request: Request) -> Response:
        """**POST /api/core/notifications/read-all/**"""
        updated = NotificationService(user=request.user).mark_all_as_read()
        return Response({"updated": updated}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="unread-count")
    @extend_schema(
        summary="Unread notification count",
        responses={200: OpenApiResponse(response=UnreadCountSerializer, description="Unread count.")},
        tags=["Notifications"],
    )
    def unread_count(self, request: Request) -> Response:
        """**GET /api/core/notifications/unread-count/**"""
        unread = NotificationService(user=request.user).unread_count()
        return Response({"unread": unread}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="broadcast")
    @extend_schema(
        summary="Broadcast a notice to all victims",
        description="Send a general notice (not tied to a case) to every active victim. Admin only.",
        request=BroadcastNoticeSerializer,
        responses={
            201: OpenApiResponse(response=NotificationSerializer(many=True), description="Created notices."),
            403: OpenApiResponse(description="Role not permitted."),
        },
        tags=["Notifications"],
    )
    def broadcast(self, request: Request) -> Response:
        """**POST /api/core/notifications/broadcast/**"""
        serializer = BroadcastNoticeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        records = NotificationService(user=request.user).broadcast(**serializer.validated_data)
        return Response(
            NotificationSerializer(records, many=True).data,
            status=status.HTTP_201_CREATED,
        )
