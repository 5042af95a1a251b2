"""
Core app URL configuration.

Provides cross-app aggregation endpoints that serve the frontend
dashboards, system-wide constants/enums, and the notification inbox.

URL prefix (registered in ``casetrack/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET  /api/core/dashboard/                     — Role-aware dashboard statistics.
GET  /api/core/constants/                     — Status table and choice enumerations.
GET  /api/core/notifications/                 — List notifications for the authenticated user.
GET  /api/core/notifications/unread-count/    — Unread notification count.
POST /api/core/notifications/{id}/read/       — Mark a single notification as read.
POST /api/core/notifications/read-all/        — Mark every notification as read.
POST /api/core/notifications/broadcast/       — Admin notice to all victims.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "core"

# ── Router for ViewSet-based endpoints ───────────────────────────────
router = DefaultRouter()
router.register(
    prefix=r"notifications",
    viewset=views.NotificationViewSet,
    basename="notification",
)

urlpatterns = [
    # ── Dashboard ────────────────────────────────────────────────────
    path(
        "dashboard/",
        views.DashboardStatsView.as_view(),
        name="dashboard-stats",
    ),

    # ── System Constants / Enums ─────────────────────────────────────
    path(
        "constants/",
        views.SystemConstantsView.as_view(),
        name="system-constants",
    ),

    # ── Notifications (router-generated URLs) ────────────────────────
    path("", include(router.urls)),
]
