"""
Cases app URL configuration.

All routes are registered under the ``/api/cases/`` prefix.

Route Hierarchy
---------------
  /api/cases/                              → list / create
  /api/cases/{id}/                         → retrieve

  ── Lifecycle @actions ──────────────────────────────────────────
  POST /api/cases/{id}/transition/         → police/admin move status
  POST /api/cases/{id}/escalate/           → admin escalates
  POST /api/cases/{id}/flag-overdue/       → admin marks stalled

  ── Assignment @actions ─────────────────────────────────────────
  POST /api/cases/{id}/assign-officer/

  ── Sub-resource @actions ───────────────────────────────────────
  GET  /api/cases/{id}/timeline/
  GET  /api/cases/{id}/report/             → text/plain download
"""

from rest_framework.routers import DefaultRouter

from .views import CaseViewSet

router = DefaultRouter()
router.register(
    prefix=r"cases",
    viewset=CaseViewSet,
    basename="case",
)

urlpatterns = router.urls
