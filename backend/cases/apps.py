from django.apps import AppConfig

from core.domain.change_feed import ChangeFeed


class CasesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cases"
    verbose_name = "Cases"

    def __init__(self, app_name, app_module):
        super().__init__(app_name, app_module)
        # Published after every case creation or mutation.
        self.change_feed = ChangeFeed("cases")

    def ready(self):
        from core.services import DashboardAggregationService

        self.change_feed.subscribe(DashboardAggregationService.invalidate)
