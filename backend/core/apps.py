from django.apps import AppConfig

from core.domain.change_feed import ChangeFeed


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Core"

    def __init__(self, app_name, app_module):
        super().__init__(app_name, app_module)
        # Published whenever a notification is stored or read.
        self.notification_feed = ChangeFeed("notifications")

    def ready(self):
        from core.services import DashboardAggregationService

        self.notification_feed.subscribe(DashboardAggregationService.invalidate)
