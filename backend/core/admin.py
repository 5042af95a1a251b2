from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("recipient", "case_number", "message", "kind",
                    "priority", "is_read", "created_at")
    list_filter = ("kind", "priority", "is_read")
    search_fields = ("case_number", "message", "recipient__username")
