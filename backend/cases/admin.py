from django.contrib import admin

from .models import Case, CaseUpdate


class CaseUpdateInline(admin.TabularInline):
    model = CaseUpdate
    extra = 0
    can_delete = False
    readonly_fields = ("date", "title", "description", "stage",
                       "created_by", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    list_display = ("case_number", "type", "status", "priority",
                    "is_overdue", "station_name", "submitted_date")
    list_filter = ("status", "priority", "is_overdue", "type", "province")
    search_fields = ("case_number", "type", "description")
    readonly_fields = ("case_number", "type", "status", "priority",
                       "last_update", "created_at", "updated_at")
    inlines = [CaseUpdateInline]


@admin.register(CaseUpdate)
class CaseUpdateAdmin(admin.ModelAdmin):
    list_display = ("case", "title", "stage", "date", "created_by")
    list_filter = ("stage",)
    search_fields = ("case__case_number", "title")
