from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "full_name", "email", "phone_number",
                    "role", "anonymous", "is_active")
    search_fields = ("username", "full_name", "email", "national_id", "phone_number")
    list_filter = ("role", "is_active", "anonymous")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("CaseTrack", {"fields": ("full_name", "national_id", "phone_number",
                                  "role", "anonymous")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("CaseTrack", {"fields": ("full_name", "email", "national_id",
                                  "phone_number", "role")}),
    )
