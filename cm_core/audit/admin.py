# cm_core/audit/admin.py
from django.contrib import admin

from cm_core.audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action", "resource", "resource_id", "org_id", "user", "created_at")
    list_filter = ("action", "resource")
    search_fields = ("action", "resource", "resource_id")
    ordering = ("-created_at",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
