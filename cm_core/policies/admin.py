# cm_core/policies/admin.py
from django.contrib import admin

from cm_core.policies.models import Policy, PolicyHistory


@admin.register(Policy)
class PolicyAdmin(admin.ModelAdmin):
    list_display = ("policy_number", "status", "client", "insurer", "start_date", "end_date")
    list_filter = ("status", "type")
    search_fields = ("policy_number", "client__name", "insurer__name")
    ordering = ("-created_at",)
    raw_id_fields = ("client", "insurer")
    readonly_fields = ("status", "cancellation_reason", "cancelled_at")


@admin.register(PolicyHistory)
class PolicyHistoryAdmin(admin.ModelAdmin):
    list_display = ("policy", "from_status", "to_status", "created_by", "created_at")
    list_filter = ("to_status",)
    ordering = ("-created_at",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
