# cm_core/claims/admin.py
from django.contrib import admin

from cm_core.claims.models import Claim, ClaimHistory, ClaimInvoice


@admin.register(Claim)
class ClaimAdmin(admin.ModelAdmin):
    list_display = ("claim_number", "status", "client", "affiliate", "org_id", "created_at")
    list_filter = ("status", "care_type")
    search_fields = ("claim_number", "client__name", "affiliate__last_name")
    ordering = ("-created_at",)
    raw_id_fields = ("client", "affiliate", "patient", "policy")
    # status moves only through the transition endpoint
    readonly_fields = ("status",)


@admin.register(ClaimHistory)
class ClaimHistoryAdmin(admin.ModelAdmin):
    list_display = ("claim", "from_status", "to_status", "created_by", "created_at")
    list_filter = ("to_status",)
    ordering = ("-created_at",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ClaimInvoice)
class ClaimInvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "provider_name", "amount_submitted", "claim", "created_at")
    search_fields = ("invoice_number", "provider_name")
    raw_id_fields = ("claim",)
