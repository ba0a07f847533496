from django.contrib import admin

from cm_core.clients.models import Affiliate, Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("name", "org_id", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)
    ordering = ("name",)


@admin.register(Affiliate)
class AffiliateAdmin(admin.ModelAdmin):
    list_display = ("last_name", "first_name", "client", "primary_affiliate", "user", "is_active")
    list_filter = ("is_active", "relationship")
    search_fields = ("first_name", "last_name", "document_number")
    raw_id_fields = ("client", "primary_affiliate", "user")
