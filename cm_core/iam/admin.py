# cm_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from cm_core.iam.models import OrgMembership, UserClient


@admin.register(OrgMembership)
class OrgMembershipAdmin(admin.ModelAdmin):
    list_display = ("organization", "user", "role", "is_active", "created_at")
    list_filter = ("organization", "role", "is_active")
    search_fields = ("organization__name", "organization__slug", "user__username", "user__email")
    raw_id_fields = ("organization", "user")
    ordering = ("-created_at",)


@admin.register(UserClient)
class UserClientAdmin(admin.ModelAdmin):
    list_display = ("user", "client", "created_at")
    search_fields = ("user__username", "client__name")
    raw_id_fields = ("user", "client")
