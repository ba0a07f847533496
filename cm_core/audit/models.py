# cm_core/audit/models.py
import uuid

from django.conf import settings
from django.db import models

from cm_core.common.models import ImmutableRowMixin


class AuditLog(ImmutableRowMixin, models.Model):
    """
    Immutable audit record, one per mutating action.
    Also the source of the curated per-record timeline.
    """
    immutable_label = "AuditLog"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    org_id = models.UUIDField(db_index=True)

    # null for system actions
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="audit_logs",
        null=True,
        blank=True,
    )

    action = models.CharField(max_length=128, db_index=True)  # e.g. "claim.transitioned"
    resource = models.CharField(max_length=64)  # e.g. "claim"
    resource_id = models.UUIDField(db_index=True)

    metadata = models.JSONField(default=dict, blank=True)

    ip_address = models.CharField(max_length=64, blank=True, default="")
    user_agent = models.CharField(max_length=512, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "audit_audit_log"
        indexes = [
            models.Index(fields=["org_id", "resource", "resource_id", "created_at"], name="audit_resource_idx"),
            models.Index(fields=["org_id", "action"], name="audit_org_action_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.resource}:{self.resource_id}"
