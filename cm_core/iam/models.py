# cm_core/iam/models.py
import uuid

from django.conf import settings
from django.db import models

from cm_core.clients.models import Client
from cm_core.iam.roles import Role
from cm_core.orgs.models import Organization


class OrgMembership(models.Model):
    """
    Assigns a user to an organization with a role.
    This is the RBAC entry point: role -> permissions -> scope.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(Organization, on_delete=models.PROTECT, related_name="memberships")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="org_memberships")

    role = models.CharField(max_length=16, choices=Role.choices, default=Role.MEMBER)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_org_membership"
        constraints = [
            models.UniqueConstraint(fields=["organization", "user"], name="uq_org_user_membership"),
        ]
        indexes = [
            models.Index(fields=["user", "is_active"], name="membership_user_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.organization_id} ({self.role})"


class UserClient(models.Model):
    """
    Client assignment: which clients a client-scoped user may act on.
    Read-only input to the scope authorizer.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="client_assignments")
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name="user_assignments")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "iam_user_client"
        constraints = [
            models.UniqueConstraint(fields=["user", "client"], name="uq_user_client"),
        ]
