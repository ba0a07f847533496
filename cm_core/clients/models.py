# cm_core/clients/models.py
from django.conf import settings
from django.db import models

from cm_core.common.models import OrgScopedModel


class Client(OrgScopedModel):
    """
    Corporate customer whose employees (affiliates) are covered by policies.
    """
    name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "clients_client"
        indexes = [
            models.Index(fields=["org_id", "is_active"], name="client_org_active_idx"),
            models.Index(fields=["org_id", "name"], name="client_org_name_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class Affiliate(OrgScopedModel):
    """
    Insured person under a client.

    A main affiliate (subscriber) has primary_affiliate=None.
    Dependents point at their subscriber through primary_affiliate.
    `user` links the affiliate to a login, which drives the "own" scope.
    """
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name="affiliates")

    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)
    document_type = models.CharField(max_length=16, blank=True, default="")
    document_number = models.CharField(max_length=64, blank=True, default="")
    relationship = models.CharField(max_length=32, blank=True, default="")

    primary_affiliate = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="dependents",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="linked_affiliates",
    )

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "clients_affiliate"
        indexes = [
            models.Index(fields=["org_id", "client", "is_active"], name="affiliate_org_client_idx"),
            models.Index(fields=["org_id", "user"], name="affiliate_org_user_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return self.full_name
