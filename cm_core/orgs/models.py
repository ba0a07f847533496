# cm_core/orgs/models.py
import uuid

from django.db import models


class Organization(models.Model):
    """
    Top-level partition.
    Every business row carries the org_id of exactly one Organization.
    NOT an OrgScopedModel (it *is* the org).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=64, unique=True)

    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orgs_organization"

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"
