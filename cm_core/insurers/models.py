# cm_core/insurers/models.py
from django.db import models

from cm_core.common.models import OrgScopedModel


class Insurer(OrgScopedModel):
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=32, blank=True, default="")
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "insurers_insurer"
        indexes = [
            models.Index(fields=["org_id", "is_active"], name="insurer_org_active_idx"),
        ]

    def __str__(self) -> str:
        return self.name
