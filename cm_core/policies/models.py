# cm_core/policies/models.py
import uuid

from django.conf import settings
from django.db import models

from cm_core.clients.models import Client
from cm_core.common.models import ImmutableRowMixin, OrgScopedModel
from cm_core.insurers.models import Insurer
from cm_core.policies.constants import PolicyStatus, PolicyType


def _money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, **kwargs)


class Policy(OrgScopedModel):
    """
    Insurance policy contracted by a client with an insurer.
    policy_number is unique per insurer.
    """
    policy_number = models.CharField(max_length=64)
    status = models.CharField(max_length=16, choices=PolicyStatus.choices, default=PolicyStatus.PENDING, db_index=True)
    type = models.CharField(max_length=16, choices=PolicyType.choices, null=True, blank=True)

    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name="policies")
    insurer = models.ForeignKey(Insurer, on_delete=models.PROTECT, related_name="policies")

    plan_name = models.CharField(max_length=255, null=True, blank=True)
    employee_class = models.CharField(max_length=255, null=True, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()

    # financial
    ambulatory_coinsurance_pct = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    hospitalary_coinsurance_pct = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    maternity_cost = _money()
    t_premium = _money()
    tplus1_premium = _money()
    tplusf_premium = _money()
    benefits_cost_per_person = _money()
    max_coverage = _money()
    deductible = _money()

    # set only while CANCELLED
    cancellation_reason = models.TextField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="policies_created",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="policies_updated",
    )

    class Meta:
        db_table = "policies_policy"
        constraints = [
            models.UniqueConstraint(fields=["insurer", "policy_number"], name="uq_policy_insurer_number"),
        ]
        indexes = [
            models.Index(fields=["org_id", "status"], name="policy_org_status_idx"),
            models.Index(fields=["org_id", "client", "start_date"], name="policy_org_client_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.policy_number} ({self.status})"


class PolicyHistory(ImmutableRowMixin, models.Model):
    immutable_label = "PolicyHistory"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    policy = models.ForeignKey(Policy, on_delete=models.CASCADE, related_name="history")
    from_status = models.CharField(max_length=16, choices=PolicyStatus.choices, null=True, blank=True)
    to_status = models.CharField(max_length=16, choices=PolicyStatus.choices)
    reason = models.TextField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "policies_policy_history"
        indexes = [
            models.Index(fields=["policy", "created_at"], name="policy_history_idx"),
        ]
