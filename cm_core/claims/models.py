# cm_core/claims/models.py
import uuid

from django.conf import settings
from django.db import models

from cm_core.claims.constants import CareType, ClaimStatus
from cm_core.clients.models import Affiliate, Client
from cm_core.common.models import ImmutableRowMixin, OrgScopedModel
from cm_core.policies.models import Policy


class Claim(OrgScopedModel):
    """
    Reimbursement request for care received by a patient
    (the subscriber affiliate or one of their dependents).

    `status` only changes through a recorded transition.
    """
    claim_number = models.PositiveIntegerField()
    status = models.CharField(max_length=16, choices=ClaimStatus.choices, default=ClaimStatus.DRAFT, db_index=True)

    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name="claims")
    affiliate = models.ForeignKey(Affiliate, on_delete=models.PROTECT, related_name="claims")
    patient = models.ForeignKey(Affiliate, on_delete=models.PROTECT, related_name="patient_claims")
    policy = models.ForeignKey(Policy, on_delete=models.SET_NULL, null=True, blank=True, related_name="claims")

    # core
    care_type = models.CharField(max_length=16, choices=CareType.choices, null=True, blank=True)
    diagnosis = models.TextField(null=True, blank=True)
    incident_date = models.DateField(null=True, blank=True)
    description = models.TextField()

    # submission
    amount_submitted = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    submitted_date = models.DateField(null=True, blank=True)

    # settlement
    amount_approved = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    amount_denied = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    amount_unprocessed = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    deductible_applied = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    copay_applied = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    settlement_date = models.DateField(null=True, blank=True)
    settlement_number = models.CharField(max_length=64, null=True, blank=True)
    settlement_notes = models.TextField(null=True, blank=True)
    business_days = models.PositiveIntegerField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="claims_created",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="claims_updated",
    )

    class Meta:
        db_table = "claims_claim"
        constraints = [
            models.UniqueConstraint(fields=["org_id", "claim_number"], name="uq_claim_org_number"),
        ]
        indexes = [
            models.Index(fields=["org_id", "status"], name="claim_org_status_idx"),
            models.Index(fields=["org_id", "client"], name="claim_org_client_idx"),
            models.Index(fields=["org_id", "created_at"], name="claim_org_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Claim #{self.claim_number} ({self.status})"


class ClaimHistory(ImmutableRowMixin, models.Model):
    """
    One row per status change, including the initial null -> DRAFT.
    """
    immutable_label = "ClaimHistory"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    claim = models.ForeignKey(Claim, on_delete=models.CASCADE, related_name="history")
    from_status = models.CharField(max_length=16, choices=ClaimStatus.choices, null=True, blank=True)
    to_status = models.CharField(max_length=16, choices=ClaimStatus.choices)
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
        db_table = "claims_claim_history"
        indexes = [
            models.Index(fields=["claim", "created_at"], name="claim_history_idx"),
        ]


class ClaimInvoice(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    claim = models.ForeignKey(Claim, on_delete=models.CASCADE, related_name="invoices")
    invoice_number = models.CharField(max_length=64)
    provider_name = models.CharField(max_length=255)
    amount_submitted = models.DecimalField(max_digits=12, decimal_places=2)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "claims_claim_invoice"
        indexes = [
            models.Index(fields=["claim", "created_at"], name="claim_invoice_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.provider_name})"
