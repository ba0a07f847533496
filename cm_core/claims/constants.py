# cm_core/claims/constants.py
from django.db import models


class ClaimStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    IN_REVIEW = "IN_REVIEW", "In review"
    SUBMITTED = "SUBMITTED", "Submitted"
    PENDING_INFO = "PENDING_INFO", "Pending info"
    RETURNED = "RETURNED", "Returned"
    CANCELLED = "CANCELLED", "Cancelled"
    SETTLED = "SETTLED", "Settled"


class CareType(models.TextChoices):
    AMBULATORY = "AMBULATORY", "Ambulatory"
    HOSPITALARY = "HOSPITALARY", "Hospitalary"
    OTHER = "OTHER", "Other"


# Field tiers, unlocked progressively by status
CORE_FIELDS = ("policy_id", "care_type", "diagnosis", "incident_date", "description")
SUBMISSION_FIELDS = ("amount_submitted", "submitted_date")
SETTLEMENT_FIELDS = (
    "amount_approved",
    "amount_denied",
    "amount_unprocessed",
    "deductible_applied",
    "copay_applied",
    "settlement_date",
    "settlement_number",
    "settlement_notes",
    "business_days",
)

EDITABLE_FIELDS = CORE_FIELDS + SUBMISSION_FIELDS + SETTLEMENT_FIELDS

TIMELINE_ACTIONS = (
    "claim.created",
    "claim.updated",
    "claim.transitioned",
    "claim.deleted",
    "claim.invoice_created",
    "claim.invoice_updated",
    "claim.invoice_deleted",
)

SORTABLE_FIELDS = ("created_at", "claim_number", "updated_at")
