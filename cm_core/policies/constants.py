# cm_core/policies/constants.py
from django.db import models


class PolicyStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    ACTIVE = "ACTIVE", "Active"
    SUSPENDED = "SUSPENDED", "Suspended"
    EXPIRED = "EXPIRED", "Expired"
    CANCELLED = "CANCELLED", "Cancelled"


class PolicyType(models.TextChoices):
    HEALTH = "HEALTH", "Health"
    LIFE = "LIFE", "Life"
    ACCIDENTS = "ACCIDENTS", "Accidents"


CORE_FIELDS = (
    "client_id",
    "insurer_id",
    "policy_number",
    "type",
    "plan_name",
    "employee_class",
    "start_date",
    "end_date",
)
FINANCIAL_FIELDS = (
    "ambulatory_coinsurance_pct",
    "hospitalary_coinsurance_pct",
    "maternity_cost",
    "t_premium",
    "tplus1_premium",
    "tplusf_premium",
    "benefits_cost_per_person",
    "max_coverage",
    "deductible",
)

EDITABLE_FIELDS = CORE_FIELDS + FINANCIAL_FIELDS

TIMELINE_ACTIONS = (
    "policy.created",
    "policy.updated",
    "policy.transitioned",
    "policy.deleted",
)

SORTABLE_FIELDS = ("created_at", "policy_number", "updated_at")
