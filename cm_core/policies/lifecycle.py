# cm_core/policies/lifecycle.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from cm_core.lifecycle.definitions import Lifecycle, TransitionEdge, register
from cm_core.policies.constants import CORE_FIELDS, FINANCIAL_FIELDS, PolicyStatus as S

_IN_FORCE_REQUIRED = (
    "client_id",
    "insurer_id",
    "policy_number",
    "start_date",
    "end_date",
    "plan_name",
    "employee_class",
    "max_coverage",
    "deductible",
)


def cancellation_stamp(to_status: str, reason: Optional[str], at: datetime) -> dict:
    """
    Entering CANCELLED stamps the cancellation fields, any other target clears them.
    """
    if to_status == S.CANCELLED:
        return {"cancelled_at": at, "cancellation_reason": reason}
    return {"cancelled_at": None, "cancellation_reason": None}


POLICY_LIFECYCLE = register(
    Lifecycle(
        kind="policy",
        initial_status=S.PENDING.value,
        statuses=tuple(s.value for s in S),
        edges=(
            TransitionEdge(S.PENDING.value, S.ACTIVE.value),
            TransitionEdge(S.PENDING.value, S.CANCELLED.value, reason_required=True),
            TransitionEdge(S.ACTIVE.value, S.SUSPENDED.value, reason_required=True),
            TransitionEdge(S.ACTIVE.value, S.EXPIRED.value),
            TransitionEdge(S.ACTIVE.value, S.CANCELLED.value, reason_required=True),
            TransitionEdge(S.SUSPENDED.value, S.ACTIVE.value, reason_required=True),
            TransitionEdge(S.SUSPENDED.value, S.EXPIRED.value),
            TransitionEdge(S.SUSPENDED.value, S.CANCELLED.value, reason_required=True),
        ),
        editable={
            S.PENDING.value: frozenset(CORE_FIELDS + FINANCIAL_FIELDS),
            S.ACTIVE.value: frozenset(("end_date",) + FINANCIAL_FIELDS),
            S.SUSPENDED.value: frozenset(("end_date",) + FINANCIAL_FIELDS),
        },
        invariants={
            S.ACTIVE.value: _IN_FORCE_REQUIRED,
            S.SUSPENDED.value: _IN_FORCE_REQUIRED,
            S.EXPIRED.value: _IN_FORCE_REQUIRED,
        },
        side_effect=cancellation_stamp,
    )
)
