# cm_core/claims/lifecycle.py
from cm_core.claims.constants import CORE_FIELDS, SETTLEMENT_FIELDS, SUBMISSION_FIELDS, ClaimStatus as S
from cm_core.lifecycle.definitions import Lifecycle, TransitionEdge, register

_IN_REVIEW_REQUIRED = ("policy_id", "care_type", "diagnosis", "incident_date")
_SUBMITTED_REQUIRED = _IN_REVIEW_REQUIRED + ("amount_submitted", "submitted_date")
_SETTLED_REQUIRED = _SUBMITTED_REQUIRED + ("amount_approved", "amount_denied", "settlement_date", "settlement_number")

CLAIM_LIFECYCLE = register(
    Lifecycle(
        kind="claim",
        initial_status=S.DRAFT.value,
        statuses=tuple(s.value for s in S),
        edges=(
            TransitionEdge(S.DRAFT.value, S.IN_REVIEW.value),
            TransitionEdge(S.DRAFT.value, S.RETURNED.value, reason_required=True),
            TransitionEdge(S.DRAFT.value, S.CANCELLED.value, reason_required=True),
            TransitionEdge(S.IN_REVIEW.value, S.SUBMITTED.value),
            TransitionEdge(S.IN_REVIEW.value, S.RETURNED.value, reason_required=True),
            TransitionEdge(S.IN_REVIEW.value, S.CANCELLED.value, reason_required=True),
            TransitionEdge(S.SUBMITTED.value, S.PENDING_INFO.value, reason_required=True),
            TransitionEdge(S.SUBMITTED.value, S.SETTLED.value),
            TransitionEdge(S.PENDING_INFO.value, S.SUBMITTED.value),
        ),
        editable={
            S.DRAFT.value: frozenset(CORE_FIELDS),
            S.IN_REVIEW.value: frozenset(CORE_FIELDS + SUBMISSION_FIELDS),
            S.SUBMITTED.value: frozenset(SUBMISSION_FIELDS + SETTLEMENT_FIELDS),
            S.PENDING_INFO.value: frozenset(CORE_FIELDS + SUBMISSION_FIELDS + SETTLEMENT_FIELDS),
        },
        invariants={
            S.IN_REVIEW.value: _IN_REVIEW_REQUIRED,
            S.SUBMITTED.value: _SUBMITTED_REQUIRED,
            S.PENDING_INFO.value: _SUBMITTED_REQUIRED,
            S.SETTLED.value: _SETTLED_REQUIRED,
        },
    )
)
