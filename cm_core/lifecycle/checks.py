# cm_core/lifecycle/checks.py
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from cm_core.common.api.exceptions import BusinessRuleError
from cm_core.lifecycle.definitions import Lifecycle, TransitionEdge

FIELD_NOT_EDITABLE = "FIELD_NOT_EDITABLE"
INVALID_TRANSITION = "INVALID_TRANSITION"
REASON_REQUIRED = "REASON_REQUIRED"
INVARIANT_VIOLATION = "INVARIANT_VIOLATION"


def non_editable(lifecycle: Lifecycle, status: str, fields: Iterable[str]) -> List[str]:
    allowed = lifecycle.editable_fields(status)
    return [f for f in fields if f not in allowed]


def check_editable(lifecycle: Lifecycle, status: str, fields: Iterable[str]) -> None:
    """
    All-or-nothing: one disallowed field rejects the whole change set.
    """
    rejected = non_editable(lifecycle, status, fields)
    if rejected:
        raise BusinessRuleError(
            f"Fields not editable in {status} status: {', '.join(rejected)}",
            FIELD_NOT_EDITABLE,
        )


def check_transition(
    lifecycle: Lifecycle,
    from_status: str,
    to_status: str,
    reason: Optional[str],
) -> TransitionEdge:
    edge = lifecycle.edge(from_status, to_status)
    if edge is None:
        raise BusinessRuleError(f"Cannot transition from {from_status} to {to_status}", INVALID_TRANSITION)

    if edge.reason_required and not (reason or "").strip():
        raise BusinessRuleError("Reason is required for this transition", REASON_REQUIRED)

    return edge


def missing_fields(lifecycle: Lifecycle, to_status: str, values: Mapping[str, Any]) -> List[str]:
    return [f for f in lifecycle.required_fields(to_status) if values.get(f) is None]


def check_invariants(lifecycle: Lifecycle, to_status: str, values: Mapping[str, Any]) -> None:
    missing = missing_fields(lifecycle, to_status, values)
    if missing:
        raise BusinessRuleError(
            f"Missing required fields for {to_status} status: {', '.join(missing)}",
            INVARIANT_VIOLATION,
        )
