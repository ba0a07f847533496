import itertools
from datetime import datetime, timezone

import pytest

from cm_core.claims.constants import ClaimStatus
from cm_core.claims.lifecycle import CLAIM_LIFECYCLE
from cm_core.common.api.exceptions import BusinessRuleError, InternalError
from cm_core.lifecycle import definitions
from cm_core.lifecycle.checks import (
    FIELD_NOT_EDITABLE,
    INVALID_TRANSITION,
    INVARIANT_VIOLATION,
    REASON_REQUIRED,
    check_editable,
    check_invariants,
    check_transition,
)
from cm_core.lifecycle.definitions import Lifecycle, TransitionEdge
from cm_core.policies.constants import PolicyStatus
from cm_core.policies.lifecycle import POLICY_LIFECYCLE

C = ClaimStatus
P = PolicyStatus

CLAIM_EDGES = {
    (C.DRAFT, C.IN_REVIEW): False,
    (C.DRAFT, C.RETURNED): True,
    (C.DRAFT, C.CANCELLED): True,
    (C.IN_REVIEW, C.SUBMITTED): False,
    (C.IN_REVIEW, C.RETURNED): True,
    (C.IN_REVIEW, C.CANCELLED): True,
    (C.SUBMITTED, C.PENDING_INFO): True,
    (C.SUBMITTED, C.SETTLED): False,
    (C.PENDING_INFO, C.SUBMITTED): False,
}

POLICY_EDGES = {
    (P.PENDING, P.ACTIVE): False,
    (P.PENDING, P.CANCELLED): True,
    (P.ACTIVE, P.SUSPENDED): True,
    (P.ACTIVE, P.EXPIRED): False,
    (P.ACTIVE, P.CANCELLED): True,
    (P.SUSPENDED, P.ACTIVE): True,
    (P.SUSPENDED, P.EXPIRED): False,
    (P.SUSPENDED, P.CANCELLED): True,
}


@pytest.mark.parametrize(
    "lifecycle,choices,expected",
    [
        (CLAIM_LIFECYCLE, C, CLAIM_EDGES),
        (POLICY_LIFECYCLE, P, POLICY_EDGES),
    ],
    ids=["claim", "policy"],
)
def test_edge_table_matches_every_status_pair(lifecycle, choices, expected):
    for src, dst in itertools.product(choices, repeat=2):
        key = (src, dst)
        assert lifecycle.is_legal(src.value, dst.value) is (key in expected), key
        assert lifecycle.reason_required(src.value, dst.value) is expected.get(key, False), key


def test_terminal_statuses():
    assert CLAIM_LIFECYCLE.terminal_statuses == {"RETURNED", "CANCELLED", "SETTLED"}
    assert POLICY_LIFECYCLE.terminal_statuses == {"EXPIRED", "CANCELLED"}
    assert CLAIM_LIFECYCLE.initial_status == C.DRAFT
    assert POLICY_LIFECYCLE.initial_status == P.PENDING


def test_terminal_statuses_edit_nothing():
    for status in CLAIM_LIFECYCLE.terminal_statuses:
        assert CLAIM_LIFECYCLE.editable_fields(status) == frozenset()
    for status in POLICY_LIFECYCLE.terminal_statuses:
        assert POLICY_LIFECYCLE.editable_fields(status) == frozenset()


def test_claim_editable_tiers():
    assert "diagnosis" in CLAIM_LIFECYCLE.editable_fields(C.DRAFT)
    assert "amount_submitted" not in CLAIM_LIFECYCLE.editable_fields(C.DRAFT)
    assert "amount_submitted" in CLAIM_LIFECYCLE.editable_fields(C.IN_REVIEW)
    assert "amount_approved" not in CLAIM_LIFECYCLE.editable_fields(C.IN_REVIEW)
    assert "diagnosis" not in CLAIM_LIFECYCLE.editable_fields(C.SUBMITTED)
    assert "amount_approved" in CLAIM_LIFECYCLE.editable_fields(C.SUBMITTED)
    assert {"diagnosis", "amount_submitted", "amount_approved"} <= CLAIM_LIFECYCLE.editable_fields(C.PENDING_INFO)


def test_policy_editable_tiers():
    assert "policy_number" in POLICY_LIFECYCLE.editable_fields(P.PENDING)
    assert "policy_number" not in POLICY_LIFECYCLE.editable_fields(P.ACTIVE)
    assert "end_date" in POLICY_LIFECYCLE.editable_fields(P.ACTIVE)
    assert "deductible" in POLICY_LIFECYCLE.editable_fields(P.SUSPENDED)
    assert "start_date" not in POLICY_LIFECYCLE.editable_fields(P.SUSPENDED)


def test_claim_invariant_sets_grow_with_the_lifecycle():
    in_review = set(CLAIM_LIFECYCLE.required_fields(C.IN_REVIEW))
    submitted = set(CLAIM_LIFECYCLE.required_fields(C.SUBMITTED))
    settled = set(CLAIM_LIFECYCLE.required_fields(C.SETTLED))

    assert in_review == {"policy_id", "care_type", "diagnosis", "incident_date"}
    assert submitted == in_review | {"amount_submitted", "submitted_date"}
    assert set(CLAIM_LIFECYCLE.required_fields(C.PENDING_INFO)) == submitted
    assert settled == submitted | {"amount_approved", "amount_denied", "settlement_date", "settlement_number"}
    assert CLAIM_LIFECYCLE.required_fields(C.CANCELLED) == ()


@pytest.mark.parametrize("status", [P.ACTIVE, P.SUSPENDED, P.EXPIRED])
def test_policy_in_force_invariants(status):
    assert set(POLICY_LIFECYCLE.required_fields(status)) == {
        "client_id",
        "insurer_id",
        "policy_number",
        "start_date",
        "end_date",
        "plan_name",
        "employee_class",
        "max_coverage",
        "deductible",
    }


@pytest.mark.parametrize("field", CLAIM_LIFECYCLE.required_fields(C.SETTLED))
def test_removing_any_required_field_names_it(field):
    values = {f: "x" for f in CLAIM_LIFECYCLE.required_fields(C.SETTLED)}
    check_invariants(CLAIM_LIFECYCLE, C.SETTLED, values)

    values[field] = None
    with pytest.raises(BusinessRuleError) as exc:
        check_invariants(CLAIM_LIFECYCLE, C.SETTLED, values)
    assert exc.value.error_code == INVARIANT_VIOLATION
    assert field in str(exc.value.detail)


def test_invariant_message_lists_every_missing_field():
    with pytest.raises(BusinessRuleError) as exc:
        check_invariants(CLAIM_LIFECYCLE, "IN_REVIEW", {"policy_id": "p"})
    assert str(exc.value.detail) == (
        "Missing required fields for IN_REVIEW status: care_type, diagnosis, incident_date"
    )


def test_check_editable_lists_every_rejected_field():
    with pytest.raises(BusinessRuleError) as exc:
        check_editable(CLAIM_LIFECYCLE, "DRAFT", ["diagnosis", "amount_submitted", "amount_approved"])
    assert exc.value.error_code == FIELD_NOT_EDITABLE
    assert str(exc.value.detail) == "Fields not editable in DRAFT status: amount_submitted, amount_approved"


def test_check_transition_codes():
    with pytest.raises(BusinessRuleError) as exc:
        check_transition(CLAIM_LIFECYCLE, "DRAFT", "SUBMITTED", None)
    assert exc.value.error_code == INVALID_TRANSITION
    assert str(exc.value.detail) == "Cannot transition from DRAFT to SUBMITTED"

    for blank in (None, "", "   "):
        with pytest.raises(BusinessRuleError) as exc:
            check_transition(CLAIM_LIFECYCLE, C.DRAFT, C.CANCELLED, blank)
        assert exc.value.error_code == REASON_REQUIRED

    edge = check_transition(CLAIM_LIFECYCLE, C.DRAFT, C.CANCELLED, "duplicate")
    assert edge.reason_required is True


def test_cancellation_side_effect_stamps_and_clears():
    at = datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert POLICY_LIFECYCLE.side_effect_fields(P.CANCELLED, "fraud", at) == {
        "cancelled_at": at,
        "cancellation_reason": "fraud",
    }
    assert POLICY_LIFECYCLE.side_effect_fields(P.ACTIVE, "back", at) == {
        "cancelled_at": None,
        "cancellation_reason": None,
    }
    assert CLAIM_LIFECYCLE.side_effect_fields(C.CANCELLED, "dup", at) == {}


def test_registry_lookups():
    assert definitions.get_lifecycle("claim") is CLAIM_LIFECYCLE
    assert definitions.is_legal("policy", P.PENDING, P.ACTIVE)
    assert definitions.reason_required("policy", P.ACTIVE, P.CANCELLED)
    assert "end_date" in definitions.editable_fields("policy", P.ACTIVE)
    assert "diagnosis" in definitions.required_fields("claim", C.IN_REVIEW)

    with pytest.raises(InternalError):
        definitions.get_lifecycle("invoice")


@pytest.mark.parametrize(
    "edges",
    [
        (TransitionEdge("A", "Z"),),
        (TransitionEdge("A", "A"),),
        (TransitionEdge("A", "B"), TransitionEdge("A", "B", reason_required=True)),
    ],
    ids=["unknown-status", "self-edge", "duplicate"],
)
def test_malformed_tables_are_rejected(edges):
    with pytest.raises(ValueError):
        Lifecycle(kind="t", initial_status="A", statuses=("A", "B"), edges=edges, editable={})
