import pytest

from cm_core.audit.models import AuditLog
from cm_core.claims.models import Claim, ClaimHistory
from cm_core.policies.models import Policy

pytestmark = pytest.mark.django_db


def _url(claim_id=None, suffix=""):
    if claim_id is None:
        return "/api/v1/claims/"
    return f"/api/v1/claims/{claim_id}/{suffix}"


def _transition(api, claim_id, status, **extra):
    return api.post(_url(claim_id, "transition/"), {"status": status, **extra}, format="json")


def _code(res):
    return res.json()["error"]["code"]


def test_draft_to_cancelled_walkthrough(owner_api, client_co, subscriber, dependent, policy):
    res = owner_api.post(
        _url(),
        {
            "client_id": str(client_co.id),
            "affiliate_id": str(subscriber.id),
            "patient_id": str(dependent.id),
            "description": "Emergency room visit",
        },
        format="json",
    )
    assert res.status_code == 201
    body = res.json()
    claim_id = body["id"]
    assert body["status"] == "DRAFT"
    assert body["client_name"] == "Acme Corp"
    assert body["patient_name"] == "Luis Lopez"
    assert body["policy_number"] is None
    assert ClaimHistory.objects.filter(claim_id=claim_id).count() == 1

    # DRAFT -> SUBMITTED is not an edge
    res = _transition(owner_api, claim_id, "SUBMITTED")
    assert res.status_code == 422
    assert _code(res) == "INVALID_TRANSITION"

    res = owner_api.patch(
        _url(claim_id),
        {
            "policy_id": str(policy.id),
            "care_type": "AMBULATORY",
            "diagnosis": "Sprained ankle",
            "incident_date": "2026-02-10",
        },
        format="json",
    )
    assert res.status_code == 200
    assert res.json()["policy_number"] == "POL-001"

    res = _transition(owner_api, claim_id, "IN_REVIEW")
    assert res.status_code == 200
    assert res.json()["status"] == "IN_REVIEW"

    res = _transition(owner_api, claim_id, "CANCELLED")
    assert res.status_code == 422
    assert _code(res) == "REASON_REQUIRED"

    res = _transition(owner_api, claim_id, "CANCELLED", reason="duplicate")
    assert res.status_code == 200
    assert res.json()["status"] == "CANCELLED"
    assert ClaimHistory.objects.get(claim_id=claim_id, to_status="CANCELLED").reason == "duplicate"

    # terminal
    for target in ("DRAFT", "IN_REVIEW", "SETTLED"):
        res = _transition(owner_api, claim_id, target, reason="again")
        assert res.status_code == 422
        assert _code(res) == "INVALID_TRANSITION"

    assert ClaimHistory.objects.filter(claim_id=claim_id).count() == 3
    assert list(
        AuditLog.objects.filter(resource_id=claim_id).order_by("action").values_list("action", flat=True)
    ) == ["claim.created", "claim.transitioned", "claim.transitioned", "claim.updated"]


def test_full_settlement_path(owner_api, claim, core_values):
    Claim.objects.filter(id=claim.id).update(**core_values)

    assert _transition(owner_api, claim.id, "IN_REVIEW").status_code == 200

    res = _transition(owner_api, claim.id, "SUBMITTED")
    assert res.status_code == 422
    assert res.json()["error"]["message"] == (
        "Missing required fields for SUBMITTED status: amount_submitted, submitted_date"
    )

    res = owner_api.patch(
        _url(claim.id), {"amount_submitted": "1200.50", "submitted_date": "2026-02-15"}, format="json"
    )
    assert res.status_code == 200
    assert res.json()["amount_submitted"] == "1200.50"

    assert _transition(owner_api, claim.id, "SUBMITTED").status_code == 200
    assert _transition(owner_api, claim.id, "PENDING_INFO", reason="Need receipts").status_code == 200
    assert _transition(owner_api, claim.id, "SUBMITTED").status_code == 200

    # core fields are frozen once submitted
    res = owner_api.patch(_url(claim.id), {"diagnosis": "Fracture"}, format="json")
    assert res.status_code == 422
    assert res.json()["error"]["message"] == "Fields not editable in SUBMITTED status: diagnosis"

    res = owner_api.patch(
        _url(claim.id),
        {
            "amount_approved": "1000.00",
            "amount_denied": "200.50",
            "settlement_date": "2026-03-01",
            "settlement_number": "STL-9",
            "business_days": 10,
        },
        format="json",
    )
    assert res.status_code == 200

    res = _transition(owner_api, claim.id, "SETTLED", notes="paid")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "SETTLED"
    assert body["amount_denied"] == "200.50"
    assert body["settlement_date"] == "2026-03-01"

    assert list(
        ClaimHistory.objects.filter(claim=claim).order_by("created_at").values_list("to_status", flat=True)
    ) == ["DRAFT", "IN_REVIEW", "SUBMITTED", "PENDING_INFO", "SUBMITTED", "SETTLED"]


def test_non_editable_field_rejects_the_whole_patch(owner_api, claim):
    res = owner_api.patch(
        _url(claim.id),
        {"diagnosis": "Flu", "amount_submitted": "10.00", "settlement_number": "X"},
        format="json",
    )
    assert res.status_code == 422
    assert _code(res) == "FIELD_NOT_EDITABLE"
    assert res.json()["error"]["message"] == (
        "Fields not editable in DRAFT status: amount_submitted, settlement_number"
    )

    detail = owner_api.get(_url(claim.id)).json()
    assert detail["diagnosis"] is None


def test_status_is_not_patchable(owner_api, claim):
    res = owner_api.patch(_url(claim.id), {"status": "SETTLED"}, format="json")
    assert res.status_code == 400
    assert _code(res) == "VALIDATION_ERROR"


def test_policy_link_rules(owner_api, claim, org, other_client, insurer, policy):
    foreign = Policy.objects.create(
        org_id=org.id,
        client=other_client,
        insurer=insurer,
        policy_number="POL-GLX",
        start_date="2026-01-01",
        end_date="2026-12-31",
    )

    res = owner_api.patch(_url(claim.id), {"policy_id": str(foreign.id)}, format="json")
    assert res.status_code == 422
    assert _code(res) == "POLICY_CLIENT_MISMATCH"

    res = owner_api.patch(_url(claim.id), {"policy_id": "00000000-0000-0000-0000-000000000000"}, format="json")
    assert res.status_code == 404
    assert _code(res) == "POLICY_NOT_FOUND"

    assert owner_api.patch(_url(claim.id), {"policy_id": str(policy.id)}, format="json").status_code == 200

    res = owner_api.patch(_url(claim.id), {"policy_id": None}, format="json")
    assert res.status_code == 200
    assert res.json()["policy_id"] is None


def test_delete_cascades_and_audits(owner_api, claim):
    owner_api.post(
        _url(claim.id, "invoices/"),
        {"invoice_number": "INV-1", "provider_name": "City Clinic", "amount_submitted": "50.00"},
        format="json",
    )

    res = owner_api.delete(_url(claim.id))
    assert res.status_code == 200
    assert res.json() == {"message": "Claim deleted"}

    assert owner_api.get(_url(claim.id)).status_code == 404
    assert AuditLog.objects.filter(resource_id=claim.id, action="claim.deleted").count() == 1


@pytest.mark.parametrize(
    "body,status,code",
    [
        ({"status": "IN_REVIEW"}, 422, "INVARIANT_VIOLATION"),
        ({"status": "RETURNED", "reason": "   "}, 422, "REASON_REQUIRED"),
        ({"status": "ARCHIVED"}, 400, "VALIDATION_ERROR"),
        ({}, 400, "VALIDATION_ERROR"),
    ],
)
def test_rejected_transitions_change_nothing(owner_api, claim, body, status, code):
    res = owner_api.post(_url(claim.id, "transition/"), body, format="json")
    assert res.status_code == status
    assert _code(res) == code

    claim.refresh_from_db()
    assert claim.status == "DRAFT"
    assert ClaimHistory.objects.filter(claim=claim).count() == 1
