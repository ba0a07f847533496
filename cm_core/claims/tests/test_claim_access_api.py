import pytest

from cm_core.audit.models import AuditLog
from cm_core.claims.services import ClaimService
from cm_core.clients.models import Affiliate, Client
from cm_core.conftest import make_user
from cm_core.iam.models import UserClient
from cm_core.iam.roles import Role
from cm_core.lifecycle.uow import UnitOfWork

pytestmark = pytest.mark.django_db


def _create_body(client, affiliate, patient, description="Consultation"):
    return {
        "client_id": str(client.id),
        "affiliate_id": str(affiliate.id),
        "patient_id": str(patient.id),
        "description": description,
    }


def _code(res):
    return res.json()["error"]["code"]


@pytest.fixture
def stranger_claim(owner_actor, client_co, stranger):
    return ClaimService.create(
        UnitOfWork(),
        actor=owner_actor,
        client_id=client_co.id,
        affiliate_id=stranger.id,
        patient_id=stranger.id,
        description="Someone else's claim",
    )


# -------------------------------------------------------------------
# Create reference checks
# -------------------------------------------------------------------

def test_create_reference_checks(owner_api, org, client_co, other_client, subscriber, dependent, stranger):
    inactive = Client.objects.create(org_id=org.id, name="Dormant", is_active=False)
    outsider = Affiliate.objects.create(org_id=org.id, client=other_client, first_name="Max", last_name="Ito")
    cases = [
        (_create_body(inactive, subscriber, subscriber), 422, "CLIENT_INACTIVE"),
        (
            {**_create_body(client_co, subscriber, subscriber), "client_id": "00000000-0000-0000-0000-000000000000"},
            404,
            "CLIENT_NOT_FOUND",
        ),
        (_create_body(client_co, outsider, outsider), 422, "AFFILIATE_CLIENT_MISMATCH"),
        (_create_body(client_co, subscriber, outsider), 422, "PATIENT_CLIENT_MISMATCH"),
        (_create_body(client_co, subscriber, stranger), 422, "PATIENT_NOT_DEPENDENT"),
    ]

    for body, status, code in cases:
        res = owner_api.post("/api/v1/claims/", body, format="json")
        assert res.status_code == status, code
        assert _code(res) == code

    dependent.is_active = False
    dependent.save(update_fields=["is_active"])
    res = owner_api.post("/api/v1/claims/", _create_body(client_co, subscriber, dependent), format="json")
    assert res.status_code == 422
    assert _code(res) == "PATIENT_INACTIVE"

    assert not AuditLog.objects.exists()


def test_description_bounds(owner_api, client_co, subscriber):
    for description in ("", "x" * 5001):
        res = owner_api.post(
            "/api/v1/claims/", _create_body(client_co, subscriber, subscriber, description), format="json"
        )
        assert res.status_code == 400


def test_taken_claim_number_is_a_conflict_not_a_retry(monkeypatch, owner_api, client_co, subscriber, claim):
    calls = []

    def stale_number(uow, org_id):
        calls.append(org_id)
        return claim.claim_number

    monkeypatch.setattr(ClaimService, "_next_claim_number", staticmethod(stale_number))

    res = owner_api.post("/api/v1/claims/", _create_body(client_co, subscriber, subscriber), format="json")
    assert res.status_code == 409
    assert _code(res) == "CLAIM_NUMBER_UNAVAILABLE"
    assert len(calls) == 1
    assert not AuditLog.objects.filter(action="claim.created").exclude(resource_id=claim.id).exists()


# -------------------------------------------------------------------
# 404 across orgs, 403 inside the org
# -------------------------------------------------------------------

def test_other_org_sees_404_never_403(api_for, other_org, claim):
    foreign_owner = make_user("foreign-owner", other_org, Role.OWNER)
    api = api_for(foreign_owner, other_org)

    for res in (
        api.get(f"/api/v1/claims/{claim.id}/"),
        api.patch(f"/api/v1/claims/{claim.id}/", {"diagnosis": "x"}, format="json"),
        api.post(f"/api/v1/claims/{claim.id}/transition/", {"status": "CANCELLED", "reason": "x"}, format="json"),
        api.get(f"/api/v1/claims/{claim.id}/history/"),
        api.delete(f"/api/v1/claims/{claim.id}/"),
    ):
        assert res.status_code == 404
        assert _code(res) == "CLAIM_NOT_FOUND"


def test_unassigned_admin_gets_403_until_assigned(api_for, org, claim, client_co):
    admin = make_user("admin-unassigned", org, Role.ADMIN)
    api = api_for(admin)

    res = api.patch(f"/api/v1/claims/{claim.id}/", {"diagnosis": "Flu"}, format="json")
    assert res.status_code == 403
    assert _code(res) == "PERMISSION_DENIED"
    assert api.get(f"/api/v1/claims/{claim.id}/").status_code == 403

    UserClient.objects.create(user=admin, client=client_co)

    res = api.patch(f"/api/v1/claims/{claim.id}/", {"diagnosis": "Flu"}, format="json")
    assert res.status_code == 200
    assert res.json()["diagnosis"] == "Flu"


def test_unassigned_admin_cannot_create(api_for, org, client_co, subscriber):
    admin = make_user("admin-unassigned", org, Role.ADMIN)
    res = api_for(admin).post("/api/v1/claims/", _create_body(client_co, subscriber, subscriber), format="json")
    assert res.status_code == 403


def test_member_acts_only_on_own_subscriber(member_api, claim, stranger_claim, client_co, subscriber, stranger):
    assert member_api.get(f"/api/v1/claims/{claim.id}/").status_code == 200

    res = member_api.get(f"/api/v1/claims/{stranger_claim.id}/")
    assert res.status_code == 403
    assert _code(res) == "PERMISSION_DENIED"

    res = member_api.post("/api/v1/claims/", _create_body(client_co, stranger, stranger), format="json")
    assert res.status_code == 403

    res = member_api.post("/api/v1/claims/", _create_body(client_co, subscriber, subscriber), format="json")
    assert res.status_code == 201

    ids = {row["id"] for row in member_api.get("/api/v1/claims/").json()["data"]}
    assert str(stranger_claim.id) not in ids
    assert str(claim.id) in ids


def test_viewer_cannot_touch_claims(api_for, viewer_user, claim):
    api = api_for(viewer_user)
    assert api.get("/api/v1/claims/").status_code == 403
    assert api.get(f"/api/v1/claims/{claim.id}/").status_code == 403


def test_member_cannot_write_policies(member_api, policy):
    assert member_api.get("/api/v1/policies/").status_code == 200
    res = member_api.patch(f"/api/v1/policies/{policy.id}/", {"plan_name": "Silver"}, format="json")
    assert res.status_code == 403
