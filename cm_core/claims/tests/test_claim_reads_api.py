import datetime

import pytest
from django.utils import timezone

from cm_core.claims.models import Claim
from cm_core.claims.services import ClaimService
from cm_core.clients.models import Affiliate
from cm_core.lifecycle.uow import UnitOfWork
from cm_core.policies.models import Policy

pytestmark = pytest.mark.django_db


def _numbers(res):
    assert res.status_code == 200, res.content
    return [row["claim_number"] for row in res.json()["data"]]


@pytest.fixture
def claims(owner_actor, client_co, other_client, subscriber, dependent, org):
    """
    Three claims: #1 and #2 under Acme, #3 under Globex.
    #2 is RETURNED and dated in January.
    """
    globex_sub = Affiliate.objects.create(org_id=org.id, client=other_client, first_name="Kim", last_name="Park")
    uow = UnitOfWork()

    def create(client, affiliate, patient, description):
        return ClaimService.create(
            uow,
            actor=owner_actor,
            client_id=client.id,
            affiliate_id=affiliate.id,
            patient_id=patient.id,
            description=description,
        )

    first = create(client_co, subscriber, subscriber, "Lab work")
    second = create(client_co, subscriber, dependent, "Dental")
    third = create(other_client, globex_sub, globex_sub, "X-ray")

    january = timezone.make_aware(datetime.datetime(2020, 1, 15, 12, 0))
    Claim.objects.filter(id=second.id).update(status="RETURNED", created_at=january)
    return first, second, third


def test_list_filters(owner_api, claims):
    assert sorted(_numbers(owner_api.get("/api/v1/claims/"))) == [1, 2, 3]

    assert _numbers(owner_api.get("/api/v1/claims/?status=RETURNED")) == [2]
    assert sorted(_numbers(owner_api.get("/api/v1/claims/?status=DRAFT,RETURNED"))) == [1, 2, 3]
    assert sorted(_numbers(owner_api.get("/api/v1/claims/?status=DRAFT&status=SETTLED"))) == [1, 3]

    # numeric search matches the claim number, text search the client name
    assert _numbers(owner_api.get("/api/v1/claims/?search=3")) == [3]
    assert sorted(_numbers(owner_api.get("/api/v1/claims/?search=acme"))) == [1, 2]

    assert _numbers(owner_api.get("/api/v1/claims/?date_from=2020-01-01&date_to=2020-01-31")) == [2]

    assert _numbers(owner_api.get("/api/v1/claims/?sort_by=claim_number&sort_order=asc")) == [1, 2, 3]
    assert _numbers(owner_api.get("/api/v1/claims/?sort_by=claim_number")) == [3, 2, 1]


@pytest.mark.parametrize("search", ["²", "١٢", "99999999999999999999"])
def test_search_with_non_claim_numbers_falls_back_to_names(owner_api, claims, search):
    assert _numbers(owner_api.get("/api/v1/claims/", {"search": search})) == []


@pytest.mark.parametrize(
    "query",
    [
        "status=ARCHIVED",
        "sort_by=description",
        "sort_order=up",
        "date_from=2026-02-01&date_to=2026-01-01",
        "date_from=yesterday",
    ],
)
def test_list_rejects_bad_filters(owner_api, query):
    res = owner_api.get(f"/api/v1/claims/?{query}")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_item_shape_and_pagination(owner_api, claims):
    body = owner_api.get("/api/v1/claims/?limit=2&sort_by=claim_number&sort_order=asc").json()
    assert body["meta"] == {"page": 1, "limit": 2, "totalCount": 3, "totalPages": 2}

    row = body["data"][0]
    assert row["client_name"] == "Acme Corp"
    assert (row["affiliate_first_name"], row["patient_last_name"]) == ("Ana", "Lopez")


def test_admin_lists_only_assigned_clients(admin_api, claims):
    assert sorted(_numbers(admin_api.get("/api/v1/claims/"))) == [1, 2]


def test_history_is_newest_first(owner_api, owner_actor, claim, core_values):
    ClaimService.update(UnitOfWork(), actor=owner_actor, claim_id=claim.id, changes=core_values)
    owner_api.post(f"/api/v1/claims/{claim.id}/transition/", {"status": "IN_REVIEW"}, format="json")

    rows = owner_api.get(f"/api/v1/claims/{claim.id}/history/").json()["data"]
    assert {r["to_status"] for r in rows} == {"DRAFT", "IN_REVIEW"}
    created = [r["created_at"] for r in rows]
    assert created == sorted(created, reverse=True)


def test_timeline_includes_invoice_events(owner_api, claim):
    owner_api.patch(f"/api/v1/claims/{claim.id}/", {"diagnosis": "Flu"}, format="json")
    owner_api.post(
        f"/api/v1/claims/{claim.id}/invoices/",
        {"invoice_number": "INV-7", "provider_name": "City Clinic", "amount_submitted": "80.00"},
        format="json",
    )

    body = owner_api.get(f"/api/v1/claims/{claim.id}/timeline/").json()
    assert body["meta"]["totalCount"] == 3
    assert {r["action"] for r in body["data"]} == {"claim.created", "claim.updated", "claim.invoice_created"}
    assert all(r["resource_id"] == str(claim.id) for r in body["data"])


# -------------------------------------------------------------------
# Lookups
# -------------------------------------------------------------------

def test_client_lookup_follows_scope(owner_api, admin_api, member_api, client_co, other_client, subscriber):
    def names(res):
        return [r["name"] for r in res.json()["data"]]

    assert names(owner_api.get("/api/v1/claims/lookup/clients/")) == ["Acme Corp", "Globex"]
    assert names(owner_api.get("/api/v1/claims/lookup/clients/?search=glo")) == ["Globex"]
    assert names(admin_api.get("/api/v1/claims/lookup/clients/")) == ["Acme Corp"]
    assert names(member_api.get("/api/v1/claims/lookup/clients/")) == ["Acme Corp"]


def test_affiliate_lookup_lists_main_affiliates(owner_api, member_api, client_co, subscriber, dependent, stranger):
    url = f"/api/v1/claims/lookup/clients/{client_co.id}/affiliates/"

    rows = owner_api.get(url).json()["data"]
    assert [r["last_name"] for r in rows] == ["Baker", "Lopez"]
    assert str(dependent.id) not in {r["id"] for r in rows}

    assert [r["id"] for r in owner_api.get(f"{url}?search=DOC-100").json()["data"]] == [str(subscriber.id)]
    assert [r["id"] for r in member_api.get(url).json()["data"]] == [str(subscriber.id)]


def test_affiliate_lookup_for_foreign_client(admin_api, other_client):
    res = admin_api.get(f"/api/v1/claims/lookup/clients/{other_client.id}/affiliates/")
    assert res.status_code == 403


def test_patient_lookup_puts_the_affiliate_first(owner_api, member_api, org, client_co, subscriber, dependent, stranger):
    Affiliate.objects.create(
        org_id=org.id, client=client_co, first_name="Ada", last_name="Lopez", primary_affiliate=subscriber
    )
    Affiliate.objects.create(
        org_id=org.id,
        client=client_co,
        first_name="Old",
        last_name="Lopez",
        primary_affiliate=subscriber,
        is_active=False,
    )

    res = owner_api.get(f"/api/v1/claims/lookup/affiliates/{subscriber.id}/patients/")
    assert res.status_code == 200
    body = res.json()
    assert "meta" not in body
    assert [r["first_name"] for r in body["data"]] == ["Ana", "Ada", "Luis"]

    assert member_api.get(f"/api/v1/claims/lookup/affiliates/{stranger.id}/patients/").status_code == 403


def test_policy_lookup(owner_api, org, client_co, insurer, policy):
    Policy.objects.create(
        org_id=org.id,
        client=client_co,
        insurer=insurer,
        policy_number="POL-002",
        start_date=datetime.date(2025, 1, 1),
        end_date=datetime.date(2025, 12, 31),
    )

    rows = owner_api.get(f"/api/v1/claims/lookup/clients/{client_co.id}/policies/").json()["data"]
    assert [r["policy_number"] for r in rows] == ["POL-001", "POL-002"]
    assert rows[0]["insurer_name"] == "Northwind Health"

    rows = owner_api.get(f"/api/v1/claims/lookup/clients/{client_co.id}/policies/?search=002").json()["data"]
    assert [r["policy_number"] for r in rows] == ["POL-002"]

    res = owner_api.get("/api/v1/claims/lookup/clients/not-a-uuid/policies/")
    assert res.status_code == 400
    assert res.json()["error"]["details"] == {"client_id": ["Must be a valid UUID."]}
