# cm_core/conftest.py
import datetime
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from cm_core.clients.models import Affiliate, Client
from cm_core.common.scope import RequestActor
from cm_core.iam.models import OrgMembership, UserClient
from cm_core.iam.roles import SCOPE_ALL, SCOPE_CLIENT, SCOPE_OWN, Role
from cm_core.insurers.models import Insurer
from cm_core.orgs.models import Organization
from cm_core.policies.models import Policy


def org_headers(org):
    """
    DRF test client requires the HTTP_ prefix.
    """
    return {"HTTP_X_ORG_ID": str(org.id)}


def make_user(username, org=None, role=None):
    user = get_user_model().objects.create_user(username=username, password="testpass")
    if org is not None and role is not None:
        OrgMembership.objects.create(organization=org, user=user, role=role, is_active=True)
    return user


@pytest.fixture
def org(db):
    return Organization.objects.create(name="Test Org", slug="test-org")


@pytest.fixture
def other_org(db):
    return Organization.objects.create(name="Other Org", slug="other-org")


# -------------------------------------------------------------------
# Users, one per role
# -------------------------------------------------------------------

@pytest.fixture
def owner_user(org):
    return make_user("owner", org, Role.OWNER)


@pytest.fixture
def admin_user(org, client_co):
    user = make_user("admin", org, Role.ADMIN)
    UserClient.objects.create(user=user, client=client_co)
    return user


@pytest.fixture
def member_user(org):
    return make_user("member", org, Role.MEMBER)


@pytest.fixture
def viewer_user(org):
    return make_user("viewer", org, Role.VIEWER)


@pytest.fixture
def outsider_user(db):
    return make_user("outsider")


# -------------------------------------------------------------------
# Reference data
# -------------------------------------------------------------------

@pytest.fixture
def client_co(org):
    return Client.objects.create(org_id=org.id, name="Acme Corp")


@pytest.fixture
def other_client(org):
    return Client.objects.create(org_id=org.id, name="Globex")


@pytest.fixture
def subscriber(org, client_co, member_user):
    return Affiliate.objects.create(
        org_id=org.id,
        client=client_co,
        first_name="Ana",
        last_name="Lopez",
        document_number="DOC-100",
        user=member_user,
    )


@pytest.fixture
def dependent(org, client_co, subscriber):
    return Affiliate.objects.create(
        org_id=org.id,
        client=client_co,
        first_name="Luis",
        last_name="Lopez",
        relationship="CHILD",
        primary_affiliate=subscriber,
    )


@pytest.fixture
def stranger(org, client_co):
    """Subscriber under the same client, not linked to any login."""
    return Affiliate.objects.create(org_id=org.id, client=client_co, first_name="Zoe", last_name="Baker")


@pytest.fixture
def insurer(org):
    return Insurer.objects.create(org_id=org.id, name="Northwind Health", code="NWH")


@pytest.fixture
def policy(org, client_co, insurer):
    return Policy.objects.create(
        org_id=org.id,
        client=client_co,
        insurer=insurer,
        policy_number="POL-001",
        start_date=datetime.date(2026, 1, 1),
        end_date=datetime.date(2026, 12, 31),
    )


@pytest.fixture
def in_force_values():
    """Fields a policy needs before it may become ACTIVE."""
    return {
        "plan_name": "Gold",
        "employee_class": "Staff",
        "max_coverage": Decimal("100000.00"),
        "deductible": Decimal("500.00"),
    }


# -------------------------------------------------------------------
# Actors and API clients
# -------------------------------------------------------------------

@pytest.fixture
def owner_actor(org, owner_user):
    return RequestActor(user_id=owner_user.id, org_id=org.id, scope=SCOPE_ALL, ip_address="10.0.0.1", user_agent="pytest")


@pytest.fixture
def admin_actor(org, admin_user):
    return RequestActor(user_id=admin_user.id, org_id=org.id, scope=SCOPE_CLIENT)


@pytest.fixture
def member_actor(org, member_user):
    return RequestActor(user_id=member_user.id, org_id=org.id, scope=SCOPE_OWN)


@pytest.fixture
def api_for(org):
    """
    APIClient authenticated as `user` with the org header preset.
    """
    def _build(user, target_org=None):
        c = APIClient()
        c.force_authenticate(user=user)
        c.credentials(**org_headers(target_org or org))
        return c

    return _build


@pytest.fixture
def owner_api(api_for, owner_user):
    return api_for(owner_user)


@pytest.fixture
def admin_api(api_for, admin_user):
    return api_for(admin_user)


@pytest.fixture
def member_api(api_for, member_user):
    return api_for(member_user)


# -------------------------------------------------------------------
# Records
# -------------------------------------------------------------------

@pytest.fixture
def claim(owner_actor, client_co, subscriber, dependent):
    from cm_core.claims.services import ClaimService
    from cm_core.lifecycle.uow import UnitOfWork

    return ClaimService.create(
        UnitOfWork(),
        actor=owner_actor,
        client_id=client_co.id,
        affiliate_id=subscriber.id,
        patient_id=dependent.id,
        description="Emergency room visit",
    )


@pytest.fixture
def core_values(policy):
    """Fields a claim needs before it may enter IN_REVIEW."""
    return {
        "policy_id": policy.id,
        "care_type": "AMBULATORY",
        "diagnosis": "Sprained ankle",
        "incident_date": datetime.date(2026, 2, 10),
    }
