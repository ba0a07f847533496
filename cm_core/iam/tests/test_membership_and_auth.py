import pytest
from django.conf import settings
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from cm_core.conftest import org_headers
from cm_core.iam.models import OrgMembership
from cm_core.iam.services.membership import get_active_role

pytestmark = pytest.mark.django_db


def test_active_role_requires_active_membership_and_org(org, other_org, owner_user):
    assert get_active_role(user_id=owner_user.id, org_id=org.id) == "OWNER"
    assert get_active_role(user_id=owner_user.id, org_id=other_org.id) is None

    OrgMembership.objects.filter(user=owner_user).update(is_active=False)
    assert get_active_role(user_id=owner_user.id, org_id=org.id) is None

    OrgMembership.objects.filter(user=owner_user).update(is_active=True)
    org.is_active = False
    org.save(update_fields=["is_active"])
    assert get_active_role(user_id=owner_user.id, org_id=org.id) is None


def test_bearer_token_authenticates(org, owner_user):
    """
    Real JWT so CookieOrHeaderJWTAuthentication runs (force_authenticate bypasses it).
    """
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {RefreshToken.for_user(owner_user).access_token}")

    res = c.get("/api/v1/claims/", **org_headers(org))
    assert res.status_code == 200


def test_access_cookie_authenticates(org, owner_user):
    c = APIClient()
    c.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]] = str(RefreshToken.for_user(owner_user).access_token)

    res = c.get("/api/v1/policies/", **org_headers(org))
    assert res.status_code == 200


def test_garbage_cookie_is_rejected(org):
    c = APIClient()
    c.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]] = "not-a-jwt"

    res = c.get("/api/v1/claims/", **org_headers(org))
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "NOT_AUTHENTICATED"


def test_no_credentials_is_401(org):
    res = APIClient().get("/api/v1/claims/", **org_headers(org))
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "NOT_AUTHENTICATED"
