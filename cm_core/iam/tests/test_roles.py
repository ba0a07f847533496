import pytest

from cm_core.common.api.exceptions import InternalError
from cm_core.iam.roles import (
    CLAIMS_CREATE,
    CLAIMS_READ,
    CLAIMS_TRANSITION,
    CLAIMS_UPDATE,
    POLICIES_CREATE,
    POLICIES_READ,
    POLICIES_UPDATE,
    SCOPE_ALL,
    SCOPE_CLIENT,
    SCOPE_OWN,
    Role,
    permissions_for_role,
    scope_for,
)

CLAIM_ACTIONS = (CLAIMS_CREATE, CLAIMS_READ, CLAIMS_UPDATE, CLAIMS_TRANSITION)


@pytest.mark.parametrize("action", CLAIM_ACTIONS)
def test_claim_scopes_per_role(action):
    assert scope_for(permissions_for_role(Role.OWNER), action) == SCOPE_ALL
    assert scope_for(permissions_for_role(Role.ADMIN), action) == SCOPE_CLIENT
    assert scope_for(permissions_for_role(Role.MEMBER), action) == SCOPE_OWN
    assert scope_for(permissions_for_role(Role.VIEWER), action) is None


def test_members_only_read_policies():
    perms = permissions_for_role(Role.MEMBER)
    assert scope_for(perms, POLICIES_READ) == SCOPE_OWN
    assert scope_for(perms, POLICIES_CREATE) is None
    assert scope_for(perms, POLICIES_UPDATE) is None


def test_broadest_scope_wins():
    perms = {"claims:read:own", "claims:read:all", "claims:read:client"}
    assert scope_for(perms, CLAIMS_READ) == SCOPE_ALL
    assert scope_for({"claims:read:own", "claims:read:client"}, CLAIMS_READ) == SCOPE_CLIENT


def test_action_prefix_must_match_exactly():
    # "claims:read" must not match "claims:readonly:*"
    assert scope_for({"claims:readonly:all"}, CLAIMS_READ) is None


def test_unknown_role_is_a_configuration_error():
    with pytest.raises(InternalError) as exc:
        permissions_for_role("AUDITOR")
    assert exc.value.status_code == 500
    assert "Role is not configured" in str(exc.value.detail)
