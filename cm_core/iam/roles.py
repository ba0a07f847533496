# cm_core/iam/roles.py
"""
Role -> permission set -> scope resolution.

Both steps are pure functions over in-code tables: no database access,
no request access. The permission layer calls them once per request and
hands the resulting scope to services explicitly.

Permission strings are "<resource>:<action>:<scope>", e.g. "claims:read:client".
"""
from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

from django.db import models

from cm_core.common.api.exceptions import InternalError


class Role(models.TextChoices):
    OWNER = "OWNER", "Owner"
    ADMIN = "ADMIN", "Admin"
    MEMBER = "MEMBER", "Member"
    VIEWER = "VIEWER", "Viewer"


SCOPE_ALL = "all"
SCOPE_CLIENT = "client"
SCOPE_OWN = "own"

# Broadest first
SCOPE_PRIORITY = (SCOPE_ALL, SCOPE_CLIENT, SCOPE_OWN)

CLAIMS_CREATE = "claims:create"
CLAIMS_READ = "claims:read"
CLAIMS_UPDATE = "claims:update"
CLAIMS_TRANSITION = "claims:transition"

POLICIES_CREATE = "policies:create"
POLICIES_READ = "policies:read"
POLICIES_UPDATE = "policies:update"
POLICIES_TRANSITION = "policies:transition"

_CLAIM_ACTIONS = (CLAIMS_CREATE, CLAIMS_READ, CLAIMS_UPDATE, CLAIMS_TRANSITION)
_POLICY_ACTIONS = (POLICIES_CREATE, POLICIES_READ, POLICIES_UPDATE, POLICIES_TRANSITION)


def _grant(actions: Iterable[str], scope: str) -> FrozenSet[str]:
    return frozenset(f"{a}:{scope}" for a in actions)


ROLE_PERMISSIONS: dict[str, FrozenSet[str]] = {
    Role.OWNER.value: _grant(_CLAIM_ACTIONS + _POLICY_ACTIONS, SCOPE_ALL),
    Role.ADMIN.value: _grant(_CLAIM_ACTIONS + _POLICY_ACTIONS, SCOPE_CLIENT),
    Role.MEMBER.value: _grant(_CLAIM_ACTIONS, SCOPE_OWN) | _grant((POLICIES_READ,), SCOPE_OWN),
    Role.VIEWER.value: frozenset(),
}


def permissions_for_role(role: str) -> FrozenSet[str]:
    try:
        return ROLE_PERMISSIONS[str(role)]
    except KeyError:
        raise InternalError(f"Role is not configured: {role}")


def scope_for(permissions: Iterable[str], action: str) -> Optional[str]:
    """
    Broadest scope granted for `action`, or None when the action is not granted.
    """
    granted = set()
    prefix = action + ":"
    for perm in permissions:
        if perm.startswith(prefix):
            granted.add(perm[len(prefix):])

    for scope in SCOPE_PRIORITY:
        if scope in granted:
            return scope
    return None
