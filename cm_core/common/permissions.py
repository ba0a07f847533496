# cm_core/common/permissions.py

from __future__ import annotations

import logging

from rest_framework.permissions import BasePermission

from cm_core.common.api.exceptions import PermissionDeniedError
from cm_core.common.scope import resolve_org_id
from cm_core.iam.roles import (
    CLAIMS_CREATE,
    CLAIMS_READ,
    CLAIMS_TRANSITION,
    CLAIMS_UPDATE,
    POLICIES_CREATE,
    POLICIES_READ,
    POLICIES_TRANSITION,
    POLICIES_UPDATE,
    permissions_for_role,
    scope_for,
)
from cm_core.iam.services.membership import get_active_role

logger = logging.getLogger(__name__)


class ScopedActionPermission(BasePermission):
    """
    Base permission class for action-based access control.

    Key behavior:
    - Resolves the org from X-Org-Id (400 when missing/invalid).
    - Requires an active membership in that org (403 otherwise).
    - Maps the view action to a permission action, then resolves
      role -> permission set -> scope with the pure functions in iam.roles.
    - Attaches request.org_id, request.role and request.permission_scope.

    Subclasses fill `action_permissions`: view action -> permission action,
    or view action -> {HTTP method -> permission action} for multi-method actions.
    Unknown actions are denied.
    """
    message = "Insufficient permissions"

    action_permissions: dict = {}

    def _required(self, request, view) -> str | None:
        required = self.action_permissions.get(getattr(view, "action", None))
        if isinstance(required, dict):
            return required.get(request.method.upper())
        return required

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        org_id = resolve_org_id(request)

        role = get_active_role(user_id=user.id, org_id=org_id)
        if role is None:
            logger.warning("Org access denied", extra={"user_id": user.id, "org_id": str(org_id)})
            raise PermissionDeniedError("You do not have access to the selected organization.")

        required = self._required(request, view)
        if required is None:
            return False

        scope = scope_for(permissions_for_role(role), required)
        if scope is None:
            logger.warning(
                "Action denied by role",
                extra={"user_id": user.id, "org_id": str(org_id), "role": role, "action": required},
            )
            raise PermissionDeniedError()

        request.role = role
        request.permission_scope = scope
        return True


class ClaimPermission(ScopedActionPermission):
    action_permissions = {
        "list": CLAIMS_READ,
        "retrieve": CLAIMS_READ,
        "history": CLAIMS_READ,
        "timeline": CLAIMS_READ,
        "create": CLAIMS_CREATE,
        "partial_update": CLAIMS_UPDATE,
        "destroy": CLAIMS_UPDATE,
        "transition": CLAIMS_TRANSITION,
        "invoices": {"GET": CLAIMS_READ, "POST": CLAIMS_UPDATE},
        "invoice_detail": {"GET": CLAIMS_READ, "PATCH": CLAIMS_UPDATE, "DELETE": CLAIMS_UPDATE},
        # lookups for the claim form
        "lookup_clients": CLAIMS_READ,
        "lookup_client_affiliates": CLAIMS_READ,
        "lookup_affiliate_patients": CLAIMS_READ,
        "lookup_client_policies": CLAIMS_READ,
    }


class PolicyPermission(ScopedActionPermission):
    action_permissions = {
        "list": POLICIES_READ,
        "retrieve": POLICIES_READ,
        "history": POLICIES_READ,
        "timeline": POLICIES_READ,
        "create": POLICIES_CREATE,
        "partial_update": POLICIES_UPDATE,
        "destroy": POLICIES_UPDATE,
        "transition": POLICIES_TRANSITION,
        # lookups for the policy form
        "lookup_clients": POLICIES_READ,
        "lookup_insurers": POLICIES_READ,
    }
