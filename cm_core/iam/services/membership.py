# cm_core/iam/services/membership.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from cm_core.iam.models import OrgMembership


def get_active_role(*, user_id: int, org_id: UUID) -> Optional[str]:
    """
    Role of the user inside the org, or None when there is no active membership.
    This is the single source of truth used by the permission layer.
    """
    return (
        OrgMembership.objects.filter(
            user_id=user_id,
            organization_id=org_id,
            organization__is_active=True,
            is_active=True,
        )
        .values_list("role", flat=True)
        .first()
    )
