# cm_core/audit/selectors.py
from __future__ import annotations

from typing import Iterable
from uuid import UUID

from django.db.models import QuerySet

from cm_core.audit.models import AuditLog
from cm_core.lifecycle.uow import UnitOfWork


def timeline_for(
    uow: UnitOfWork,
    *,
    org_id: UUID,
    resource: str,
    resource_id: UUID,
    actions: Iterable[str],
) -> QuerySet[AuditLog]:
    """
    Audit rows of one record, limited to an allow-list of action names, newest first.
    """
    return (
        uow.rows(AuditLog)
        .filter(org_id=org_id, resource=resource, resource_id=resource_id, action__in=list(actions))
        .order_by("-created_at", "-id")
    )
