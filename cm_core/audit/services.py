# cm_core/audit/services.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

from django.conf import settings

from cm_core.audit.models import AuditLog
from cm_core.common.scope import RequestActor
from cm_core.lifecycle.uow import UnitOfWork


def _cap_user_agent(value: str | None) -> str:
    limit = getattr(settings, "LIFECYCLE_AUDIT_USER_AGENT_MAX", 512)
    return (value or "")[:limit]


@dataclass(frozen=True)
class AuditRecord:
    id: UUID
    action: str
    resource: str
    resource_id: UUID
    org_id: UUID
    user_id: int | None
    metadata: Dict[str, Any]


class AuditService:
    """
    Central audit writer.
    Always called inside the caller's unit of work so the audit row
    commits or rolls back together with the mutation it describes.
    """

    @staticmethod
    def log(
        uow: UnitOfWork,
        *,
        actor: RequestActor,
        action: str,
        resource: str,
        resource_id: UUID,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        metadata = metadata or {}

        row = uow.rows(AuditLog).create(
            org_id=actor.org_id,
            user_id=actor.user_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            metadata=metadata,
            ip_address=(actor.ip_address or "")[:64],
            user_agent=_cap_user_agent(actor.user_agent),
        )

        return AuditRecord(
            id=row.id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            org_id=actor.org_id,
            user_id=actor.user_id,
            metadata=metadata,
        )
