# cm_core/policies/selectors.py
from __future__ import annotations

from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from django.db.models import Q, QuerySet

from cm_core.audit.models import AuditLog
from cm_core.audit.selectors import timeline_for
from cm_core.common.scope import RequestActor
from cm_core.lifecycle.authorizer import ScopeAuthorizer
from cm_core.lifecycle.uow import UnitOfWork
from cm_core.policies.constants import TIMELINE_ACTIONS
from cm_core.policies.models import Policy, PolicyHistory
from cm_core.policies.services import policy_orchestrator


class PolicySelectors:
    """
    Read-only queries for policies.
    """

    @staticmethod
    def list_policies(
        uow: UnitOfWork,
        *,
        actor: RequestActor,
        statuses: Iterable[str] = (),
        search: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> QuerySet[Policy]:
        qs = uow.rows(Policy).filter(org_id=actor.org_id).select_related("client", "insurer")
        qs = ScopeAuthorizer(uow).restrict(qs, actor, client_field="client_id")

        statuses = list(statuses)
        if statuses:
            qs = qs.filter(status__in=statuses)

        if search:
            qs = qs.filter(
                Q(policy_number__icontains=search)
                | Q(client__name__icontains=search)
                | Q(insurer__name__icontains=search)
                | Q(plan_name__icontains=search)
                | Q(employee_class__icontains=search)
            )

        if date_from:
            qs = qs.filter(created_at__date__gte=date_from)
        if date_to:
            qs = qs.filter(created_at__date__lte=date_to)

        prefix = "-" if sort_order == "desc" else ""
        return qs.order_by(f"{prefix}{sort_by}", f"{prefix}id")

    @staticmethod
    def get_policy(uow: UnitOfWork, *, actor: RequestActor, policy_id: UUID) -> Policy:
        orch = policy_orchestrator(uow)
        policy = orch.load(actor, policy_id)
        return orch.fetch(actor, policy.id)

    @staticmethod
    def history(uow: UnitOfWork, *, actor: RequestActor, policy_id: UUID) -> QuerySet[PolicyHistory]:
        policy = policy_orchestrator(uow).load(actor, policy_id)
        return uow.rows(PolicyHistory).filter(policy=policy).order_by("-created_at", "-id")

    @staticmethod
    def timeline(uow: UnitOfWork, *, actor: RequestActor, policy_id: UUID) -> QuerySet[AuditLog]:
        policy = policy_orchestrator(uow).load(actor, policy_id)
        return timeline_for(
            uow,
            org_id=actor.org_id,
            resource="policy",
            resource_id=policy.id,
            actions=TIMELINE_ACTIONS,
        )
