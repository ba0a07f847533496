# cm_core/policies/services.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from cm_core.clients.selectors import ClientSelectors
from cm_core.common.api.exceptions import BusinessRuleError, ConflictError
from cm_core.common.scope import RequestActor
from cm_core.insurers.selectors import InsurerSelectors
from cm_core.lifecycle.authorizer import ScopeAuthorizer
from cm_core.lifecycle.orchestrator import MutationOrchestrator, RecordKind
from cm_core.lifecycle.uow import UnitOfWork
from cm_core.policies.lifecycle import POLICY_LIFECYCLE
from cm_core.policies.models import Policy, PolicyHistory

logger = logging.getLogger(__name__)


def _authorize_policy(authorizer: ScopeAuthorizer, actor: RequestActor, policy: Policy) -> None:
    authorizer.require_client(actor, policy.client_id, what="Policy access")


def _policy_snapshot(policy: Policy) -> Dict[str, Any]:
    return {
        "policyNumber": policy.policy_number,
        "status": policy.status,
        "clientId": str(policy.client_id),
        "insurerId": str(policy.insurer_id),
    }


def _number_unavailable() -> ConflictError:
    return ConflictError("Policy number unavailable for insurer", "POLICY_NUMBER_UNAVAILABLE")


POLICY_KIND = RecordKind(
    lifecycle=POLICY_LIFECYCLE,
    model=Policy,
    history_model=PolicyHistory,
    history_fk="policy",
    resource="policy",
    label="Policy",
    not_found_code="POLICY_NOT_FOUND",
    authorize=_authorize_policy,
    snapshot=_policy_snapshot,
    related=("client", "insurer"),
    unique_conflict=_number_unavailable,
)


def policy_orchestrator(uow: UnitOfWork) -> MutationOrchestrator:
    return MutationOrchestrator(POLICY_KIND, uow)


class PolicyService:
    @staticmethod
    def _check_date_range(start_date, end_date, *, policy_id: Optional[UUID] = None) -> None:
        if start_date and end_date and start_date > end_date:
            logger.warning(
                "Policy write with inverted date range",
                extra={"policy_id": str(policy_id) if policy_id else None},
            )
            raise BusinessRuleError("start_date must not be after end_date", "INVALID_DATE_RANGE")

    @staticmethod
    def create(uow: UnitOfWork, *, actor: RequestActor, fields: Dict[str, Any]) -> Policy:
        """
        `fields` holds validated input; the date range is already checked at the boundary.
        """
        orch = policy_orchestrator(uow)

        client = ClientSelectors.require_active_client(uow, actor, fields["client_id"], what="Policy create")
        orch.authorizer.require_client(actor, client.id, what="Policy create")
        insurer = InsurerSelectors.require_active_insurer(uow, actor, fields["insurer_id"], what="Policy create")

        values = {k: v for k, v in fields.items() if k not in ("client_id", "insurer_id")}

        def insert(u: UnitOfWork, status: str) -> Policy:
            return u.rows(Policy).create(
                org_id=actor.org_id,
                client=client,
                insurer=insurer,
                status=status,
                created_by_id=actor.user_id,
                updated_by_id=actor.user_id,
                **values,
            )

        return orch.create(
            actor,
            insert=insert,
            metadata=lambda p: {
                "policyNumber": p.policy_number,
                "status": p.status,
                "clientId": str(p.client_id),
                "insurerId": str(p.insurer_id),
            },
        )

    @staticmethod
    def update(uow: UnitOfWork, *, actor: RequestActor, policy_id: UUID, changes: Dict[str, Any]) -> Policy:
        orch = policy_orchestrator(uow)
        policy = orch.load(actor, policy_id)

        def validate(record: Policy, values: Dict[str, Any]) -> None:
            PolicyService._check_date_range(
                values.get("start_date", record.start_date),
                values.get("end_date", record.end_date),
                policy_id=record.id,
            )

            next_client_id = values.get("client_id", record.client_id)
            if "client_id" in values:
                ClientSelectors.require_active_client(uow, actor, values["client_id"], what="Policy update")
            # moving a policy must stay inside the caller's scope
            orch.authorizer.require_client(actor, next_client_id, what="Policy update")

            if "insurer_id" in values:
                InsurerSelectors.require_active_insurer(uow, actor, values["insurer_id"], what="Policy update")

        return orch.update(
            actor,
            policy,
            changes,
            validate=validate,
            metadata=lambda record, values: {
                "clientId": str(values.get("client_id", record.client_id)),
                "insurerId": str(values.get("insurer_id", record.insurer_id)),
            },
        )

    @staticmethod
    def transition(
        uow: UnitOfWork,
        *,
        actor: RequestActor,
        policy_id: UUID,
        status: str,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Policy:
        orch = policy_orchestrator(uow)
        policy = orch.load(actor, policy_id)
        return orch.transition(actor, policy, status, reason=reason, notes=notes)

    @staticmethod
    def delete(uow: UnitOfWork, *, actor: RequestActor, policy_id: UUID) -> Dict[str, str]:
        orch = policy_orchestrator(uow)
        policy = orch.load(actor, policy_id)
        return orch.delete(actor, policy)
