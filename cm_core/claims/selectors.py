# cm_core/claims/selectors.py
from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from django.db.models import Q, QuerySet

from cm_core.audit.models import AuditLog
from cm_core.audit.selectors import timeline_for
from cm_core.claims.constants import TIMELINE_ACTIONS
from cm_core.claims.models import Claim, ClaimHistory, ClaimInvoice
from cm_core.claims.services import INVOICE_KIND, claim_orchestrator
from cm_core.clients.selectors import ClientSelectors
from cm_core.common.scope import RequestActor
from cm_core.lifecycle.authorizer import ScopeAuthorizer
from cm_core.lifecycle.uow import UnitOfWork
from cm_core.policies.models import Policy

# claim_number is a PositiveIntegerField
CLAIM_NUMBER_RE = re.compile(r"\d+", re.ASCII)
CLAIM_NUMBER_MAX = 2147483647


class ClaimSelectors:
    """
    Read-only queries for claims.
    No .save(), no state mutation here.
    """

    @staticmethod
    def list_claims(
        uow: UnitOfWork,
        *,
        actor: RequestActor,
        statuses: Iterable[str] = (),
        search: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> QuerySet[Claim]:
        qs = uow.rows(Claim).filter(org_id=actor.org_id).select_related("client", "affiliate", "patient")
        qs = ScopeAuthorizer(uow).restrict(qs, actor, client_field="client_id", owner_field="affiliate__user_id")

        statuses = list(statuses)
        if statuses:
            qs = qs.filter(status__in=statuses)

        if search:
            cond = Q(client__name__icontains=search)
            if CLAIM_NUMBER_RE.fullmatch(search) and int(search) <= CLAIM_NUMBER_MAX:
                cond |= Q(claim_number=int(search))
            qs = qs.filter(cond)

        if date_from:
            qs = qs.filter(created_at__date__gte=date_from)
        if date_to:
            qs = qs.filter(created_at__date__lte=date_to)

        prefix = "-" if sort_order == "desc" else ""
        return qs.order_by(f"{prefix}{sort_by}", f"{prefix}id")

    @staticmethod
    def get_claim(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID) -> Claim:
        orch = claim_orchestrator(uow)
        claim = orch.load(actor, claim_id)
        # row may vanish between the access check and the fetch
        return orch.fetch(actor, claim.id)

    @staticmethod
    def history(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID) -> QuerySet[ClaimHistory]:
        claim = claim_orchestrator(uow).load(actor, claim_id)
        return uow.rows(ClaimHistory).filter(claim=claim).order_by("-created_at", "-id")

    @staticmethod
    def timeline(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID) -> QuerySet[AuditLog]:
        claim = claim_orchestrator(uow).load(actor, claim_id)
        return timeline_for(
            uow,
            org_id=actor.org_id,
            resource="claim",
            resource_id=claim.id,
            actions=TIMELINE_ACTIONS,
        )

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------
    @staticmethod
    def list_invoices(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID) -> QuerySet[ClaimInvoice]:
        claim = claim_orchestrator(uow).load(actor, claim_id)
        return uow.rows(ClaimInvoice).filter(claim=claim).order_by("-created_at", "-id")

    @staticmethod
    def get_invoice(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID, invoice_id: UUID) -> ClaimInvoice:
        orch = claim_orchestrator(uow)
        claim = orch.load(actor, claim_id)
        return orch.get_child(actor, claim, INVOICE_KIND, invoice_id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @staticmethod
    def lookup_client_policies(
        uow: UnitOfWork,
        *,
        actor: RequestActor,
        client_id: UUID,
        search: Optional[str] = None,
    ) -> QuerySet[Policy]:
        client = ClientSelectors.require_active_client(uow, actor, client_id, what="Lookup")
        ScopeAuthorizer(uow).require_client(actor, client.id, what="Lookup")

        qs = uow.rows(Policy).filter(org_id=actor.org_id, client_id=client.id).select_related("insurer")
        if search:
            qs = qs.filter(policy_number__icontains=search)
        return qs.order_by("-start_date", "id")
