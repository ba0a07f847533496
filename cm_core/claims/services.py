# cm_core/claims/services.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import IntegrityError
from django.db.models import Max

from cm_core.claims.lifecycle import CLAIM_LIFECYCLE
from cm_core.claims.models import Claim, ClaimHistory, ClaimInvoice
from cm_core.clients.models import Affiliate
from cm_core.clients.selectors import ClientSelectors
from cm_core.common.api.exceptions import BusinessRuleError, ConflictError, NotFoundError
from cm_core.common.scope import RequestActor
from cm_core.lifecycle.authorizer import ScopeAuthorizer
from cm_core.lifecycle.orchestrator import ChildKind, MutationOrchestrator, RecordKind
from cm_core.lifecycle.uow import UnitOfWork
from cm_core.policies.models import Policy

logger = logging.getLogger(__name__)


def _authorize_claim(authorizer: ScopeAuthorizer, actor: RequestActor, claim: Claim) -> None:
    authorizer.require_assigned_client(actor, claim.client_id, what="Claim access")
    authorizer.require_owner(actor, claim.affiliate.user_id, what="Claim access", claim_id=str(claim.id))


def _claim_snapshot(claim: Claim) -> Dict[str, Any]:
    return {
        "claimNumber": claim.claim_number,
        "status": claim.status,
        "clientId": str(claim.client_id),
        "affiliateId": str(claim.affiliate_id),
        "patientId": str(claim.patient_id),
    }


CLAIM_KIND = RecordKind(
    lifecycle=CLAIM_LIFECYCLE,
    model=Claim,
    history_model=ClaimHistory,
    history_fk="claim",
    resource="claim",
    label="Claim",
    not_found_code="CLAIM_NOT_FOUND",
    authorize=_authorize_claim,
    snapshot=_claim_snapshot,
    related=("client", "affiliate", "patient", "policy"),
)

INVOICE_KIND = ChildKind(
    model=ClaimInvoice,
    parent_field="claim",
    name="invoice",
    label="Claim invoice",
    not_found_code="INVOICE_NOT_FOUND",
    metadata=lambda inv: {"invoiceId": str(inv.id), "invoiceNumber": inv.invoice_number},
)


def claim_orchestrator(uow: UnitOfWork) -> MutationOrchestrator:
    return MutationOrchestrator(CLAIM_KIND, uow)


class ClaimService:
    """
    Claim writes. Every method takes the unit of work and the acting
    RequestActor explicitly; the orchestrator owns the atomic write set.
    """

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    @staticmethod
    def _next_claim_number(uow: UnitOfWork, org_id: UUID) -> int:
        current = uow.rows(Claim).filter(org_id=org_id).aggregate(m=Max("claim_number"))["m"]
        return (current or 0) + 1

    @staticmethod
    def _insert(uow: UnitOfWork, actor: RequestActor, status: str, **fields) -> Claim:
        """
        Allocates claim_number as max+1 per org. A concurrent insert that took
        the same number hits the unique constraint and surfaces as a 409.
        """
        number = ClaimService._next_claim_number(uow, actor.org_id)
        try:
            with uow.begin():
                return uow.rows(Claim).create(
                    org_id=actor.org_id,
                    claim_number=number,
                    status=status,
                    created_by_id=actor.user_id,
                    updated_by_id=actor.user_id,
                    **fields,
                )
        except IntegrityError:
            logger.warning(
                "Claim number collision",
                extra={"org_id": str(actor.org_id), "claim_number": number},
            )
            raise ConflictError("Claim number unavailable; retry the request", "CLAIM_NUMBER_UNAVAILABLE")

    @staticmethod
    def _require_patient(uow: UnitOfWork, actor: RequestActor, *, patient_id: UUID, affiliate: Affiliate) -> Affiliate:
        patient = ClientSelectors.require_active_affiliate(
            uow, actor, patient_id, what="Claim create", label="Patient", code_prefix="PATIENT"
        )
        extra = {"patient_id": str(patient_id), "affiliate_id": str(affiliate.id), "user_id": actor.user_id}

        if patient.client_id != affiliate.client_id:
            logger.warning("Claim create with patient-client mismatch", extra=extra)
            raise BusinessRuleError("Patient does not belong to the specified client", "PATIENT_CLIENT_MISMATCH")

        if patient.id != affiliate.id and patient.primary_affiliate_id != affiliate.id:
            logger.warning("Claim create with unrelated patient", extra=extra)
            raise BusinessRuleError(
                "Patient is not the affiliate or one of their dependents",
                "PATIENT_NOT_DEPENDENT",
            )

        return patient

    @staticmethod
    def _validate_policy(uow: UnitOfWork, actor: RequestActor, claim: Claim, policy_id: UUID) -> None:
        policy = uow.rows(Policy).filter(id=policy_id, org_id=actor.org_id).first()
        extra = {"claim_id": str(claim.id), "policy_id": str(policy_id), "user_id": actor.user_id}

        if policy is None:
            logger.warning("Claim update with unknown policy", extra=extra)
            raise NotFoundError("Policy not found", "POLICY_NOT_FOUND")

        if policy.client_id != claim.client_id:
            logger.warning("Claim update with policy-client mismatch", extra=extra)
            raise BusinessRuleError("Policy does not belong to the claim client", "POLICY_CLIENT_MISMATCH")

    # ---------------------------------------------------------------------
    # Claim lifecycle writes
    # ---------------------------------------------------------------------
    @staticmethod
    def create(
        uow: UnitOfWork,
        *,
        actor: RequestActor,
        client_id: UUID,
        affiliate_id: UUID,
        patient_id: UUID,
        description: str,
    ) -> Claim:
        orch = claim_orchestrator(uow)

        client = ClientSelectors.require_active_client(uow, actor, client_id, what="Claim create")
        orch.authorizer.require_assigned_client(actor, client.id, what="Claim create")

        affiliate = ClientSelectors.require_active_affiliate(uow, actor, affiliate_id, what="Claim create")
        if affiliate.client_id != client.id:
            logger.warning(
                "Claim create with affiliate-client mismatch",
                extra={"affiliate_id": str(affiliate_id), "client_id": str(client_id), "user_id": actor.user_id},
            )
            raise BusinessRuleError("Affiliate does not belong to the specified client", "AFFILIATE_CLIENT_MISMATCH")

        orch.authorizer.require_owner(
            actor, affiliate.user_id, what="Claim create", affiliate_id=str(affiliate.id)
        )

        patient = ClaimService._require_patient(uow, actor, patient_id=patient_id, affiliate=affiliate)

        def insert(u: UnitOfWork, status: str) -> Claim:
            return ClaimService._insert(
                u,
                actor,
                status,
                client=client,
                affiliate=affiliate,
                patient=patient,
                description=description,
            )

        return orch.create(
            actor,
            insert=insert,
            metadata=lambda c: {
                "claimNumber": c.claim_number,
                "clientId": str(c.client_id),
                "affiliateId": str(c.affiliate_id),
                "patientId": str(c.patient_id),
            },
        )

    @staticmethod
    def update(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID, changes: Dict[str, Any]) -> Claim:
        orch = claim_orchestrator(uow)
        claim = orch.load(actor, claim_id)

        def validate(record: Claim, values: Dict[str, Any]) -> None:
            # null clears the link without validation
            if values.get("policy_id") is not None:
                ClaimService._validate_policy(uow, actor, record, values["policy_id"])

        return orch.update(actor, claim, changes, validate=validate)

    @staticmethod
    def transition(
        uow: UnitOfWork,
        *,
        actor: RequestActor,
        claim_id: UUID,
        status: str,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Claim:
        orch = claim_orchestrator(uow)
        claim = orch.load(actor, claim_id)
        return orch.transition(actor, claim, status, reason=reason, notes=notes)

    @staticmethod
    def delete(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID) -> Dict[str, str]:
        orch = claim_orchestrator(uow)
        claim = orch.load(actor, claim_id)
        return orch.delete(actor, claim)

    # ---------------------------------------------------------------------
    # Invoices
    # ---------------------------------------------------------------------
    @staticmethod
    def create_invoice(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID, values: Dict[str, Any]) -> ClaimInvoice:
        orch = claim_orchestrator(uow)
        claim = orch.load(actor, claim_id)
        return orch.create_child(actor, claim, INVOICE_KIND, {**values, "created_by_id": actor.user_id})

    @staticmethod
    def update_invoice(
        uow: UnitOfWork,
        *,
        actor: RequestActor,
        claim_id: UUID,
        invoice_id: UUID,
        changes: Dict[str, Any],
    ) -> ClaimInvoice:
        orch = claim_orchestrator(uow)
        claim = orch.load(actor, claim_id)
        return orch.update_child(actor, claim, INVOICE_KIND, invoice_id, changes)

    @staticmethod
    def delete_invoice(uow: UnitOfWork, *, actor: RequestActor, claim_id: UUID, invoice_id: UUID) -> Dict[str, str]:
        orch = claim_orchestrator(uow)
        claim = orch.load(actor, claim_id)
        return orch.delete_child(actor, claim, INVOICE_KIND, invoice_id)
