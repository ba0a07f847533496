# cm_core/clients/selectors.py
from __future__ import annotations

import logging
from uuid import UUID

from django.db.models import Q, QuerySet

from cm_core.clients.models import Affiliate, Client
from cm_core.common.api.exceptions import BusinessRuleError, NotFoundError
from cm_core.common.scope import RequestActor
from cm_core.iam.roles import SCOPE_OWN
from cm_core.lifecycle.authorizer import ScopeAuthorizer
from cm_core.lifecycle.uow import UnitOfWork

logger = logging.getLogger(__name__)


class ClientSelectors:
    """
    Reference checks shared by record writes and lookups.
    Unknown or other-org rows are 404, inactive rows are 422.
    """

    @staticmethod
    def require_active_client(uow: UnitOfWork, actor: RequestActor, client_id: UUID, *, what: str = "Request") -> Client:
        client = uow.rows(Client).filter(id=client_id, org_id=actor.org_id).first()
        extra = {"client_id": str(client_id), "user_id": actor.user_id, "scope": actor.scope}

        if client is None:
            logger.warning("%s with unknown client", what, extra=extra)
            raise NotFoundError("Client not found", "CLIENT_NOT_FOUND")

        if not client.is_active:
            logger.warning("%s with inactive client", what, extra=extra)
            raise BusinessRuleError("Client is inactive", "CLIENT_INACTIVE")

        return client

    @staticmethod
    def require_active_affiliate(
        uow: UnitOfWork,
        actor: RequestActor,
        affiliate_id: UUID,
        *,
        what: str = "Request",
        label: str = "Affiliate",
        code_prefix: str = "AFFILIATE",
    ) -> Affiliate:
        """
        Also used for patients, which are affiliate rows under another name.
        """
        affiliate = (
            uow.rows(Affiliate)
            .select_related("client")
            .filter(id=affiliate_id, org_id=actor.org_id)
            .first()
        )
        extra = {f"{label.lower()}_id": str(affiliate_id), "user_id": actor.user_id, "scope": actor.scope}

        if affiliate is None:
            logger.warning("%s with unknown %s", what, label.lower(), extra=extra)
            raise NotFoundError(f"{label} not found", f"{code_prefix}_NOT_FOUND")

        if not affiliate.is_active:
            logger.warning("%s with inactive %s", what, label.lower(), extra=extra)
            raise BusinessRuleError(f"{label} is inactive", f"{code_prefix}_INACTIVE")

        return affiliate

    # ------------------------------------------------------------------
    # Lookups for dependent selectors
    # ------------------------------------------------------------------
    @staticmethod
    def lookup_clients(uow: UnitOfWork, actor: RequestActor, *, search: str | None = None) -> QuerySet[Client]:
        qs = uow.rows(Client).filter(org_id=actor.org_id, is_active=True)
        qs = ScopeAuthorizer(uow).restrict(qs, actor, client_field="id")
        if search:
            qs = qs.filter(name__icontains=search)
        return qs.order_by("name", "id")

    @staticmethod
    def lookup_client_affiliates(
        uow: UnitOfWork,
        actor: RequestActor,
        client_id: UUID,
        *,
        search: str | None = None,
    ) -> QuerySet[Affiliate]:
        """
        Active main affiliates (subscribers) of a client.
        """
        client = ClientSelectors.require_active_client(uow, actor, client_id, what="Lookup")
        ScopeAuthorizer(uow).require_client(actor, client.id, what="Lookup")

        qs = uow.rows(Affiliate).filter(
            org_id=actor.org_id,
            client_id=client.id,
            is_active=True,
            primary_affiliate__isnull=True,
        )
        if actor.scope == SCOPE_OWN:
            qs = qs.filter(user_id=actor.user_id)

        if search:
            qs = qs.filter(
                Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(document_number__icontains=search)
            )
        return qs.order_by("last_name", "first_name", "id")

    @staticmethod
    def lookup_affiliate_patients(uow: UnitOfWork, actor: RequestActor, affiliate_id: UUID) -> list[Affiliate]:
        """
        The affiliate followed by its active dependents, sorted by last then first name.
        """
        affiliate = ClientSelectors.require_active_affiliate(uow, actor, affiliate_id, what="Lookup")
        ScopeAuthorizer(uow).require_subscriber(actor, affiliate, what="Lookup")

        rows = list(
            uow.rows(Affiliate).filter(
                Q(id=affiliate.id) | Q(primary_affiliate_id=affiliate.id),
                org_id=actor.org_id,
                is_active=True,
            )
        )
        rows.sort(key=lambda a: (a.id != affiliate.id, a.last_name, a.first_name))
        return rows
