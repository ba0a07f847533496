# cm_core/lifecycle/authorizer.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from cm_core.clients.models import Affiliate
from cm_core.common.api.exceptions import PermissionDeniedError
from cm_core.common.scope import RequestActor
from cm_core.iam.models import UserClient
from cm_core.iam.roles import SCOPE_ALL, SCOPE_CLIENT, SCOPE_OWN
from cm_core.lifecycle.uow import UnitOfWork

logger = logging.getLogger(__name__)


class ScopeAuthorizer:
    """
    Decides whether an in-org record is inside the caller's scope.

    - all: always allowed.
    - client: a UserClient row links the caller to the client.
    - own: the subscriber affiliate is linked to the caller.

    Never writes. Callers have already turned unknown/other-org records
    into 404s, so every refusal here is a 403.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # ------------------------------------------------------------------
    # Assignment lookups
    # ------------------------------------------------------------------
    def has_client_assignment(self, actor: RequestActor, client_id: UUID) -> bool:
        return self.uow.rows(UserClient).filter(user_id=actor.user_id, client_id=client_id).exists()

    def has_linked_affiliate(self, actor: RequestActor, client_id: UUID) -> bool:
        return (
            self.uow.rows(Affiliate)
            .filter(org_id=actor.org_id, client_id=client_id, user_id=actor.user_id, is_active=True)
            .exists()
        )

    def assigned_client_ids(self, actor: RequestActor) -> QuerySet:
        return self.uow.rows(UserClient).filter(user_id=actor.user_id).values("client_id")

    def linked_client_ids(self, actor: RequestActor) -> QuerySet:
        return (
            self.uow.rows(Affiliate)
            .filter(org_id=actor.org_id, user_id=actor.user_id, is_active=True)
            .values("client_id")
        )

    def _deny(self, actor: RequestActor, what: str, **context) -> None:
        logger.warning(
            "%s denied by %s scope",
            what,
            actor.scope,
            extra={"user_id": actor.user_id, "org_id": str(actor.org_id), "scope": actor.scope, **context},
        )
        raise PermissionDeniedError()

    # ------------------------------------------------------------------
    # Record gates
    # ------------------------------------------------------------------
    def require_client(self, actor: RequestActor, client_id: UUID, *, what: str = "Access") -> None:
        """
        Client-level gate: assignment for client scope, an active linked
        affiliate under the client for own scope.
        """
        if actor.scope == SCOPE_ALL:
            return

        if actor.scope == SCOPE_CLIENT:
            if not self.has_client_assignment(actor, client_id):
                self._deny(actor, what, client_id=str(client_id))
            return

        if actor.scope == SCOPE_OWN:
            if not self.has_linked_affiliate(actor, client_id):
                self._deny(actor, what, client_id=str(client_id))
            return

        self._deny(actor, what, client_id=str(client_id))

    def require_assigned_client(self, actor: RequestActor, client_id: UUID, *, what: str = "Access") -> None:
        """
        Only enforces the client scope. No-op for all and own.
        """
        if actor.scope == SCOPE_CLIENT and not self.has_client_assignment(actor, client_id):
            self._deny(actor, what, client_id=str(client_id))

    def require_owner(self, actor: RequestActor, owner_user_id: Optional[int], *, what: str = "Access", **context) -> None:
        """
        Only enforces the own scope. No-op for all and client.
        """
        if actor.scope == SCOPE_OWN and owner_user_id != actor.user_id:
            self._deny(actor, what, **context)

    def require_subscriber(self, actor: RequestActor, affiliate: Affiliate, *, what: str = "Access") -> None:
        self.require_assigned_client(actor, affiliate.client_id, what=what)
        self.require_owner(actor, affiliate.user_id, what=what, affiliate_id=str(affiliate.id))

    # ------------------------------------------------------------------
    # Row filtering for lists
    # ------------------------------------------------------------------
    def restrict(
        self,
        qs: QuerySet,
        actor: RequestActor,
        *,
        client_field: str = "client_id",
        owner_field: Optional[str] = None,
    ) -> QuerySet:
        """
        Narrows a queryset to the caller's scope.
        With `owner_field` the own scope matches that user column,
        otherwise it matches clients where the caller has a linked affiliate.
        """
        if actor.scope == SCOPE_ALL:
            return qs

        if actor.scope == SCOPE_CLIENT:
            return qs.filter(**{f"{client_field}__in": self.assigned_client_ids(actor)})

        if actor.scope == SCOPE_OWN:
            if owner_field:
                return qs.filter(**{owner_field: actor.user_id})
            return qs.filter(**{f"{client_field}__in": self.linked_client_ids(actor)})

        return qs.none()
