# cm_core/insurers/selectors.py
from __future__ import annotations

import logging
from uuid import UUID

from django.db.models import Q

from cm_core.common.api.exceptions import BusinessRuleError, NotFoundError
from cm_core.common.scope import RequestActor
from cm_core.insurers.models import Insurer
from cm_core.lifecycle.uow import UnitOfWork

logger = logging.getLogger(__name__)


class InsurerSelectors:
    @staticmethod
    def require_active_insurer(uow: UnitOfWork, actor: RequestActor, insurer_id: UUID, *, what: str = "Request") -> Insurer:
        insurer = uow.rows(Insurer).filter(id=insurer_id, org_id=actor.org_id).first()
        extra = {"insurer_id": str(insurer_id), "user_id": actor.user_id}

        if insurer is None:
            logger.warning("%s with unknown insurer", what, extra=extra)
            raise NotFoundError("Insurer not found", "INSURER_NOT_FOUND")

        if not insurer.is_active:
            logger.warning("%s with inactive insurer", what, extra=extra)
            raise BusinessRuleError("Insurer is inactive", "INSURER_INACTIVE")

        return insurer

    @staticmethod
    def lookup_insurers(uow: UnitOfWork, actor: RequestActor, *, search: str | None = None):
        qs = uow.rows(Insurer).filter(org_id=actor.org_id, is_active=True)
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(code__icontains=search))
        return qs.order_by("name", "id")
