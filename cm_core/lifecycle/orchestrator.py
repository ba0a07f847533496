# cm_core/lifecycle/orchestrator.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple
from uuid import UUID

from django.core.exceptions import FieldDoesNotExist
from django.db import IntegrityError
from django.utils import timezone

from cm_core.audit.services import AuditService
from cm_core.common.api.exceptions import BusinessRuleError, ConflictError, DomainError, NotFoundError
from cm_core.common.scope import RequestActor
from cm_core.lifecycle.authorizer import ScopeAuthorizer
from cm_core.lifecycle.checks import check_editable, check_invariants, check_transition, missing_fields
from cm_core.lifecycle.definitions import Lifecycle
from cm_core.lifecycle.uow import UnitOfWork

logger = logging.getLogger(__name__)

TRANSITION_CONFLICT = "TRANSITION_CONFLICT"
TRANSITION_CONFLICT_MSG = "Record status changed concurrently; reload and retry"


@dataclass(frozen=True)
class RecordKind:
    """
    Binds a lifecycle table to its storage and naming.

    `authorize(authorizer, actor, record)` raises PermissionDeniedError when the
    record is outside the actor's scope. `snapshot(record)` returns the audit
    metadata kept when the record is deleted.
    """
    lifecycle: Lifecycle
    model: type
    history_model: type
    history_fk: str
    resource: str
    label: str
    not_found_code: str
    authorize: Callable[[ScopeAuthorizer, RequestActor, Any], None]
    snapshot: Callable[[Any], Dict[str, Any]]
    related: Tuple[str, ...] = ()
    unique_conflict: Optional[Callable[[], DomainError]] = None


@dataclass(frozen=True)
class ChildKind:
    """
    Child collection of a record (e.g. claim invoices).
    Child writes only need record-level authorization.
    """
    model: type
    parent_field: str
    name: str
    label: str
    not_found_code: str
    metadata: Callable[[Any], Dict[str, Any]]


class MutationOrchestrator:
    """
    Sequences load -> authorize -> lifecycle checks, then commits the entity
    write, the history row and the audit row as one unit of work.

    Status changes are conditional on the status observed during validation;
    a lost race rolls the whole unit back with TRANSITION_CONFLICT.
    """

    def __init__(self, kind: RecordKind, uow: UnitOfWork):
        self.kind = kind
        self.uow = uow
        self.authorizer = ScopeAuthorizer(uow)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @property
    def lifecycle(self) -> Lifecycle:
        return self.kind.lifecycle

    def _rows(self):
        return self.uow.rows(self.kind.model).select_related(*self.kind.related)

    def _tracks_actor(self) -> bool:
        try:
            self.kind.model._meta.get_field("updated_by")
        except FieldDoesNotExist:
            return False
        return True

    def _log_extra(self, actor: RequestActor, record_id, **extra) -> dict:
        return {
            f"{self.kind.resource}_id": str(record_id),
            "user_id": actor.user_id,
            "org_id": str(actor.org_id),
            "scope": actor.scope,
            **extra,
        }

    def _not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.kind.label} not found", self.kind.not_found_code)

    def _unique_conflict(self, actor: RequestActor, record_id, exc: IntegrityError):
        if self.kind.unique_conflict is None:
            raise exc
        logger.warning(
            "%s write hit a unique identifier conflict",
            self.kind.label,
            extra=self._log_extra(actor, record_id),
        )
        raise self.kind.unique_conflict() from exc

    def _write_history(self, actor: RequestActor, record, from_status, to_status, reason=None, notes=None) -> None:
        self.uow.rows(self.kind.history_model).create(
            **{self.kind.history_fk: record},
            from_status=from_status,
            to_status=to_status,
            reason=reason,
            notes=notes,
            created_by_id=actor.user_id,
        )

    def _audit(self, actor: RequestActor, record_id, verb: str, metadata: Dict[str, Any]) -> None:
        AuditService.log(
            self.uow,
            actor=actor,
            action=f"{self.kind.resource}.{verb}",
            resource=self.kind.resource,
            resource_id=record_id,
            metadata=metadata,
        )

    def _conditional_update(self, actor: RequestActor, record, values: Dict[str, Any]) -> None:
        try:
            with self.uow.begin():
                updated = (
                    self.uow.rows(self.kind.model)
                    .filter(id=record.id, org_id=actor.org_id, status=record.status)
                    .update(**values)
                )
        except IntegrityError as exc:
            self._unique_conflict(actor, record.id, exc)

        if updated == 0:
            logger.warning(
                "%s status changed concurrently",
                self.kind.label,
                extra=self._log_extra(actor, record.id, expected_status=record.status),
            )
            raise ConflictError(TRANSITION_CONFLICT_MSG, TRANSITION_CONFLICT)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def fetch(self, actor: RequestActor, record_id: UUID):
        record = self._rows().filter(id=record_id, org_id=actor.org_id).first()
        if record is None:
            raise self._not_found()
        return record

    def load(self, actor: RequestActor, record_id: UUID):
        """
        Unknown and other-org records are 404; out-of-scope records are 403.
        """
        record = self._rows().filter(id=record_id, org_id=actor.org_id).first()
        if record is None:
            logger.warning(
                "%s access with unknown %s",
                self.kind.label,
                self.kind.resource,
                extra=self._log_extra(actor, record_id),
            )
            raise self._not_found()

        self.kind.authorize(self.authorizer, actor, record)
        return record

    # ------------------------------------------------------------------
    # Record mutations
    # ------------------------------------------------------------------
    def create(
        self,
        actor: RequestActor,
        *,
        insert: Callable[[UnitOfWork, str], Any],
        metadata: Callable[[Any], Dict[str, Any]],
    ):
        """
        `insert(uow, initial_status)` writes the entity row and returns it.
        """
        initial = self.lifecycle.initial_status

        with self.uow.begin():
            try:
                with self.uow.begin():
                    record = insert(self.uow, initial)
            except IntegrityError as exc:
                self._unique_conflict(actor, None, exc)

            self._write_history(actor, record, None, initial)
            self._audit(actor, record.id, "created", metadata(record))

        logger.info("%s created", self.kind.label, extra=self._log_extra(actor, record.id, status=initial))
        return self.fetch(actor, record.id)

    def update(
        self,
        actor: RequestActor,
        record,
        changes: Dict[str, Any],
        *,
        validate: Optional[Callable[[Any, Dict[str, Any]], None]] = None,
        metadata: Optional[Callable[[Any, Dict[str, Any]], Dict[str, Any]]] = None,
    ):
        fields = list(changes)

        try:
            check_editable(self.lifecycle, record.status, fields)
        except BusinessRuleError:
            logger.warning(
                "%s update with non-editable fields",
                self.kind.label,
                extra=self._log_extra(actor, record.id, status=record.status, fields=fields),
            )
            raise

        if validate is not None:
            validate(record, changes)

        values = dict(changes)
        values["updated_at"] = timezone.now()
        if self._tracks_actor():
            values["updated_by_id"] = actor.user_id

        audit_metadata = {"changedFields": fields, f"{self.kind.resource}Status": record.status}
        if metadata is not None:
            audit_metadata.update(metadata(record, changes))

        with self.uow.begin():
            self._conditional_update(actor, record, values)
            self._audit(actor, record.id, "updated", audit_metadata)

        logger.info("%s updated", self.kind.label, extra=self._log_extra(actor, record.id, fields=fields))
        return self.fetch(actor, record.id)

    def transition(
        self,
        actor: RequestActor,
        record,
        to_status: str,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ):
        from_status = record.status
        extra = self._log_extra(actor, record.id, from_status=from_status, to_status=to_status)

        try:
            check_transition(self.lifecycle, from_status, to_status, reason)
        except BusinessRuleError as exc:
            logger.warning("%s transition rejected: %s", self.kind.label, exc.error_code, extra=extra)
            raise

        current = {f: getattr(record, f, None) for f in self.lifecycle.required_fields(to_status)}
        try:
            check_invariants(self.lifecycle, to_status, current)
        except BusinessRuleError:
            logger.warning(
                "%s transition blocked by missing invariant fields",
                self.kind.label,
                extra={**extra, "missing_fields": missing_fields(self.lifecycle, to_status, current)},
            )
            raise

        now = timezone.now()
        values = {"status": to_status, "updated_at": now}
        values.update(self.lifecycle.side_effect_fields(to_status, reason, now))
        if self._tracks_actor():
            values["updated_by_id"] = actor.user_id

        with self.uow.begin():
            self._conditional_update(actor, record, values)
            self._write_history(actor, record, from_status, to_status, reason, notes)
            self._audit(
                actor,
                record.id,
                "transitioned",
                {"fromStatus": from_status, "toStatus": to_status, "reason": reason, "notes": notes},
            )

        logger.info("%s transitioned", self.kind.label, extra=extra)
        return self.fetch(actor, record.id)

    def delete(self, actor: RequestActor, record) -> Dict[str, str]:
        """
        Cascades history and children. The audit row keeps a snapshot of the
        identifying fields since the record is no longer queryable afterwards.
        """
        snapshot = self.kind.snapshot(record)

        with self.uow.begin():
            deleted, _ = self.uow.rows(self.kind.model).filter(id=record.id, org_id=actor.org_id).delete()
            if not deleted:
                raise self._not_found()
            self._audit(actor, record.id, "deleted", snapshot)

        logger.info("%s deleted", self.kind.label, extra=self._log_extra(actor, record.id))
        return {"message": f"{self.kind.label} deleted"}

    # ------------------------------------------------------------------
    # Child mutations
    # ------------------------------------------------------------------
    def _child_rows(self, child: ChildKind, record):
        return self.uow.rows(child.model).filter(**{child.parent_field: record})

    def _child_not_found(self, actor: RequestActor, record, child: ChildKind, child_id) -> NotFoundError:
        logger.warning(
            "%s access with unknown %s",
            child.label,
            child.name,
            extra=self._log_extra(actor, record.id, **{f"{child.name}_id": str(child_id)}),
        )
        return NotFoundError(f"{child.label} not found", child.not_found_code)

    def get_child(self, actor: RequestActor, record, child: ChildKind, child_id: UUID):
        obj = self._child_rows(child, record).filter(id=child_id).first()
        if obj is None:
            raise self._child_not_found(actor, record, child, child_id)
        return obj

    def create_child(self, actor: RequestActor, record, child: ChildKind, values: Dict[str, Any]):
        with self.uow.begin():
            obj = self.uow.rows(child.model).create(**{child.parent_field: record}, **values)
            self._audit(actor, record.id, f"{child.name}_created", child.metadata(obj))

        logger.info(
            "%s created",
            child.label,
            extra=self._log_extra(actor, record.id, **{f"{child.name}_id": str(obj.id)}),
        )
        return obj

    def update_child(self, actor: RequestActor, record, child: ChildKind, child_id: UUID, changes: Dict[str, Any]):
        fields = list(changes)

        with self.uow.begin():
            obj = (
                self.uow.locked(child.model)
                .filter(**{child.parent_field: record}, id=child_id)
                .first()
            )
            if obj is None:
                raise self._child_not_found(actor, record, child, child_id)

            for name, value in changes.items():
                setattr(obj, name, value)
            if fields:
                obj.save(update_fields=fields)

            self._audit(actor, record.id, f"{child.name}_updated", {**child.metadata(obj), "changedFields": fields})

        logger.info(
            "%s updated",
            child.label,
            extra=self._log_extra(actor, record.id, fields=fields, **{f"{child.name}_id": str(child_id)}),
        )
        return obj

    def delete_child(self, actor: RequestActor, record, child: ChildKind, child_id: UUID) -> Dict[str, str]:
        with self.uow.begin():
            obj = (
                self.uow.locked(child.model)
                .filter(**{child.parent_field: record}, id=child_id)
                .first()
            )
            if obj is None:
                raise self._child_not_found(actor, record, child, child_id)

            metadata = child.metadata(obj)
            self._child_rows(child, record).filter(id=child_id).delete()
            self._audit(actor, record.id, f"{child.name}_deleted", metadata)

        logger.info(
            "%s deleted",
            child.label,
            extra=self._log_extra(actor, record.id, **{f"{child.name}_id": str(child_id)}),
        )
        return {"message": f"{child.label} deleted"}
