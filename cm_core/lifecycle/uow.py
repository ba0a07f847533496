# cm_core/lifecycle/uow.py
from __future__ import annotations

from contextlib import contextmanager

from django.db import DEFAULT_DB_ALIAS, transaction


class UnitOfWork:
    """
    Explicit storage handle.

    Every engine component reads and writes through the handle it is given
    instead of the ambient default connection, and the write set of one
    mutation is committed by `begin()`:

        with uow.begin():
            uow.rows(Claim).filter(...).update(...)
            uow.rows(ClaimHistory).create(...)

    Nested `begin()` calls become savepoints.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def rows(self, model):
        return model._default_manager.db_manager(self.using).all()

    def locked(self, model):
        return self.rows(model).select_for_update()

    @contextmanager
    def begin(self):
        with transaction.atomic(using=self.using):
            yield self

    def in_transaction(self) -> bool:
        return transaction.get_connection(self.using).in_atomic_block

    def __repr__(self) -> str:
        return f"UnitOfWork(using={self.using!r})"
