"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service in the kernel layer.  All concrete services inherit
    from BaseService, receiving a SQLAlchemy ``Session`` that they use
    via ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback it.  The caller (or
      ``session_scope()``) owns commit/rollback.  The only rollback a
      service performs is of a SAVEPOINT it opened itself.

Failure modes:
    - If a subclass calls ``session.commit()``, a failed journal update can
      no longer be rolled back as a whole.
"""

from abc import ABC
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query-only (read) methods -- those belong
          in ``ledger_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session


class UserScopedService(BaseService[ModelType]):
    """
    Base for services over user-owned reference data.

    Lookups are restricted to ``user_id``; rows created on the user's behalf
    are stamped with ``actor_id``.
    """

    def __init__(self, session: Session, user_id: UUID, actor_id: UUID):
        super().__init__(session)
        self.user_id = user_id
        self.actor_id = actor_id
