"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for every
    service in the kernel.  Concrete services receive a SQLAlchemy
    ``Session`` and persist through ``session.flush()`` -- never
    ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or roll back.  The caller (``session_scope()`` or a
    test fixture) owns commit/rollback, so an overlap check and the write
    it guards always land in one transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from fleet_kernel.db.base import Base
from fleet_kernel.domain.providers import ShiftDirectory
from fleet_kernel.domain.subjects import SubjectKind, SubjectRef
from fleet_kernel.exceptions import SubjectNotFoundError

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.

    Non-goals:
        - Does NOT manage transaction lifecycle.
    """

    def __init__(self, session: Session):
        self.session = session


def require_known_subject(directory: ShiftDirectory, subject: SubjectRef) -> None:
    """
    Raise SubjectNotFoundError unless ``directory`` knows the shift or cab.

    Shared by every service that accepts a SubjectRef from a caller.
    """
    if subject.kind is SubjectKind.SHIFT:
        exists = directory.shift_exists(subject.id)
    else:
        exists = directory.cab_exists(subject.id)
    if not exists:
        raise SubjectNotFoundError(subject.kind.value.lower(), str(subject.id))
