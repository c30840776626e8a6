"""
Module: fleet_kernel.selectors.assignment_selector
Responsibility: Read-only queries over temporal attribute assignments:
    overlap search, active-on-date lookup, ordered history, and the
    "which subjects hold this attribute" query used by scope resolution.
Architecture position: Kernel > Selectors.

Interval semantics:
    Stored intervals are closed [start_date, end_date]; a NULL end_date is
    open-ended.  Two intervals overlap iff each starts on or before the
    other's (effective) end.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from fleet_kernel.domain.dtos import AssignmentInfo
from fleet_kernel.domain.intervals import effective_end
from fleet_kernel.domain.subjects import SubjectKind, SubjectRef
from fleet_kernel.models.attribute_assignment import AttributeAssignment
from fleet_kernel.selectors.base import BaseSelector


def _for_subject(subject: SubjectRef):
    return (
        AttributeAssignment.subject_kind == subject.kind.value,
        AttributeAssignment.subject_id == subject.id,
    )


def _covers(on_date: date):
    return (
        AttributeAssignment.start_date <= on_date,
        or_(
            AttributeAssignment.end_date.is_(None),
            AttributeAssignment.end_date >= on_date,
        ),
    )


class AssignmentSelector(BaseSelector[AttributeAssignment]):
    """
    Selector for assignment queries.

    Guarantees:
        - Read-only.
        - History is ordered by start_date descending; other lists by
          start_date ascending.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def find_overlapping(
        self,
        subject: SubjectRef,
        attribute_type_id: UUID,
        start_date: date,
        end_date: date | None,
        exclude_id: UUID | None = None,
    ) -> list[AssignmentInfo]:
        """
        Assignments of (subject, attribute type) that share a day with
        [start_date, end_date].  An absent end_date is open-ended.
        """
        stmt = select(AttributeAssignment).where(
            *_for_subject(subject),
            AttributeAssignment.attribute_type_id == attribute_type_id,
            AttributeAssignment.start_date <= effective_end(end_date),
            or_(
                AttributeAssignment.end_date.is_(None),
                AttributeAssignment.end_date >= start_date,
            ),
        )
        if exclude_id is not None:
            stmt = stmt.where(AttributeAssignment.id != exclude_id)
        stmt = stmt.order_by(AttributeAssignment.start_date)
        rows = self.session.execute(stmt).scalars().all()
        return [AssignmentInfo.from_model(row) for row in rows]

    def get(self, assignment_id: UUID) -> AssignmentInfo | None:
        row = self.session.get(AttributeAssignment, assignment_id)
        return AssignmentInfo.from_model(row) if row else None

    def get_active(
        self,
        subject: SubjectRef,
        attribute_type_id: UUID,
        on_date: date,
    ) -> AssignmentInfo | None:
        """The assignment of this type covering ``on_date``, if any.

        Non-overlap guarantees at most one.
        """
        row = self.session.execute(
            select(AttributeAssignment).where(
                *_for_subject(subject),
                AttributeAssignment.attribute_type_id == attribute_type_id,
                *_covers(on_date),
            )
        ).scalars().first()
        return AssignmentInfo.from_model(row) if row else None

    def active_on(self, subject: SubjectRef, on_date: date) -> list[AssignmentInfo]:
        """All assignments, of any attribute type, covering ``on_date``."""
        rows = self.session.execute(
            select(AttributeAssignment)
            .where(*_for_subject(subject), *_covers(on_date))
            .order_by(AttributeAssignment.start_date)
        ).scalars().all()
        return [AssignmentInfo.from_model(row) for row in rows]

    def history(self, subject: SubjectRef) -> list[AssignmentInfo]:
        rows = self.session.execute(
            select(AttributeAssignment)
            .where(*_for_subject(subject))
            .order_by(
                AttributeAssignment.start_date.desc(),
                AttributeAssignment.attribute_type_id,
            )
        ).scalars().all()
        return [AssignmentInfo.from_model(row) for row in rows]

    def history_by_type(
        self,
        subject: SubjectRef,
        attribute_type_id: UUID,
    ) -> list[AssignmentInfo]:
        rows = self.session.execute(
            select(AttributeAssignment)
            .where(
                *_for_subject(subject),
                AttributeAssignment.attribute_type_id == attribute_type_id,
            )
            .order_by(AttributeAssignment.start_date.desc())
        ).scalars().all()
        return [AssignmentInfo.from_model(row) for row in rows]

    def active_for_attribute_type(
        self,
        attribute_type_id: UUID,
        on_date: date,
        kind: SubjectKind = SubjectKind.SHIFT,
    ) -> list[AssignmentInfo]:
        """Assignments of the type covering ``on_date``, across all subjects of ``kind``."""
        rows = self.session.execute(
            select(AttributeAssignment)
            .where(
                AttributeAssignment.attribute_type_id == attribute_type_id,
                AttributeAssignment.subject_kind == kind.value,
                *_covers(on_date),
            )
            .order_by(AttributeAssignment.subject_id)
        ).scalars().all()
        return [AssignmentInfo.from_model(row) for row in rows]

    def subject_ids_with_attribute(
        self,
        attribute_type_id: UUID,
        on_date: date,
        kind: SubjectKind = SubjectKind.SHIFT,
    ) -> list[UUID]:
        ids = self.session.execute(
            select(AttributeAssignment.subject_id)
            .where(
                AttributeAssignment.attribute_type_id == attribute_type_id,
                AttributeAssignment.subject_kind == kind.value,
                *_covers(on_date),
            )
            .distinct()
        ).scalars().all()
        return list(ids)
