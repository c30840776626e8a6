"""
AttributeAssignmentService -- the temporal assignment store.

Responsibility:
    Records, per (subject, attribute type), non-overlapping date intervals
    during which an attribute applies to a shift or a cab, with an optional
    value.  Owns every mutation of ``attribute_assignments``.

Architecture position:
    Kernel > Services -- imperative shell.  Reads through
    AssignmentSelector; writes via flush only (caller owns the transaction).

Invariants enforced:
    ASSIGNMENT_NON_OVERLAP -- every assign/update/end runs the overlap
        search and the write in the caller's transaction after taking
        ``SELECT ... FOR UPDATE`` on the attribute type row.  Concurrent
        writers for the same attribute type therefore serialize; the second
        one sees the first one's row once it commits.  On PostgreSQL the
        exclusion constraint is the storage-level backstop and its
        IntegrityError is translated to AssignmentOverlapError.
    REQUIRED_VALUE -- values are checked against requires_value and
        validation_pattern on assign and update.
    IMMUTABLE_HISTORY -- delete is refused once start_date is before today.

Failure modes:
    - AttributeTypeNotFoundError, AttributeTypeInactiveError
    - SubjectNotFoundError when the ShiftDirectory does not know the subject
    - InvalidDateRangeError, MissingAttributeValueError,
      InvalidAttributeValueError
    - AssignmentOverlapError naming every conflicting assignment
    - AssignmentNotFoundError, ImmutableHistoryError

Audit relevance:
    Assignments are the evidence for every attribute charge.  Mutations are
    logged with the actor, and history rows are closed, never removed.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fleet_kernel.db.constraints import ASSIGNMENT_EXCLUSION, violated_constraint
from fleet_kernel.domain.attributes import normalize_code, normalize_value, validate_value
from fleet_kernel.domain.clock import Clock, SystemClock
from fleet_kernel.domain.dtos import AssignmentInfo
from fleet_kernel.domain.intervals import validate_range
from fleet_kernel.domain.providers import ShiftDirectory
from fleet_kernel.domain.subjects import SubjectKind, SubjectRef
from fleet_kernel.exceptions import (
    AssignmentNotFoundError,
    AssignmentOverlapError,
    AttributeTypeInactiveError,
    AttributeTypeNotFoundError,
    ImmutableHistoryError,
    InvalidDateRangeError,
)
from fleet_kernel.logging_config import LogContext, get_logger
from fleet_kernel.models.attribute_assignment import AttributeAssignment
from fleet_kernel.models.attribute_type import AttributeType
from fleet_kernel.selectors.assignment_selector import AssignmentSelector
from fleet_kernel.services.base import BaseService, require_known_subject

logger = get_logger("services.assignment")


class AttributeAssignmentService(BaseService[AttributeAssignment]):
    """
    Service for assigning attributes to shifts and cabs over time.

    Contract:
        All public methods return AssignmentInfo DTOs (or plain ids).
        Intervals are closed [start_date, end_date]; an absent end_date is
        open-ended.  An update never reopens a closed assignment.

    Non-goals:
        - Does NOT price assignments (see ChargeCalculator).
        - Does NOT own shifts or cabs; existence is checked through the
          ShiftDirectory.
    """

    def __init__(
        self,
        session: Session,
        subjects: ShiftDirectory,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._subjects = subjects
        self._selector = AssignmentSelector(session)

    # -- internal helpers --------------------------------------------------

    def _lock_attribute_type(self, attribute_type_id: UUID) -> AttributeType:
        """Fetch the attribute type row with a write lock held to commit."""
        attribute_type = self.session.execute(
            select(AttributeType)
            .where(AttributeType.id == attribute_type_id)
            .with_for_update()
        ).scalar_one_or_none()
        if attribute_type is None:
            raise AttributeTypeNotFoundError(str(attribute_type_id))
        return attribute_type

    def _get_by_id(self, assignment_id: UUID) -> AttributeAssignment:
        assignment = self.session.get(AttributeAssignment, assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(str(assignment_id))
        return assignment

    def _check_no_overlap(
        self,
        subject: SubjectRef,
        attribute_type_id: UUID,
        start_date: date,
        end_date: date | None,
        exclude_id: UUID | None = None,
    ) -> None:
        conflicts = self._selector.find_overlapping(
            subject, attribute_type_id, start_date, end_date, exclude_id=exclude_id
        )
        if conflicts:
            conflicting_ids = [str(c.id) for c in conflicts]
            logger.warning(
                "assignment_overlap_rejected",
                extra={
                    "subject": str(subject),
                    "attribute_type_id": str(attribute_type_id),
                    "start_date": str(start_date),
                    "end_date": str(end_date) if end_date else None,
                    "conflicting_ids": conflicting_ids,
                },
            )
            raise AssignmentOverlapError(
                subject=str(subject),
                attribute_type_id=str(attribute_type_id),
                conflicting_ids=conflicting_ids,
                start=str(start_date),
                end=str(end_date) if end_date else None,
            )

    def _flush(self, on_overlap: Callable[[], AssignmentOverlapError]) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            if violated_constraint(exc) == ASSIGNMENT_EXCLUSION:
                raise on_overlap() from exc
            raise

    # -- commands ----------------------------------------------------------

    def assign(
        self,
        subject: SubjectRef,
        attribute_type_id: UUID,
        actor_id: UUID,
        start_date: date,
        end_date: date | None = None,
        value: str | None = None,
        notes: str | None = None,
    ) -> AssignmentInfo:
        """
        Assign an attribute to a subject for [start_date, end_date].

        Args:
            subject: The shift or cab.
            attribute_type_id: Attribute type being assigned.
            actor_id: UUID of the actor making the assignment.
            start_date: First day the attribute applies.
            end_date: Last day it applies; None for open-ended.
            value: Optional value (e.g. the license number).
            notes: Free text.

        Returns:
            The created AssignmentInfo.

        Raises:
            AssignmentOverlapError: Another assignment of the same type
                overlaps the interval for this subject.
        """
        with LogContext.bind(
            actor_id=actor_id, subject=subject, attribute_type_id=attribute_type_id
        ):
            return self._assign(
                subject, attribute_type_id, actor_id, start_date, end_date, value, notes
            )

    def _assign(
        self,
        subject: SubjectRef,
        attribute_type_id: UUID,
        actor_id: UUID,
        start_date: date,
        end_date: date | None,
        value: str | None,
        notes: str | None,
    ) -> AssignmentInfo:
        attribute_type = self._lock_attribute_type(attribute_type_id)
        if not attribute_type.is_active:
            raise AttributeTypeInactiveError(attribute_type.code)
        require_known_subject(self._subjects, subject)
        validate_range(start_date, end_date)

        value = normalize_value(value)
        validate_value(
            attribute_type.code,
            value,
            attribute_type.requires_value,
            attribute_type.validation_pattern,
        )

        self._check_no_overlap(subject, attribute_type_id, start_date, end_date)

        assignment = AttributeAssignment(
            subject_kind=subject.kind.value,
            subject_id=subject.id,
            attribute_type_id=attribute_type_id,
            value=value,
            start_date=start_date,
            end_date=end_date,
            notes=notes,
            created_by_id=actor_id,
        )
        self.session.add(assignment)
        self._flush(
            lambda: AssignmentOverlapError(
                str(subject), str(attribute_type_id), [], str(start_date),
                str(end_date) if end_date else None,
            )
        )

        logger.info(
            "attribute_assigned",
            extra={
                "assignment_id": str(assignment.id),
                "attribute_code": attribute_type.code,
                "start_date": str(start_date),
                "end_date": str(end_date) if end_date else None,
            },
        )
        return AssignmentInfo.from_model(assignment)

    def update(
        self,
        assignment_id: UUID,
        actor_id: UUID,
        value: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        notes: str | None = None,
    ) -> AssignmentInfo:
        """
        Update value, interval or notes of an assignment.

        Omitted arguments keep their current value.  ``end_date=None``
        therefore leaves the end unchanged: a closed assignment is never
        reopened here.  An empty string clears the value (subject to
        requires_value).

        Raises:
            AssignmentOverlapError: The recomputed interval overlaps another
                assignment of the same (subject, attribute type).
        """
        assignment = self._get_by_id(assignment_id)
        attribute_type = self._lock_attribute_type(assignment.attribute_type_id)
        subject = assignment.subject

        new_start = start_date if start_date is not None else assignment.start_date
        new_end = end_date if end_date is not None else assignment.end_date
        validate_range(new_start, new_end)

        new_value = normalize_value(value) if value is not None else assignment.value
        validate_value(
            attribute_type.code,
            new_value,
            attribute_type.requires_value,
            attribute_type.validation_pattern,
        )

        self._check_no_overlap(
            subject, assignment.attribute_type_id, new_start, new_end,
            exclude_id=assignment.id,
        )

        assignment.start_date = new_start
        assignment.end_date = new_end
        assignment.value = new_value
        if notes is not None:
            assignment.notes = notes
        assignment.updated_by_id = actor_id
        self._flush(
            lambda: AssignmentOverlapError(
                str(subject), str(assignment.attribute_type_id), [], str(new_start),
                str(new_end) if new_end else None,
            )
        )

        logger.info(
            "assignment_updated",
            extra={
                "assignment_id": str(assignment.id),
                "subject": str(subject),
                "start_date": str(new_start),
                "end_date": str(new_end) if new_end else None,
                "actor_id": str(actor_id),
            },
        )
        return AssignmentInfo.from_model(assignment)

    def end(self, assignment_id: UUID, end_date: date, actor_id: UUID) -> AssignmentInfo:
        """
        Close an assignment on ``end_date`` (inclusive).

        Raises:
            InvalidDateRangeError: iff end_date is before start_date.
            AssignmentOverlapError: A closed assignment is extended into
                another assignment's interval.
        """
        assignment = self._get_by_id(assignment_id)
        if end_date < assignment.start_date:
            raise InvalidDateRangeError(
                str(assignment.start_date),
                str(end_date),
                "end date precedes the assignment start date",
            )
        self._lock_attribute_type(assignment.attribute_type_id)

        # Shortening can never create an overlap; extending a closed one can.
        if assignment.end_date is not None and end_date > assignment.end_date:
            self._check_no_overlap(
                assignment.subject,
                assignment.attribute_type_id,
                assignment.start_date,
                end_date,
                exclude_id=assignment.id,
            )

        assignment.end_date = end_date
        assignment.updated_by_id = actor_id
        self._flush(
            lambda: AssignmentOverlapError(
                str(assignment.subject), str(assignment.attribute_type_id), [],
                str(assignment.start_date), str(end_date),
            )
        )

        logger.info(
            "assignment_ended",
            extra={
                "assignment_id": str(assignment.id),
                "subject": str(assignment.subject),
                "end_date": str(end_date),
                "actor_id": str(actor_id),
            },
        )
        return AssignmentInfo.from_model(assignment)

    def delete(self, assignment_id: UUID, actor_id: UUID | None = None) -> None:
        """
        Remove an assignment that has not started yet.

        Raises:
            ImmutableHistoryError: start_date is before today.
        """
        assignment = self._get_by_id(assignment_id)
        today = self._clock.today()
        if assignment.start_date < today:
            logger.warning(
                "assignment_delete_rejected",
                extra={
                    "assignment_id": str(assignment.id),
                    "start_date": str(assignment.start_date),
                    "today": str(today),
                },
            )
            raise ImmutableHistoryError(
                "attribute assignment", str(assignment.id), str(assignment.start_date)
            )

        self._lock_attribute_type(assignment.attribute_type_id)
        subject = assignment.subject
        self.session.delete(assignment)
        self.session.flush()

        logger.info(
            "assignment_deleted",
            extra={
                "assignment_id": str(assignment_id),
                "subject": str(subject),
                "actor_id": str(actor_id) if actor_id else None,
            },
        )

    # -- queries -----------------------------------------------------------

    def get(self, assignment_id: UUID) -> AssignmentInfo:
        return AssignmentInfo.from_model(self._get_by_id(assignment_id))

    def get_active(
        self,
        subject: SubjectRef,
        attribute_type_id: UUID,
        on_date: date,
    ) -> AssignmentInfo | None:
        """The assignment of this type covering ``on_date``, or None."""
        return self._selector.get_active(subject, attribute_type_id, on_date)

    def get_active_on(self, subject: SubjectRef, on_date: date) -> list[AssignmentInfo]:
        """All assignments of any type covering ``on_date``."""
        return self._selector.active_on(subject, on_date)

    def get_current(self, subject: SubjectRef) -> list[AssignmentInfo]:
        return self._selector.active_on(subject, self._clock.today())

    def get_history(self, subject: SubjectRef) -> list[AssignmentInfo]:
        """All assignments for the subject, start date descending."""
        return self._selector.history(subject)

    def get_history_by_type(
        self,
        subject: SubjectRef,
        attribute_type_id: UUID,
    ) -> list[AssignmentInfo]:
        return self._selector.history_by_type(subject, attribute_type_id)

    def has_attribute_now(self, subject: SubjectRef, attribute_code: str) -> bool:
        attribute_type_id = self.session.execute(
            select(AttributeType.id).where(
                AttributeType.code == normalize_code(attribute_code)
            )
        ).scalar_one_or_none()
        if attribute_type_id is None:
            return False
        return (
            self._selector.get_active(subject, attribute_type_id, self._clock.today())
            is not None
        )

    def subjects_with_attribute(
        self,
        attribute_type_id: UUID,
        on_date: date,
        kind: SubjectKind = SubjectKind.SHIFT,
    ) -> list[UUID]:
        """Ids of subjects of ``kind`` holding the attribute on ``on_date``."""
        return self._selector.subject_ids_with_attribute(attribute_type_id, on_date, kind)
