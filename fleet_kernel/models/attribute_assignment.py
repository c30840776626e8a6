"""
Module: fleet_kernel.models.attribute_assignment
Responsibility: ORM persistence for temporal attribute assignments: the
    date intervals during which an attribute applies to a shift or a cab.
Architecture position: Kernel > Models.  May import from db/ and domain
    value types only.  MUST NOT import from services/ or selectors/.

Invariants enforced:
    - ASSIGNMENT_NON_OVERLAP: enforced by AttributeAssignmentService under a
      row lock on the attribute type, and on PostgreSQL by the
      ex_attribute_assignments_no_overlap exclusion constraint.
    - end_date is NULL or >= start_date (ck_attribute_assignments_range).

Failure modes:
    - IntegrityError on a range or exclusion violation at flush time.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleet_kernel.db.base import TrackedBase, UUIDString
from fleet_kernel.db.types import LongText, ValueText
from fleet_kernel.domain.subjects import SubjectKind, SubjectRef
from fleet_kernel.models.attribute_type import AttributeType


class AttributeAssignment(TrackedBase):
    """
    One interval during which an attribute applies to one subject.

    The subject is stored as a tagged pair (subject_kind, subject_id); a
    row can never point at a shift and a cab at the same time.  A NULL
    end_date means the assignment is open-ended.
    """

    __tablename__ = "attribute_assignments"

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="ck_attribute_assignments_range",
        ),
        Index(
            "idx_attribute_assignment_subject_type",
            "subject_kind",
            "subject_id",
            "attribute_type_id",
            "start_date",
        ),
        Index("idx_attribute_assignment_type_dates", "attribute_type_id", "start_date"),
    )

    subject_kind: Mapped[SubjectKind] = mapped_column(String(10), nullable=False)

    subject_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    attribute_type_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("attribute_types.id"),
        nullable=False,
    )

    value: Mapped[ValueText | None] = mapped_column(nullable=True)

    start_date: Mapped[date] = mapped_column(nullable=False)

    end_date: Mapped[date | None] = mapped_column(nullable=True)

    notes: Mapped[LongText | None] = mapped_column(nullable=True)

    attribute_type: Mapped[AttributeType] = relationship(lazy="joined")

    @property
    def subject(self) -> SubjectRef:
        return SubjectRef(SubjectKind(self.subject_kind), self.subject_id)

    def __repr__(self) -> str:
        return (
            f"<AttributeAssignment {self.subject_kind}:{self.subject_id} "
            f"{self.attribute_type_id} {self.start_date}..{self.end_date or 'open'}>"
        )
