"""
Module: fleet_kernel.models.attribute_type
Responsibility: ORM persistence for the attribute type registry: the master
    catalogue of cost-bearing characteristics (airport license, transponder,
    vehicle type, ...) that can be assigned to cabs and shifts.
Architecture position: Kernel > Models.  May import from db/ and domain
    value enums only.  MUST NOT import from services/ or selectors/.

Invariants enforced:
    - code is unique (uq_attribute_type_code) and never changed after
      creation (service layer).

Failure modes:
    - IntegrityError on duplicate code.

Audit relevance:
    Every assignment and cost schedule entry references an attribute type.
    Deactivating a type stops new assignments but keeps history intact.
"""

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fleet_kernel.db.base import TrackedBase
from fleet_kernel.db.types import LongText, Name, ShortCode, ValueText
from fleet_kernel.domain.attributes import AttributeCategory, AttributeDataType


class AttributeType(TrackedBase):
    """
    A named, reusable characteristic that can be assigned to a cab or shift.

    Guarantees:
        - code is globally unique and upper-case.
        - is_active gates new assignments only.
    """

    __tablename__ = "attribute_types"

    __table_args__ = (
        UniqueConstraint("code", name="uq_attribute_type_code"),
        Index("idx_attribute_type_category", "category"),
        Index("idx_attribute_type_active", "is_active"),
    )

    code: Mapped[ShortCode] = mapped_column(nullable=False)

    name: Mapped[Name] = mapped_column(nullable=False)

    description: Mapped[LongText | None] = mapped_column(nullable=True)

    category: Mapped[AttributeCategory] = mapped_column(String(30), nullable=False)

    data_type: Mapped[AttributeDataType] = mapped_column(
        String(20),
        nullable=False,
        default=AttributeDataType.STRING,
    )

    # Assignments of this type must carry a non-blank value
    requires_value: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Optional regex the whole value must match
    validation_pattern: Mapped[ValueText | None] = mapped_column(nullable=True)

    help_text: Mapped[LongText | None] = mapped_column(nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<AttributeType {self.code}: {self.name}>"
