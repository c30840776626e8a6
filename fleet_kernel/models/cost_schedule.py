"""
Module: fleet_kernel.models.cost_schedule
Responsibility: ORM persistence for the price history of each attribute
    type: non-overlapping intervals of (price, billing unit).
Architecture position: Kernel > Models.  May import from db/ and domain
    value enums only.

Invariants enforced:
    - COST_SCHEDULE_NON_OVERLAP: enforced by CostScheduleService and, on
      PostgreSQL, by ex_cost_schedule_entries_no_overlap.
    - (attribute_type_id, effective_from) is unique; effective_from is the
      natural key and never changes.
    - price >= 0 and effective_to >= effective_from (check constraints).
"""

from datetime import date
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fleet_kernel.db.base import TrackedBase, UUIDString
from fleet_kernel.db.types import Price
from fleet_kernel.domain.charges import BillingUnit


class CostScheduleEntry(TrackedBase):
    """A price and billing unit in force for an attribute type over an interval."""

    __tablename__ = "cost_schedule_entries"

    __table_args__ = (
        UniqueConstraint(
            "attribute_type_id",
            "effective_from",
            name="uq_cost_schedule_type_from",
        ),
        CheckConstraint("price >= 0", name="ck_cost_schedule_price_non_negative"),
        CheckConstraint(
            "effective_to IS NULL OR effective_to >= effective_from",
            name="ck_cost_schedule_range",
        ),
    )

    attribute_type_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("attribute_types.id"),
        nullable=False,
        index=True,
    )

    price: Mapped[Price] = mapped_column(nullable=False)

    billing_unit: Mapped[BillingUnit] = mapped_column(
        String(10),
        nullable=False,
        default=BillingUnit.MONTHLY,
    )

    effective_from: Mapped[date] = mapped_column(nullable=False)

    effective_to: Mapped[date | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return (
            f"<CostScheduleEntry {self.attribute_type_id} {self.price}/"
            f"{self.billing_unit} {self.effective_from}..{self.effective_to or 'open'}>"
        )
