"""
Module: fleet_kernel.selectors.cost_schedule_selector
Responsibility: Read-only queries over cost schedule entries: overlap
    search, the entry in force on a date, and per-type price history.
Architecture position: Kernel > Selectors.
"""

from datetime import date
from typing import Iterable
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from fleet_kernel.domain.dtos import CostScheduleEntryInfo
from fleet_kernel.domain.intervals import effective_end
from fleet_kernel.models.cost_schedule import CostScheduleEntry
from fleet_kernel.selectors.base import BaseSelector


def _covers(on_date: date):
    return (
        CostScheduleEntry.effective_from <= on_date,
        or_(
            CostScheduleEntry.effective_to.is_(None),
            CostScheduleEntry.effective_to >= on_date,
        ),
    )


class CostScheduleSelector(BaseSelector[CostScheduleEntry]):
    """
    Selector for cost schedule queries.

    Guarantees:
        - Read-only.
        - Per-type history is ordered by effective_from descending.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def get(self, entry_id: UUID) -> CostScheduleEntryInfo | None:
        row = self.session.get(CostScheduleEntry, entry_id)
        return CostScheduleEntryInfo.from_model(row) if row else None

    def find_overlapping(
        self,
        attribute_type_id: UUID,
        effective_from: date,
        effective_to: date | None,
        exclude_id: UUID | None = None,
    ) -> list[CostScheduleEntryInfo]:
        stmt = select(CostScheduleEntry).where(
            CostScheduleEntry.attribute_type_id == attribute_type_id,
            CostScheduleEntry.effective_from <= effective_end(effective_to),
            or_(
                CostScheduleEntry.effective_to.is_(None),
                CostScheduleEntry.effective_to >= effective_from,
            ),
        )
        if exclude_id is not None:
            stmt = stmt.where(CostScheduleEntry.id != exclude_id)
        rows = self.session.execute(
            stmt.order_by(CostScheduleEntry.effective_from)
        ).scalars().all()
        return [CostScheduleEntryInfo.from_model(row) for row in rows]

    def active_on(
        self,
        attribute_type_id: UUID,
        on_date: date,
    ) -> CostScheduleEntryInfo | None:
        """The entry covering ``on_date``; non-overlap guarantees at most one."""
        row = self.session.execute(
            select(CostScheduleEntry)
            .where(
                CostScheduleEntry.attribute_type_id == attribute_type_id,
                *_covers(on_date),
            )
            .order_by(CostScheduleEntry.effective_from.desc())
        ).scalars().first()
        return CostScheduleEntryInfo.from_model(row) if row else None

    def for_attribute_type(self, attribute_type_id: UUID) -> list[CostScheduleEntryInfo]:
        rows = self.session.execute(
            select(CostScheduleEntry)
            .where(CostScheduleEntry.attribute_type_id == attribute_type_id)
            .order_by(CostScheduleEntry.effective_from.desc())
        ).scalars().all()
        return [CostScheduleEntryInfo.from_model(row) for row in rows]

    def all_active_on(self, on_date: date) -> list[CostScheduleEntryInfo]:
        rows = self.session.execute(
            select(CostScheduleEntry)
            .where(*_covers(on_date))
            .order_by(CostScheduleEntry.attribute_type_id)
        ).scalars().all()
        return [CostScheduleEntryInfo.from_model(row) for row in rows]

    def active_for_types(
        self,
        attribute_type_ids: Iterable[UUID],
        on_date: date,
    ) -> dict[UUID, CostScheduleEntryInfo]:
        ids = list(attribute_type_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(CostScheduleEntry).where(
                CostScheduleEntry.attribute_type_id.in_(ids),
                *_covers(on_date),
            )
        ).scalars().all()
        return {
            row.attribute_type_id: CostScheduleEntryInfo.from_model(row)
            for row in rows
        }
