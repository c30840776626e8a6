"""
ChargeCalculator -- what a subject owes for its attributes over a period.

Responsibility:
    Intersects a subject's assignment history with the requested period and
    the cost schedule, producing itemized charges and a total.  Pure read
    path: nothing is persisted, and the same inputs always yield the same
    result.

Architecture position:
    Kernel > Services (read facade).  Reads through AssignmentSelector and
    CostScheduleSelector; arithmetic lives in domain.charges.

Algorithm (per assignment overlapping [period_start, period_end]):
    1. Clip to [max(start, period_start), min(end or period_end, period_end)].
    2. Look up the cost entry in force on the clipped start date.  One
       lookup per line item: a rate change inside the clipped range does not
       split the line.  No entry -> no line item; the assignment id goes to
       ChargeResult.unpriced_assignment_ids.
    3. DAILY bills inclusive days; MONTHLY bills every calendar month the
       clipped range touches.
    4. Prices are whole cents, so price * units is exact: DAILY totals add
       up across any split of the period.  Line amounts and the total go
       through round_money only to fix their scale at cents.

    Example: an assignment Jan 20..Feb 5 with $30 MONTHLY from Jan 1 and
    $35 MONTHLY from Feb 1 bills 2 x $30 = $60.00.

Concurrency:
    Each calculation reads only its own subject's rows and shares no
    mutable state; calculate_many runs them independently.

Failure modes:
    - SubjectNotFoundError when the ShiftDirectory does not know the subject.
    - InvalidDateRangeError when period_start > period_end.
    - NoActiveCostError from affected_subjects when no entry is in force.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from fleet_kernel.db.types import round_money
from fleet_kernel.domain.charges import BillingUnit, price_range
from fleet_kernel.domain.dtos import (
    AffectedSubject,
    AssignmentInfo,
    ChargeLineItem,
    ChargeResult,
)
from fleet_kernel.domain.intervals import DateRange, validate_range
from fleet_kernel.domain.providers import ShiftDirectory
from fleet_kernel.domain.subjects import SubjectKind, SubjectRef
from fleet_kernel.exceptions import NoActiveCostError
from fleet_kernel.logging_config import LogContext, get_logger
from fleet_kernel.selectors.assignment_selector import AssignmentSelector
from fleet_kernel.selectors.cost_schedule_selector import CostScheduleSelector
from fleet_kernel.services.base import require_known_subject

logger = get_logger("services.charge_calculator")

ZERO = Decimal("0")


class ChargeCalculator:
    """
    Computes attribute charges for shifts and cabs.

    Contract:
        calculate_charges is deterministic over the stored assignments and
        cost schedule.  Missing pricing is never an error.

    Non-goals:
        - Does NOT persist charges or post them anywhere.
        - Does NOT split a line item at a mid-range rate change.
    """

    def __init__(self, session: Session, subjects: ShiftDirectory):
        self.session = session
        self._subjects = subjects
        self._assignments = AssignmentSelector(session)
        self._costs = CostScheduleSelector(session)

    def _line_item(
        self,
        assignment: AssignmentInfo,
        clipped: DateRange,
    ) -> ChargeLineItem | None:
        entry = self._costs.active_on(assignment.attribute_type_id, clipped.start)
        if entry is None:
            return None

        priced = price_range(entry.price, entry.billing_unit, clipped.start, clipped.end)
        return ChargeLineItem(
            assignment_id=assignment.id,
            attribute_type_id=assignment.attribute_type_id,
            attribute_code=assignment.attribute_code,
            attribute_name=assignment.attribute_name,
            value=assignment.value,
            unit_price=entry.price,
            billing_unit=BillingUnit(entry.billing_unit),
            charge_start=clipped.start,
            charge_end=clipped.end,
            days_active=priced.days_active,
            units=priced.units,
            amount=round_money(priced.amount),
        )

    def calculate_charges(
        self,
        subject: SubjectRef,
        period_start: date,
        period_end: date,
    ) -> ChargeResult:
        """
        Itemized attribute charges for ``subject`` over [period_start, period_end].

        Returns:
            ChargeResult; an empty result (no line items, zero total) when
            nothing overlaps the period or nothing is priced.
        """
        with LogContext.bind(subject=subject):
            return self._calculate(subject, period_start, period_end)

    def _calculate(
        self,
        subject: SubjectRef,
        period_start: date,
        period_end: date,
    ) -> ChargeResult:
        require_known_subject(self._subjects, subject)
        validate_range(period_start, period_end)

        line_items: list[ChargeLineItem] = []
        unpriced: list[UUID] = []
        for assignment in self._assignments.history(subject):
            clipped = assignment.date_range.clip(period_start, period_end)
            if clipped is None:
                continue
            item = self._line_item(assignment, clipped)
            if item is None:
                unpriced.append(assignment.id)
            else:
                line_items.append(item)

        line_items.sort(key=lambda li: (li.charge_start, li.attribute_code))
        total = round_money(sum((li.amount for li in line_items), ZERO))

        if unpriced:
            logger.info(
                "unpriced_assignments_skipped",
                extra={
                    "period_start": str(period_start),
                    "period_end": str(period_end),
                    "assignment_ids": [str(a) for a in unpriced],
                },
            )
        logger.debug(
            "charges_calculated",
            extra={
                "period_start": str(period_start),
                "period_end": str(period_end),
                "line_items": len(line_items),
                "total": str(total),
            },
        )
        return ChargeResult(
            subject=subject,
            period_start=period_start,
            period_end=period_end,
            line_items=tuple(line_items),
            total=total,
            unpriced_assignment_ids=tuple(unpriced),
        )

    def calculate_many(
        self,
        subjects: Iterable[SubjectRef],
        period_start: date,
        period_end: date,
    ) -> dict[SubjectRef, ChargeResult]:
        """calculate_charges for each subject; results are independent."""
        validate_range(period_start, period_end)
        return {
            subject: self.calculate_charges(subject, period_start, period_end)
            for subject in subjects
        }

    def affected_subjects(
        self,
        attribute_type_id: UUID,
        as_of: date,
    ) -> list[AffectedSubject]:
        """
        Shifts holding the attribute on ``as_of`` with the cost then in force.

        Raises:
            NoActiveCostError: No cost entry covers ``as_of``.
        """
        entry = self._costs.active_on(attribute_type_id, as_of)
        if entry is None:
            raise NoActiveCostError(str(attribute_type_id), str(as_of))
        return [
            AffectedSubject(
                subject=a.subject,
                assignment_id=a.id,
                value=a.value,
                cost_entry=entry,
            )
            for a in self._assignments.active_for_attribute_type(
                attribute_type_id, as_of, SubjectKind.SHIFT
            )
        ]
