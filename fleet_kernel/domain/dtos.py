"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable records returned by every public service and selector method:
    attribute types, assignments, cost schedule entries, charge line items,
    charge results and affected subjects.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies at runtime.  from_model() class methods are the
    boundary converters and are only invoked from selectors and services.

Invariants enforced:
    - Services and selectors return these, never ORM instances.
    - ChargeResult.total equals the rounded sum of its line item amounts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from fleet_kernel.domain.attributes import AttributeCategory, AttributeDataType
from fleet_kernel.domain.charges import BillingUnit
from fleet_kernel.domain.intervals import DateRange
from fleet_kernel.domain.subjects import SubjectKind, SubjectRef

if TYPE_CHECKING:
    from fleet_kernel.models.attribute_assignment import (
        AttributeAssignment as AttributeAssignmentModel,
    )
    from fleet_kernel.models.attribute_type import AttributeType as AttributeTypeModel
    from fleet_kernel.models.cost_schedule import (
        CostScheduleEntry as CostScheduleEntryModel,
    )


@dataclass(frozen=True)
class AttributeTypeInfo:
    """Immutable view of a registry entry."""

    id: UUID
    code: str
    name: str
    description: str | None
    category: AttributeCategory
    data_type: AttributeDataType
    requires_value: bool
    validation_pattern: str | None
    help_text: str | None
    is_active: bool

    @classmethod
    def from_model(cls, model: AttributeTypeModel) -> AttributeTypeInfo:
        return cls(
            id=model.id,
            code=model.code,
            name=model.name,
            description=model.description,
            category=AttributeCategory(model.category),
            data_type=AttributeDataType(model.data_type),
            requires_value=model.requires_value,
            validation_pattern=model.validation_pattern,
            help_text=model.help_text,
            is_active=model.is_active,
        )


@dataclass(frozen=True)
class AssignmentInfo:
    """
    Immutable view of a temporal assignment.

    ``attribute_code`` and ``attribute_name`` are denormalized from the
    attribute type for display and charge line items.
    """

    id: UUID
    subject: SubjectRef
    attribute_type_id: UUID
    attribute_code: str
    attribute_name: str
    value: str | None
    start_date: date
    end_date: date | None
    notes: str | None

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_open(self) -> bool:
        return self.end_date is None

    def is_active_on(self, on_date: date) -> bool:
        return self.date_range.contains(on_date)

    @classmethod
    def from_model(cls, model: AttributeAssignmentModel) -> AssignmentInfo:
        return cls(
            id=model.id,
            subject=SubjectRef(SubjectKind(model.subject_kind), model.subject_id),
            attribute_type_id=model.attribute_type_id,
            attribute_code=model.attribute_type.code,
            attribute_name=model.attribute_type.name,
            value=model.value,
            start_date=model.start_date,
            end_date=model.end_date,
            notes=model.notes,
        )


@dataclass(frozen=True)
class CostScheduleEntryInfo:
    """Immutable view of a price interval for an attribute type."""

    id: UUID
    attribute_type_id: UUID
    price: Decimal
    billing_unit: BillingUnit
    effective_from: date
    effective_to: date | None

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.effective_from, self.effective_to)

    def is_active_on(self, on_date: date) -> bool:
        return self.date_range.contains(on_date)

    @classmethod
    def from_model(cls, model: CostScheduleEntryModel) -> CostScheduleEntryInfo:
        return cls(
            id=model.id,
            attribute_type_id=model.attribute_type_id,
            price=model.price,
            billing_unit=BillingUnit(model.billing_unit),
            effective_from=model.effective_from,
            effective_to=model.effective_to,
        )


@dataclass(frozen=True)
class ChargeLineItem:
    """One priced assignment within a charge period. Never persisted."""

    assignment_id: UUID
    attribute_type_id: UUID
    attribute_code: str
    attribute_name: str
    value: str | None
    unit_price: Decimal
    billing_unit: BillingUnit
    charge_start: date
    charge_end: date
    days_active: int
    units: int
    amount: Decimal


@dataclass(frozen=True)
class ChargeResult:
    """
    Itemized charges for one subject over one period.

    Guarantees:
        - line_items are ordered by (charge_start, attribute_code).
        - total is the rounded sum of line item amounts.
        - unpriced_assignment_ids lists assignments that overlapped the
          period but had no cost entry at their clipped start date; they
          contribute nothing to the total.
    """

    subject: SubjectRef
    period_start: date
    period_end: date
    line_items: tuple[ChargeLineItem, ...]
    total: Decimal
    unpriced_assignment_ids: tuple[UUID, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.line_items

    @property
    def has_unpriced(self) -> bool:
        return bool(self.unpriced_assignment_ids)


@dataclass(frozen=True)
class AffectedSubject:
    """A shift holding an attribute on a date, with the cost then in force."""

    subject: SubjectRef
    assignment_id: UUID
    value: str | None
    cost_entry: CostScheduleEntryInfo
