"""
CostScheduleService -- price history per attribute type.

Responsibility:
    Records, per attribute type, non-overlapping intervals of price and
    billing unit, and answers "what did this attribute cost on day D".

Architecture position:
    Kernel > Services.  Reads through CostScheduleSelector; writes via flush
    only.

Invariants enforced:
    COST_SCHEDULE_NON_OVERLAP -- create/update/end check overlap after
        locking the attribute type row (same discipline as assignments).
    effective_from is the natural key: it never changes after create.
    IMMUTABLE_HISTORY -- delete only while effective_from is in the future.
    Prices are whole cents, so every line amount is exact.

Documented fallbacks:
    get_cost_amount returns Decimal("0") and get_billing_unit returns
    MONTHLY when no entry covers the date.  Missing pricing is treated as
    free, not as an error.  has_chargeable_price lets callers tell the two
    apart.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal, InvalidOperation
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fleet_kernel.db.constraints import COST_SCHEDULE_EXCLUSION, violated_constraint
from fleet_kernel.db.types import CENT, MAX_PRICE, is_whole_cents
from fleet_kernel.domain.charges import DEFAULT_BILLING_UNIT, BillingUnit
from fleet_kernel.domain.clock import Clock, SystemClock
from fleet_kernel.domain.dtos import CostScheduleEntryInfo
from fleet_kernel.domain.intervals import validate_range
from fleet_kernel.exceptions import (
    AttributeTypeNotFoundError,
    CostScheduleEntryNotFoundError,
    CostScheduleOverlapError,
    ImmutableHistoryError,
    InvalidDateRangeError,
    InvalidPriceError,
)
from fleet_kernel.logging_config import get_logger
from fleet_kernel.models.attribute_type import AttributeType
from fleet_kernel.models.cost_schedule import CostScheduleEntry
from fleet_kernel.selectors.cost_schedule_selector import CostScheduleSelector
from fleet_kernel.services.base import BaseService

logger = get_logger("services.cost_schedule")

ZERO = Decimal("0")


def _validate_price(price) -> Decimal:
    """Non-negative whole cents within the Price column's range."""
    try:
        amount = price if isinstance(price, Decimal) else Decimal(str(price))
    except (InvalidOperation, ValueError):
        raise InvalidPriceError(str(price)) from None
    if not amount.is_finite() or amount < 0 or amount > MAX_PRICE:
        raise InvalidPriceError(str(price))
    if not is_whole_cents(amount):
        raise InvalidPriceError(str(price))
    return amount.quantize(CENT)


class CostScheduleService(BaseService[CostScheduleEntry]):
    """
    Service for attribute pricing over time.

    Contract:
        All public methods return CostScheduleEntryInfo DTOs or plain values.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._selector = CostScheduleSelector(session)

    def _lock_attribute_type(self, attribute_type_id: UUID) -> AttributeType:
        attribute_type = self.session.execute(
            select(AttributeType)
            .where(AttributeType.id == attribute_type_id)
            .with_for_update()
        ).scalar_one_or_none()
        if attribute_type is None:
            raise AttributeTypeNotFoundError(str(attribute_type_id))
        return attribute_type

    def _get_by_id(self, entry_id: UUID) -> CostScheduleEntry:
        entry = self.session.get(CostScheduleEntry, entry_id)
        if entry is None:
            raise CostScheduleEntryNotFoundError(str(entry_id))
        return entry

    def _check_no_overlap(
        self,
        attribute_type_id: UUID,
        effective_from: date,
        effective_to: date | None,
        exclude_id: UUID | None = None,
    ) -> None:
        conflicts = self._selector.find_overlapping(
            attribute_type_id, effective_from, effective_to, exclude_id=exclude_id
        )
        if conflicts:
            conflicting_ids = [str(c.id) for c in conflicts]
            logger.warning(
                "cost_entry_overlap_rejected",
                extra={
                    "attribute_type_id": str(attribute_type_id),
                    "effective_from": str(effective_from),
                    "effective_to": str(effective_to) if effective_to else None,
                    "conflicting_ids": conflicting_ids,
                },
            )
            raise CostScheduleOverlapError(
                attribute_type_id=str(attribute_type_id),
                conflicting_ids=conflicting_ids,
                start=str(effective_from),
                end=str(effective_to) if effective_to else None,
            )

    def _flush(self, attribute_type_id: UUID, effective_from: date, effective_to: date | None) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            if violated_constraint(exc) == COST_SCHEDULE_EXCLUSION:
                raise CostScheduleOverlapError(
                    str(attribute_type_id), [], str(effective_from),
                    str(effective_to) if effective_to else None,
                ) from exc
            raise

    # -- commands ----------------------------------------------------------

    def create(
        self,
        attribute_type_id: UUID,
        price: Decimal,
        billing_unit: BillingUnit,
        effective_from: date,
        actor_id: UUID,
        effective_to: date | None = None,
    ) -> CostScheduleEntryInfo:
        """
        Add a price interval for an attribute type.

        Raises:
            AttributeTypeNotFoundError: Unknown attribute type.
            InvalidPriceError: Negative or non-numeric price.
            InvalidDateRangeError: effective_to before effective_from.
            CostScheduleOverlapError: Another entry for the type overlaps.
        """
        attribute_type = self._lock_attribute_type(attribute_type_id)
        amount = _validate_price(price)
        unit = BillingUnit(billing_unit)
        validate_range(effective_from, effective_to)
        self._check_no_overlap(attribute_type_id, effective_from, effective_to)

        entry = CostScheduleEntry(
            attribute_type_id=attribute_type_id,
            price=amount,
            billing_unit=unit.value,
            effective_from=effective_from,
            effective_to=effective_to,
            created_by_id=actor_id,
        )
        self.session.add(entry)
        self._flush(attribute_type_id, effective_from, effective_to)

        logger.info(
            "cost_entry_created",
            extra={
                "cost_entry_id": str(entry.id),
                "attribute_code": attribute_type.code,
                "price": str(amount),
                "billing_unit": unit.value,
                "effective_from": str(effective_from),
                "effective_to": str(effective_to) if effective_to else None,
                "actor_id": str(actor_id),
            },
        )
        return CostScheduleEntryInfo.from_model(entry)

    def update(
        self,
        entry_id: UUID,
        actor_id: UUID,
        price: Decimal | None = None,
        billing_unit: BillingUnit | None = None,
        effective_to: date | None = None,
    ) -> CostScheduleEntryInfo:
        """
        Change price, billing unit or effective_to.  effective_from is fixed.

        Omitted arguments keep their current value.
        """
        entry = self._get_by_id(entry_id)
        self._lock_attribute_type(entry.attribute_type_id)

        new_to = effective_to if effective_to is not None else entry.effective_to
        validate_range(entry.effective_from, new_to)
        if new_to != entry.effective_to:
            self._check_no_overlap(
                entry.attribute_type_id, entry.effective_from, new_to, exclude_id=entry.id
            )

        if price is not None:
            entry.price = _validate_price(price)
        if billing_unit is not None:
            entry.billing_unit = BillingUnit(billing_unit).value
        entry.effective_to = new_to
        entry.updated_by_id = actor_id
        self._flush(entry.attribute_type_id, entry.effective_from, new_to)

        logger.info(
            "cost_entry_updated",
            extra={
                "cost_entry_id": str(entry.id),
                "price": str(entry.price),
                "billing_unit": entry.billing_unit,
                "effective_to": str(new_to) if new_to else None,
                "actor_id": str(actor_id),
            },
        )
        return CostScheduleEntryInfo.from_model(entry)

    def end(self, entry_id: UUID, effective_to: date, actor_id: UUID) -> CostScheduleEntryInfo:
        """
        Close an entry on ``effective_to`` (inclusive).

        Raises:
            InvalidDateRangeError: iff effective_to is before effective_from.
        """
        entry = self._get_by_id(entry_id)
        if effective_to < entry.effective_from:
            raise InvalidDateRangeError(
                str(entry.effective_from),
                str(effective_to),
                "effective_to precedes effective_from",
            )
        self._lock_attribute_type(entry.attribute_type_id)
        if entry.effective_to is not None and effective_to > entry.effective_to:
            self._check_no_overlap(
                entry.attribute_type_id, entry.effective_from, effective_to,
                exclude_id=entry.id,
            )

        entry.effective_to = effective_to
        entry.updated_by_id = actor_id
        self._flush(entry.attribute_type_id, entry.effective_from, effective_to)

        logger.info(
            "cost_entry_ended",
            extra={
                "cost_entry_id": str(entry.id),
                "effective_to": str(effective_to),
                "actor_id": str(actor_id),
            },
        )
        return CostScheduleEntryInfo.from_model(entry)

    def delete(self, entry_id: UUID, actor_id: UUID | None = None) -> None:
        """
        Remove an entry whose effective_from is still in the future.

        Raises:
            ImmutableHistoryError: effective_from is today or earlier.
        """
        entry = self._get_by_id(entry_id)
        today = self._clock.today()
        if entry.effective_from <= today:
            logger.warning(
                "cost_entry_delete_rejected",
                extra={
                    "cost_entry_id": str(entry.id),
                    "effective_from": str(entry.effective_from),
                    "today": str(today),
                },
            )
            raise ImmutableHistoryError(
                "cost schedule entry", str(entry.id), str(entry.effective_from)
            )

        self._lock_attribute_type(entry.attribute_type_id)
        self.session.delete(entry)
        self.session.flush()

        logger.info(
            "cost_entry_deleted",
            extra={
                "cost_entry_id": str(entry_id),
                "actor_id": str(actor_id) if actor_id else None,
            },
        )

    # -- queries -----------------------------------------------------------

    def get(self, entry_id: UUID) -> CostScheduleEntryInfo:
        return CostScheduleEntryInfo.from_model(self._get_by_id(entry_id))

    def list_for_attribute_type(self, attribute_type_id: UUID) -> list[CostScheduleEntryInfo]:
        """All entries for the type, effective_from descending."""
        return self._selector.for_attribute_type(attribute_type_id)

    def list_currently_active(self) -> list[CostScheduleEntryInfo]:
        return self._selector.all_active_on(self._clock.today())

    def active_costs_on(
        self,
        attribute_type_ids: Iterable[UUID],
        on_date: date,
    ) -> dict[UUID, CostScheduleEntryInfo]:
        """Entries in force on ``on_date``, keyed by attribute type id.  Unpriced types are absent."""
        return self._selector.active_for_types(attribute_type_ids, on_date)

    def get_active_on(self, attribute_type_id: UUID, on_date: date) -> CostScheduleEntryInfo | None:
        return self._selector.active_on(attribute_type_id, on_date)

    def get_cost_amount(self, attribute_type_id: UUID, on_date: date) -> Decimal:
        """Price in force on ``on_date``, or zero when none is configured."""
        entry = self._selector.active_on(attribute_type_id, on_date)
        return entry.price if entry else ZERO

    def get_billing_unit(self, attribute_type_id: UUID, on_date: date) -> BillingUnit:
        """Billing unit in force on ``on_date``, or MONTHLY when none is configured."""
        entry = self._selector.active_on(attribute_type_id, on_date)
        return entry.billing_unit if entry else DEFAULT_BILLING_UNIT

    def has_chargeable_price(self, attribute_type_id: UUID, on_date: date) -> bool:
        entry = self._selector.active_on(attribute_type_id, on_date)
        return entry is not None and entry.price > 0
