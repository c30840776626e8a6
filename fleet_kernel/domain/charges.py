"""
Charge arithmetic -- pricing a clipped date range.

Responsibility:
    Converts (price, billing unit, [start, end]) into billed units and an
    amount.  Pure; the ChargeCalculator service feeds it one clipped
    assignment range at a time.

Billing rules:
    DAILY    units = inclusive day count of [start, end].
    MONTHLY  units = calendar months touched by [start, end].  Any touched
             month bills one full unit; there is no pro-rating.

    DAILY totals are additive across any split of a period.  MONTHLY totals
    are not: Jan 20..Jan 25 plus Jan 26..Feb 5 bills three months, while
    Jan 20..Feb 5 bills two.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from fleet_kernel.domain.intervals import days_inclusive, months_touched, validate_range


class BillingUnit(str, Enum):
    MONTHLY = "MONTHLY"
    DAILY = "DAILY"


# Unit used when no cost schedule entry covers a date.
DEFAULT_BILLING_UNIT = BillingUnit.MONTHLY


@dataclass(frozen=True)
class PricedRange:
    """Outcome of pricing one closed range."""

    days_active: int
    units: int
    amount: Decimal


def billable_units(unit: BillingUnit, start: date, end: date) -> int:
    validate_range(start, end)
    if unit is BillingUnit.DAILY:
        return days_inclusive(start, end)
    if unit is BillingUnit.MONTHLY:
        return months_touched(start, end)
    raise ValueError(f"Unsupported billing unit: {unit!r}")


def price_range(
    price: Decimal,
    unit: BillingUnit,
    start: date,
    end: date,
) -> PricedRange:
    """
    Price the closed range [start, end] at a single unit price.

    The amount is unrounded; callers round line items and totals through
    ``round_money``.
    """
    units = billable_units(unit, start, end)
    return PricedRange(
        days_active=days_inclusive(start, end),
        units=units,
        amount=price * units,
    )
