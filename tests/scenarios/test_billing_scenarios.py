"""
End-to-end billing scenarios.

Each test walks one fleet-billing story through the registry, the
assignment store, the cost schedule, the calculator and the resolver, and
pins the resulting amounts.
"""

from datetime import date
from decimal import Decimal

import pytest

from fleet_kernel.domain.charges import BillingUnit
from fleet_kernel.domain.scope import ShiftsWithAttributeScope
from fleet_kernel.domain.subjects import SubjectRef
from fleet_kernel.exceptions import AssignmentOverlapError, OverlapError


class TestAirportLicenseBilling:

    def test_monthly_license_for_january(
        self, assignments, cost_schedule, charge_calculator, airport_license, shift_s1, test_actor_id
    ):
        """$30 MONTHLY for Jan 1..Jan 31 bills one line item of $30.00."""
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        cost_schedule.create(
            airport_license.id, Decimal("30"), BillingUnit.MONTHLY, date(2026, 1, 1), test_actor_id
        )

        result = charge_calculator.calculate_charges(shift_s1, date(2026, 1, 1), date(2026, 1, 31))

        assert len(result.line_items) == 1
        assert result.line_items[0].units == 1
        assert result.line_items[0].amount == Decimal("30.00")
        assert result.total == Decimal("30.00")

    def test_overlapping_second_license_rejected(
        self, assignments, airport_license, shift_s1, test_actor_id
    ):
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )

        with pytest.raises(OverlapError) as exc_info:
            assignments.assign(
                shift_s1, airport_license.id, test_actor_id, date(2026, 1, 15), date(2026, 2, 15)
            )
        assert isinstance(exc_info.value, AssignmentOverlapError)

    def test_daily_rate_for_three_days(
        self, assignments, cost_schedule, charge_calculator, airport_license, shift_s1, test_actor_id
    ):
        """$5.00 DAILY for Feb 10..Feb 12 bills 3 days, $15.00."""
        cost_schedule.create(
            airport_license.id, Decimal("5.00"), BillingUnit.DAILY, date(2026, 1, 1), test_actor_id
        )
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 2, 10), date(2026, 2, 12)
        )

        result = charge_calculator.calculate_charges(shift_s1, date(2026, 2, 1), date(2026, 2, 28))

        (item,) = result.line_items
        assert item.days_active == 3
        assert item.amount == Decimal("15.00")

    def test_rate_change_inside_line_item_uses_start_price(
        self, assignments, cost_schedule, charge_calculator, airport_license, shift_s1, test_actor_id
    ):
        """
        Jan 20..Feb 5 with $30 MONTHLY from Jan 1 and $35 MONTHLY from Feb 1.

        The price is looked up once, on Jan 20, and the range touches two
        calendar months: 2 x $30 = $60.00.  The Feb rate is never applied.
        """
        jan = cost_schedule.create(
            airport_license.id, Decimal("30"), BillingUnit.MONTHLY,
            date(2026, 1, 1), test_actor_id, effective_to=date(2026, 1, 31),
        )
        cost_schedule.create(
            airport_license.id, Decimal("35"), BillingUnit.MONTHLY, date(2026, 2, 1), test_actor_id
        )
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 20), date(2026, 2, 5)
        )

        result = charge_calculator.calculate_charges(shift_s1, date(2026, 1, 1), date(2026, 2, 28))

        (item,) = result.line_items
        assert item.unit_price == jan.price
        assert item.units == 2
        assert item.amount == Decimal("60.00")

    def test_monthly_billing_across_split_periods(
        self, assignments, cost_schedule, charge_calculator, airport_license, shift_s1, test_actor_id
    ):
        """Billing Jan and Feb separately touches the same two months as billing them together."""
        cost_schedule.create(
            airport_license.id, Decimal("30"), BillingUnit.MONTHLY, date(2026, 1, 1), test_actor_id
        )
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 20), date(2026, 2, 5)
        )

        jan = charge_calculator.calculate_charges(shift_s1, date(2026, 1, 1), date(2026, 1, 31))
        feb = charge_calculator.calculate_charges(shift_s1, date(2026, 2, 1), date(2026, 2, 28))
        both = charge_calculator.calculate_charges(shift_s1, date(2026, 1, 1), date(2026, 2, 28))

        assert jan.total + feb.total == both.total == Decimal("60.00")


class TestShiftsWithAttributeScope:

    def test_resolves_to_exactly_the_shifts_holding_the_attribute(
        self, assignments, scope_resolver, airport_license, transponder,
        shift_directory, test_actor_id,
    ):
        on = date(2026, 1, 15)
        holders = []
        for offset in range(3):
            ref = SubjectRef.shift(shift_directory.add_shift())
            assignments.assign(ref, airport_license.id, test_actor_id, date(2026, 1, 1 + offset))
            holders.append(ref)

        expired = SubjectRef.shift(shift_directory.add_shift())
        assignments.assign(
            expired, airport_license.id, test_actor_id, date(2025, 1, 1), date(2026, 1, 14)
        )
        future = SubjectRef.shift(shift_directory.add_shift())
        assignments.assign(future, airport_license.id, test_actor_id, date(2026, 1, 16))
        other_type = SubjectRef.shift(shift_directory.add_shift())
        assignments.assign(other_type, transponder.id, test_actor_id, date(2026, 1, 1), value="TR-00002")

        resolved = scope_resolver.resolve(ShiftsWithAttributeScope(airport_license.id), on)

        expected = {
            ref.id
            for ref in [*holders, expired, future, other_type]
            if assignments.get_active(ref, airport_license.id, on) is not None
        }
        assert resolved == frozenset(expected)
        assert resolved == frozenset(ref.id for ref in holders)
