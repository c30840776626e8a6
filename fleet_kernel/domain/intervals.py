"""
Closed calendar-date intervals.

Responsibility:
    Interval algebra for assignments, cost schedule entries and charge
    periods: containment, overlap, clipping, inclusive day counts and
    calendar-month counts.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Every interval is closed on both ends: [start, end].
    - An absent end means open-ended.  For comparison it is treated as
      OPEN_END (date.max, 9999-12-31), which no real date exceeds.
    - start <= end whenever end is present (InvalidDateRangeError).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from fleet_kernel.exceptions import InvalidDateRangeError

OPEN_END: date = date.max


def validate_range(start: date, end: date | None) -> None:
    """Raise InvalidDateRangeError unless start <= end (or end is absent)."""
    if end is not None and start > end:
        raise InvalidDateRangeError(start.isoformat(), end.isoformat())


def effective_end(end: date | None) -> date:
    return OPEN_END if end is None else end


def ranges_overlap(
    a_start: date,
    a_end: date | None,
    b_start: date,
    b_end: date | None,
) -> bool:
    """True iff the closed intervals [a_start, a_end] and [b_start, b_end] share a day."""
    return a_start <= effective_end(b_end) and b_start <= effective_end(a_end)


def days_inclusive(start: date, end: date) -> int:
    """Number of calendar days in [start, end], counting both ends."""
    return (end - start).days + 1


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def add_months(day: date, months: int) -> date:
    """
    Shift ``day`` by whole calendar months.

    The day of month is clamped to the target month's length
    (Jan 31 + 1 month = Feb 28/29).
    """
    index = day.month - 1 + months
    year = day.year + index // 12
    month = index % 12 + 1
    if month == 12:
        month_end = 31
    else:
        month_end = (date(year, month + 1, 1) - date(year, month, 1)).days
    return date(year, month, min(day.day, month_end))


def months_touched(start: date, end: date) -> int:
    """
    Number of calendar months that [start, end] intersects.

    A cursor starts on the first day of start's month and advances one
    calendar month at a time while it does not pass ``end``; each step counts
    one month.  Jan 20..Feb 5 touches two months; Jan 1..Jan 31 touches one.
    """
    validate_range(start, end)
    cursor = first_of_month(start)
    count = 0
    while cursor <= end:
        count += 1
        if cursor.year == OPEN_END.year and cursor.month == 12:
            break
        cursor = add_months(cursor, 1)
    return count


@dataclass(frozen=True)
class DateRange:
    """
    A closed interval of calendar days, possibly open-ended.

    Guarantees:
        - start <= end when end is present (checked on construction).
    """

    start: date
    end: date | None = None

    def __post_init__(self) -> None:
        validate_range(self.start, self.end)

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def effective_end(self) -> date:
        return effective_end(self.end)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.effective_end

    def overlaps(self, other: DateRange) -> bool:
        return ranges_overlap(self.start, self.end, other.start, other.end)

    def clip(self, period_start: date, period_end: date) -> DateRange | None:
        """
        Intersect with the closed period [period_start, period_end].

        Returns None when the two do not share a day.  The result is always
        closed: an open end is cut at period_end.
        """
        validate_range(period_start, period_end)
        if not ranges_overlap(self.start, self.end, period_start, period_end):
            return None
        return DateRange(
            max(self.start, period_start),
            min(self.effective_end, period_end),
        )

    def days(self) -> int:
        """Inclusive day count.  Only defined for closed ranges."""
        if self.end is None:
            raise ValueError("Open-ended range has no day count")
        return days_inclusive(self.start, self.end)
