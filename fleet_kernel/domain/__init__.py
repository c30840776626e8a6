"""
Pure domain core: clock, date intervals, subjects, application scopes,
charge arithmetic, DTOs and collaborator protocols.

Nothing here touches the database.
"""

from fleet_kernel.domain.charges import BillingUnit
from fleet_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from fleet_kernel.domain.intervals import OPEN_END, DateRange
from fleet_kernel.domain.scope import (
    AllActiveShiftsScope,
    AllDriversScope,
    AllOwnersScope,
    ApplicationScope,
    ScopeType,
    ShiftProfileScope,
    ShiftsWithAttributeScope,
    SpecificPersonScope,
    SpecificShiftScope,
)
from fleet_kernel.domain.subjects import SubjectKind, SubjectRef

__all__ = [
    "BillingUnit",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "OPEN_END",
    "DateRange",
    "ApplicationScope",
    "ScopeType",
    "SpecificShiftScope",
    "ShiftProfileScope",
    "SpecificPersonScope",
    "AllOwnersScope",
    "AllDriversScope",
    "AllActiveShiftsScope",
    "ShiftsWithAttributeScope",
    "SubjectKind",
    "SubjectRef",
]
