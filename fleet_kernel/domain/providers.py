"""
Collaborator protocols.

The kernel does not own shifts, cabs, drivers, owners or shift profiles.
It reads them through these protocols; the surrounding application supplies
implementations (repository adapters in production, in-memory fakes in
tests).
"""

from datetime import date
from typing import Iterable, Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class ShiftDirectory(Protocol):
    """Shift existence, cab existence and shift status."""

    def shift_exists(self, shift_id: UUID) -> bool:
        ...

    def cab_exists(self, cab_id: UUID) -> bool:
        ...

    def active_shift_ids(self, as_of: date) -> Iterable[UUID]:
        """Ids of shifts whose status is active on ``as_of``."""
        ...


@runtime_checkable
class PersonDirectory(Protocol):
    """Rosters of active drivers and active owners."""

    def active_driver_ids(self, as_of: date) -> Iterable[UUID]:
        ...

    def active_owner_ids(self, as_of: date) -> Iterable[UUID]:
        ...


@runtime_checkable
class ShiftProfileDirectory(Protocol):
    """Shift-profile assignment history."""

    def shift_ids_for_profile(self, shift_profile_id: UUID, as_of: date) -> Iterable[UUID]:
        """Shifts bound to the profile on ``as_of``."""
        ...
