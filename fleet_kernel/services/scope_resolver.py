"""
ScopeResolver -- expands an application scope into concrete subject ids.

Responsibility:
    Given an ApplicationScope variant and a reference date, returns the set
    of shift or person ids the scope denotes.  Expense and revenue
    categories both resolve through here, so they always target the same
    subjects for the same scope.

Resolution:
    SpecificShiftScope        {shift_id}
    SpecificPersonScope       {person_id}
    ShiftProfileScope         shifts bound to the profile on as_of
    AllOwnersScope            active owner roster
    AllDriversScope           active driver roster
    AllActiveShiftsScope      shifts whose status is active on as_of
    ShiftsWithAttributeScope  shifts with an assignment of the attribute
                              type covering as_of (shift ids only)

Architecture position:
    Kernel > Services (read facade).  Depends on the collaborator protocols
    and AssignmentSelector.

Failure modes:
    - InvalidScopeError for anything that is not a well-formed scope
      variant.  No interpretation is guessed.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from fleet_kernel.domain.providers import (
    PersonDirectory,
    ShiftDirectory,
    ShiftProfileDirectory,
)
from fleet_kernel.domain.scope import (
    AllActiveShiftsScope,
    AllDriversScope,
    AllOwnersScope,
    ApplicationScope,
    ShiftProfileScope,
    ShiftsWithAttributeScope,
    SpecificPersonScope,
    SpecificShiftScope,
    describe_scope,
    require_scope,
)
from fleet_kernel.domain.subjects import SubjectKind
from fleet_kernel.logging_config import get_logger
from fleet_kernel.selectors.assignment_selector import AssignmentSelector

logger = get_logger("services.scope_resolver")


class ScopeResolver:
    """
    Resolves application scopes as of a date.

    Contract:
        resolve() returns a frozenset of UUIDs.  Specific scopes always
        yield a singleton; roster scopes ignore target ids entirely.
    """

    def __init__(
        self,
        session: Session,
        shifts: ShiftDirectory,
        persons: PersonDirectory,
        shift_profiles: ShiftProfileDirectory,
    ):
        self.session = session
        self._shifts = shifts
        self._persons = persons
        self._shift_profiles = shift_profiles
        self._assignments = AssignmentSelector(session)

    def resolve(self, scope: ApplicationScope, as_of: date) -> frozenset[UUID]:
        """
        Expand ``scope`` into subject ids as of ``as_of``.

        Raises:
            InvalidScopeError: ``scope`` is not a well-formed scope variant.
        """
        scope = require_scope(scope)

        if isinstance(scope, SpecificShiftScope):
            result = frozenset({scope.shift_id})
        elif isinstance(scope, SpecificPersonScope):
            result = frozenset({scope.person_id})
        elif isinstance(scope, ShiftProfileScope):
            result = frozenset(
                self._shift_profiles.shift_ids_for_profile(scope.shift_profile_id, as_of)
            )
        elif isinstance(scope, AllOwnersScope):
            result = frozenset(self._persons.active_owner_ids(as_of))
        elif isinstance(scope, AllDriversScope):
            result = frozenset(self._persons.active_driver_ids(as_of))
        elif isinstance(scope, AllActiveShiftsScope):
            result = frozenset(self._shifts.active_shift_ids(as_of))
        elif isinstance(scope, ShiftsWithAttributeScope):
            result = frozenset(
                self._assignments.subject_ids_with_attribute(
                    scope.attribute_type_id, as_of, SubjectKind.SHIFT
                )
            )
        else:  # pragma: no cover - require_scope admits only the variants above
            raise AssertionError(f"Unhandled scope variant: {scope!r}")

        logger.debug(
            "scope_resolved",
            extra={
                "scope": describe_scope(scope),
                "as_of": str(as_of),
                "target_count": len(result),
                "targets": result,
            },
        )
        return result
