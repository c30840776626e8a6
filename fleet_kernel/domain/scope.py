"""
ApplicationScope -- which shifts or persons a category targets.

Responsibility:
    A sum type with one frozen variant per targeting strategy.  Each variant
    carries exactly its own payload, so a well-typed scope can never have the
    wrong id populated.  Expense and revenue categories share it.

    Persistence stores a flat layout (scope_type plus four nullable id
    columns).  ``scope_from_fields`` / ``scope_to_fields`` are the only
    crossing points between the two shapes, and the flat shape is checked
    there: the populated id set must be exactly the one the tag requires.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - InvalidScopeError for an unknown tag, a missing required id, or any
      extra id populated alongside the required one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union
from uuid import UUID

from fleet_kernel.exceptions import InvalidScopeError


class ScopeType(str, Enum):
    SPECIFIC_SHIFT = "SPECIFIC_SHIFT"
    SHIFT_PROFILE = "SHIFT_PROFILE"
    SPECIFIC_PERSON = "SPECIFIC_PERSON"
    ALL_OWNERS = "ALL_OWNERS"
    ALL_DRIVERS = "ALL_DRIVERS"
    ALL_ACTIVE_SHIFTS = "ALL_ACTIVE_SHIFTS"
    SHIFTS_WITH_ATTRIBUTE = "SHIFTS_WITH_ATTRIBUTE"


@dataclass(frozen=True)
class SpecificShiftScope:
    scope_type: ClassVar[ScopeType] = ScopeType.SPECIFIC_SHIFT
    shift_id: UUID


@dataclass(frozen=True)
class ShiftProfileScope:
    scope_type: ClassVar[ScopeType] = ScopeType.SHIFT_PROFILE
    shift_profile_id: UUID


@dataclass(frozen=True)
class SpecificPersonScope:
    scope_type: ClassVar[ScopeType] = ScopeType.SPECIFIC_PERSON
    person_id: UUID


@dataclass(frozen=True)
class AllOwnersScope:
    scope_type: ClassVar[ScopeType] = ScopeType.ALL_OWNERS


@dataclass(frozen=True)
class AllDriversScope:
    scope_type: ClassVar[ScopeType] = ScopeType.ALL_DRIVERS


@dataclass(frozen=True)
class AllActiveShiftsScope:
    scope_type: ClassVar[ScopeType] = ScopeType.ALL_ACTIVE_SHIFTS


@dataclass(frozen=True)
class ShiftsWithAttributeScope:
    scope_type: ClassVar[ScopeType] = ScopeType.SHIFTS_WITH_ATTRIBUTE
    attribute_type_id: UUID


ApplicationScope = Union[
    SpecificShiftScope,
    ShiftProfileScope,
    SpecificPersonScope,
    AllOwnersScope,
    AllDriversScope,
    AllActiveShiftsScope,
    ShiftsWithAttributeScope,
]

SCOPE_CLASSES: tuple[type, ...] = (
    SpecificShiftScope,
    ShiftProfileScope,
    SpecificPersonScope,
    AllOwnersScope,
    AllDriversScope,
    AllActiveShiftsScope,
    ShiftsWithAttributeScope,
)

# Flat column that carries each tag's payload (None for the ALL_* tags).
TARGET_FIELD: dict[ScopeType, str | None] = {
    ScopeType.SPECIFIC_SHIFT: "shift_id",
    ScopeType.SHIFT_PROFILE: "shift_profile_id",
    ScopeType.SPECIFIC_PERSON: "person_id",
    ScopeType.ALL_OWNERS: None,
    ScopeType.ALL_DRIVERS: None,
    ScopeType.ALL_ACTIVE_SHIFTS: None,
    ScopeType.SHIFTS_WITH_ATTRIBUTE: "attribute_type_id",
}

TARGET_FIELDS: tuple[str, ...] = (
    "shift_id",
    "shift_profile_id",
    "person_id",
    "attribute_type_id",
)

_CLASS_BY_TYPE: dict[ScopeType, type] = {cls.scope_type: cls for cls in SCOPE_CLASSES}


@dataclass(frozen=True)
class ScopeFields:
    """Flat persistence shape of an ApplicationScope."""

    scope_type: ScopeType
    shift_id: UUID | None = None
    shift_profile_id: UUID | None = None
    person_id: UUID | None = None
    attribute_type_id: UUID | None = None


def is_scope(value: object) -> bool:
    return isinstance(value, SCOPE_CLASSES)


def require_scope(value: object) -> ApplicationScope:
    """Return ``value`` if it is a well-formed scope variant, else raise."""
    if not is_scope(value):
        raise InvalidScopeError(
            type(value).__name__, "not an application scope variant"
        )
    field = TARGET_FIELD[value.scope_type]
    if field is not None and not isinstance(getattr(value, field), UUID):
        raise InvalidScopeError(
            value.scope_type.value, f"{field} must be a UUID"
        )
    return value


def scope_from_fields(
    scope_type: ScopeType | str | None,
    shift_id: UUID | None = None,
    shift_profile_id: UUID | None = None,
    person_id: UUID | None = None,
    attribute_type_id: UUID | None = None,
) -> ApplicationScope:
    """
    Build a scope variant from the flat column layout.

    Raises:
        InvalidScopeError: Unknown tag, required id missing, or an id
            populated that the tag does not use.
    """
    if scope_type is None:
        raise InvalidScopeError("None", "scope type is required")
    try:
        tag = ScopeType(scope_type)
    except ValueError:
        raise InvalidScopeError(str(scope_type), "unknown scope type") from None

    values = {
        "shift_id": shift_id,
        "shift_profile_id": shift_profile_id,
        "person_id": person_id,
        "attribute_type_id": attribute_type_id,
    }
    required = TARGET_FIELD[tag]
    populated = {name for name, val in values.items() if val is not None}
    expected = {required} if required else set()

    missing = expected - populated
    if missing:
        raise InvalidScopeError(tag.value, f"{required} is required")
    extra = populated - expected
    if extra:
        raise InvalidScopeError(
            tag.value, f"unexpected target id(s): {', '.join(sorted(extra))}"
        )

    cls = _CLASS_BY_TYPE[tag]
    if required is None:
        return cls()
    return cls(values[required])


def scope_to_fields(scope: ApplicationScope) -> ScopeFields:
    """Flatten a scope variant for persistence."""
    scope = require_scope(scope)
    field = TARGET_FIELD[scope.scope_type]
    if field is None:
        return ScopeFields(scope_type=scope.scope_type)
    return ScopeFields(scope_type=scope.scope_type, **{field: getattr(scope, field)})


def describe_scope(scope: ApplicationScope) -> str:
    """Short human-readable form, e.g. ``SPECIFIC_SHIFT(<uuid>)``."""
    field = TARGET_FIELD[scope.scope_type]
    if field is None:
        return scope.scope_type.value
    return f"{scope.scope_type.value}({getattr(scope, field)})"
