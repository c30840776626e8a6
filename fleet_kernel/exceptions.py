"""
Typed Exception Hierarchy for the Fleet Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (expense generation, revenue generation, API layers) must react to
kernel failures precisely. Every failure therefore has:
  1. A TYPED exception class (catch by type, not by message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example:
    try:
        assignments.assign(subject, airport_license.id, actor_id, start, end)
    except AssignmentOverlapError as e:
        api_response(code=e.code, conflicts=e.conflicting_ids)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from FleetKernelError:

    FleetKernelError (base)
    |
    +-- NotFoundError
    |   +-- AttributeTypeNotFoundError
    |   +-- AssignmentNotFoundError
    |   +-- CostScheduleEntryNotFoundError
    |   +-- SubjectNotFoundError
    |   +-- CategoryNotFoundError
    |   +-- NoActiveCostError
    |
    +-- ValidationError
    |   +-- InvalidDateRangeError
    |   +-- MissingAttributeValueError
    |   +-- InvalidAttributeValueError
    |   +-- InvalidPriceError
    |   +-- InvalidScopeError
    |   +-- AttributeTypeExistsError
    |   +-- AttributeTypeInactiveError
    |   +-- CategoryExistsError
    |
    +-- OverlapError
    |   +-- AssignmentOverlapError
    |   +-- CostScheduleOverlapError
    |
    +-- ImmutableHistoryError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Not found       | ATTRIBUTE_TYPE_NOT_FOUND    | Unknown attribute type id or code
                | ASSIGNMENT_NOT_FOUND        | Unknown assignment id
                | COST_ENTRY_NOT_FOUND        | Unknown cost schedule entry id
                | SUBJECT_NOT_FOUND           | Shift or cab unknown to the directory
                | CATEGORY_NOT_FOUND          | Unknown expense/revenue category
                | NO_ACTIVE_COST              | No cost entry covers the date
----------------|-----------------------------|-----------------------------------------
Validation      | INVALID_DATE_RANGE          | start > end, end < start
                | MISSING_ATTRIBUTE_VALUE     | requires_value type, blank value
                | INVALID_ATTRIBUTE_VALUE     | value fails validation_pattern
                | INVALID_PRICE               | negative price
                | INVALID_SCOPE               | scope tag / target id mismatch
                | ATTRIBUTE_TYPE_EXISTS       | duplicate attribute code
                | ATTRIBUTE_TYPE_INACTIVE     | assigning a deactivated type
                | CATEGORY_EXISTS             | duplicate category code
----------------|-----------------------------|-----------------------------------------
Overlap         | ASSIGNMENT_OVERLAP          | (subject, type) intervals conflict
                | COST_SCHEDULE_OVERLAP       | (type) price intervals conflict
----------------|-----------------------------|-----------------------------------------
History         | IMMUTABLE_HISTORY           | delete of a record that already began

===============================================================================
HANDLING PATTERNS
===============================================================================

Overlap and validation failures are caller-input problems, never transient:
do not retry them. Expense/revenue generation treats any FleetKernelError as
fatal to the single operation being attempted.

Missing cost coverage is NOT an error. It yields an omitted line item (see
ChargeResult.unpriced_assignment_ids).

===============================================================================
"""


class FleetKernelError(Exception):
    """
    Base exception for all fleet kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "FLEET_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(FleetKernelError):
    """Base exception for unknown records or subjects."""

    code: str = "NOT_FOUND"


class AttributeTypeNotFoundError(NotFoundError):
    """Attribute type with given ID or code was not found."""

    code: str = "ATTRIBUTE_TYPE_NOT_FOUND"

    def __init__(self, attribute_type: str):
        self.attribute_type = attribute_type
        super().__init__(f"Attribute type not found: {attribute_type}")


class AssignmentNotFoundError(NotFoundError):
    """Attribute assignment with given ID was not found."""

    code: str = "ASSIGNMENT_NOT_FOUND"

    def __init__(self, assignment_id: str):
        self.assignment_id = assignment_id
        super().__init__(f"Attribute assignment not found: {assignment_id}")


class CostScheduleEntryNotFoundError(NotFoundError):
    """Cost schedule entry with given ID was not found."""

    code: str = "COST_ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Cost schedule entry not found: {entry_id}")


class SubjectNotFoundError(NotFoundError):
    """The shift or cab is not known to the subject directory."""

    code: str = "SUBJECT_NOT_FOUND"

    def __init__(self, subject_kind: str, subject_id: str):
        self.subject_kind = subject_kind
        self.subject_id = subject_id
        super().__init__(f"{subject_kind.capitalize()} not found: {subject_id}")


class CategoryNotFoundError(NotFoundError):
    """Expense or revenue category was not found."""

    code: str = "CATEGORY_NOT_FOUND"

    def __init__(self, category_kind: str, category: str):
        self.category_kind = category_kind
        self.category = category
        super().__init__(f"{category_kind} category not found: {category}")


class NoActiveCostError(NotFoundError):
    """No cost schedule entry covers the requested date."""

    code: str = "NO_ACTIVE_COST"

    def __init__(self, attribute_type_id: str, as_of: str):
        self.attribute_type_id = attribute_type_id
        self.as_of = as_of
        super().__init__(
            f"No active cost for attribute type {attribute_type_id} on {as_of}"
        )


# Validation exceptions


class ValidationError(FleetKernelError):
    """Base exception for rejected caller input."""

    code: str = "VALIDATION_ERROR"


class InvalidDateRangeError(ValidationError):
    """Interval bounds are inverted."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start: str, end: str, reason: str | None = None):
        self.start = start
        self.end = end
        self.reason = reason or "start date must be on or before end date"
        super().__init__(f"Invalid date range {start}..{end}: {self.reason}")


class MissingAttributeValueError(ValidationError):
    """The attribute type requires a value but none was given."""

    code: str = "MISSING_ATTRIBUTE_VALUE"

    def __init__(self, attribute_code: str):
        self.attribute_code = attribute_code
        super().__init__(f"Attribute value is required for: {attribute_code}")


class InvalidAttributeValueError(ValidationError):
    """The value does not match the attribute type's validation pattern."""

    code: str = "INVALID_ATTRIBUTE_VALUE"

    def __init__(self, attribute_code: str, value: str, pattern: str):
        self.attribute_code = attribute_code
        self.value = value
        self.pattern = pattern
        super().__init__(
            f"Value '{value}' for {attribute_code} does not match pattern {pattern}"
        )


class InvalidPriceError(ValidationError):
    """Cost schedule price is negative, not a number, or finer than a cent."""

    code: str = "INVALID_PRICE"

    def __init__(self, price: str):
        self.price = price
        super().__init__(f"Price must be a non-negative amount in whole cents, got {price}")


class InvalidScopeError(ValidationError):
    """
    Application scope tag and target ids are inconsistent.

    The populated id set must exactly match what the tag requires.
    """

    code: str = "INVALID_SCOPE"

    def __init__(self, scope_type: str, reason: str):
        self.scope_type = scope_type
        self.reason = reason
        super().__init__(f"Invalid application scope {scope_type}: {reason}")


class AttributeTypeExistsError(ValidationError):
    """An attribute type with this code already exists."""

    code: str = "ATTRIBUTE_TYPE_EXISTS"

    def __init__(self, attribute_code: str):
        self.attribute_code = attribute_code
        super().__init__(f"Attribute type with code already exists: {attribute_code}")


class AttributeTypeInactiveError(ValidationError):
    """The attribute type is deactivated and cannot be newly assigned."""

    code: str = "ATTRIBUTE_TYPE_INACTIVE"

    def __init__(self, attribute_code: str):
        self.attribute_code = attribute_code
        super().__init__(f"Attribute type is inactive: {attribute_code}")


class CategoryExistsError(ValidationError):
    """A category with this code already exists."""

    code: str = "CATEGORY_EXISTS"

    def __init__(self, category_kind: str, category_code: str):
        self.category_kind = category_kind
        self.category_code = category_code
        super().__init__(
            f"{category_kind} category code already exists: {category_code}"
        )


# Overlap exceptions


class OverlapError(FleetKernelError):
    """
    Base exception for interval conflicts.

    Carries the ids of every conflicting record and the attempted interval.
    """

    code: str = "OVERLAP"

    def __init__(
        self,
        conflicting_ids: list[str],
        start: str,
        end: str | None,
        message: str,
    ):
        self.conflicting_ids = conflicting_ids
        self.start = start
        self.end = end
        super().__init__(message)


class AssignmentOverlapError(OverlapError):
    """New or updated assignment overlaps existing assignment(s)."""

    code: str = "ASSIGNMENT_OVERLAP"

    def __init__(
        self,
        subject: str,
        attribute_type_id: str,
        conflicting_ids: list[str],
        start: str,
        end: str | None,
    ):
        self.subject = subject
        self.attribute_type_id = attribute_type_id
        super().__init__(
            conflicting_ids,
            start,
            end,
            f"Assignment {start}..{end or 'open'} of attribute type "
            f"{attribute_type_id} to {subject} overlaps existing assignment(s): "
            f"{', '.join(conflicting_ids) or 'concurrent write'}",
        )


class CostScheduleOverlapError(OverlapError):
    """New or updated cost entry overlaps existing entries for the type."""

    code: str = "COST_SCHEDULE_OVERLAP"

    def __init__(
        self,
        attribute_type_id: str,
        conflicting_ids: list[str],
        start: str,
        end: str | None,
    ):
        self.attribute_type_id = attribute_type_id
        super().__init__(
            conflicting_ids,
            start,
            end,
            f"Cost entry {start}..{end or 'open'} for attribute type "
            f"{attribute_type_id} overlaps existing entr(y/ies): "
            f"{', '.join(conflicting_ids) or 'concurrent write'}",
        )


# History exceptions


class ImmutableHistoryError(FleetKernelError):
    """
    Attempted to delete a record whose interval has already begun.

    Historical records may only be closed (end date / effective_to), never
    removed, so the audit trail of what was charged stays reconstructible.
    """

    code: str = "IMMUTABLE_HISTORY"

    def __init__(self, record_type: str, record_id: str, started_on: str):
        self.record_type = record_type
        self.record_id = record_id
        self.started_on = started_on
        super().__init__(
            f"Cannot delete historical {record_type} {record_id} "
            f"(started {started_on}); set an end date instead"
        )
