"""
Kernel Invariants Contract.

These invariants are structural law. They are enforced by the services and,
on PostgreSQL, by exclusion constraints. No setting may override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across AttributeAssignmentService,
CostScheduleService, the ApplicationScopeMixin flush hook and the
constraints installed by fleet_kernel.db.constraints.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    ASSIGNMENT_NON_OVERLAP = "assignment_non_overlap"
    """For a fixed (subject, attribute type) no two assignment intervals
    intersect. Enforced by AttributeAssignmentService under a row lock on
    the attribute type, and by an EXCLUDE constraint on PostgreSQL."""

    COST_SCHEDULE_NON_OVERLAP = "cost_schedule_non_overlap"
    """For a fixed attribute type no two cost schedule entries intersect.
    Enforced by CostScheduleService and an EXCLUDE constraint."""

    REQUIRED_VALUE = "required_value"
    """Assignments of a requires_value attribute type carry a non-blank
    value matching the type's validation pattern."""

    IMMUTABLE_HISTORY = "immutable_history"
    """Assignments and cost entries that have already begun are closed with
    an end date, never deleted."""

    SCOPE_CONSISTENCY = "scope_consistency"
    """A persisted application scope populates exactly the target id its
    tag requires. Enforced by ApplicationScopeMixin on every flush."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The pure domain layer may not import from these packages.
# This is enforced by tests/architecture/test_layering.py.
FORBIDDEN_DOMAIN_IMPORTS: tuple[str, ...] = (
    "sqlalchemy",
    "psycopg2",
    "fleet_kernel.db",
    "fleet_kernel.models",
    "fleet_kernel.services",
    "fleet_kernel.selectors",
)
