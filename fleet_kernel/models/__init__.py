"""ORM models for the fleet kernel."""

from fleet_kernel.models.attribute_assignment import AttributeAssignment
from fleet_kernel.models.attribute_type import AttributeType
from fleet_kernel.models.category import (
    ApplicationScopeMixin,
    ExpenseCategory,
    RevenueCategory,
)
from fleet_kernel.models.cost_schedule import CostScheduleEntry

__all__ = [
    "AttributeType",
    "AttributeAssignment",
    "CostScheduleEntry",
    "ApplicationScopeMixin",
    "ExpenseCategory",
    "RevenueCategory",
]
