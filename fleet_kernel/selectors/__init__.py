"""Read-only selectors for the fleet kernel."""

from fleet_kernel.selectors.assignment_selector import AssignmentSelector
from fleet_kernel.selectors.base import BaseSelector
from fleet_kernel.selectors.cost_schedule_selector import CostScheduleSelector

__all__ = [
    "BaseSelector",
    "AssignmentSelector",
    "CostScheduleSelector",
]
