"""Kernel services: the write side plus read facades over the selectors."""

from fleet_kernel.services.assignment_service import AttributeAssignmentService
from fleet_kernel.services.attribute_type_service import AttributeTypeService
from fleet_kernel.services.base import BaseService
from fleet_kernel.services.category_service import (
    CategoryInfo,
    CategoryKind,
    ScopedCategoryService,
)
from fleet_kernel.services.charge_calculator import ChargeCalculator
from fleet_kernel.services.cost_schedule_service import CostScheduleService
from fleet_kernel.services.scope_resolver import ScopeResolver

__all__ = [
    "BaseService",
    "AttributeTypeService",
    "AttributeAssignmentService",
    "CostScheduleService",
    "ChargeCalculator",
    "ScopeResolver",
    "ScopedCategoryService",
    "CategoryKind",
    "CategoryInfo",
]
