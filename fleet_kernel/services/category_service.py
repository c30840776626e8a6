"""
Service layer for scoped expense and revenue categories.

Both category kinds persist an application scope through
ApplicationScopeMixin and resolve it through the same ScopeResolver, so an
expense and a revenue category with equal scopes always target the same
subjects.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from fleet_kernel.domain.scope import ApplicationScope, require_scope
from fleet_kernel.exceptions import (
    CategoryExistsError,
    CategoryNotFoundError,
    ValidationError,
)
from fleet_kernel.logging_config import get_logger
from fleet_kernel.models.category import ExpenseCategory, RevenueCategory
from fleet_kernel.services.base import BaseService
from fleet_kernel.services.scope_resolver import ScopeResolver

logger = get_logger("services.category")


class CategoryKind(str, Enum):
    EXPENSE = "EXPENSE"
    REVENUE = "REVENUE"


_MODELS = {
    CategoryKind.EXPENSE: ExpenseCategory,
    CategoryKind.REVENUE: RevenueCategory,
}


@dataclass(frozen=True)
class CategoryInfo:
    """Immutable DTO for an expense or revenue category."""

    id: UUID
    kind: CategoryKind
    code: str
    name: str
    description: str | None
    scope: ApplicationScope
    is_active: bool


class ScopedCategoryService(BaseService):
    """
    Create categories, change their scope, and resolve their targets.

    Contract:
        Scopes are validated before they are written and again by the
        mixin's flush hook.
    """

    def __init__(self, session: Session, resolver: ScopeResolver):
        super().__init__(session)
        self._resolver = resolver

    def _to_dto(self, kind: CategoryKind, category) -> CategoryInfo:
        return CategoryInfo(
            id=category.id,
            kind=kind,
            code=category.code,
            name=category.name,
            description=category.description,
            scope=category.scope,
            is_active=category.is_active,
        )

    def _get_by_id(self, kind: CategoryKind, category_id: UUID):
        category = self.session.get(_MODELS[kind], category_id)
        if category is None:
            raise CategoryNotFoundError(kind.value, str(category_id))
        return category

    def create_category(
        self,
        kind: CategoryKind,
        code: str,
        name: str,
        scope: ApplicationScope,
        actor_id: UUID,
        description: str | None = None,
    ) -> CategoryInfo:
        """
        Create an expense or revenue category targeting ``scope``.

        Raises:
            CategoryExistsError: The code is taken for this kind.
            InvalidScopeError: ``scope`` is not a well-formed variant.
        """
        kind = CategoryKind(kind)
        model = _MODELS[kind]
        normalized = (code or "").strip().upper()
        if not normalized:
            raise ValidationError("Category code is required")
        scope = require_scope(scope)

        exists = self.session.execute(
            select(model.id).where(model.code == normalized)
        ).scalar_one_or_none()
        if exists is not None:
            raise CategoryExistsError(kind.value, normalized)

        category = model(
            code=normalized,
            name=name,
            description=description,
            is_active=True,
            created_by_id=actor_id,
        )
        category.set_scope(scope)
        self.session.add(category)
        self.session.flush()

        logger.info(
            "category_created",
            extra={
                "category_kind": kind.value,
                "category_id": str(category.id),
                "category_code": normalized,
                "scope_type": category.scope_type,
            },
        )
        return self._to_dto(kind, category)

    def update_scope(
        self,
        kind: CategoryKind,
        category_id: UUID,
        scope: ApplicationScope,
        actor_id: UUID,
    ) -> CategoryInfo:
        kind = CategoryKind(kind)
        category = self._get_by_id(kind, category_id)
        category.set_scope(require_scope(scope))
        category.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "category_scope_updated",
            extra={
                "category_kind": kind.value,
                "category_id": str(category.id),
                "scope_type": category.scope_type,
            },
        )
        return self._to_dto(kind, category)

    def get(self, kind: CategoryKind, category_id: UUID) -> CategoryInfo:
        kind = CategoryKind(kind)
        return self._to_dto(kind, self._get_by_id(kind, category_id))

    def get_scope(self, kind: CategoryKind, category_id: UUID) -> ApplicationScope:
        return self._get_by_id(CategoryKind(kind), category_id).scope

    def resolve_targets(
        self,
        kind: CategoryKind,
        category_id: UUID,
        as_of: date,
    ) -> frozenset[UUID]:
        """Subject ids the category applies to on ``as_of``."""
        return self._resolver.resolve(self.get_scope(kind, category_id), as_of)
