"""
Module: fleet_kernel.models.category
Responsibility: ORM persistence for expense and revenue categories and the
    application scope columns they share.
Architecture position: Kernel > Models.  May import from db/ and domain
    value types only.

Invariants enforced:
    - SCOPE_CONSISTENCY: ApplicationScopeMixin rebuilds the scope variant
      from its columns on every INSERT and UPDATE flush.  A row whose
      populated target ids do not match its scope_type never reaches the
      database (InvalidScopeError).
    - code is unique per table.
"""

from uuid import UUID

from sqlalchemy import Boolean, String, event
from sqlalchemy.orm import Mapped, mapped_column

from fleet_kernel.db.base import TrackedBase, UUIDString
from fleet_kernel.db.types import LongText, Name, ShortCode
from fleet_kernel.domain.scope import (
    ApplicationScope,
    ScopeType,
    scope_from_fields,
    scope_to_fields,
)


class ApplicationScopeMixin:
    """
    Flat application scope columns plus typed accessors.

    Contract:
        Code reads and writes the scope through ``scope`` / ``set_scope``;
        the raw columns exist for storage and querying only.
    """

    scope_type: Mapped[ScopeType] = mapped_column(String(30), nullable=False)

    shift_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    shift_profile_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    person_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    attribute_type_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    @property
    def scope(self) -> ApplicationScope:
        return scope_from_fields(
            self.scope_type,
            shift_id=self.shift_id,
            shift_profile_id=self.shift_profile_id,
            person_id=self.person_id,
            attribute_type_id=self.attribute_type_id,
        )

    def set_scope(self, scope: ApplicationScope) -> None:
        fields = scope_to_fields(scope)
        self.scope_type = fields.scope_type.value
        self.shift_id = fields.shift_id
        self.shift_profile_id = fields.shift_profile_id
        self.person_id = fields.person_id
        self.attribute_type_id = fields.attribute_type_id


class ExpenseCategory(ApplicationScopeMixin, TrackedBase):
    """A recurring cost category and the subjects it is charged to."""

    __tablename__ = "expense_categories"

    code: Mapped[ShortCode] = mapped_column(nullable=False, unique=True)

    name: Mapped[Name] = mapped_column(nullable=False)

    description: Mapped[LongText | None] = mapped_column(nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<ExpenseCategory {self.code}: {self.scope_type}>"


class RevenueCategory(ApplicationScopeMixin, TrackedBase):
    """A revenue category and the subjects it is credited to."""

    __tablename__ = "revenue_categories"

    code: Mapped[ShortCode] = mapped_column(nullable=False, unique=True)

    name: Mapped[Name] = mapped_column(nullable=False)

    description: Mapped[LongText | None] = mapped_column(nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<RevenueCategory {self.code}: {self.scope_type}>"


def _validate_scope_columns(mapper, connection, target) -> None:
    """Reject inconsistent scope columns at flush time."""
    # INVARIANT: SCOPE_CONSISTENCY -- raises InvalidScopeError on mismatch
    target.scope  # noqa: B018


for _model in (ExpenseCategory, RevenueCategory):
    event.listen(_model, "before_insert", _validate_scope_columns)
    event.listen(_model, "before_update", _validate_scope_columns)
