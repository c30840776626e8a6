"""
Service layer for the attribute type registry.

Manages the catalogue of cost-bearing attribute kinds.  Codes are
normalized to upper case on create and never change afterwards.

Returns AttributeTypeInfo DTOs instead of ORM entities.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from fleet_kernel.domain.attributes import (
    AttributeCategory,
    AttributeDataType,
    normalize_code,
    validate_pattern,
)
from fleet_kernel.domain.dtos import AttributeTypeInfo
from fleet_kernel.exceptions import (
    AttributeTypeExistsError,
    AttributeTypeNotFoundError,
    ValidationError,
)
from fleet_kernel.logging_config import get_logger
from fleet_kernel.models.attribute_type import AttributeType
from fleet_kernel.services.base import BaseService

logger = get_logger("services.attribute_type")


class AttributeTypeService(BaseService[AttributeType]):
    """
    Service for managing attribute types.

    Contract:
        All public methods return AttributeTypeInfo DTOs.  The code of an
        attribute type is immutable once created.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _get_by_id(self, attribute_type_id: UUID) -> AttributeType:
        attribute_type = self.session.get(AttributeType, attribute_type_id)
        if attribute_type is None:
            raise AttributeTypeNotFoundError(str(attribute_type_id))
        return attribute_type

    def _find_by_code(self, code: str) -> AttributeType | None:
        stmt = select(AttributeType).where(AttributeType.code == normalize_code(code))
        return self.session.execute(stmt).scalar_one_or_none()

    def get(self, attribute_type_id: UUID) -> AttributeTypeInfo:
        """
        Get attribute type by ID.

        Raises:
            AttributeTypeNotFoundError: If it doesn't exist.
        """
        return AttributeTypeInfo.from_model(self._get_by_id(attribute_type_id))

    def get_by_code(self, code: str) -> AttributeTypeInfo:
        """
        Get attribute type by code (case-insensitive).

        Raises:
            AttributeTypeNotFoundError: If it doesn't exist.
        """
        attribute_type = self._find_by_code(code)
        if attribute_type is None:
            raise AttributeTypeNotFoundError(code)
        return AttributeTypeInfo.from_model(attribute_type)

    def find_by_code(self, code: str) -> AttributeTypeInfo | None:
        attribute_type = self._find_by_code(code)
        return AttributeTypeInfo.from_model(attribute_type) if attribute_type else None

    def list_all(self) -> list[AttributeTypeInfo]:
        rows = self.session.execute(
            select(AttributeType).order_by(AttributeType.name)
        ).scalars().all()
        return [AttributeTypeInfo.from_model(r) for r in rows]

    def list_active(self) -> list[AttributeTypeInfo]:
        rows = self.session.execute(
            select(AttributeType)
            .where(AttributeType.is_active == True)  # noqa: E712
            .order_by(AttributeType.name)
        ).scalars().all()
        return [AttributeTypeInfo.from_model(r) for r in rows]

    def list_by_category(
        self,
        category: AttributeCategory,
        active_only: bool = True,
    ) -> list[AttributeTypeInfo]:
        stmt = select(AttributeType).where(
            AttributeType.category == AttributeCategory(category).value
        )
        if active_only:
            stmt = stmt.where(AttributeType.is_active == True)  # noqa: E712
        rows = self.session.execute(stmt.order_by(AttributeType.name)).scalars().all()
        return [AttributeTypeInfo.from_model(r) for r in rows]

    def create_attribute_type(
        self,
        code: str,
        name: str,
        category: AttributeCategory,
        data_type: AttributeDataType,
        actor_id: UUID,
        requires_value: bool = False,
        description: str | None = None,
        validation_pattern: str | None = None,
        help_text: str | None = None,
    ) -> AttributeTypeInfo:
        """
        Create a new attribute type.

        Args:
            code: Unique code, e.g. "AIRPORT_LICENSE".  Stored upper-case.
            name: Display name.
            category: LICENSE, EQUIPMENT, TYPE, PERMIT or CERTIFICATION.
            data_type: Kind of value assignments carry.
            actor_id: UUID of the actor creating the type.
            requires_value: Assignments must carry a non-blank value.
            validation_pattern: Optional regex values must fully match.

        Raises:
            AttributeTypeExistsError: The code is already taken.
            ValidationError: Blank code or name, or an invalid pattern.
        """
        normalized = normalize_code(code or "")
        if not normalized:
            raise ValidationError("Attribute type code is required")
        if not name or not name.strip():
            raise ValidationError("Attribute type name is required")
        if self._find_by_code(normalized) is not None:
            logger.warning(
                "attribute_type_rejected",
                extra={"code": normalized, "reason": AttributeTypeExistsError.code},
            )
            raise AttributeTypeExistsError(normalized)

        attribute_type = AttributeType(
            code=normalized,
            name=name.strip(),
            description=description,
            category=AttributeCategory(category).value,
            data_type=AttributeDataType(data_type).value,
            requires_value=requires_value,
            validation_pattern=validate_pattern(validation_pattern),
            help_text=help_text,
            is_active=True,
            created_by_id=actor_id,
        )
        self.session.add(attribute_type)
        self.session.flush()

        logger.info(
            "attribute_type_created",
            extra={
                "attribute_type_id": str(attribute_type.id),
                "code": normalized,
                "category": attribute_type.category,
                "requires_value": requires_value,
            },
        )
        return AttributeTypeInfo.from_model(attribute_type)

    def update_attribute_type(
        self,
        attribute_type_id: UUID,
        actor_id: UUID,
        name: str | None = None,
        description: str | None = None,
        category: AttributeCategory | None = None,
        validation_pattern: str | None = None,
        help_text: str | None = None,
        requires_value: bool | None = None,
    ) -> AttributeTypeInfo:
        """
        Update attribute type details.  The code cannot be changed.

        Tightening requires_value or validation_pattern does not re-check
        existing assignments; it applies to later assign/update calls.
        """
        attribute_type = self._get_by_id(attribute_type_id)

        if name is not None:
            if not name.strip():
                raise ValidationError("Attribute type name is required")
            attribute_type.name = name.strip()
        if description is not None:
            attribute_type.description = description
        if category is not None:
            attribute_type.category = AttributeCategory(category).value
        if validation_pattern is not None:
            attribute_type.validation_pattern = validate_pattern(validation_pattern)
        if help_text is not None:
            attribute_type.help_text = help_text
        if requires_value is not None:
            attribute_type.requires_value = requires_value

        attribute_type.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "attribute_type_updated",
            extra={"attribute_type_id": str(attribute_type.id), "code": attribute_type.code},
        )
        return AttributeTypeInfo.from_model(attribute_type)

    def activate(self, attribute_type_id: UUID, actor_id: UUID | None = None) -> AttributeTypeInfo:
        return self._set_active(attribute_type_id, True, actor_id)

    def deactivate(self, attribute_type_id: UUID, actor_id: UUID | None = None) -> AttributeTypeInfo:
        """Stop new assignments of this type.  Existing history is untouched."""
        return self._set_active(attribute_type_id, False, actor_id)

    def _set_active(
        self,
        attribute_type_id: UUID,
        active: bool,
        actor_id: UUID | None,
    ) -> AttributeTypeInfo:
        attribute_type = self._get_by_id(attribute_type_id)
        attribute_type.is_active = active
        if actor_id is not None:
            attribute_type.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "attribute_type_activated" if active else "attribute_type_deactivated",
            extra={"attribute_type_id": str(attribute_type.id), "code": attribute_type.code},
        )
        return AttributeTypeInfo.from_model(attribute_type)
