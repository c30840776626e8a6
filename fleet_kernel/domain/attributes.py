"""
Attribute type vocabulary and value checks.

Pure rules shared by the registry and the assignment store: the category and
data type enums, code normalization, and the checks an assignment value must
pass for its attribute type.
"""

from __future__ import annotations

import re
from enum import Enum

from fleet_kernel.exceptions import (
    InvalidAttributeValueError,
    MissingAttributeValueError,
    ValidationError,
)


class AttributeCategory(str, Enum):
    LICENSE = "LICENSE"
    EQUIPMENT = "EQUIPMENT"
    TYPE = "TYPE"
    PERMIT = "PERMIT"
    CERTIFICATION = "CERTIFICATION"


class AttributeDataType(str, Enum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    DATE = "DATE"
    BOOLEAN = "BOOLEAN"


def normalize_code(code: str) -> str:
    """Attribute codes are stored trimmed and upper-case."""
    return code.strip().upper()


def normalize_value(value: str | None) -> str | None:
    """Blank values are stored as None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_pattern(pattern: str | None) -> str | None:
    """Return the pattern if it compiles; blank patterns become None."""
    if pattern is None or not pattern.strip():
        return None
    try:
        re.compile(pattern)
    except re.error as exc:
        raise ValidationError(f"Invalid validation pattern {pattern!r}: {exc}") from exc
    return pattern


def validate_value(
    attribute_code: str,
    value: str | None,
    requires_value: bool,
    validation_pattern: str | None,
) -> None:
    """
    Check an assignment value against its attribute type.

    Raises:
        MissingAttributeValueError: requires_value and the value is blank.
        InvalidAttributeValueError: a value is present and does not fully
            match validation_pattern.
    """
    if value is None:
        if requires_value:
            raise MissingAttributeValueError(attribute_code)
        return
    if validation_pattern and re.fullmatch(validation_pattern, value) is None:
        raise InvalidAttributeValueError(attribute_code, value, validation_pattern)
