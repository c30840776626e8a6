"""
Module: fleet_kernel.db.types
Responsibility: Annotated column type aliases and the money rounding helper.
    Centralizes precision and string widths so every model declares columns
    through the same aliases.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/ and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Prices are whole cents.  Price columns are Numeric(12, 2) and the cost
      schedule rejects anything finer, so price * units is exact and DAILY
      totals add up across any split of a period.
    - round_money() is the ONLY sanctioned rounding function for charge
      amounts.
    - No floats: prices and amounts are Decimal end to end.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, get_args

from sqlalchemy import Numeric, String

# Price per billing unit: up to 9,999,999,999.99
Price = Annotated[Decimal, Numeric(12, 2)]

# Attribute and category codes
ShortCode = Annotated[str, String(50)]

# Human-readable names
Name = Annotated[str, String(200)]

# Assignment values and validation patterns
ValueText = Annotated[str, String(500)]

# Descriptions, notes and help text
LongText = Annotated[str, String(4000)]

# Consumed by Base.type_annotation_map.
ANNOTATED_COLUMN_TYPES = {
    alias: get_args(alias)[1] for alias in (Price, ShortCode, Name, ValueText, LongText)
}

CHARGE_DECIMAL_PLACES = 2
CENT = Decimal("0.01")
MAX_PRICE = Decimal("9999999999.99")
DEFAULT_ROUNDING = ROUND_HALF_UP


def is_whole_cents(value: Decimal) -> bool:
    """True when ``value`` has no digits below the cent."""
    return value == value.quantize(CENT)


def round_money(
    value: Decimal,
    decimal_places: int = CHARGE_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    This is the ONLY sanctioned rounding function for charge amounts.
    All other code delegates rounding here.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)
