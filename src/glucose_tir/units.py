"""Conversión de unidades de glucosa (mg/dL -> mmol/L)."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

CONVERSION_FACTOR = 0.0555

_ONE_DECIMAL = Decimal("0.1")


class DisplayUnit(str, Enum):
    """Unit a value is shown in. Storage is always mg/dL."""

    MG_DL = "mg/dL"
    MMOL_L = "mmol/L"

    @property
    def is_converted(self) -> bool:
        return self is DisplayUnit.MMOL_L


def convert(value: float, to_display_unit: bool) -> float:
    """Convert a canonical (mg/dL) value for display.

    Args:
        value: Value in mg/dL.
        to_display_unit: True to convert to mmol/L, False to keep mg/dL.

    Returns:
        ``value * 0.0555`` when converting, ``value`` otherwise.
    """
    if not to_display_unit:
        return value
    return value * CONVERSION_FACTOR


def to_display(value: float, unit: DisplayUnit) -> float:
    """Apply :func:`convert` for the selected display unit."""
    return convert(value, unit.is_converted)


def format_threshold(value: float, unit: DisplayUnit) -> str:
    """Threshold en la unidad elegida, con un decimal y sin separador de miles.

    Decimal product, rounded half up: 100 mg/dL -> "5.6" mmol/L.
    """
    amount = Decimal(repr(float(value)))
    if unit.is_converted:
        amount *= Decimal(repr(CONVERSION_FACTOR))
    return f"{amount.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP):f}"
