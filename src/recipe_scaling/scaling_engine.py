#!/usr/bin/env python3
"""
Scaling engine: multiply a parsed quantity by a scale factor and round it to
a precision that makes sense for its unit.

Rounding classes:
    fractional  cups/spoons/unknown units snap to the nearest kitchen fraction
    decimal     weights and metric volumes keep one decimal place
    whole       counted items round to whole numbers (sub-1 amounts snap to fractions)
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Sequence

from .config import config
from .error_handling import InvalidScaleFactorError
from .ingredient_parser import ParsedIngredient
from .unit_tables import DECIMAL, KITCHEN_FRACTIONS, WHOLE, rounding_class


@dataclass(frozen=True)
class ScaledQuantity:
    """Quantity and unit after scaling, before unit selection."""
    quantity: float
    unit: str


def validate_scale_factor(scale_factor: float) -> float:
    """Return the factor as a float, or raise if it is not positive and finite."""
    if isinstance(scale_factor, bool) or not isinstance(scale_factor, (int, float)):
        raise InvalidScaleFactorError(f"Scale factor must be a number, got {scale_factor!r}")
    if not math.isfinite(scale_factor) or scale_factor <= 0:
        raise InvalidScaleFactorError(f"Scale factor must be positive and finite, got {scale_factor!r}")
    return float(scale_factor)


def snap_to_fraction(value: float, fractions: Sequence[Fraction] = KITCHEN_FRACTIONS) -> float:
    """Snap the fractional part of value to the nearest allowed fraction; ties round up."""
    whole = math.floor(value)
    remainder = value - whole
    nearest = min(fractions, key=lambda f: (abs(remainder - float(f)), -f))
    return whole + float(nearest)


def round_half_up(value: float, places: int) -> float:
    """Round to a number of decimal places, halves away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_quantity(value: float, unit: str,
                   fractions: Sequence[Fraction] = KITCHEN_FRACTIONS,
                   precision: int = None) -> float:
    """
    Round a quantity according to the rounding class of its unit.

    Positive inputs never round down to zero; they are clamped to the smallest
    value the class can display.

    Args:
        value: Raw quantity
        unit: Canonical (or verbatim unknown) unit token
        fractions: Allowed fractional parts for fraction-friendly units
        precision: Decimal places for weights and metric volumes

    Returns:
        Rounded quantity
    """
    if precision is None:
        precision = config.WEIGHT_PRECISION
    smallest_fraction = min(float(f) for f in fractions if f > 0)
    unit_class = rounding_class(unit)

    if unit_class == DECIMAL:
        rounded = round_half_up(value, precision)
        minimum = 10.0 ** -precision
    elif unit_class == WHOLE and value >= 1:
        rounded = float(math.floor(value + 0.5))
        minimum = 1.0
    else:
        rounded = snap_to_fraction(value, fractions)
        minimum = smallest_fraction

    if value > 0 and rounded < minimum:
        return minimum
    return rounded


def scale_ingredient(parsed: ParsedIngredient, scale_factor: float,
                     fractions: Sequence[Fraction] = KITCHEN_FRACTIONS,
                     precision: int = None) -> ScaledQuantity:
    """
    Scale a parsed ingredient.

    Entries that are not scalable (no quantity in the source text, or a failed
    parse) come back unchanged. The unit is never changed here.

    Args:
        parsed: Parsed ingredient
        scale_factor: Positive, finite multiplier
        fractions: Allowed fractional parts for fraction-friendly units
        precision: Decimal places for weights and metric volumes

    Returns:
        Scaled quantity and unchanged unit
    """
    factor = validate_scale_factor(scale_factor)

    if not parsed.scalable:
        return ScaledQuantity(quantity=parsed.quantity, unit=parsed.unit)

    new_quantity = round_quantity(parsed.quantity * factor, parsed.unit, fractions, precision)
    return ScaledQuantity(quantity=new_quantity, unit=parsed.unit)
