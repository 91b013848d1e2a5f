#!/usr/bin/env python3
"""
Unit Normalization Module
Re-expresses scaled quantities in the most readable unit of their family
(16 tbsp -> 1 cup, 1500 g -> 1.5 kg) and converts between units.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from .error_handling import UnitConversionError
from .monitoring_logging import UNIT_CONVERSIONS, record_metric
from .scaling_engine import round_half_up, round_quantity
from .unit_tables import (
    BASE_AMOUNTS, CONVERSION_LADDERS, KITCHEN_FRACTIONS, UNIT_SWITCH_TOLERANCE, lookup_unit,
    unit_family,
)

logger = structlog.get_logger(__name__)

# Tolerance when comparing converted values against ladder thresholds
_EPSILON = 1e-9


@dataclass
class ConversionResult:
    """Value/unit pair after conversion. error is set when the unit was not understood."""
    value: float
    unit: str
    error: Optional[UnitConversionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None


class IngredientNormalizer:
    """Unit selection and conversion within unit families."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize normalizer.

        Args:
            config: Optional overrides for 'fractions', 'precision', 'ladders' and 'tolerance'
        """
        self.config = config or {}
        self.fractions: Sequence[Fraction] = self.config.get('fractions', KITCHEN_FRACTIONS)
        self.precision: Optional[int] = self.config.get('precision')
        self.ladders: List[Tuple[Tuple[str, int, float, Optional[float]], ...]] = self.config.get('ladders', CONVERSION_LADDERS)
        self.tolerance: float = self.config.get('tolerance', UNIT_SWITCH_TOLERANCE)

    def get_unit_category(self, unit: Optional[str]) -> str:
        """Family of a unit spelling: volume, weight, count, vague or unknown."""
        canonical = lookup_unit(unit) or unit
        return unit_family(canonical) or 'unknown'

    def _find_ladder(self, unit: str) -> Optional[Tuple[Tuple[str, int, float, Optional[float]], ...]]:
        for ladder in self.ladders:
            if any(step[0] == unit for step in ladder):
                return ladder
        return None

    def _round(self, value: float, unit: str) -> float:
        return round_quantity(value, unit, self.fractions, self.precision)

    def _select_unit(self, value: float, unit: str) -> Tuple[float, str]:
        """
        Largest ladder unit that reads well for a value, and the value rounded in it.

        A larger unit is taken only when rounding in it stays within the
        tolerance, or when the next unit down would exceed its maximum
        (17 tbsp reads as 1 1/8 cups, 6 tbsp stays 6 tbsp).
        """
        ladder = self._find_ladder(unit)
        if ladder is None:
            return self._round(value, unit), unit

        factors = {step[0]: step[1] for step in ladder}
        base_value = value * factors[unit]

        for position in range(len(ladder) - 1, 0, -1):
            candidate, factor, minimum, _ = ladder[position]
            converted = base_value / factor
            if converted + _EPSILON < minimum:
                continue

            rounded = self._round(converted, candidate)
            if abs(rounded - converted) <= self.tolerance * converted + _EPSILON:
                return rounded, candidate

            _, smaller_factor, _, maximum = ladder[position - 1]
            if maximum is not None and base_value / smaller_factor > maximum + _EPSILON:
                return rounded, candidate

        smallest, factor, _, _ = ladder[0]
        return self._round(base_value / factor, smallest), smallest

    def get_optimal_unit(self, value: float, unit: str) -> str:
        """Best display unit for a value; units without a ladder are returned as-is."""
        canonical = lookup_unit(unit) or unit
        return self._select_unit(value, canonical)[1]

    def smart_convert_units(self, quantity: float, unit: str, context_factor: float = 1.0) -> ConversionResult:
        """
        Pick the most readable unit for a quantity.

        Args:
            quantity: Quantity in the given unit
            unit: Unit spelling (canonical or alias)
            context_factor: Extra multiplier applied before unit selection

        Returns:
            Converted value and unit. Unknown units come back unchanged with an error.
        """
        value = quantity * context_factor
        canonical = lookup_unit(unit) or unit
        family = unit_family(canonical)

        if family is None:
            record_metric(UNIT_CONVERSIONS, result="unknown_unit")
            logger.debug("Unknown unit, leaving value unchanged", unit=unit)
            return ConversionResult(
                value=value,
                unit=unit,
                error=UnitConversionError(f"Unknown unit: {unit}", unit=unit)
            )

        if family in ('count', 'vague'):
            record_metric(UNIT_CONVERSIONS, result="unitless")
            return ConversionResult(value=self._round(value, canonical), unit=canonical)

        converted, chosen = self._select_unit(value, canonical)
        if chosen == canonical:
            record_metric(UNIT_CONVERSIONS, result="unchanged")
        else:
            record_metric(UNIT_CONVERSIONS, result="converted")
            logger.debug("Converted unit", from_unit=canonical, to_unit=chosen, value=converted)

        return ConversionResult(value=converted, unit=chosen)

    def convert_units(self, value: float, from_unit: str, to_unit: str) -> ConversionResult:
        """
        Convert between two units of the same family.

        Args:
            value: Quantity in from_unit
            from_unit: Source unit spelling
            to_unit: Target unit spelling

        Returns:
            Converted value rounded to 2 decimals, or the unchanged value with
            an error when the units are unknown or belong to different families
        """
        source = lookup_unit(from_unit) or from_unit
        target = lookup_unit(to_unit) or to_unit
        source_family = unit_family(source)
        target_family = unit_family(target)

        if source_family is None or source_family != target_family:
            record_metric(UNIT_CONVERSIONS, result="incompatible")
            return ConversionResult(
                value=value,
                unit=from_unit,
                error=UnitConversionError(
                    f"Cannot convert between different unit types: {from_unit} -> {to_unit}",
                    unit=from_unit
                )
            )

        if source_family in ('count', 'vague'):
            if source != target:
                return ConversionResult(
                    value=value,
                    unit=from_unit,
                    error=UnitConversionError(f"Cannot convert {from_unit} to {to_unit}", unit=from_unit)
                )
            return ConversionResult(value=value, unit=target)

        converted = value * BASE_AMOUNTS[source] / BASE_AMOUNTS[target]
        record_metric(UNIT_CONVERSIONS, result="converted")
        return ConversionResult(value=round_half_up(converted, 2), unit=target)


_default_normalizer: Optional[IngredientNormalizer] = None


def get_normalizer() -> IngredientNormalizer:
    """Shared normalizer with default configuration."""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = IngredientNormalizer()
    return _default_normalizer


def smart_convert_units(quantity: float, unit: str, context_factor: float = 1.0) -> ConversionResult:
    return get_normalizer().smart_convert_units(quantity, unit, context_factor)


def convert_units(value: float, from_unit: str, to_unit: str) -> ConversionResult:
    return get_normalizer().convert_units(value, from_unit, to_unit)


def get_unit_category(unit: Optional[str]) -> str:
    return get_normalizer().get_unit_category(unit)


def get_optimal_unit(value: float, unit: str) -> str:
    return get_normalizer().get_optimal_unit(value, unit)
