#!/usr/bin/env python3
"""
Unit reference data shared by the parser, scaling engine, normalizer and formatter.

Everything here is plain data plus small lookup helpers. The rounding grid and
ladder thresholds are policy constants; callers that want different values
pass them through ScalingOptions rather than editing this module.
"""

from fractions import Fraction
from typing import Dict, List, Optional, Tuple

# Canonical unit token -> accepted spellings (matched case-insensitively)
VOLUME_UNITS = {
    "tsp": ["tsp", "tsps", "teaspoon", "teaspoons", "ts"],
    "tbsp": ["tbsp", "tbsps", "tablespoon", "tablespoons", "tbs", "tbl"],
    "cup": ["cup", "cups"],
    "fl oz": ["fl oz", "fl. oz", "fluid ounce", "fluid ounces"],
    "pint": ["pint", "pints", "pt"],
    "quart": ["quart", "quarts", "qt"],
    "gallon": ["gallon", "gallons", "gal"],
    "ml": ["ml", "milliliter", "milliliters", "millilitre", "millilitres"],
    "l": ["l", "liter", "liters", "litre", "litres"],
}

WEIGHT_UNITS = {
    "g": ["g", "gram", "grams", "gr"],
    "kg": ["kg", "kilogram", "kilograms", "kilo", "kilos"],
    "oz": ["oz", "ounce", "ounces"],
    "lb": ["lb", "lbs", "pound", "pounds"],
}

COUNT_UNITS = {
    "piece": ["piece", "pieces", "pc", "pcs"],
    "clove": ["clove", "cloves"],
    "slice": ["slice", "slices"],
    "can": ["can", "cans"],
    "package": ["package", "packages", "pkg", "packet", "packets"],
    "sheet": ["sheet", "sheets"],
    "sprig": ["sprig", "sprigs"],
    "bunch": ["bunch", "bunches"],
    "head": ["head", "heads"],
    "stalk": ["stalk", "stalks"],
    "stick": ["stick", "sticks"],
    "jar": ["jar", "jars"],
    "bottle": ["bottle", "bottles"],
    "box": ["box", "boxes"],
    "bag": ["bag", "bags"],
}

VAGUE_UNITS = {
    "pinch": ["pinch", "pinches"],
    "dash": ["dash", "dashes"],
    "to taste": ["to taste"],
}

UNIT_FAMILIES: Dict[str, str] = {}
for _family, _table in (("volume", VOLUME_UNITS), ("weight", WEIGHT_UNITS),
                        ("count", COUNT_UNITS), ("vague", VAGUE_UNITS)):
    for _canonical in _table:
        UNIT_FAMILIES[_canonical] = _family

UNIT_LOOKUP: Dict[str, str] = {}
for _table in (VOLUME_UNITS, WEIGHT_UNITS, COUNT_UNITS, VAGUE_UNITS):
    for _canonical, _variations in _table.items():
        for _variation in _variations:
            UNIT_LOOKUP[_variation.lower()] = _canonical

# Every spelling, longest first, so "fl oz" wins over "oz" in a regex alternation
UNIT_SPELLINGS: List[str] = sorted(UNIT_LOOKUP, key=len, reverse=True)

# Rounding classes used by the scaling engine and the formatter
FRACTIONAL = "fractional"
DECIMAL = "decimal"
WHOLE = "whole"

ROUNDING_CLASSES: Dict[str, str] = {
    "tsp": FRACTIONAL, "tbsp": FRACTIONAL, "cup": FRACTIONAL, "fl oz": FRACTIONAL,
    "pint": FRACTIONAL, "quart": FRACTIONAL, "gallon": FRACTIONAL,
    "ml": DECIMAL, "l": DECIMAL,
    "g": DECIMAL, "kg": DECIMAL, "oz": DECIMAL, "lb": DECIMAL,
}

# US volumes are defined in teaspoons so ladder ratios stay exact in binary floats
TSP_ML = 4.92892159375

# Base amounts: volume in milliliters, weight in grams
BASE_AMOUNTS: Dict[str, float] = {
    "tsp": TSP_ML,
    "tbsp": 3 * TSP_ML,
    "cup": 48 * TSP_ML,
    "fl oz": 6 * TSP_ML,
    "pint": 96 * TSP_ML,
    "quart": 192 * TSP_ML,
    "gallon": 768 * TSP_ML,
    "ml": 1.0,
    "l": 1000.0,
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.349523125,
    "lb": 453.59237,
}

# Conversion ladders: (unit, factor in ladder base, minimum value worth displaying,
# largest value shown before the next unit up is used regardless of rounding)
CONVERSION_LADDERS: List[Tuple[Tuple[str, int, float, Optional[float]], ...]] = [
    (("tsp", 1, 0.0, 12.0), ("tbsp", 3, 1.0, 16.0), ("cup", 48, 0.25, None)),
    (("ml", 1, 0.0, 1000.0), ("l", 1000, 1.0, None)),
    (("g", 1, 0.0, 1000.0), ("kg", 1000, 1.0, None)),
    (("oz", 1, 0.0, 16.0), ("lb", 16, 1.0, None)),
]

# A larger unit is only used when rounding in it moves the amount by at most this share
UNIT_SWITCH_TOLERANCE = 0.025

# Fractions a home cook can actually measure
KITCHEN_FRACTIONS: Tuple[Fraction, ...] = (
    Fraction(0), Fraction(1, 8), Fraction(1, 4), Fraction(1, 3),
    Fraction(1, 2), Fraction(2, 3), Fraction(3, 4), Fraction(1),
)

PLURAL_FORMS = {
    "cup": "cups",
    "pint": "pints",
    "quart": "quarts",
    "gallon": "gallons",
    "clove": "cloves",
    "slice": "slices",
    "can": "cans",
    "package": "packages",
    "sheet": "sheets",
    "sprig": "sprigs",
    "bunch": "bunches",
    "head": "heads",
    "stalk": "stalks",
    "stick": "sticks",
    "jar": "jars",
    "bottle": "bottles",
    "box": "boxes",
    "bag": "bags",
    "pinch": "pinches",
    "dash": "dashes",
}

# Unit-less sentinel: rendered without a unit token
PIECE = "piece"

UNICODE_FRACTIONS = {
    '½': '1/2', '¼': '1/4', '¾': '3/4', '⅓': '1/3', '⅔': '2/3',
    '⅛': '1/8', '⅜': '3/8', '⅝': '5/8', '⅞': '7/8'
}

WORD_QUANTITIES = {
    'a': 1, 'an': 1, 'half': 0.5,
    'one': 1, 'two': 2, 'three': 3, 'four': 4, 'five': 5, 'six': 6,
    'seven': 7, 'eight': 8, 'nine': 9, 'ten': 10, 'eleven': 11, 'twelve': 12,
    'dozen': 12,
    'one-half': 0.5, 'one-third': Fraction(1, 3), 'two-thirds': Fraction(2, 3),
    'one-quarter': 0.25, 'three-quarters': 0.75,
    'one-fourth': 0.25, 'three-fourths': 0.75,
}

# Words that only count as a quantity when a known unit follows them
UNIT_BOUND_WORDS = {'a', 'an', 'half'}


def lookup_unit(token: Optional[str]) -> Optional[str]:
    """Return the canonical unit for a spelling, or None if it is not known."""
    if not token:
        return None
    key = token.strip().lower().rstrip('.')
    return UNIT_LOOKUP.get(key)


def unit_family(unit: Optional[str]) -> Optional[str]:
    """Family of a canonical unit: 'volume', 'weight', 'count', 'vague' or None."""
    if unit is None:
        return None
    return UNIT_FAMILIES.get(unit)


def rounding_class(unit: Optional[str]) -> str:
    """Rounding class for a unit. Unknown units round like measuring cups."""
    family = unit_family(unit)
    if family in ("count", "vague"):
        return WHOLE
    return ROUNDING_CLASSES.get(unit, FRACTIONAL)
