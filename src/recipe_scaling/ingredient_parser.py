#!/usr/bin/env python3
"""
Ingredient parser for recipe scaling.
Turns free-text lines ("2 1/2 cups flour") and structured entries
({"name": ..., "unit": ..., "amount": ...}) into ParsedIngredient records.

The parser never raises to its caller: anything it cannot understand comes
back as a ParsedIngredient carrying an IngredientParseError.
"""

import math
import re
import unicodedata
from collections.abc import Mapping
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, List, Optional, Tuple, Union

import structlog
from pydantic import BaseModel, ConfigDict

from .error_handling import IngredientParseError
from .monitoring_logging import INGREDIENT_PARSE_FAILURES, record_metric
from .unit_tables import (
    PIECE, UNICODE_FRACTIONS, UNIT_BOUND_WORDS, UNIT_SPELLINGS, WORD_QUANTITIES,
    lookup_unit,
)

logger = structlog.get_logger(__name__)

# Single number: mixed number, fraction, decimal or integer (order matters)
NUMBER_PATTERN = r'\d+\s+\d+/\d+|\d+/\d+|\d*\.\d+|\d+'

FALLBACK_NAME = "unknown ingredient"


class StructuredIngredient(BaseModel):
    """Ingredient already split into fields, e.g. from an AI recipe generator."""
    model_config = ConfigDict(extra='allow')

    name: Optional[str] = None
    unit: Optional[str] = None
    amount: Any = None


IngredientEntry = Union[str, StructuredIngredient, Mapping]


@dataclass
class ParsedIngredient:
    """Structured ingredient data."""
    quantity: float
    unit: str
    name: str
    original: Any
    error: Optional[IngredientParseError] = None
    scalable: bool = True

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "quantity": self.quantity,
            "unit": self.unit,
            "name": self.name,
            "original": self.original,
            "error": self.error_message,
            "scalable": self.scalable,
        }


def parse_quantity(quantity: Union[str, int, float]) -> float:
    """
    Parse a quantity such as "2", "1.5", "1/2", "2 1/2" or "1-2".

    Ranges resolve to their midpoint. Unicode fractions and a leading minus
    sign are accepted; rejecting non-positive amounts is left to the caller.

    Args:
        quantity: Quantity text or number

    Returns:
        Quantity as a float

    Raises:
        ValueError: If the text is not a quantity (including division by zero)
    """
    if isinstance(quantity, bool):
        raise ValueError(f"Not a quantity: {quantity!r}")
    if isinstance(quantity, (int, float)):
        value = float(quantity)
        if not math.isfinite(value):
            raise ValueError(f"Not a finite quantity: {quantity!r}")
        return value

    text = _replace_unicode_fractions(str(quantity)).strip().lower()
    sign = 1.0
    if text.startswith('-'):
        sign, text = -1.0, text[1:].strip()

    word = WORD_QUANTITIES.get(text)
    if word is not None:
        return sign * float(word)

    match = re.fullmatch(
        rf'(?P<low>{NUMBER_PATTERN})(?:\s*(?:[-–—]|to\b)\s*(?P<high>{NUMBER_PATTERN}))?',
        text
    )
    if not match:
        raise ValueError(f"Not a quantity: {quantity!r}")

    low = _number_value(match.group('low'))
    if match.group('high'):
        high = _number_value(match.group('high'))
        return sign * (low + high) / 2
    return sign * low


def _number_value(token: str) -> float:
    """Value of a single number token (no ranges)."""
    token = token.strip()
    try:
        parts = token.split()
        if len(parts) == 2:
            return float(int(parts[0]) + Fraction(parts[1]))
        if '/' in token:
            return float(Fraction(token))
        return float(token)
    except ZeroDivisionError:
        raise ValueError(f"Division by zero in quantity {token!r}")


def _replace_unicode_fractions(text: str) -> str:
    """Replace vulgar fraction characters, splitting "1½" into "1 1/2"."""
    for unicode_frac, ascii_frac in UNICODE_FRACTIONS.items():
        text = re.sub(rf'(\d){unicode_frac}', rf'\1 {ascii_frac}', text)
        text = text.replace(unicode_frac, ascii_frac)
    return text


class IngredientParser:
    """Parser for extracting structured data from ingredient entries."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize ingredient parser.

        Args:
            config: Parser configuration overrides
        """
        self.config = {
            "connector_words": ["of"],
            "bullet_characters": "•·▪▫◦‣⁃*",
        }
        self.config.update(config or {})

        self._compile_patterns()

    def _compile_patterns(self):
        """Compile regex patterns for parsing."""
        unit_pattern = '|'.join(re.escape(spelling) for spelling in UNIT_SPELLINGS)
        range_pattern = rf'(?P<low>{NUMBER_PATTERN})(?:\s*(?:[-–—]|to\b)\s*(?P<high>{NUMBER_PATTERN}))?'
        words = '|'.join(re.escape(w) for w in sorted(WORD_QUANTITIES, key=len, reverse=True))

        # "2 cups", "1-2 tsp", "200g"
        self.quantity_pattern = re.compile(rf'^{range_pattern}(?=\s|$|[^\W\d_])', re.IGNORECASE)

        # "two eggs", "a pinch"
        self.word_quantity_pattern = re.compile(rf'^(?P<word>{words})(?=\s|$)\s*', re.IGNORECASE)

        # Known unit at the start of the remaining text
        self.unit_pattern = re.compile(rf'^(?P<unit>{unit_pattern})\.?(?=\s|$|[,;)])', re.IGNORECASE)

        # "flour - 2 cups"
        self.trailing_pattern = re.compile(
            rf'^(?P<name>.+?)\s*[-–—:]\s*{range_pattern}\s*(?P<unit>{unit_pattern})\.?$',
            re.IGNORECASE
        )

        connectors = '|'.join(re.escape(w) for w in self.config["connector_words"])
        self.connector_pattern = re.compile(rf'^(?:{connectors})\s+', re.IGNORECASE)

        bullets = re.escape(self.config["bullet_characters"])
        self.bullet_pattern = re.compile(rf'^(?:[{bullets}]|-(?=\s))\s*')

    def parse_ingredient(self, entry: Any) -> ParsedIngredient:
        """
        Parse a single ingredient entry.

        Args:
            entry: Ingredient text, a StructuredIngredient, or a mapping with
                name/unit/amount keys

        Returns:
            Parsed ingredient; failures are reported through its error field
        """
        if isinstance(entry, str):
            kind = "string"
        elif isinstance(entry, (StructuredIngredient, Mapping)):
            kind = "structured"
        else:
            kind = "invalid"

        try:
            if kind == "string":
                return self._parse_text(entry)
            if kind == "structured":
                return self._parse_structured(entry)
            raise IngredientParseError("Invalid ingredient format", original=entry)
        except IngredientParseError as e:
            return self._fallback(entry, kind, e)
        except Exception as e:
            logger.exception("Unexpected ingredient parse failure", original=repr(entry))
            return self._fallback(entry, kind, IngredientParseError(f"Could not parse ingredient: {e}", original=entry))

    def _fallback(self, entry: Any, kind: str, error: IngredientParseError) -> ParsedIngredient:
        """Build the placeholder entry returned for a failed parse."""
        record_metric(INGREDIENT_PARSE_FAILURES, input_kind=kind)
        logger.debug("Ingredient parse failed", error=error.message, input_kind=kind)
        return ParsedIngredient(
            quantity=1.0,
            unit=PIECE,
            name=self._describe(entry),
            original=entry,
            error=error,
            scalable=False
        )

    def _describe(self, entry: Any) -> str:
        """Best-effort human description of an entry."""
        if isinstance(entry, str):
            return entry.strip() or FALLBACK_NAME
        if isinstance(entry, (StructuredIngredient, Mapping)):
            name, unit, amount = self._structured_fields(entry)
            if not name:
                return FALLBACK_NAME
            return f"{amount or 1} {unit or PIECE} {name}".strip()
        if entry is None:
            return FALLBACK_NAME
        return str(entry)

    def _structured_fields(self, entry: Union[StructuredIngredient, Mapping]) -> Tuple[Any, Any, Any]:
        if isinstance(entry, StructuredIngredient):
            return entry.name, entry.unit, entry.amount
        return entry.get("name"), entry.get("unit"), entry.get("amount")

    def _parse_structured(self, entry: Union[StructuredIngredient, Mapping]) -> ParsedIngredient:
        """Map an explicit {name, unit, amount} entry."""
        name, unit, amount = self._structured_fields(entry)
        if not isinstance(name, str) or not name.strip():
            raise IngredientParseError("Invalid ingredient format: missing name", original=entry)

        try:
            quantity = parse_quantity(amount)
        except (TypeError, ValueError):
            quantity = 1.0

        if quantity <= 0:
            raise IngredientParseError(f"Quantity must be positive, got {amount!r}", original=entry)

        unit_text = str(unit).strip() if unit is not None else ""
        canonical = lookup_unit(unit_text) if unit_text else None

        return ParsedIngredient(
            quantity=quantity,
            unit=canonical or unit_text or PIECE,
            name=name.strip(),
            original=entry
        )

    def _parse_text(self, text: str) -> ParsedIngredient:
        """Parse a free-text ingredient line."""
        cleaned = self._clean_text(text)

        if not cleaned:
            raise IngredientParseError("Empty ingredient entry", original=text)
        if not re.search(r'[^\W\d_]', cleaned):
            raise IngredientParseError("Ingredient has no descriptive text", original=text)

        try:
            quantity, rest = self._extract_quantity(cleaned)
            trailing = self.trailing_pattern.match(cleaned) if quantity is None else None
            if trailing:
                quantity = self._range_value(trailing)
        except ValueError as e:
            raise IngredientParseError(str(e), original=text)

        if trailing:
            return self._build(text, quantity, lookup_unit(trailing.group('unit')),
                               trailing.group('name'))

        if quantity is None:
            # Nothing to scale: "salt to taste"
            return ParsedIngredient(
                quantity=1.0,
                unit=PIECE,
                name=cleaned,
                original=text,
                scalable=False
            )

        unit, rest = self._extract_unit(rest)
        return self._build(text, quantity, unit, rest)

    def _build(self, text: str, quantity: float, unit: Optional[str], name: str) -> ParsedIngredient:
        if quantity <= 0:
            raise IngredientParseError(f"Quantity must be positive, got {quantity:g}", original=text)
        return ParsedIngredient(
            quantity=quantity,
            unit=unit or PIECE,
            name=self._clean_name(name),
            original=text
        )

    def _clean_text(self, text: str) -> str:
        """Clean and normalize text."""
        text = _replace_unicode_fractions(text)
        text = unicodedata.normalize('NFKC', text)
        text = re.sub(r'\s+', ' ', text.strip())
        text = self.bullet_pattern.sub('', text)
        return text.strip()

    def _extract_quantity(self, text: str) -> Tuple[Optional[float], str]:
        """Extract a leading quantity; returns (None, text) when there is none."""
        match = self.quantity_pattern.match(text)
        if match:
            return self._range_value(match), text[match.end():].strip()

        word_match = self.word_quantity_pattern.match(text)
        if word_match:
            word = word_match.group('word').lower()
            rest = text[word_match.end():]
            if word in UNIT_BOUND_WORDS and not self.unit_pattern.match(rest):
                return None, text
            return float(WORD_QUANTITIES[word]), rest.strip()

        return None, text

    def _range_value(self, match: re.Match) -> float:
        """Quantity of a (possibly ranged) match; ranges use the midpoint."""
        low = _number_value(match.group('low'))
        if match.group('high'):
            return (low + _number_value(match.group('high'))) / 2
        return low

    def _extract_unit(self, text: str) -> Tuple[Optional[str], str]:
        """Extract a known unit at the beginning of the remaining text."""
        match = self.unit_pattern.match(text)
        if match:
            return lookup_unit(match.group('unit')), text[match.end():].strip()
        return None, text

    def _clean_name(self, name: str) -> str:
        """Strip connector words and stray separators from the name."""
        name = re.sub(r'\s+', ' ', name.strip())
        name = self.connector_pattern.sub('', name)
        return name.strip()

    def parse_ingredient_list(self, entries: List[Any]) -> List[ParsedIngredient]:
        """
        Parse multiple ingredient entries.

        Args:
            entries: Ingredient entries in any supported shape

        Returns:
            One parsed ingredient per entry, in order
        """
        results = [self.parse_ingredient(entry) for entry in entries]
        logger.debug("Parsed ingredient entries", count=len(results))
        return results

    def get_parsing_statistics(self, results: List[ParsedIngredient]) -> Dict[str, Any]:
        """Summary statistics about a batch of parse results."""
        if not results:
            return {"total": 0}

        total = len(results)
        failed = sum(1 for r in results if r.has_error)
        unscalable = sum(1 for r in results if not r.scalable and not r.has_error)

        return {
            "total": total,
            "parsed": total - failed,
            "failed": failed,
            "unscalable": unscalable,
            "with_unit": sum(1 for r in results if r.unit != PIECE),
            "success_rate": (total - failed) / total,
        }


_default_parser: Optional[IngredientParser] = None


def get_parser() -> IngredientParser:
    """Shared parser instance with default configuration."""
    global _default_parser
    if _default_parser is None:
        _default_parser = IngredientParser()
    return _default_parser


def parse_ingredient(entry: Any) -> ParsedIngredient:
    """Parse one ingredient entry with the default parser."""
    return get_parser().parse_ingredient(entry)
