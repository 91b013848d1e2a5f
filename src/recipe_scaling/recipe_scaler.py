#!/usr/bin/env python3
"""
Recipe Scaling System
Scales a recipe's ingredient list to a new serving count: validates the
request, runs every ingredient through parse -> scale -> normalize -> format
in isolation and collects per-ingredient warnings.
"""

import argparse
import copy
import hashlib
import json
import numbers
import sys
from dataclasses import asdict, dataclass, field
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .caching_system import CacheInterface, CacheKey
from .config import config
from .error_handling import InvalidRecipeError, InvalidScaleFactorError, ScalingError
from .ingredient_normalizer import IngredientNormalizer
from .ingredient_parser import IngredientParser, ParsedIngredient
from .monitoring_logging import SCALING_REQUESTS, configure_logging, record_metric, track_execution_time
from .output_formatter import export_scaled_recipe, format_ingredient
from .scaling_engine import scale_ingredient
from .unit_tables import KITCHEN_FRACTIONS

logger = structlog.get_logger(__name__)

CACHE_PREFIX = "scaled_recipe"


class RecipeInput(BaseModel):
    """Recipe as supplied by the caller."""
    model_config = ConfigDict(extra='allow')

    servings: int
    ingredients: List[Any]

    @field_validator('servings', mode='before')
    @classmethod
    def reject_bool_servings(cls, value):
        if isinstance(value, bool):
            raise ValueError("servings must be an integer, not a boolean")
        return value


@dataclass
class ScalingOptions:
    """Recipe scaling options."""
    min_servings: int = None
    max_servings: int = None
    fractions: Sequence[Fraction] = KITCHEN_FRACTIONS
    precision: int = None

    def __post_init__(self):
        if self.min_servings is None:
            self.min_servings = config.MIN_SERVINGS
        if self.max_servings is None:
            self.max_servings = config.MAX_SERVINGS
        if self.precision is None:
            self.precision = config.WEIGHT_PRECISION


def _is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass
class ScalingContext:
    """Validated original/target serving pair."""
    original_servings: int
    target_servings: int
    min_servings: int = None
    max_servings: int = None

    def __post_init__(self):
        if self.min_servings is None:
            self.min_servings = config.MIN_SERVINGS
        if self.max_servings is None:
            self.max_servings = config.MAX_SERVINGS

        if not _is_integer(self.original_servings) or self.original_servings <= 0:
            raise InvalidScaleFactorError(
                f"Original servings must be a positive integer, got {self.original_servings!r}"
            )
        if not _is_integer(self.target_servings):
            raise InvalidScaleFactorError(
                f"Target servings must be an integer, got {self.target_servings!r}"
            )
        if not self.min_servings <= self.target_servings <= self.max_servings:
            raise InvalidScaleFactorError(
                f"Target servings must be between {self.min_servings} and "
                f"{self.max_servings}, got {self.target_servings}"
            )

    @property
    def scale_factor(self) -> float:
        return self.target_servings / self.original_servings


@dataclass
class ScaledIngredient:
    """One ingredient of a scaled recipe."""
    quantity: float
    unit: str
    name: str
    original: Any
    formatted: str
    index: int
    has_error: bool = False
    error: Optional[str] = None
    scalable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if isinstance(self.original, BaseModel):
            data["original"] = self.original.model_dump()
        return data


def format_scale_factor(scale_factor: float) -> str:
    """Scale factor as shown next to the serving picker, e.g. "1.50x"."""
    return f"{scale_factor:.2f}x"


def describe_scale(scale_factor: float) -> str:
    """One-line summary of how much the recipe changed."""
    if scale_factor == 1:
        return "Recipe at original size"
    if scale_factor < 1:
        return f"Recipe scaled down by {(1 - scale_factor) * 100:.0f}%"
    return f"Recipe scaled up by {(scale_factor - 1) * 100:.0f}%"


@dataclass
class ScaledRecipe:
    """Complete scaled recipe."""
    servings: int
    ingredients: List[str]
    scale_factor: float
    original_servings: int
    warnings: List[str] = field(default_factory=list)
    scaled_ingredients: List[ScaledIngredient] = field(default_factory=list)

    @property
    def scale_factor_label(self) -> str:
        return format_scale_factor(self.scale_factor)

    @property
    def summary(self) -> str:
        return describe_scale(self.scale_factor)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "servings": self.servings,
            "original_servings": self.original_servings,
            "scale_factor": self.scale_factor,
            "scale_factor_label": self.scale_factor_label,
            "summary": self.summary,
            "ingredients": list(self.ingredients),
            "warnings": list(self.warnings),
            "scaled_ingredients": [ingredient.to_dict() for ingredient in self.scaled_ingredients],
        }


class RecipeScaler:
    """Scales whole recipes to a target serving count."""

    def __init__(self, options: Optional[ScalingOptions] = None,
                 cache: Optional[CacheInterface] = None,
                 parser: Optional[IngredientParser] = None,
                 normalizer: Optional[IngredientNormalizer] = None):
        """
        Initialize recipe scaler.

        Args:
            options: Scaling options; defaults come from the environment
            cache: Optional result cache, keyed by recipe content and target
            parser: Ingredient parser to use
            normalizer: Unit normalizer to use
        """
        self.options = options or ScalingOptions()
        self.cache = cache
        self.parser = parser or IngredientParser()
        self.normalizer = normalizer or IngredientNormalizer({
            'fractions': self.options.fractions,
            'precision': self.options.precision,
        })

    def _validate_recipe(self, recipe: Union[RecipeInput, Dict[str, Any]]) -> RecipeInput:
        if isinstance(recipe, RecipeInput):
            return recipe
        try:
            return RecipeInput.model_validate(recipe)
        except ValidationError as e:
            errors = [
                {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            raise InvalidRecipeError("Recipe must have integer servings and a list of ingredients",
                                     validation_errors=errors)

    def _cache_key(self, recipe: RecipeInput, target_servings: int) -> str:
        payload = json.dumps(
            {"recipe": recipe.model_dump(mode="json"), "target": target_servings},
            sort_keys=True,
            default=str
        )
        return str(CacheKey(prefix=CACHE_PREFIX, identifier=hashlib.sha256(payload.encode()).hexdigest()))

    @track_execution_time("scale_recipe")
    def scale_recipe(self, recipe: Union[RecipeInput, Dict[str, Any]], target_servings: int) -> ScaledRecipe:
        """
        Scale a recipe to a new serving count.

        Args:
            recipe: Mapping or RecipeInput with servings and ingredients
            target_servings: Desired serving count

        Returns:
            Scaled recipe with one entry per input ingredient

        Raises:
            InvalidRecipeError: If the recipe structure is malformed
            InvalidScaleFactorError: If the serving counts are out of bounds
        """
        try:
            recipe = self._validate_recipe(recipe)
            context = ScalingContext(
                original_servings=recipe.servings,
                target_servings=target_servings,
                min_servings=self.options.min_servings,
                max_servings=self.options.max_servings
            )
        except ScalingError:
            record_metric(SCALING_REQUESTS, result="rejected")
            raise

        cache_key = None
        if self.cache is not None:
            cache_key = self._cache_key(recipe, target_servings)
            cached = self.cache.get(cache_key)
            if cached is not None:
                record_metric(SCALING_REQUESTS, result="cache_hit")
                return copy.deepcopy(cached)

        scale_factor = context.scale_factor
        warnings: List[str] = []
        scaled_ingredients = [
            self._process_ingredient(entry, index, scale_factor, warnings)
            for index, entry in enumerate(recipe.ingredients)
        ]

        result = ScaledRecipe(
            servings=context.target_servings,
            ingredients=[ingredient.formatted for ingredient in scaled_ingredients],
            scale_factor=scale_factor,
            original_servings=context.original_servings,
            warnings=warnings,
            scaled_ingredients=scaled_ingredients
        )

        record_metric(SCALING_REQUESTS, result="partial" if warnings else "success")
        logger.info(
            "Recipe scaled",
            original_servings=context.original_servings,
            target_servings=context.target_servings,
            scale_factor=scale_factor,
            ingredient_count=len(scaled_ingredients),
            warning_count=len(warnings)
        )

        if self.cache is not None:
            self.cache.set(cache_key, copy.deepcopy(result))
        return result

    def _process_ingredient(self, entry: Any, index: int, scale_factor: float,
                            warnings: List[str]) -> ScaledIngredient:
        """Run one entry through the pipeline; problems become warnings."""
        parsed = self.parser.parse_ingredient(entry)

        if parsed.has_error:
            warnings.append(f"Error processing ingredient {index + 1}: {parsed.error_message}")
            return self._unscaled(parsed, index)
        if not parsed.scalable:
            return self._unscaled(parsed, index)

        scaled = scale_ingredient(parsed, scale_factor, self.options.fractions, self.options.precision)
        quantity, unit = scaled.quantity, scaled.unit

        # Unit selection rounds once, in the unit it picks
        conversion = self.normalizer.smart_convert_units(parsed.quantity * scale_factor, unit)
        if conversion.ok:
            quantity, unit = conversion.value, conversion.unit
        else:
            warnings.append(f"Unit not converted for ingredient {index + 1}: {conversion.error_message}")

        ingredient = ScaledIngredient(
            quantity=quantity,
            unit=unit,
            name=parsed.name,
            original=parsed.original,
            formatted="",
            index=index
        )
        ingredient.formatted = format_ingredient(ingredient)
        return ingredient

    def _unscaled(self, parsed: ParsedIngredient, index: int) -> ScaledIngredient:
        ingredient = ScaledIngredient(
            quantity=parsed.quantity,
            unit=parsed.unit,
            name=parsed.name,
            original=parsed.original,
            formatted="",
            index=index,
            has_error=parsed.has_error,
            error=parsed.error_message,
            scalable=False
        )
        ingredient.formatted = format_ingredient(ingredient)
        return ingredient

    def preset_servings(self, original_servings: int) -> List[int]:
        return preset_servings(original_servings)

    def adjust_servings(self, current: int, delta: int) -> int:
        return adjust_servings(current, delta, self.options.min_servings, self.options.max_servings)


def preset_servings(original_servings: int) -> List[int]:
    """Serving counts offered as quick picks, including the original."""
    candidates = set(config.PRESET_SERVINGS)
    if _is_integer(original_servings):
        candidates.add(original_servings)
    return sorted(s for s in candidates if 0 < s <= config.PRESET_MAX_SERVINGS)


def adjust_servings(current: int, delta: int,
                    min_servings: int = None, max_servings: int = None) -> int:
    """Step the serving count up or down, staying within the allowed range."""
    low = config.MIN_SERVINGS if min_servings is None else min_servings
    high = config.MAX_SERVINGS if max_servings is None else max_servings
    return max(low, min(high, current + delta))


_default_scaler: Optional[RecipeScaler] = None


def get_scaler() -> RecipeScaler:
    """Shared scaler with default options and no cache."""
    global _default_scaler
    if _default_scaler is None:
        _default_scaler = RecipeScaler()
    return _default_scaler


def scale_recipe(recipe: Union[RecipeInput, Dict[str, Any]], target_servings: int) -> ScaledRecipe:
    """Scale a recipe with the default scaler."""
    return get_scaler().scale_recipe(recipe, target_servings)


def main(argv: Optional[List[str]] = None) -> int:
    """Main recipe scaling script."""
    parser = argparse.ArgumentParser(description='Recipe ingredient scaling')
    parser.add_argument('--recipe', '-r', required=True, help='Recipe JSON file with servings and ingredients')
    parser.add_argument('--servings', '-s', type=int, help='Target servings (defaults to the original)')
    parser.add_argument('--format', choices=['json', 'text', 'markdown'], default='json', help='Output format')
    parser.add_argument('--output', '-o', help='Output file')
    parser.add_argument('--log-level', default='WARNING', help='Log level')

    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, stream=sys.stderr)

    # Load recipe
    try:
        with open(args.recipe, 'r', encoding='utf-8') as f:
            recipe_data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read recipe: {e}", file=sys.stderr)
        return 1

    target = args.servings
    if target is None and isinstance(recipe_data, dict):
        target = recipe_data.get('servings')

    try:
        result = RecipeScaler().scale_recipe(recipe_data, target)
    except ScalingError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    output = export_scaled_recipe(result, args.format)
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(output)
        print(f"Scaled recipe saved to: {args.output}")
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
