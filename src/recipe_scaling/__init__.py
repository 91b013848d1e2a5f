"""Recipe ingredient scaling: parse, scale, normalize and format ingredient lists."""

from .caching_system import CacheKey, InMemoryCache
from .debounce import DebouncedRecipeScaler, Debouncer
from .error_handling import (
    IngredientParseError,
    InvalidRecipeError,
    InvalidScaleFactorError,
    ScalingError,
    UnitConversionError,
)
from .ingredient_normalizer import convert_units, smart_convert_units
from .ingredient_parser import ParsedIngredient, parse_ingredient, parse_quantity
from .output_formatter import export_scaled_recipe, format_ingredient, format_quantity
from .recipe_scaler import (
    RecipeScaler,
    ScaledIngredient,
    ScaledRecipe,
    ScalingContext,
    ScalingOptions,
    adjust_servings,
    describe_scale,
    format_scale_factor,
    preset_servings,
    scale_recipe,
)
from .scaling_engine import scale_ingredient

__version__ = "1.0.0"
