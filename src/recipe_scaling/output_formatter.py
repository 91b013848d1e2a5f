#!/usr/bin/env python3
"""
Output formatter for scaled recipes.
Renders quantities as kitchen fractions, builds ingredient display lines and
exports whole scaled recipes as JSON, plain text or Markdown.
"""

import json
import math
from fractions import Fraction
from typing import Any, List, Sequence

from .unit_tables import DECIMAL, KITCHEN_FRACTIONS, PIECE, PLURAL_FORMS, rounding_class

WARNING_MARKER = "⚠"


def format_quantity(value: float, unit: str = None,
                    fractions: Sequence[Fraction] = KITCHEN_FRACTIONS) -> str:
    """
    Format a quantity for display.

    Whole numbers never show a decimal point. Weights and metric volumes show
    up to two decimals; everything else uses the nearest kitchen fraction.

    Args:
        value: Quantity to render
        unit: Unit the quantity is expressed in
        fractions: Fractions allowed in the rendering

    Returns:
        Display string such as "2", "1 1/4" or "0.5"
    """
    if value == int(value):
        return str(int(value))

    if rounding_class(unit) == DECIMAL:
        return f"{value:.2f}".rstrip('0').rstrip('.')

    whole = math.floor(value)
    remainder = value - whole
    nearest = min(fractions, key=lambda f: (abs(remainder - float(f)), -f))

    if nearest == 0:
        return str(whole)
    if nearest == 1:
        return str(whole + 1)

    label = f"{nearest.numerator}/{nearest.denominator}"
    return f"{whole} {label}" if whole else label


def display_unit(unit: str, value: float) -> str:
    """Unit token as shown to the user; empty for unit-less pieces."""
    if not unit or unit == PIECE:
        return ""
    if value > 1:
        return PLURAL_FORMS.get(unit, unit)
    return unit


def format_ingredient(scaled_ingredient: Any, include_original_name: bool = True) -> str:
    """
    Build the display line for a scaled ingredient, e.g. "1 1/4 cups flour".

    Entries that could not be parsed, or that carry no quantity ("salt to
    taste"), render as their name only.

    Args:
        scaled_ingredient: Object with quantity, unit, name, scalable and has_error
        include_original_name: Append the ingredient name after the quantity

    Returns:
        Human-readable ingredient line
    """
    name = scaled_ingredient.name
    if scaled_ingredient.has_error or not scaled_ingredient.scalable:
        return name

    quantity = scaled_ingredient.quantity
    parts = [
        format_quantity(quantity, scaled_ingredient.unit),
        display_unit(scaled_ingredient.unit, quantity),
    ]
    if include_original_name:
        parts.append(name)

    return " ".join(part for part in parts if part)


def export_scaled_recipe(recipe: Any, format: str = "json") -> str:
    """Export a scaled recipe in the specified format."""
    if format == "json":
        return json.dumps(recipe.to_dict(), indent=2, default=str)
    elif format == "text":
        return _format_recipe_as_text(recipe)
    elif format == "markdown":
        return _format_recipe_as_markdown(recipe)
    else:
        raise ValueError(f"Unsupported format: {format}")


def _ingredient_lines(recipe: Any, bullet: str) -> List[str]:
    lines = []
    for ingredient in recipe.scaled_ingredients:
        line = f"{bullet} {ingredient.formatted}"
        if ingredient.has_error:
            line += f" {WARNING_MARKER}"
        lines.append(line)
    return lines


def _format_recipe_as_text(recipe: Any) -> str:
    """Format recipe as plain text."""
    lines = [f"Recipe for {recipe.servings} servings"]
    if recipe.scale_factor != 1.0:
        lines.append(f"Scaled by factor of {recipe.scale_factor:.2f}")
    lines.append("")

    lines.append("Ingredients:")
    lines.append("-" * 20)
    lines.extend(_ingredient_lines(recipe, "•"))

    if recipe.warnings:
        lines.append("")
        lines.append("Parsing Warnings:")
        lines.append("-" * 20)
        for warning in recipe.warnings:
            lines.append(f"• {warning}")

    return "\n".join(lines)


def _format_recipe_as_markdown(recipe: Any) -> str:
    """Format recipe as Markdown."""
    lines = [f"# Recipe for {recipe.servings} servings"]
    if recipe.scale_factor != 1.0:
        lines.append(f"*Scaled by factor of {recipe.scale_factor:.2f}*")
    lines.append("")

    lines.append("## Ingredients")
    lines.append("")
    lines.extend(_ingredient_lines(recipe, "-"))

    if recipe.warnings:
        lines.append("")
        lines.append("## Parsing Warnings")
        lines.append("")
        for warning in recipe.warnings:
            lines.append(f"- {warning}")

    return "\n".join(lines)
