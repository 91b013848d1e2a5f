#!/usr/bin/env python3
"""
Quick Start Guide for Recipe Scaling
Simple examples to get started with ingredient parsing and recipe scaling.
"""

from recipe_scaling import (
    InvalidScaleFactorError,
    RecipeScaler,
    describe_scale,
    export_scaled_recipe,
    parse_ingredient,
    preset_servings,
)


def main():
    """Quick start examples for recipe scaling."""

    print("🚀 Quick Start: Recipe Scaling")
    print("=" * 50)

    # 1. Parse a single ingredient
    print("\n1. 📝 Parse Single Ingredient")
    print("-" * 30)

    ingredient_text = "2 1/2 cups all-purpose flour"
    result = parse_ingredient(ingredient_text)

    print(f"Input: '{ingredient_text}'")
    print(f"Quantity: {result.quantity}")
    print(f"Unit: {result.unit}")
    print(f"Ingredient: {result.name}")

    # 2. Scale a recipe
    print("\n2. ⚖️  Scale a Recipe")
    print("-" * 25)

    recipe = {
        "servings": 4,
        "ingredients": [
            "2 1/2 cups flour",
            "8 tbsp butter",
            "3 eggs",
            "1-2 tsp vanilla extract",
            "500 g ricotta",
            {"name": "lemon zest", "unit": "tbsp", "amount": "1"},
            "salt to taste",
        ],
    }

    scaler = RecipeScaler()
    print(f"Serving presets: {preset_servings(recipe['servings'])}")

    scaled = scaler.scale_recipe(recipe, 8)
    print(f"{describe_scale(scaled.scale_factor)} ({scaled.scale_factor_label})")
    for line in scaled.ingredients:
        print(f"  • {line}")

    # 3. Malformed entries don't stop the batch
    print("\n3. ⚠️  Partial Failures")
    print("-" * 25)

    recipe["ingredients"].append("")
    scaled = scaler.scale_recipe(recipe, 2)
    for warning in scaled.warnings:
        print(f"  ⚠️ {warning}")

    # 4. Out-of-range requests are rejected
    print("\n4. 🚫 Invalid Targets")
    print("-" * 25)

    try:
        scaler.scale_recipe(recipe, 0)
    except InvalidScaleFactorError as e:
        print(f"  Rejected: {e.message}")

    # 5. Export
    print("\n5. 📄 Markdown Export")
    print("-" * 25)
    print(export_scaled_recipe(scaled, "markdown"))


if __name__ == "__main__":
    main()
