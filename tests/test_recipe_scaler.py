"""Tests for whole-recipe scaling."""

import json
from unittest.mock import MagicMock

import pytest

from recipe_scaling.error_handling import InvalidRecipeError, InvalidScaleFactorError
from recipe_scaling.recipe_scaler import (
    RecipeInput,
    RecipeScaler,
    ScalingContext,
    ScalingOptions,
    adjust_servings,
    describe_scale,
    format_scale_factor,
    preset_servings,
    scale_recipe,
)


class TestScaleRecipe:
    def test_double(self, scaler, sample_recipe):
        result = scaler.scale_recipe(sample_recipe, 8)

        assert result.servings == 8
        assert result.original_servings == 4
        assert result.scale_factor == 2.0
        assert result.ingredients == [
            "5 cups flour",
            "2 tsp salt",
            "6 eggs",
            "400 g butter",
            "salt to taste",
        ]
        assert result.warnings == []

    def test_original_size_is_unchanged(self, scaler, sample_recipe):
        result = scaler.scale_recipe(sample_recipe, 4)

        assert result.ingredients == sample_recipe["ingredients"]
        assert result.summary == "Recipe at original size"

    def test_halve(self, scaler, sample_recipe):
        result = scaler.scale_recipe(sample_recipe, 2)

        assert result.ingredients[0] == "1 1/4 cups flour"
        assert result.ingredients[1] == "1/2 tsp salt"
        assert result.ingredients[2] == "2 eggs"
        assert result.ingredients[3] == "100 g butter"

    def test_round_trip_of_mixed_number(self, scaler):
        result = scaler.scale_recipe({"servings": 2, "ingredients": ["2 1/2 cups flour"]}, 2)
        line = result.ingredients[0]

        assert "2 1/2" in line
        assert "flour" in line

    def test_unitless_pass_through(self, scaler):
        result = scaler.scale_recipe({"servings": 2, "ingredients": ["3 eggs"]}, 4)

        assert result.ingredients == ["6 eggs"]
        assert result.scaled_ingredients[0].unit == "piece"

    def test_tablespoons_become_a_cup(self, scaler):
        recipe = {"servings": 1, "ingredients": ["1 tbsp butter"]}

        assert scaler.scale_recipe(recipe, 16).ingredients == ["1 cup butter"]
        assert scaler.scale_recipe(recipe, 17).ingredients == ["1 1/8 cups butter"]

    def test_teaspoons_become_tablespoons(self, scaler):
        result = scaler.scale_recipe({"servings": 1, "ingredients": ["1 tsp cumin"]}, 3)

        assert result.ingredients == ["1 tbsp cumin"]

    def test_grams_become_kilograms(self, scaler):
        result = scaler.scale_recipe({"servings": 2, "ingredients": ["750 g potatoes"]}, 4)

        assert result.ingredients == ["1.5 kg potatoes"]

    @pytest.mark.parametrize("line", [
        "5 tbsp butter", "6 tbsp butter", "7 tbsp butter", "10 tbsp butter",
    ])
    def test_original_size_keeps_tablespoons(self, scaler, line):
        result = scaler.scale_recipe({"servings": 4, "ingredients": [line]}, 4)

        assert result.ingredients == [line]

    @pytest.mark.parametrize("line,expected", [
        ("1 kg beef", "333.3 g beef"),
        ("1 l stock", "333.3 ml stock"),
        ("1 lb pasta", "5.3 oz pasta"),
    ])
    def test_smaller_unit_is_rounded_once(self, scaler, line, expected):
        result = scaler.scale_recipe({"servings": 3, "ingredients": [line]}, 1)

        assert result.ingredients == [expected]

    def test_fraction_word_round_trip(self, scaler):
        result = scaler.scale_recipe({"servings": 2, "ingredients": ["two-thirds cup milk"]}, 2)

        assert result.ingredients == ["2/3 cup milk"]

    def test_structured_entries(self, scaler):
        recipe = {
            "servings": 2,
            "ingredients": [
                {"name": "flour", "unit": "cup", "amount": 1},
                {"name": "eggs", "amount": 2},
            ],
        }
        result = scaler.scale_recipe(recipe, 6)

        assert result.ingredients == ["3 cups flour", "6 eggs"]

    def test_accepts_recipe_model(self, scaler):
        recipe = RecipeInput(servings=2, ingredients=["1 cup rice"])

        assert scaler.scale_recipe(recipe, 4).ingredients == ["2 cups rice"]

    def test_module_level_function(self, sample_recipe):
        assert scale_recipe(sample_recipe, 8).scale_factor == 2.0

    def test_scale_labels(self, scaler, sample_recipe):
        result = scaler.scale_recipe(sample_recipe, 6)

        assert result.scale_factor_label == "1.50x"
        assert result.summary == "Recipe scaled up by 50%"

    def test_to_dict_is_json_serializable(self, scaler, sample_recipe):
        data = json.loads(json.dumps(scaler.scale_recipe(sample_recipe, 8).to_dict()))

        assert data["scale_factor_label"] == "2.00x"
        assert len(data["scaled_ingredients"]) == 5
        assert data["scaled_ingredients"][4]["scalable"] is False


class TestPartialFailure:
    def test_malformed_entry_is_contained(self, scaler):
        recipe = {
            "servings": 2,
            "ingredients": ["2 cups flour", "1 tsp salt", "", "3 eggs", "100 g sugar"],
        }
        result = scaler.scale_recipe(recipe, 4)

        assert len(result.ingredients) == 5
        flagged = [ingredient.has_error for ingredient in result.scaled_ingredients]
        assert flagged == [False, False, True, False, False]
        assert result.ingredients[2] == "unknown ingredient"
        assert result.ingredients[0] == "4 cups flour"
        assert result.ingredients[3] == "6 eggs"
        assert result.ingredients[4] == "200 g sugar"
        assert result.warnings == ["Error processing ingredient 3: Empty ingredient entry"]

    def test_invalid_entry_types(self, scaler):
        result = scaler.scale_recipe({"servings": 1, "ingredients": [None, 42, "1 cup milk"]}, 2)

        assert [i.has_error for i in result.scaled_ingredients] == [True, True, False]
        assert result.ingredients[1] == "42"
        assert len(result.warnings) == 2

    def test_unknown_unit_warns_but_scales(self, scaler):
        recipe = {"servings": 2, "ingredients": [{"name": "rice", "unit": "scoop", "amount": 1}]}
        result = scaler.scale_recipe(recipe, 4)

        assert result.ingredients == ["2 scoop rice"]
        assert not result.scaled_ingredients[0].has_error
        assert result.warnings == ["Unit not converted for ingredient 1: Unknown unit: scoop"]

    def test_empty_ingredient_list(self, scaler):
        result = scaler.scale_recipe({"servings": 2, "ingredients": []}, 4)

        assert result.ingredients == []
        assert result.warnings == []


class TestValidation:
    @pytest.mark.parametrize("target", [0, -3, 51, 2.5, True, None, "4"])
    def test_rejects_invalid_targets(self, scaler, sample_recipe, target):
        with pytest.raises(InvalidScaleFactorError):
            scaler.scale_recipe(sample_recipe, target)

    @pytest.mark.parametrize("servings", [0, -2])
    def test_rejects_invalid_original_servings(self, scaler, servings):
        with pytest.raises(InvalidScaleFactorError):
            scaler.scale_recipe({"servings": servings, "ingredients": ["1 cup milk"]}, 4)

    @pytest.mark.parametrize("recipe", [
        {"servings": "many", "ingredients": []},
        {"servings": 4},
        {"ingredients": ["1 cup milk"]},
        {"servings": 4, "ingredients": "1 cup milk"},
        {"servings": True, "ingredients": []},
        ["1 cup milk"],
    ])
    def test_rejects_malformed_recipes(self, scaler, recipe):
        with pytest.raises(InvalidRecipeError):
            scaler.scale_recipe(recipe, 4)

    def test_validation_happens_before_parsing(self, sample_recipe):
        parser = MagicMock()
        scaler = RecipeScaler(parser=parser)

        with pytest.raises(InvalidScaleFactorError):
            scaler.scale_recipe(sample_recipe, 0)
        parser.parse_ingredient.assert_not_called()

    def test_custom_bounds(self, sample_recipe):
        scaler = RecipeScaler(options=ScalingOptions(min_servings=2, max_servings=10))

        assert scaler.scale_recipe(sample_recipe, 10).servings == 10
        with pytest.raises(InvalidScaleFactorError):
            scaler.scale_recipe(sample_recipe, 11)
        with pytest.raises(InvalidScaleFactorError):
            scaler.scale_recipe(sample_recipe, 1)


class TestScalingContext:
    def test_scale_factor(self):
        assert ScalingContext(original_servings=4, target_servings=6).scale_factor == 1.5

    def test_rejects_zero_original(self):
        with pytest.raises(InvalidScaleFactorError):
            ScalingContext(original_servings=0, target_servings=6)


class TestCaching:
    def test_repeated_request_hits_cache(self, cache, sample_recipe):
        scaler = RecipeScaler(cache=cache)

        first = scaler.scale_recipe(sample_recipe, 8)
        second = scaler.scale_recipe(sample_recipe, 8)

        assert second is not first
        assert second.ingredients == first.ingredients
        assert cache.get_stats().hit_count == 1

    def test_cached_result_is_isolated_from_callers(self, cache, sample_recipe):
        scaler = RecipeScaler(cache=cache)

        first = scaler.scale_recipe(sample_recipe, 8)
        expected = list(first.ingredients)
        first.ingredients.append("mutated")
        first.scaled_ingredients[0].name = "mutated"
        second = scaler.scale_recipe(sample_recipe, 8)
        third = scaler.scale_recipe(sample_recipe, 8)

        assert second.ingredients == expected
        assert second.scaled_ingredients[0].name == "flour"
        assert third is not second
        assert cache.get_stats().hit_count == 2

    def test_different_target_misses(self, cache, sample_recipe):
        scaler = RecipeScaler(cache=cache)

        doubled = scaler.scale_recipe(sample_recipe, 8)
        halved = scaler.scale_recipe(sample_recipe, 2)

        assert doubled is not halved
        assert cache.get_stats().hit_count == 0

    def test_no_cache_by_default(self, scaler, sample_recipe):
        assert scaler.cache is None
        assert scaler.scale_recipe(sample_recipe, 8) is not scaler.scale_recipe(sample_recipe, 8)


class TestServingHelpers:
    def test_presets_include_original(self):
        assert preset_servings(4) == [1, 2, 4, 6, 8, 10, 12]
        assert preset_servings(5) == [1, 2, 4, 5, 6, 8, 10, 12]
        assert preset_servings(16) == [1, 2, 4, 6, 8, 10, 12, 16]

    def test_presets_drop_large_originals(self):
        assert preset_servings(24) == [1, 2, 4, 6, 8, 10, 12]

    @pytest.mark.parametrize("current,delta,expected", [
        (4, 2, 6),
        (1, -1, 1),
        (50, 1, 50),
        (3, -10, 1),
    ])
    def test_adjust_servings(self, current, delta, expected):
        assert adjust_servings(current, delta) == expected

    def test_scaler_adjust_uses_its_bounds(self):
        scaler = RecipeScaler(options=ScalingOptions(min_servings=2, max_servings=8))

        assert scaler.adjust_servings(8, 1) == 8
        assert scaler.adjust_servings(3, -5) == 2

    @pytest.mark.parametrize("factor,expected", [
        (1, "Recipe at original size"),
        (0.5, "Recipe scaled down by 50%"),
        (2, "Recipe scaled up by 100%"),
        (0.25, "Recipe scaled down by 75%"),
    ])
    def test_describe_scale(self, factor, expected):
        assert describe_scale(factor) == expected

    def test_format_scale_factor(self):
        assert format_scale_factor(1.5) == "1.50x"
        assert format_scale_factor(1 / 3) == "0.33x"
