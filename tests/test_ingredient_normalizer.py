"""Tests for unit normalization and conversion."""

import pytest

from recipe_scaling.error_handling import UnitConversionError
from recipe_scaling.ingredient_normalizer import (
    convert_units,
    get_optimal_unit,
    get_unit_category,
    smart_convert_units,
)


class TestSmartConversion:
    @pytest.mark.parametrize("quantity,unit,expected_value,expected_unit", [
        (16, "tbsp", 1.0, "cup"),
        (17, "tbsp", 1.125, "cup"),
        (0.125, "cup", 2.0, "tbsp"),
        (3, "tsp", 1.0, "tbsp"),
        (2, "tsp", 2.0, "tsp"),
        (1500, "g", 1.5, "kg"),
        (500, "g", 500.0, "g"),
        (0.5, "kg", 500.0, "g"),
        (2500, "ml", 2.5, "l"),
        (32, "oz", 2.0, "lb"),
    ])
    def test_ladders(self, normalizer, quantity, unit, expected_value, expected_unit):
        result = normalizer.smart_convert_units(quantity, unit)

        assert result.ok
        assert result.value == pytest.approx(expected_value)
        assert result.unit == expected_unit

    @pytest.mark.parametrize("tbsp", [5, 6, 7, 10, 14])
    def test_tablespoons_stay_when_cups_would_round(self, normalizer, tbsp):
        result = normalizer.smart_convert_units(tbsp, "tbsp")

        assert result.value == tbsp
        assert result.unit == "tbsp"

    @pytest.mark.parametrize("tbsp,cups", [(4, 0.25), (8, 0.5), (12, 0.75)])
    def test_exact_cup_fractions_switch(self, normalizer, tbsp, cups):
        result = normalizer.smart_convert_units(tbsp, "tbsp")

        assert result.value == pytest.approx(cups)
        assert result.unit == "cup"

    def test_teaspoons_stay_when_tablespoons_would_round(self, normalizer):
        result = normalizer.smart_convert_units(3.5, "tsp")

        assert result.value == 3.5
        assert result.unit == "tsp"

    def test_large_weight_moves_up_despite_rounding(self, normalizer):
        result = normalizer.smart_convert_units(1234, "g")

        assert result.value == pytest.approx(1.2)
        assert result.unit == "kg"

    def test_alias_is_canonicalised(self, normalizer):
        result = normalizer.smart_convert_units(4, "tablespoons")

        assert result.value == 0.25
        assert result.unit == "cup"

    def test_context_factor(self, normalizer):
        result = normalizer.smart_convert_units(8, "tbsp", context_factor=2)

        assert result.value == 1.0
        assert result.unit == "cup"

    @pytest.mark.parametrize("unit", ["piece", "clove", "pinch"])
    def test_count_and_vague_units_unchanged(self, normalizer, unit):
        result = normalizer.smart_convert_units(7, unit)

        assert result.ok
        assert result.value == 7
        assert result.unit == unit

    def test_unit_outside_ladders_unchanged(self, normalizer):
        result = normalizer.smart_convert_units(2, "pint")

        assert result.ok
        assert result.value == 2
        assert result.unit == "pint"

    def test_unknown_unit_reports_error(self, normalizer):
        result = normalizer.smart_convert_units(3, "scoop")

        assert not result.ok
        assert isinstance(result.error, UnitConversionError)
        assert result.error_message == "Unknown unit: scoop"
        assert result.value == 3
        assert result.unit == "scoop"


class TestConvertUnits:
    def test_cup_to_ml(self):
        result = convert_units(1, "cup", "ml")

        assert result.ok
        assert result.value == 236.59
        assert result.unit == "ml"

    def test_pound_to_grams(self):
        assert convert_units(1, "lb", "g").value == 453.59

    def test_kilogram_to_pounds(self):
        assert convert_units(1, "kg", "pounds").value == 2.2

    def test_different_families(self):
        result = convert_units(1, "cup", "g")

        assert not result.ok
        assert result.value == 1
        assert result.unit == "cup"
        assert "different unit types" in result.error_message

    def test_count_units_only_convert_to_themselves(self):
        assert convert_units(2, "clove", "clove").ok
        assert not convert_units(2, "clove", "slice").ok


class TestUnitHelpers:
    @pytest.mark.parametrize("unit,category", [
        ("cups", "volume"),
        ("grams", "weight"),
        ("clove", "count"),
        ("to taste", "vague"),
        ("handful", "unknown"),
        (None, "unknown"),
    ])
    def test_unit_category(self, unit, category):
        assert get_unit_category(unit) == category

    def test_optimal_unit(self):
        assert get_optimal_unit(48, "tsp") == "cup"
        assert get_optimal_unit(2, "tsp") == "tsp"
        assert get_optimal_unit(3, "scoop") == "scoop"

    def test_module_level_smart_convert(self):
        assert smart_convert_units(16, "tbsp").unit == "cup"
