"""Pytest fixtures for recipe scaling tests."""

import os
import sys

os.environ.setdefault("ENABLE_METRICS", "false")

import pytest

from recipe_scaling.caching_system import InMemoryCache
from recipe_scaling.ingredient_normalizer import IngredientNormalizer
from recipe_scaling.ingredient_parser import IngredientParser
from recipe_scaling.monitoring_logging import configure_logging
from recipe_scaling.recipe_scaler import RecipeScaler


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def parser():
    return IngredientParser()


@pytest.fixture
def normalizer():
    return IngredientNormalizer()


@pytest.fixture
def scaler():
    return RecipeScaler()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return InMemoryCache(default_ttl=60, max_entries=3, clock=clock)


@pytest.fixture
def sample_recipe():
    return {
        "servings": 4,
        "ingredients": [
            "2 1/2 cups flour",
            "1 tsp salt",
            "3 eggs",
            "200 g butter",
            "salt to taste",
        ],
    }


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Route structured logs through stdlib logging on stderr."""
    configure_logging(level="WARNING", log_format="text", stream=sys.stderr)
