"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from mockstore import MockDatabase, Record

pytest_plugins = ["mockstore.pytest_plugin"]


class Food:
    """Stand-in for an async driver model. Never reached while intercepted."""

    @classmethod
    async def find_one(cls, query):
        raise AssertionError("real Food.find_one reached")

    @classmethod
    async def connect(cls, uri):
        raise AssertionError("real Food.connect reached")


class Recipe:
    @classmethod
    async def find_one(cls, query):
        raise AssertionError("real Recipe.find_one reached")


class FoodRecord(Record):
    """Food variant exposing the exported shape the routes send back."""

    @property
    def exportable(self):
        return {"id": self.id, "name": self.to_dict()["name"]}


FOOD_RECORDS = [
    {
        "name": {"singular": "apple", "plural": "apples"},
        "conversions": [{"unit_id": 1, "ratio": 0.5}],
    },
    {
        "name": {"singular": "pear", "plural": "pears"},
        "conversions": [],
    },
]

RECIPE_RECORDS = [
    {"title": "Apple pie", "ingredients": [{"food_id": "MOCK_food_0_ID", "amount": 3}]},
]


@pytest.fixture
def database():
    """Fresh MockDatabase with food and recipe models, reset once."""
    with MockDatabase() as db:
        db.register(Food, "food", FOOD_RECORDS, FoodRecord)
        db.register(Recipe, "recipe", RECIPE_RECORDS)
        db.reset()
        yield db


@pytest.fixture(scope="session")
def mockstore_setup():
    def setup(db):
        db.register(Food, "food", FOOD_RECORDS, FoodRecord)
        db.register(Recipe, "recipe", RECIPE_RECORDS)

    return setup
