"""Tests for MockDatabase registration, lookup and reset.

Critical Invariants:
- Setup errors are raised synchronously, before anything is awaited
- Not-found is delivered when the lookup is awaited
- reset() restores registered data and reinstalls interception
- dispose() restores the real collection entry points
"""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, "tests")

from conftest import FOOD_RECORDS, Food, FoodRecord, Recipe

from mockstore import ABSENT, Collection, DatabaseSettings, MockDatabase, Record
from mockstore.errors import (
    ConsistencyError,
    DatabaseDisposedError,
    DuplicateModelError,
    RecordNotFoundError,
    RecordRemovedError,
    UnknownModelError,
    UnsupportedQueryError,
)

APPLE = "MOCK_food_0_ID"
PEAR = "MOCK_food_1_ID"


# Registration


def test_register_returns_entry(database):
    entry = database.model("food")

    assert entry.name == "food"
    assert entry.collection is Food
    assert entry.record_type is FoodRecord
    assert isinstance(entry.collection, Collection)
    assert database.model_names == ["food", "recipe"]
    assert "food" in database
    assert "drink" not in database


def test_duplicate_registration_fails(database):
    with pytest.raises(DuplicateModelError, match="food is already a model"):
        database.register(Food, "food", [])


def test_late_registration_warns(database):
    """Models added after reset() are not intercepted until the next reset()."""
    with pytest.warns(UserWarning, match="registered after reset"):
        database.register(SimpleNamespace(find_one=None), "drink", [])


def test_late_registration_warning_can_be_disabled():
    settings = DatabaseSettings(warn_late_registration=False)
    with MockDatabase(settings) as database:
        database.reset()
        database.register(SimpleNamespace(find_one=None), "drink", [{"name": "tea"}])

        assert database.get_record("drink", "MOCK_drink_0_ID").name == "tea"


def test_register_before_reset_does_not_warn(recwarn):
    with MockDatabase() as database:
        database.register(SimpleNamespace(find_one=None), "drink", [])

    assert not [w for w in recwarn if issubclass(w.category, UserWarning)]


# Unknown models


@pytest.mark.parametrize(
    "call",
    [
        lambda db: db.get_record("drink", "x"),
        lambda db: db.lookup("drink", "x"),
        lambda db: db.find_one("drink", {"_id": "x"}),
        lambda db: db.all_records("drink"),
        lambda db: db.save_record("drink", {"id": "x"}),
        lambda db: db.remove_record("drink", {"id": "x"}),
        lambda db: db.model("drink"),
    ],
)
def test_unknown_model_fails_synchronously(database, call):
    """CRITICAL: Unknown models raise at call time, not at await time.

    Why: A misconfigured test double must abort the test, not look like a
    missing record.
    """
    with pytest.raises(UnknownModelError, match="drink is not a model") as info:
        call(database)

    assert info.value.model_name == "drink"
    assert isinstance(info.value, KeyError)


# Lookups


def test_get_record_returns_exported_clone(database):
    apple = database.get_record("food", APPLE)

    assert isinstance(apple, FoodRecord)
    assert not apple.is_bound
    assert apple == {"id": APPLE, **FOOD_RECORDS[0]}


def test_get_record_not_found(database):
    with pytest.raises(RecordNotFoundError):
        database.get_record("food", "MOCK_food_7_ID")


@pytest.mark.asyncio
async def test_lookup_resolves_when_awaited(database):
    apple = await database.lookup("food", APPLE)

    assert apple.exportable == {"id": APPLE, "name": {"singular": "apple", "plural": "apples"}}


@pytest.mark.asyncio
async def test_lookup_not_found_fails_when_awaited(database):
    """Not-found is an async failure, like a real driver reports it."""
    pending = database.lookup("food", "MOCK_food_7_ID")

    with pytest.raises(RecordNotFoundError, match="No food record with MOCK_food_7_ID"):
        await pending


@pytest.mark.asyncio
async def test_lookup_resolves_at_call_time(database):
    """The awaitable carries the state at the time the lookup was issued."""
    pending = database.lookup("food", APPLE)
    record = database.get_record("food", APPLE, write_capable=True)
    record.name = "changed"
    record.save()

    assert (await pending).name == FOOD_RECORDS[0]["name"]


@pytest.mark.asyncio
async def test_find_one_accepts_id_filters(database):
    by_driver_key = await database.find_one("food", {"_id": PEAR})
    by_field = await database.find_one("food", {"id": PEAR})

    assert by_driver_key == by_field
    assert by_driver_key.name["singular"] == "pear"


@pytest.mark.parametrize(
    "query",
    [
        {},
        {"name": "apple"},
        {"_id": APPLE, "name": "apple"},
        {"_id": {"$in": [APPLE]}},
        {"id": [APPLE]},
        APPLE,
        None,
    ],
)
def test_find_one_rejects_other_filters(database, query):
    with pytest.raises(UnsupportedQueryError, match="only single-field identity lookups"):
        database.find_one("food", query)


@pytest.mark.asyncio
async def test_find_one_write_capable_flag(database):
    assert not (await database.find_one("food", {"_id": APPLE})).is_bound
    assert (await database.find_one("food", {"_id": APPLE}, write_capable=True)).is_bound


# Interception


@pytest.mark.asyncio
async def test_reset_intercepts_collection_lookup(database):
    """CRITICAL: After reset(), application code resolves through the mock."""
    assert isinstance(Food.find_one, MagicMock)

    apple = await Food.find_one({"_id": APPLE})

    assert apple.is_bound
    Food.find_one.assert_called_once_with({"_id": APPLE})


@pytest.mark.asyncio
async def test_intercepted_lookup_supports_save(database):
    apple = await Food.find_one({"_id": APPLE})
    apple.name = {"singular": "crab apple", "plural": ABSENT}
    apple.save()

    assert database.get_record("food", APPLE).name == {"singular": "crab apple"}


@pytest.mark.asyncio
async def test_intercepted_lookup_removed_record(database):
    pear = await Food.find_one({"_id": PEAR})
    pear.remove()

    with pytest.raises(RecordRemovedError):
        await Food.find_one({"_id": PEAR})


@pytest.mark.asyncio
async def test_intercepted_lookup_unknown_record(database):
    with pytest.raises(RecordNotFoundError):
        await Recipe.find_one({"_id": "MOCK_recipe_5_ID"})


def test_reset_installs_fresh_mocks(database):
    first = Food.find_one

    database.reset()

    assert Food.find_one is not first
    assert isinstance(Food.find_one, MagicMock)


def test_intercept_lasts_until_reset(database):
    connect = database.intercept(Food, "connect", new=MagicMock(return_value=True))

    assert Food.connect is connect
    assert Food.connect("mongodb://test") is True

    database.reset()

    assert not isinstance(Food.connect, MagicMock)


def test_custom_lookup_attribute():
    class Legacy:
        def findOne(self, query):
            raise AssertionError("real findOne reached")

    settings = DatabaseSettings(lookup_attribute="findOne", id_template="{name}#{index}")
    with MockDatabase(settings) as database:
        database.register(Legacy, "legacy", [{"value": 1}])
        database.reset()

        assert database.get_record("legacy", "legacy#0").value == 1
        assert isinstance(Legacy.findOne, MagicMock)


# Writes


def test_save_record_by_name(database):
    database.save_record("food", {"id": APPLE, "name": "plum", "notes": ABSENT})

    assert database.get_record("food", APPLE) == {"id": APPLE, "name": "plum"}
    assert isinstance(database.get_record("food", APPLE), FoodRecord)


def test_save_record_does_not_mutate_caller_record(database):
    record = database.get_record("food", APPLE)
    record.notes = ABSENT

    database.save_record("food", record)

    assert record.notes is ABSENT
    assert "notes" not in database.get_record("food", APPLE)


def test_save_record_requires_identity(database):
    with pytest.raises(ValueError, match="without an 'id'"):
        database.save_record("food", {"name": "plum"})


def test_remove_then_save_record_fails(database):
    database.remove_record("food", {"id": PEAR})

    with pytest.raises(ConsistencyError):
        database.save_record("food", {"id": PEAR, "name": "plum"})


def test_saved_record_stays_write_capable(database):
    """CRITICAL: Records written by name can still be saved and removed later.

    Why: Harnesses seed records with save_record() before the code under test
    looks them up and writes to them.
    """
    database.save_record("food", {"id": APPLE, "name": "plum"})

    record = database.get_record("food", APPLE, write_capable=True)
    assert record.is_bound
    record.name = "damson"
    record.save()
    assert database.get_record("food", APPLE).name == "damson"

    database.get_record("food", APPLE, write_capable=True).remove()
    with pytest.raises(RecordRemovedError):
        database.get_record("food", APPLE)


@pytest.mark.asyncio
async def test_intercepted_lookup_after_save_record_supports_writes(database):
    database.save_record("food", database.get_record("food", PEAR))

    pear = await Food.find_one({"_id": PEAR})
    pear.name = "nashi"
    pear.save()
    pear.remove()

    with pytest.raises(RecordRemovedError):
        await Food.find_one({"_id": PEAR})


# Reset


def test_reset_restores_registered_state(database):
    """CRITICAL: reset() discards every save and remove."""
    apple = database.get_record("food", APPLE, write_capable=True)
    apple.name = "plum"
    apple.save()
    database.get_record("food", PEAR, write_capable=True).remove()

    database.reset()

    assert database.get_record("food", APPLE) == {"id": APPLE, **FOOD_RECORDS[0]}
    assert database.get_record("food", PEAR) == {"id": PEAR, **FOOD_RECORDS[1]}
    assert database.cycle == 2


# Dispose


def test_dispose_restores_collections_and_retires_database():
    original = Recipe.__dict__["find_one"]
    database = MockDatabase()
    database.register(Recipe, "recipe", [])
    database.reset()
    assert isinstance(Recipe.find_one, MagicMock)

    database.dispose()
    database.dispose()

    assert Recipe.__dict__["find_one"] is original
    with pytest.raises(DatabaseDisposedError):
        database.reset()
    with pytest.raises(DatabaseDisposedError):
        database.get_record("recipe", "x")
    assert "disposed" in repr(database)


def test_context_manager_disposes():
    with MockDatabase() as database:
        database.register(Record, "plain", [])

    with pytest.raises(DatabaseDisposedError):
        database.all_records("plain")
