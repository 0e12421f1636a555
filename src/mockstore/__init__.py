"""mockstore: deterministic in-memory document store for test suites.

Usage:
    from mockstore import ABSENT, MockDatabase

    database = MockDatabase()
    database.register(Food, "food", [{"name": "Apple"}])

    database.reset()
    apple = await Food.find_one({"_id": "MOCK_food_0_ID"})
    apple.name = "Pear"
    apple.save()

    database.reset()  # food is back to Apple
"""

__version__ = "0.1.0"

# Core primitives
from mockstore.core import (
    ABSENT,
    FieldValue,
    FrozenDict,
    FrozenList,
    Record,
    assign_id,
    deep_copy,
    deep_freeze,
    strip_absent,
)

# Configuration
from mockstore.config import DatabaseSettings

# Database
from mockstore.database import MockDatabase

# Errors
from mockstore.errors import (
    ConsistencyError,
    DatabaseDisposedError,
    DuplicateModelError,
    FrozenRecordError,
    MockDatabaseError,
    RecordNotFoundError,
    RecordRemovedError,
    UnboundRecordError,
    UnknownModelError,
    UnsupportedQueryError,
)

# Storage
from mockstore.storage import Collection, ModelEntry

__all__ = [
    # Version
    "__version__",
    # Core
    "ABSENT",
    "FieldValue",
    "FrozenDict",
    "FrozenList",
    "Record",
    "assign_id",
    "deep_copy",
    "deep_freeze",
    "strip_absent",
    # Config
    "DatabaseSettings",
    # Database
    "MockDatabase",
    # Storage
    "Collection",
    "ModelEntry",
    # Errors
    "MockDatabaseError",
    "UnknownModelError",
    "DuplicateModelError",
    "UnsupportedQueryError",
    "DatabaseDisposedError",
    "RecordNotFoundError",
    "RecordRemovedError",
    "ConsistencyError",
    "UnboundRecordError",
    "FrozenRecordError",
]
