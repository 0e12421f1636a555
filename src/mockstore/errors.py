"""Error taxonomy for the mock database.

Setup errors and consistency errors signal misuse of the test double and are
raised synchronously. RecordNotFoundError is the only expected failure; async
lookups deliver it when awaited, the way a real driver reports a missing
record.
"""

from __future__ import annotations

from typing import Any


class MockDatabaseError(Exception):
    """Base class for every error raised by mockstore."""


class UnknownModelError(MockDatabaseError, KeyError):
    """A model name was used that was never registered."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"{model_name} is not a model in the mocked database")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class DuplicateModelError(MockDatabaseError, ValueError):
    """A model name was registered twice."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"{model_name} is already a model in the mocked database")


class UnsupportedQueryError(MockDatabaseError, ValueError):
    """A lookup filter asked for more than a single identity match."""

    def __init__(self, model_name: str, query: Any) -> None:
        self.model_name = model_name
        self.query = query
        super().__init__(
            f"Unsupported query on {model_name}: {query!r} "
            "(only single-field identity lookups are mocked)"
        )


class DatabaseDisposedError(MockDatabaseError, RuntimeError):
    """The database was used after dispose()."""


class RecordNotFoundError(MockDatabaseError, LookupError):
    """No live record exists for the requested identity."""

    def __init__(self, model_name: str, record_id: Any, message: str | None = None) -> None:
        self.model_name = model_name
        self.record_id = record_id
        super().__init__(message or f"No {model_name} record with {record_id} has been found")


class RecordRemovedError(RecordNotFoundError):
    """The record existed but was removed during the current test cycle."""

    def __init__(self, model_name: str, record_id: Any) -> None:
        super().__init__(
            model_name, record_id, f"{model_name} record with {record_id} has been removed"
        )


class ConsistencyError(MockDatabaseError, RuntimeError):
    """A removed record was saved again."""

    def __init__(self, model_name: str, record_id: Any) -> None:
        self.model_name = model_name
        self.record_id = record_id
        super().__init__(
            f"Cannot update {model_name} record {record_id} because it is already removed"
        )


class UnboundRecordError(MockDatabaseError, RuntimeError):
    """save() or remove() was called on a record no model owns."""


class FrozenRecordError(MockDatabaseError, TypeError):
    """An attempt was made to mutate frozen registration data."""
