"""MockDatabase: the in-process stand-in for a document store.

Lifecycle:
    database = MockDatabase()
    database.register(Food, "food", [{"name": "Apple"}])
    for each test:
        database.reset()      # forget writes, (re)install lookup interception
        ...                   # code under test calls Food.find_one({"_id": ...})
    database.dispose()

Lookups are resolved eagerly when they are issued and handed back as
awaitables, so no other operation can observe a half-finished read.
Registration mistakes raise immediately instead of when the awaitable is
awaited.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Awaitable, Iterable, Mapping
from contextlib import ExitStack
from types import TracebackType
from typing import Any, Self
from unittest.mock import MagicMock, patch

from mockstore.config import DatabaseSettings
from mockstore.core.identity import ID_FIELD
from mockstore.core.record import Record
from mockstore.core.values import deep_copy, strip_absent
from mockstore.errors import (
    DatabaseDisposedError,
    DuplicateModelError,
    RecordNotFoundError,
    UnknownModelError,
    UnsupportedQueryError,
)
from mockstore.storage.model import ModelEntry

logger = logging.getLogger(__name__)


async def _resolved[T](value: T) -> T:
    return value


async def _failed(error: Exception) -> Any:
    raise error


class MockDatabase:
    """Registry of mocked models with per-test reset.

    Args:
        settings: Database settings. Defaults to DatabaseSettings(), which
            reads MOCKSTORE_* environment variables.
    """

    def __init__(self, settings: DatabaseSettings | None = None) -> None:
        self._settings = settings or DatabaseSettings()
        self._models: dict[str, ModelEntry[Any]] = {}
        self._interceptions = ExitStack()
        self._cycle = 0
        self._disposed = False

    @property
    def settings(self) -> DatabaseSettings:
        return self._settings

    @property
    def cycle(self) -> int:
        """Number of resets performed so far."""
        return self._cycle

    @property
    def model_names(self) -> list[str]:
        return list(self._models)

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._models

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"cycle={self._cycle}"
        return f"MockDatabase(models={self.model_names!r}, {state})"

    def _check_open(self) -> None:
        if self._disposed:
            raise DatabaseDisposedError("MockDatabase has been disposed")

    def model(self, model_name: str) -> ModelEntry[Any]:
        """Get the registry entry for a model.

        Raises:
            UnknownModelError: If the model was never registered.
        """
        self._check_open()
        try:
            return self._models[model_name]
        except KeyError:
            raise UnknownModelError(model_name) from None

    # Setup

    def register[R: Record](
        self,
        collection: Any,
        name: str,
        records: Iterable[Mapping[str, Any]],
        record_type: type[R] = Record,  # type: ignore[assignment]
    ) -> ModelEntry[R]:
        """Add a model and its initial records.

        The records are copied and frozen; they are never changed afterwards.
        Writes during a test are kept in overlays that reset() discards.

        Args:
            collection: Collection object whose lookup attribute is patched.
            name: Model name, used in identities (MOCK_<name>_<index>_ID).
            records: Raw records. Not validated.
            record_type: Record variant for this model.

        Returns:
            The new model entry.

        Raises:
            DuplicateModelError: If name is already registered.
        """
        self._check_open()
        if name in self._models:
            raise DuplicateModelError(name)
        entry = ModelEntry.build(
            collection, name, records, record_type, self._settings.id_template
        )
        self._models[name] = entry
        if self._cycle and self._settings.warn_late_registration:
            warnings.warn(
                f"Model {name} was registered after reset(); its "
                f"{self._settings.lookup_attribute} is only intercepted from the next reset()",
                stacklevel=2,
            )
        return entry

    # Reads

    def get_record(self, model_name: str, record_id: Any, write_capable: bool = False) -> Record:
        """Resolve a record synchronously.

        Args:
            model_name: Registered model name.
            record_id: Identity to resolve.
            write_capable: Keep save()/remove() working on the result. Leave
                False when the record is only compared in assertions.

        Raises:
            UnknownModelError: If the model was never registered.
            RecordNotFoundError: If the record is missing or was removed.
        """
        return self.model(model_name).lookup(record_id, write_capable)

    def lookup(
        self, model_name: str, record_id: Any, write_capable: bool = False
    ) -> Awaitable[Record]:
        """Resolve a record the way an async driver would.

        Raises:
            UnknownModelError: Synchronously, if the model was never registered.

        Returns:
            Awaitable yielding the record clone, or raising RecordNotFoundError.
        """
        entry = self.model(model_name)
        try:
            record = entry.lookup(record_id, write_capable)
        except RecordNotFoundError as error:
            return _failed(error)
        return _resolved(record)

    def find_one(
        self, model_name: str, query: Mapping[str, Any], write_capable: bool = False
    ) -> Awaitable[Record]:
        """Point lookup by an identity filter such as {"_id": record_id}.

        Raises:
            UnknownModelError: Synchronously, if the model was never registered.
            UnsupportedQueryError: Synchronously, for any other kind of filter.
        """
        self.model(model_name)
        return self.lookup(model_name, self._identity_of(model_name, query), write_capable)

    def _identity_of(self, model_name: str, query: Any) -> Any:
        if isinstance(query, Mapping) and len(query) == 1:
            for key in (self._settings.id_key, ID_FIELD):
                if key in query:
                    return self._checked_identity(model_name, query, query[key])
        raise UnsupportedQueryError(model_name, query)

    @staticmethod
    def _checked_identity(model_name: str, query: Any, value: Any) -> Any:
        # Operator filters such as {"_id": {"$in": [...]}} are not identities.
        if isinstance(value, Mapping):
            raise UnsupportedQueryError(model_name, query)
        try:
            hash(value)
        except TypeError:
            raise UnsupportedQueryError(model_name, query) from None
        return value

    def all_records(self, model_name: str) -> list[Record]:
        """Every live record of a model, as exported clones.

        Convenience for assertions; matches the result of an unfiltered find
        but does not intercept one.

        Raises:
            UnknownModelError: If the model was never registered.
        """
        return self.model(model_name).all_records()

    # Writes

    def save_record(self, model_name: str, record: Mapping[str, Any]) -> None:
        """Store a version of a record as if it had been saved.

        Raises:
            UnknownModelError: If the model was never registered.
            ValueError: If the record has no identity.
            ConsistencyError: If the record was removed this cycle.
        """
        entry = self.model(model_name)
        entry.commit_update(self._as_record(entry, record))

    def remove_record(self, model_name: str, record: Mapping[str, Any]) -> None:
        """Mark a record as removed for the rest of the cycle.

        Raises:
            UnknownModelError: If the model was never registered.
            ValueError: If the record has no identity.
        """
        entry = self.model(model_name)
        entry.commit_remove(self._as_record(entry, record))

    @staticmethod
    def _as_record(entry: ModelEntry[Any], record: Mapping[str, Any]) -> Record:
        if record.get(ID_FIELD) is None:
            raise ValueError(f"Cannot write a {entry.name} record without an {ID_FIELD!r}")
        if isinstance(record, Record):
            copied = record.clone()
        else:
            copied = entry.record_type._from_fields(deep_copy(dict(record)), None, None)
        return strip_absent(copied)

    # Interception lifecycle

    def intercept(self, target: Any, attribute: str, **patch_kwargs: Any) -> Any:
        """Patch target.attribute until the next reset() or dispose().

        Useful for driver entry points that must not run under test, such as
        connect().

        Args:
            target: Object to patch.
            attribute: Attribute to replace.
            **patch_kwargs: Forwarded to unittest.mock.patch.object.

        Returns:
            The replacement object (a MagicMock unless new= was given).
        """
        self._check_open()
        replacement = self._interceptions.enter_context(
            patch.object(target, attribute, **patch_kwargs)
        )
        logger.debug("Intercepted %r.%s", target, attribute)
        return replacement

    def _lookup_hook(self, model_name: str) -> Any:
        def find_one(query: Mapping[str, Any], *args: Any, **kwargs: Any) -> Awaitable[Record]:
            return self.find_one(model_name, query, write_capable=True)

        return find_one

    def reset(self) -> None:
        """Restore every model to its registered state.

        Drops every interception from the previous cycle, clears all
        overlays, then patches each collection's lookup attribute so that
        it resolves through this database with write-capable results. Call
        it before every test.
        """
        self._check_open()
        self._interceptions.close()
        self._interceptions = ExitStack()
        attribute = self._settings.lookup_attribute
        for name, entry in self._models.items():
            entry.clear_overlays()
            self._interceptions.enter_context(
                patch.object(
                    entry.collection,
                    attribute,
                    new=MagicMock(name=f"{name}.{attribute}", side_effect=self._lookup_hook(name)),
                )
            )
        self._cycle += 1
        logger.debug("Reset %d models (cycle %d)", len(self._models), self._cycle)

    def dispose(self) -> None:
        """Undo every interception and retire the database. Idempotent."""
        if self._disposed:
            return
        self._interceptions.close()
        self._disposed = True
        logger.debug("Disposed MockDatabase after %d cycles", self._cycle)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()
