"""Per-model record storage with copy-on-write overlays.

Structure:
    base[id]    = frozen Record registered at setup, never modified
    updated[id] = latest saved version during the current test cycle
    removed[id] = records removed during the current test cycle

Reads resolve removed, then updated, then base. Writes only ever touch the
overlays, so clearing them restores the registered state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from mockstore.core.identity import DEFAULT_ID_TEMPLATE, ID_FIELD, assign_id
from mockstore.core.record import Record
from mockstore.core.values import FrozenDict, deep_copy, deep_freeze
from mockstore.errors import ConsistencyError, RecordNotFoundError, RecordRemovedError

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ModelEntry[R: Record]:
    """Registered model: immutable base dataset plus update/remove overlays.

    Build instances with ModelEntry.build(); the constructor alone does not
    populate or freeze the base dataset.
    """

    name: str
    collection: Any
    record_type: type[R]
    base: FrozenDict = field(default_factory=FrozenDict)
    updated: dict[Any, R] = field(default_factory=dict)
    removed: dict[Any, R] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        collection: Any,
        name: str,
        records: Iterable[Mapping[str, Any]],
        record_type: type[R] = Record,  # type: ignore[assignment]
        id_template: str = DEFAULT_ID_TEMPLATE,
    ) -> ModelEntry[R]:
        """Create a model entry from raw records.

        Each raw record is copied, given its identity (replacing any ``id``
        it already carries), bound to this entry's write callbacks and added
        to the base dataset, which is then frozen.

        Args:
            collection: Collection object whose lookup gets intercepted.
            name: Model name, also used to derive identities.
            records: Raw field mappings in registration order.
            record_type: Record variant to instantiate.
            id_template: Identity template with {name} and {index}.

        Raises:
            TypeError: If a raw record is not a mapping.
        """
        entry = cls(name=name, collection=collection, record_type=record_type)
        base: dict[Any, R] = {}
        for index, raw in enumerate(records):
            if not isinstance(raw, Mapping):
                raise TypeError(
                    f"{name} record {index} must be a mapping, got {type(raw).__name__}"
                )
            record_id = assign_id(name, index, id_template)
            fields: dict[str, Any] = {ID_FIELD: record_id}
            fields.update(
                (key, value) for key, value in deep_copy(raw).items() if key != ID_FIELD
            )
            base[record_id] = record_type._from_fields(
                fields, entry.commit_update, entry.commit_remove
            )
        entry.base = deep_freeze(base)
        logger.debug("Registered model %s with %d records", name, len(base))
        return entry

    # Write callbacks bound into every record of this model

    def commit_update(self, record: Record) -> None:
        """Record a save() in the updated overlay.

        Raises:
            ConsistencyError: If the record was removed this cycle.
        """
        if record.id in self.removed:
            raise ConsistencyError(self.name, record.id)
        self.updated[record.id] = self._adopt(record)
        logger.debug("Saved %s record %s", self.name, record.id)

    def commit_remove(self, record: Record) -> None:
        """Record a remove() in the removed overlay."""
        self.removed[record.id] = self._adopt(record)
        logger.debug("Removed %s record %s", self.name, record.id)

    def _adopt(self, record: Record) -> R:
        # Stored versions are always bound to this entry, whoever wrote them.
        return type(record)._from_fields(  # type: ignore[return-value]
            record.to_dict(), self.commit_update, self.commit_remove
        )

    # Reads

    def lookup(self, record_id: Any, retain_callbacks: bool = False) -> R:
        """Resolve a record by identity.

        Args:
            record_id: Identity to look up.
            retain_callbacks: Return a write-capable clone.

        Returns:
            Independent clone of the live version of the record.

        Raises:
            RecordRemovedError: If the record was removed this cycle.
            RecordNotFoundError: If no record has this identity.
        """
        if record_id in self.removed:
            raise RecordRemovedError(self.name, record_id)
        record = self.updated.get(record_id)
        if record is None:
            record = self.base.get(record_id)
        if record is None:
            raise RecordNotFoundError(self.name, record_id)
        return record.clone(retain_callbacks)  # type: ignore[no-any-return]

    def all_records(self) -> list[R]:
        """Exported clones of every live record, updated versions preferred.

        Order is registration order, followed by identities that only exist
        in the updated overlay.
        """
        merged = {**self.base, **self.updated}
        return [
            record.clone()
            for record_id, record in merged.items()
            if record_id not in self.removed
        ]

    def live_ids(self) -> Iterator[Any]:
        """Iterate identities that currently resolve to a record."""
        for record_id in {**self.base, **self.updated}:
            if record_id not in self.removed:
                yield record_id

    def clear_overlays(self) -> None:
        """Forget every save and remove since the last reset."""
        self.updated.clear()
        self.removed.clear()

    def __contains__(self, record_id: object) -> bool:
        return record_id not in self.removed and (
            record_id in self.updated or record_id in self.base
        )

    def __len__(self) -> int:
        return sum(1 for _ in self.live_ids())
