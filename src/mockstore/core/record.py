"""Simulated persistent record.

A Record is an open map of fields plus two optional write callbacks. The
owning model binds the callbacks at construction, so the record itself never
knows which model or overlay it will be written to.

Usage:
    record = await Food.find_one({"_id": "MOCK_food_0_ID"})
    record.name = "Pear"
    record.conversions = ABSENT  # deleted on save
    record.save()
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, MutableMapping
from functools import cache
from typing import Any, Self

from mockstore.core.identity import ID_FIELD
from mockstore.core.values import deep_copy, deep_freeze, strip_absent
from mockstore.errors import FrozenRecordError, UnboundRecordError

type RecordCallback = Callable[[Record], None]


@cache
def _slot_names(cls: type) -> frozenset[str]:
    names: set[str] = set()
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        names.update((slots,) if isinstance(slots, str) else slots)
    return frozenset(names)


class Record(MutableMapping[str, Any]):
    """Mutable record handle with save()/remove() simulating a driver document.

    Fields are reachable both as items (record["name"]) and as attributes
    (record.name). Equality only looks at fields, so a record compares equal
    to a plain dict holding the same data.

    Subclasses act as record variants (e.g. adding an ``exportable``
    property). A variant whose constructor differs from Record's must
    override ``_from_fields`` so that clone() can rebuild it.

    Names defined on the class (methods such as ``get`` or ``items``,
    properties) are not routed to fields; use item access for those.

    Args:
        fields: Initial field values.
        on_save: Called with the record when save() is invoked.
        on_remove: Called with the record when remove() is invoked.
        **extra: Additional field values.
    """

    __slots__ = ("_fields", "_on_save", "_on_remove", "_frozen")

    def __init__(
        self,
        fields: Mapping[str, Any] | None = None,
        /,
        *,
        on_save: RecordCallback | None = None,
        on_remove: RecordCallback | None = None,
        **extra: Any,
    ) -> None:
        object.__setattr__(self, "_fields", {**(fields or {}), **extra})
        object.__setattr__(self, "_on_save", on_save)
        object.__setattr__(self, "_on_remove", on_remove)
        object.__setattr__(self, "_frozen", False)

    @classmethod
    def _from_fields(
        cls,
        fields: dict[str, Any],
        on_save: RecordCallback | None,
        on_remove: RecordCallback | None,
    ) -> Self:
        """Build an instance of this variant from already copied fields."""
        return cls(fields, on_save=on_save, on_remove=on_remove)

    # Field access

    @property
    def id(self) -> Any:
        """The record's identity, or None if it has not been assigned yet."""
        return self._fields.get(ID_FIELD)

    @id.setter
    def id(self, value: Any) -> None:
        self[ID_FIELD] = value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in _slot_names(type(self)):
            raise AttributeError(name)
        try:
            return object.__getattribute__(self, "_fields")[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!r} record has no field {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _slot_names(type(self)):
            self._check_writable()
            object.__setattr__(self, name, value)
        elif hasattr(type(self), name):
            self._class_attribute(name, "set")
            object.__setattr__(self, name, value)
        else:
            self[name] = value

    def __delattr__(self, name: str) -> None:
        if name in _slot_names(type(self)):
            self._check_writable()
            object.__delattr__(self, name)
            return
        if hasattr(type(self), name):
            self._class_attribute(name, "delete")
            object.__delattr__(self, name)
            return
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    def _class_attribute(self, name: str, action: str) -> None:
        # Only data descriptors (properties such as ``id``) take attribute writes.
        if not hasattr(getattr(type(self), name), "__set__"):
            raise AttributeError(
                f"Cannot {action} {name!r} as an attribute: it is a {type(self).__name__} "
                f"attribute; use record[{name!r}] for the field"
            )

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._check_writable()
        self._fields[key] = value

    def __delitem__(self, key: str) -> None:
        self._check_writable()
        del self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._fields)!r})"

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self.clone(retain_callbacks=True)

    # Lifecycle

    @property
    def is_bound(self) -> bool:
        """True when both write callbacks are attached."""
        return self._on_save is not None and self._on_remove is not None

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _check_writable(self) -> None:
        if self._frozen:
            raise FrozenRecordError(
                f"{type(self).__name__} {self.id!r} is frozen registration data; "
                "work on a clone instead"
            )

    def freeze(self) -> Self:
        """Freeze this record and all of its fields in place."""
        if not self._frozen:
            object.__setattr__(self, "_fields", deep_freeze(self._fields))
            object.__setattr__(self, "_frozen", True)
        return self

    def save(self) -> None:
        """Simulate a driver save().

        Fields set to ABSENT are deleted first, at any depth, the same way a
        driver drops unset fields before committing.

        Raises:
            FrozenRecordError: If the record is frozen.
            UnboundRecordError: If no model owns this record.
        """
        self._check_writable()
        if self._on_save is None:
            raise UnboundRecordError(
                f"{type(self).__name__} {self.id!r} is not bound to a model and cannot be saved"
            )
        strip_absent(self)
        self._on_save(self)

    def remove(self) -> None:
        """Simulate a driver remove().

        Raises:
            FrozenRecordError: If the record is frozen.
            UnboundRecordError: If no model owns this record.
        """
        self._check_writable()
        if self._on_remove is None:
            raise UnboundRecordError(
                f"{type(self).__name__} {self.id!r} is not bound to a model and cannot be removed"
            )
        self._on_remove(self)

    def clone(self, retain_callbacks: bool = False) -> Self:
        """Return an independent, unfrozen copy of the same record variant.

        Args:
            retain_callbacks: Keep the write callbacks. Leave False for values
                handed to assertions or exported to callers.
        """
        return type(self)._from_fields(
            deep_copy(self._fields),
            self._on_save if retain_callbacks else None,
            self._on_remove if retain_callbacks else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain, deep-copied field dict."""
        return deep_copy(self._fields)  # type: ignore[no-any-return]


@deep_copy.register
def _(value: Record) -> Record:
    return value.clone(retain_callbacks=True)


@deep_freeze.register
def _(value: Record) -> Record:
    return value.freeze()
