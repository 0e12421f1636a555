"""Structural value helpers: deep copy, deep freeze and absent-field stripping.

Usage:
    frozen = deep_freeze({"name": "Apple", "tags": ["fruit"]})
    frozen["name"] = "Pear"  # raises FrozenRecordError

    editable = deep_copy(frozen)  # plain dict/list again
    editable["tags"] = ABSENT
    strip_absent(editable)  # {"name": "Apple"}
"""

from __future__ import annotations

import copy as cp
from collections.abc import Mapping, MutableMapping
from enum import Enum
from functools import singledispatch
from typing import Any, Final, Literal, NoReturn, TypeVar

from mockstore.errors import FrozenRecordError

T = TypeVar("T")


class _AbsentType(Enum):
    ABSENT = "ABSENT"

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Final = _AbsentType.ABSENT
"""Marks a field for deletion. Fields holding ABSENT are dropped on save()."""

Absent = Literal[_AbsentType.ABSENT]
type FieldValue[V] = V | Absent

# Values that are already immutable and never need copying.
_ATOMS = (str, bytes, int, float, complex, bool, type(None), frozenset, range, Enum, type)


def _refuse(self: Any, *args: Any, **kwargs: Any) -> NoReturn:
    raise FrozenRecordError(f"{type(self).__name__} is frozen and cannot be modified")


class FrozenDict(dict[Any, Any]):
    """Read-only dict. Compares equal to a dict with the same items."""

    __slots__ = ()

    __setitem__ = _refuse
    __delitem__ = _refuse
    __ior__ = _refuse
    clear = _refuse
    pop = _refuse
    popitem = _refuse
    setdefault = _refuse
    update = _refuse

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (dict(self),))

    def __repr__(self) -> str:
        return f"FrozenDict({dict.__repr__(self)})"


class FrozenList(list[Any]):
    """Read-only list. Compares equal to a list with the same items."""

    __slots__ = ()

    __setitem__ = _refuse
    __delitem__ = _refuse
    __iadd__ = _refuse
    __imul__ = _refuse
    append = _refuse
    extend = _refuse
    insert = _refuse
    pop = _refuse
    remove = _refuse
    clear = _refuse
    sort = _refuse
    reverse = _refuse

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (list(self),))

    def __repr__(self) -> str:
        return f"FrozenList({list.__repr__(self)})"


@singledispatch
def deep_copy(value: Any) -> Any:
    """Copy a value so that the copy shares no mutable state with the original.

    Mappings and sequences are copied element-wise into their plain mutable
    counterparts, so copying frozen data yields editable data. Immutable
    atoms are returned unchanged. Anything else goes through copy.deepcopy.

    Args:
        value: Value to copy. Must not contain reference cycles.

    Returns:
        The independent copy.
    """
    if isinstance(value, _ATOMS):
        return value
    if isinstance(value, Mapping):
        return {key: deep_copy(item) for key, item in value.items()}
    return cp.deepcopy(value)


@deep_copy.register
def _(value: dict) -> dict[Any, Any]:  # type: ignore[type-arg]
    return {key: deep_copy(item) for key, item in value.items()}


@deep_copy.register
def _(value: list) -> list[Any]:  # type: ignore[type-arg]
    return [deep_copy(item) for item in value]


@deep_copy.register
def _(value: tuple) -> tuple[Any, ...]:  # type: ignore[type-arg]
    items = [deep_copy(item) for item in value]
    if hasattr(value, "_fields"):
        return type(value)._make(items)  # type: ignore[attr-defined,no-any-return]
    return tuple(items)


@deep_copy.register
def _(value: set) -> set[Any]:  # type: ignore[type-arg]
    return {deep_copy(item) for item in value}


@singledispatch
def deep_freeze(value: Any) -> Any:
    """Make a value and everything nested inside it immutable.

    Records are frozen in place. Built-in containers cannot be frozen in
    place, so they come back as read-only equivalents (dict -> FrozenDict,
    list -> FrozenList, set -> frozenset). Already frozen values are returned
    as they are, which makes freezing idempotent.

    Args:
        value: Value to freeze.

    Returns:
        The frozen value.
    """
    return value


@deep_freeze.register
def _(value: dict) -> FrozenDict:  # type: ignore[type-arg]
    if isinstance(value, FrozenDict):
        return value
    return FrozenDict({key: deep_freeze(item) for key, item in value.items()})


@deep_freeze.register
def _(value: list) -> FrozenList:  # type: ignore[type-arg]
    if isinstance(value, FrozenList):
        return value
    return FrozenList(deep_freeze(item) for item in value)


@deep_freeze.register
def _(value: tuple) -> tuple[Any, ...]:  # type: ignore[type-arg]
    items = [deep_freeze(item) for item in value]
    if hasattr(value, "_fields"):
        return type(value)._make(items)  # type: ignore[attr-defined,no-any-return]
    return tuple(items)


@deep_freeze.register
def _(value: set) -> frozenset[Any]:  # type: ignore[type-arg]
    return frozenset(value)


def is_frozen(value: Any) -> bool:
    """Check whether a value rejects mutation at the top level."""
    frozen = getattr(value, "is_frozen", None)
    if isinstance(frozen, bool):
        return frozen
    if isinstance(value, (FrozenDict, FrozenList)):
        return True
    return not isinstance(value, (dict, list, set, MutableMapping))


def strip_absent(value: T) -> T:
    """Delete every ABSENT entry in place, recursively.

    Mapping entries whose value is ABSENT are deleted; list elements that are
    ABSENT are dropped. Other values are left untouched.

    Args:
        value: Container to clean.

    Returns:
        The same container, for chaining.
    """
    if isinstance(value, MutableMapping):
        for key in [key for key, item in value.items() if item is ABSENT]:
            del value[key]
        for item in value.values():
            strip_absent(item)
    elif isinstance(value, list):
        if any(item is ABSENT for item in value):
            value[:] = [item for item in value if item is not ABSENT]
        for item in value:
            strip_absent(item)
    return value
