"""Collection protocol for the code under test.

A collection is whatever object application code calls to look records up,
typically a model class of an async document driver. MockDatabase only needs
one attribute on it, the point-lookup entry point, which it replaces for the
duration of each test cycle.

Usage:
    class Food:
        @classmethod
        async def find_one(cls, query):
            ...  # real driver call, never reached under MockDatabase

    database.register(Food, "food", [{"name": "Apple"}])
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Collection(Protocol):
    """Object exposing an async single-record lookup by filter."""

    def find_one(self, query: Mapping[str, Any], /) -> Awaitable[Any]:
        """Resolve the record matching query, or fail when there is none."""
        ...
