"""Model storage."""

from mockstore.storage.model import ModelEntry
from mockstore.storage.protocol import Collection

__all__ = [
    "Collection",
    "ModelEntry",
]
