"""Core value types: records, identities and structural helpers.

Architecture Note:
    core/ is stateless. Nothing here knows about models, overlays or
    interception; see storage/ and database/ for that.
"""

from mockstore.core.identity import DEFAULT_ID_TEMPLATE, ID_FIELD, assign_id
from mockstore.core.record import Record, RecordCallback
from mockstore.core.values import (
    ABSENT,
    FieldValue,
    FrozenDict,
    FrozenList,
    deep_copy,
    deep_freeze,
    is_frozen,
    strip_absent,
)

__all__ = [
    # Identity
    "DEFAULT_ID_TEMPLATE",
    "ID_FIELD",
    "assign_id",
    # Records
    "Record",
    "RecordCallback",
    # Values
    "ABSENT",
    "FieldValue",
    "FrozenDict",
    "FrozenList",
    "deep_copy",
    "deep_freeze",
    "is_frozen",
    "strip_absent",
]
