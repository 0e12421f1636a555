"""Deterministic record identity.

Usage:
    assign_id("food", 0)  # "MOCK_food_0_ID"
"""

from __future__ import annotations

DEFAULT_ID_TEMPLATE = "MOCK_{name}_{index}_ID"
ID_FIELD = "id"
"""Reserved field holding a record's identity."""


def assign_id(model_name: str, index: int, template: str = DEFAULT_ID_TEMPLATE) -> str:
    """Render the identity of the index-th record registered under model_name.

    Identities depend only on the model name and registration position, so
    they are stable across runs and never reused.
    """
    return template.format(name=model_name, index=index)
