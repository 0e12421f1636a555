"""Configuration settings using Pydantic Settings.

Usage:
    from mockstore.config import DatabaseSettings

    # Load from environment variables (MOCKSTORE_*)
    settings = DatabaseSettings()

    # Or override with explicit values
    settings = DatabaseSettings(lookup_attribute="findOne", id_key="_id")
"""

from __future__ import annotations

from string import Formatter

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mockstore.core.identity import DEFAULT_ID_TEMPLATE


class DatabaseSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for MockDatabase.

    Attributes:
        id_template: Format string for record identities, with {name} and
            {index} placeholders.
        lookup_attribute: Name of the point-lookup attribute patched on each
            registered collection.
        id_key: Filter key carrying the identity in point lookups.
        warn_late_registration: Warn when a model is registered after the
            first reset, since it is only intercepted from the next reset on.

    Environment Variables:
        MOCKSTORE_ID_TEMPLATE
        MOCKSTORE_LOOKUP_ATTRIBUTE
        MOCKSTORE_ID_KEY
        MOCKSTORE_WARN_LATE_REGISTRATION
    """

    model_config = SettingsConfigDict(
        env_prefix="MOCKSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    id_template: str = DEFAULT_ID_TEMPLATE
    lookup_attribute: str = "find_one"
    id_key: str = "_id"
    warn_late_registration: bool = True

    @field_validator("id_template")
    @classmethod
    def _check_placeholders(cls, value: str) -> str:
        fields = {field for _, field, _, _ in Formatter().parse(value) if field is not None}
        for placeholder in ("name", "index"):
            if placeholder not in fields:
                raise ValueError(f"id_template must contain {{{placeholder}}}, got {value!r}")
        return value

    @field_validator("lookup_attribute", "id_key")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value
