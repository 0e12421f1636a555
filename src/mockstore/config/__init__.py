"""Configuration module using Pydantic Settings.

Usage:
    from mockstore.config import DatabaseSettings

    settings = DatabaseSettings(lookup_attribute="findOne")
"""

from mockstore.config.settings import DatabaseSettings

__all__ = [
    "DatabaseSettings",
]
