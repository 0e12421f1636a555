"""Mock database service.

Architecture Note:
    database/ is the stateful service layer. It owns the registered models
    and the interceptions installed on their collections, while core/ holds
    the stateless value types it is built from.
"""

from mockstore.database.database import MockDatabase

__all__ = [
    "MockDatabase",
]
