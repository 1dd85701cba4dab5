"""Database utilities.

This module contains:
- Connection pool management
- Store error hierarchy
- Schema creation
"""

from gestao_demandas.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
)

__all__ = [
    "StoreError",
    "ConnectionError",
    "NotFoundError",
    "ConflictError",
]
