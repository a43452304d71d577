"""Catalog stores.

Submodules:
    base    -- Protocols the graph service depends on.
    sqlite  -- SQLite implementation over the catalog schema.
"""

from depcatalog.stores.base import (
    CanonicalOverrideStore,
    DependencyStore,
    ServiceStore,
    TeamStore,
)
from depcatalog.stores.sqlite import SqliteStores

__all__ = [
    "CanonicalOverrideStore",
    "DependencyStore",
    "ServiceStore",
    "SqliteStores",
    "TeamStore",
]
