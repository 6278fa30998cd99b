"""SQLAlchemy adapter package for the taxonomy catalog."""

from __future__ import annotations

from .engine import (
    StartupError,
    configured_engine,
    create_catalog_engine,
    is_started,
    shutdown,
    startup,
)
from .mappings import TABLE_BY_KIND, data_structures_table, metadata, regions_table
from .store import SqlAlchemyCatalogStore

__all__ = [
    "TABLE_BY_KIND",
    "SqlAlchemyCatalogStore",
    "StartupError",
    "configured_engine",
    "create_catalog_engine",
    "data_structures_table",
    "is_started",
    "metadata",
    "regions_table",
    "shutdown",
    "startup",
]
