"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import CatalogStore

__all__ = ["CatalogStore"]
