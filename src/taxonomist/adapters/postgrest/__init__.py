"""Hosted catalog adapter speaking PostgREST."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .client import PostgrestClient
from .store import RestCatalogStore

if TYPE_CHECKING:
    from taxonomist.config.catalog import CatalogRestConfig


def create_rest_store(config: CatalogRestConfig) -> RestCatalogStore:
    return RestCatalogStore(client=PostgrestClient(config=config))


__all__ = ["PostgrestClient", "RestCatalogStore", "create_rest_store"]
