"""Port for the canonical catalog store.

The store is an opaque point-query service. Implementations must translate their
library exceptions into ``ConnectivityError`` (unreachable, timed out) or
``ConstraintError`` (write rejected); nothing else may escape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from taxonomist.domain.model import (
        CatalogSnapshot,
        DataStructureKey,
        EntityDraft,
        EntityKind,
        Region,
    )


@runtime_checkable
class CatalogStore(Protocol):
    def ping(self) -> None: ...

    def load_snapshot(self) -> CatalogSnapshot: ...

    def list_regions(self) -> tuple[Region, ...]: ...

    def insert_entity(self, draft: EntityDraft) -> UUID: ...

    def delete_entity(self, kind: EntityKind, entity_id: UUID) -> None: ...

    def find_data_structure(self, key: DataStructureKey) -> UUID | None: ...

    def insert_data_structure(self, key: DataStructureKey) -> UUID: ...

    def delete_data_structure(self, data_structure_id: UUID) -> None: ...
