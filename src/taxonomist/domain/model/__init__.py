"""Public domain model surface."""

from __future__ import annotations

from taxonomist.domain.model.catalog import (
    CatalogRecord,
    CatalogSnapshot,
    DataStructureKey,
    DataStructureRecord,
    EntityDraft,
    Region,
)
from taxonomist.domain.model.enums import (
    CatalogTable,
    EntityKind,
    FailureKind,
    NodeOutcome,
    RunState,
)
from taxonomist.domain.model.rollback import RollbackEntry, RollbackLog
from taxonomist.domain.model.structure import DuplicateCandidate, StructureEntity, StructureTree

__all__ = [  # noqa: RUF022
    # enums
    "CatalogTable",
    "EntityKind",
    "FailureKind",
    "NodeOutcome",
    "RunState",
    # catalog
    "CatalogRecord",
    "CatalogSnapshot",
    "DataStructureKey",
    "DataStructureRecord",
    "EntityDraft",
    "Region",
    # structure
    "DuplicateCandidate",
    "StructureEntity",
    "StructureTree",
    # rollback
    "RollbackEntry",
    "RollbackLog",
]
