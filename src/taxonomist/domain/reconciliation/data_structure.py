"""Resolve the (program, provider, subject, region) data structure record."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from taxonomist.domain.errors import ConfigurationError, ConnectivityError
from taxonomist.domain.model import CatalogTable, DataStructureKey, DataStructureRecord

from .engine import ConnectivityState

if TYPE_CHECKING:
    from uuid import UUID

    from taxonomist.domain.model import RollbackLog, StructureTree
    from taxonomist.domain.ports import CatalogStore

log = logging.getLogger(__name__)


@dataclass(slots=True)
class DataStructureResolver:
    """Lookup-then-insert over the data structure join table.

    A tuple that already has a record is never inserted again. Records created
    here are appended to ``rollback_log`` when one is given, after the taxonomy
    entities they reference, so rollback removes them first.
    """

    store: CatalogStore
    rollback_log: RollbackLog | None = None
    connectivity: ConnectivityState = field(default_factory=ConnectivityState)

    def resolve(
        self,
        program_id: UUID,
        provider_id: UUID,
        subject_id: UUID,
        region_id: UUID | None,
    ) -> DataStructureRecord:
        if region_id is None:
            raise ConfigurationError("Select a region before resolving the data structure")
        if self.connectivity.offline:
            raise ConnectivityError("Catalog is offline; data structure not resolved")

        key = DataStructureKey(
            program_id=program_id,
            provider_id=provider_id,
            subject_id=subject_id,
            region_id=region_id,
        )
        try:
            existing = self.store.find_data_structure(key)
            if existing is not None:
                log.debug("Data structure %s already exists for %s", existing, key)
                return DataStructureRecord(key=key, data_structure_id=existing)
            created = self.store.insert_data_structure(key)
        except ConnectivityError as exc:
            self.connectivity.go_offline(str(exc))
            raise

        if self.rollback_log is not None:
            self.rollback_log.record(CatalogTable.DATA_STRUCTURES, created)
        log.info("Created data structure %s", created)
        return DataStructureRecord(key=key, data_structure_id=created, created=True)

    def resolve_for_tree(self, tree: StructureTree, region_id: UUID | None) -> DataStructureRecord:
        """Resolve using the tree's program, first provider and first subject."""

        path = tree.primary_path()
        if path is None:
            raise ConfigurationError("Tree has no program/provider/subject path")
        program, provider, subject = path
        if program.resolved_id is None or provider.resolved_id is None or subject.resolved_id is None:
            unresolved = ", ".join(node.name for node in path if node.resolved_id is None)
            raise ConfigurationError(
                f"Cannot resolve data structure before these exist: {unresolved}"
            )
        return self.resolve(
            program.resolved_id, provider.resolved_id, subject.resolved_id, region_id
        )
