"""Best-effort removal of everything a reconciliation run created."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from taxonomist.domain.errors import ReconciliationError
from taxonomist.domain.model import CatalogTable

if TYPE_CHECKING:
    from taxonomist.domain.model import RollbackEntry, RollbackLog, StructureTree
    from taxonomist.domain.ports import CatalogStore

    from .index import CatalogIndex

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RollbackResult:
    succeeded: int = 0
    failed: int = 0
    deleted: list[RollbackEntry] = field(default_factory=list["RollbackEntry"])
    errors: dict[RollbackEntry, str] = field(default_factory=dict["RollbackEntry", str])

    @property
    def complete(self) -> bool:
        return self.failed == 0


@dataclass(slots=True)
class RollbackCoordinator:
    store: CatalogStore

    def rollback(
        self,
        rollback_log: RollbackLog,
        index: CatalogIndex | None = None,
        tree: StructureTree | None = None,
    ) -> RollbackResult:
        """Delete logged entries newest first; a failed delete does not stop the rest.

        Deleted entities are dropped from ``index`` and their tree nodes flip back
        to missing. The log is cleared afterwards whatever the outcome.
        """

        result = RollbackResult()
        for entry in rollback_log.reversed():
            try:
                self._delete(entry)
            except ReconciliationError as exc:
                result.failed += 1
                result.errors[entry] = str(exc)
                log.warning("Rollback of %s %s failed: %s", entry.table, entry.id, exc)
                continue
            result.succeeded += 1
            result.deleted.append(entry)
            self._forget(entry, index, tree)

        rollback_log.clear()
        log.info("Rollback finished: %s deleted, %s failed", result.succeeded, result.failed)
        return result

    def _delete(self, entry: RollbackEntry) -> None:
        if entry.table is CatalogTable.DATA_STRUCTURES:
            self.store.delete_data_structure(entry.id)
            return
        kind = entry.table.kind
        if kind is None:  # pragma: no cover - every non data-structure table maps to a kind
            raise ValueError(f"Unknown rollback table {entry.table}")
        self.store.delete_entity(kind, entry.id)

    @staticmethod
    def _forget(
        entry: RollbackEntry,
        index: CatalogIndex | None,
        tree: StructureTree | None,
    ) -> None:
        kind = entry.table.kind
        if kind is None:
            return
        if index is not None:
            index.remove(kind, entry.id)
        if tree is None:
            return
        node = tree.find_by_resolved_id(entry.id)
        if node is None:
            return
        node.mark_missing()
        for child in tree.children_of(node):
            child.parent_id = None
