"""One operator's reconciliation run over a single imported payload.

The session owns everything that is per-run: the catalog index, the built tree,
the rollback log and the offline flag. Two sessions never share any of these.

State machine::

    idle -> building -> reviewed -> creating -> committed | partially_failed
    committed | partially_failed -> rolled_back

Creation is permitted from ``reviewed`` and again from ``committed`` or
``partially_failed`` (retrying what is still missing). ``rolled_back`` only
accepts a rebuild from the original payload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from taxonomist.config.reconciliation import ReconciliationConfig
from taxonomist.domain.errors import (
    ConfigurationError,
    ConnectivityError,
    ConstraintError,
    InvalidTransitionError,
    ParentNotResolvedError,
)
from taxonomist.domain.model import RollbackLog, RunState

from .data_structure import DataStructureResolver
from .engine import ConnectivityState, CreationProgress, CreationReport, ReconciliationEngine
from .index import CatalogIndex
from .rollback import RollbackCoordinator, RollbackResult
from .tree import build_structure_tree

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from taxonomist.domain.model import (
        DataStructureRecord,
        EntityKind,
        NodeOutcome,
        Region,
        StructureEntity,
        StructureTree,
    )
    from taxonomist.domain.ports import CatalogStore

    from .engine import CancelCheck, ProgressCallback

log = logging.getLogger(__name__)

_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.IDLE: frozenset({RunState.BUILDING}),
    RunState.BUILDING: frozenset({RunState.REVIEWED, RunState.IDLE}),
    RunState.REVIEWED: frozenset({RunState.CREATING, RunState.BUILDING}),
    RunState.CREATING: frozenset({RunState.COMMITTED, RunState.PARTIALLY_FAILED}),
    RunState.COMMITTED: frozenset({RunState.CREATING, RunState.ROLLED_BACK, RunState.BUILDING}),
    RunState.PARTIALLY_FAILED: frozenset(
        {RunState.CREATING, RunState.ROLLED_BACK, RunState.BUILDING}
    ),
    RunState.ROLLED_BACK: frozenset({RunState.BUILDING}),
}


def default_region(regions: Sequence[Region], hint: str | None) -> Region | None:
    """Prefer a region whose name contains ``hint``; otherwise the first one."""

    if not regions:
        return None
    if hint:
        needle = hint.lower()
        for region in regions:
            if needle in region.name.lower():
                return region
    return regions[0]


@dataclass(slots=True)
class ReconciliationSession:
    store: CatalogStore
    config: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    on_complete: Callable[[DataStructureRecord], None] | None = None

    state: RunState = RunState.IDLE
    index: CatalogIndex = field(default_factory=CatalogIndex.empty)
    tree: StructureTree | None = None
    regions: tuple[Region, ...] = ()
    region_id: UUID | None = None
    data_structure: DataStructureRecord | None = None
    data_structure_error: str | None = None
    progress: CreationProgress | None = None
    last_report: CreationReport | None = None
    rollback_log: RollbackLog = field(default_factory=RollbackLog)
    connectivity: ConnectivityState = field(default_factory=ConnectivityState)

    _payload: Any = field(default=None, init=False, repr=False)
    _completed: bool = field(default=False, init=False, repr=False)
    _engine: ReconciliationEngine | None = field(default=None, init=False, repr=False)

    # --- loading ----------------------------------------------------------

    def open(self) -> None:
        """Load the catalog index and regions; degrade to offline on failure."""

        self._load_index()
        self._load_regions()

    def _load_regions(self) -> None:
        try:
            self.regions = self.store.list_regions()
        except ConnectivityError as exc:
            self.connectivity.go_offline(str(exc))
            self.regions = ()
            return
        if self.region_id is None:
            region = default_region(self.regions, self.config.region_hint)
            self.region_id = region.id if region is not None else None

    def _load_index(self) -> None:
        try:
            snapshot = self.store.load_snapshot()
        except ConnectivityError as exc:
            self.connectivity.go_offline(str(exc))
            self.index = CatalogIndex.empty(offline=True)
            log.warning("Catalog unavailable, every node will be reported missing: %s", exc)
            return
        self.index = CatalogIndex.load(snapshot)
        self.connectivity.go_online()

    @property
    def offline(self) -> bool:
        return self.connectivity.offline

    def check_connectivity(self) -> bool:
        """Ping the store again. Leaving offline mode reloads an empty fallback index.

        When the index was a fallback and a tree has been built (but nothing was
        created yet), the tree is rebuilt against the real catalog. Regions that
        could not be listed earlier are listed again and the default one is
        selected if none was chosen.
        """

        if not self.engine.check_connectivity():
            return False
        if self.index.offline:
            self._load_index()
            self.engine.index = self.index
            if self.tree is not None and self.state is RunState.REVIEWED:
                self.build(self._payload)
        if not self.regions:
            self._load_regions()
        return not self.offline

    # --- building ---------------------------------------------------------

    def build(self, raw: object) -> StructureTree:
        """Build (or rebuild) the annotated tree for ``raw``. Never writes."""

        self._transition(RunState.BUILDING)
        self._payload = raw
        try:
            tree = build_structure_tree(raw, self.index)
        except Exception:
            self.state = RunState.IDLE
            raise
        self.tree = tree
        self.rollback_log = RollbackLog()
        self.data_structure = None
        self.data_structure_error = None
        self.progress = None
        self.last_report = None
        self._completed = False
        self._engine = None
        self._transition(RunState.REVIEWED)
        return tree

    @property
    def engine(self) -> ReconciliationEngine:
        if self._engine is None:
            self._engine = ReconciliationEngine(
                store=self.store,
                index=self.index,
                rollback_log=self.rollback_log,
                connectivity=self.connectivity,
                config=self.config,
            )
        return self._engine

    # --- creating ---------------------------------------------------------

    def create_all_missing(
        self,
        *,
        on_progress: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> CreationReport:
        tree = self._require_tree()
        if self.offline:
            log.warning("Offline: creation is disabled until the catalog is reachable")
            return CreationReport(skipped=tree.count_missing(), offline=True)

        self._transition(RunState.CREATING)

        def track(progress: CreationProgress) -> None:
            self.progress = progress
            if on_progress is not None:
                on_progress(progress)

        report = self.engine.create_missing(
            tree, on_progress=track, should_cancel=should_cancel
        )
        self.last_report = report
        self._finish_creating()
        return report

    def create_single(self, index: int) -> NodeOutcome:
        """Create one node whose parent already exists."""

        tree = self._require_tree()
        previous = self.state
        self._transition(RunState.CREATING)
        try:
            outcome = self.engine.create_single(tree, index)
        except ParentNotResolvedError:
            self.state = previous
            raise
        self._finish_creating()
        return outcome

    def _finish_creating(self) -> None:
        tree = self._require_tree()
        self._resolve_data_structure()
        if tree.all_exist():
            self._transition(RunState.COMMITTED)
        else:
            self._transition(RunState.PARTIALLY_FAILED)
        self._maybe_complete()

    # --- region & data structure -----------------------------------------

    def change_region(self, region_id: UUID) -> DataStructureRecord | None:
        """Select another region and re-resolve the data structure for it.

        Taxonomy entities are not touched.
        """

        self.region_id = region_id
        self.data_structure = None
        self.data_structure_error = None
        if self.state not in {RunState.COMMITTED, RunState.PARTIALLY_FAILED}:
            return None
        self._resolve_data_structure()
        self._maybe_complete()
        return self.data_structure

    def _resolve_data_structure(self) -> None:
        tree = self.tree
        if tree is None:
            return
        path = tree.primary_path()
        if path is None or any(node.resolved_id is None for node in path):
            return
        resolver = DataStructureResolver(
            store=self.store,
            rollback_log=self.rollback_log,
            connectivity=self.connectivity,
        )
        try:
            self.data_structure = resolver.resolve_for_tree(tree, self.region_id)
        except (ConfigurationError, ConnectivityError, ConstraintError) as exc:
            self.data_structure = None
            self.data_structure_error = str(exc)
            log.warning("Data structure not resolved: %s", exc)
            return
        self.data_structure_error = None

    @property
    def all_resolved(self) -> bool:
        return (
            self.tree is not None
            and self.tree.all_exist()
            and self.data_structure is not None
            and self.data_structure_error is None
        )

    def _maybe_complete(self) -> None:
        if self._completed or not self.all_resolved:
            return
        self._completed = True
        log.info("Import structure fully resolved")
        if self.on_complete is not None and self.data_structure is not None:
            self.on_complete(self.data_structure)

    # --- rollback ---------------------------------------------------------

    def rollback(self) -> RollbackResult:
        """Delete what this run created. Refused while offline; nothing is touched."""

        if self.offline:
            raise ConnectivityError(
                "Catalog unreachable; reconnect before rolling back "
                f"{len(self.rollback_log)} created rows"
            )
        self._transition(RunState.ROLLED_BACK)
        result = RollbackCoordinator(self.store).rollback(
            self.rollback_log, self.index, self.tree
        )
        self.data_structure = None
        self._completed = False
        return result

    # --- review helpers ---------------------------------------------------

    def count_by_kind(self) -> dict[EntityKind, int]:
        return self._require_tree().count_by_kind()

    def filter_by_kind(self, kind: EntityKind | None) -> tuple[StructureEntity, ...]:
        tree = self._require_tree()
        if kind is None:
            return tuple(tree.walk())
        return tree.nodes_of_kind(kind)

    # --- internals --------------------------------------------------------

    def _require_tree(self) -> StructureTree:
        if self.tree is None:
            raise InvalidTransitionError("No structure tree has been built yet")
        return self.tree

    def _transition(self, target: RunState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"Cannot move from {self.state} to {target}")
        log.debug("Run state %s -> %s", self.state, target)
        self.state = target
