"""Create missing taxonomy entities, parents strictly before children.

The engine walks the arena depth-first. A node is only attempted once its parent
has a catalog id; when a creation fails the node's whole subtree is skipped while
sibling subtrees carry on. Every successful insert is appended to the run's
``RollbackLog`` and registered in the session ``CatalogIndex`` before the next
node is looked at, so later siblings resolve against it instead of inserting a
second copy.

Store failures are never raised out of ``create_missing``: connectivity failures
mark the node *deferred* and switch the engine offline (no further store calls
until ``check_connectivity`` succeeds), rejections mark the node *hard* failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import uuid4

from taxonomist.config.reconciliation import ReconciliationConfig
from taxonomist.domain.errors import ConnectivityError, ConstraintError, ParentNotResolvedError
from taxonomist.domain.model import EntityDraft, EntityKind, FailureKind, NodeOutcome

from .normalize import extract_subject_code, extract_subject_name

if TYPE_CHECKING:
    from collections.abc import Callable

    from taxonomist.domain.model import RollbackLog, StructureEntity, StructureTree
    from taxonomist.domain.ports import CatalogStore

    from .index import CatalogIndex

log = logging.getLogger(__name__)

OFFLINE_MESSAGE = "Catalog unreachable; will be created when the connection is restored"


@dataclass(frozen=True, slots=True)
class CreationProgress:
    current: int
    total: int


type ProgressCallback = Callable[[CreationProgress], None]
type CancelCheck = Callable[[], bool]


@dataclass(slots=True)
class CreationReport:
    """Counts for one ``create_missing`` pass.

    ``failed`` counts nodes whose creation was attempted and failed in this pass
    (deferred or hard). ``skipped`` counts missing nodes that were not attempted
    because an ancestor is unresolved, the engine went offline, or the run was
    cancelled. Neither includes nodes already created.
    """

    created: int = 0
    failed: int = 0
    deferred: int = 0
    skipped: int = 0
    matched: int = 0
    cancelled: bool = False
    offline: bool = False
    created_nodes: list[int] = field(default_factory=list[int])
    failed_nodes: list[int] = field(default_factory=list[int])

    @property
    def succeeded(self) -> bool:
        return self.failed == 0 and self.skipped == 0 and not self.cancelled


@dataclass(slots=True)
class ConnectivityState:
    """Session-wide offline flag shared by the engine and the resolver."""

    offline: bool = False
    reason: str | None = None

    def go_offline(self, reason: str) -> None:
        if not self.offline:
            log.warning("Switching to offline mode: %s", reason)
        self.offline = True
        self.reason = reason

    def go_online(self) -> None:
        if self.offline:
            log.info("Catalog reachable again; leaving offline mode")
        self.offline = False
        self.reason = None


@dataclass(slots=True)
class ReconciliationEngine:
    store: CatalogStore
    index: CatalogIndex
    rollback_log: RollbackLog
    connectivity: ConnectivityState = field(default_factory=ConnectivityState)
    config: ReconciliationConfig = field(default_factory=ReconciliationConfig)

    def check_connectivity(self) -> bool:
        """Ping the store; leave offline mode if it answers."""

        try:
            self.store.ping()
        except ConnectivityError as exc:
            self.connectivity.go_offline(str(exc))
            return False
        self.connectivity.go_online()
        return True

    def create_missing(
        self,
        tree: StructureTree,
        *,
        on_progress: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> CreationReport:
        """Create every missing node of ``tree`` that can be created.

        Nodes that already exist are left untouched, so running this again over
        the same tree only attempts what is still missing.
        """

        report = CreationReport(offline=self.connectivity.offline)
        total = tree.count_missing()
        if total == 0:
            return report
        if self.connectivity.offline:
            report.skipped = total
            log.warning("Offline: refusing to create %s missing entities", total)
            return report

        progress = 0
        blocked: set[int] = set()
        for node in tree.walk():
            if node.exists:
                continue
            if node.parent_index is not None and node.parent_index in blocked:
                blocked.add(node.index)
                report.skipped += 1
                continue
            if should_cancel is not None and should_cancel():
                report.cancelled = True
                report.skipped += 1
                blocked.add(node.index)
                continue
            if self.connectivity.offline:
                report.offline = True
                report.skipped += 1
                blocked.add(node.index)
                continue
            if not node.creatable:
                # hard-failed earlier this session, or parent still unresolved
                report.skipped += 1
                blocked.add(node.index)
                continue

            outcome = self._create(tree, node)
            progress += 1
            if outcome is NodeOutcome.CREATED:
                report.created += 1
                report.created_nodes.append(node.index)
            elif outcome is NodeOutcome.MATCHED:
                report.matched += 1
            else:
                report.failed += 1
                report.failed_nodes.append(node.index)
                if outcome is NodeOutcome.DEFERRED:
                    report.deferred += 1
                blocked.add(node.index)
            if on_progress is not None:
                on_progress(CreationProgress(current=progress, total=total))

        report.offline = report.offline or self.connectivity.offline
        log.info(
            "Create missing finished: created=%s, failed=%s, skipped=%s, matched=%s",
            report.created,
            report.failed,
            report.skipped,
            report.matched,
        )
        return report

    def create_single(self, tree: StructureTree, index: int) -> NodeOutcome:
        """Create exactly one node; its parent must already have a catalog id.

        Unlike ``create_missing`` this attempts hard-failed nodes too: an explicit
        single create is how an operator retries a node after correcting it.
        """

        node = tree.node(index)
        if node.exists:
            return NodeOutcome.ALREADY_EXISTS
        parent = tree.parent_of(node)
        if parent is not None:
            if parent.resolved_id is None:
                raise ParentNotResolvedError(
                    f"Cannot create {node.kind} {node.name!r}: "
                    f"{parent.kind} {parent.name!r} does not exist yet"
                )
            node.parent_id = parent.resolved_id
        if self.connectivity.offline:
            node.mark_failed(OFFLINE_MESSAGE, FailureKind.DEFERRED)
            return NodeOutcome.DEFERRED
        return self._create(tree, node)

    def _create(self, tree: StructureTree, node: StructureEntity) -> NodeOutcome:
        existing = self.index.lookup(node.kind, node.canonical_name, node.parent_id)
        if existing is not None:
            node.mark_resolved(existing.id)
            tree.propagate_parent_id(node)
            log.debug("%s %r resolved to %s created earlier", node.kind, node.name, existing.id)
            return NodeOutcome.MATCHED

        draft = self.draft_for(node)
        try:
            new_id = self.store.insert_entity(draft)
        except ConnectivityError as exc:
            node.mark_failed(OFFLINE_MESSAGE, FailureKind.DEFERRED)
            self.connectivity.go_offline(str(exc))
            log.warning("Deferred %s %r: %s", node.kind, node.name, exc)
            return NodeOutcome.DEFERRED
        except ConstraintError as exc:
            node.mark_failed(str(exc), FailureKind.HARD)
            log.error("Failed to create %s %r: %s", node.kind, node.name, exc)  # noqa: TRY400
            return NodeOutcome.FAILED

        if node.code is None and not node.kind.is_scoped:
            node.code = draft.code
        node.mark_resolved(new_id)
        self.rollback_log.record(node.kind.table, new_id)
        self.index.insert(node, new_id)
        tree.propagate_parent_id(node)
        log.info("Created %s %r (%s)", node.kind, node.canonical_name, new_id)
        return NodeOutcome.CREATED

    def draft_for(self, node: StructureEntity) -> EntityDraft:
        """Insert payload for ``node``, mirroring the catalog's column rules."""

        status = self.config.entity_status
        code_length = self.config.entity_code_length
        match node.kind:
            case EntityKind.PROGRAM | EntityKind.PROVIDER:
                return EntityDraft(
                    kind=node.kind,
                    name=node.canonical_name,
                    code=node.code or node.canonical_name[:code_length],
                    status=status,
                )
            case EntityKind.SUBJECT:
                name = extract_subject_name(node.name) or node.canonical_name
                return EntityDraft(
                    kind=node.kind,
                    name=name,
                    code=node.code or extract_subject_code(node.name) or name[:code_length],
                    status=status,
                )
            case EntityKind.UNIT:
                suffix = uuid4().hex[: self.config.unit_code_suffix_length]
                return EntityDraft(
                    kind=node.kind,
                    name=node.canonical_name,
                    code=node.code or node.canonical_name[: self.config.unit_code_length] + suffix,
                    parent_id=node.parent_id,
                    status=status,
                )
            case EntityKind.TOPIC | EntityKind.SUBTOPIC:
                return EntityDraft(
                    kind=node.kind,
                    name=node.canonical_name,
                    parent_id=node.parent_id,
                    status=status,
                )
