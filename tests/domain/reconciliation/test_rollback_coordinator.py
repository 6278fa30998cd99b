from __future__ import annotations

from taxonomist.domain.model import CatalogTable, EntityKind, RollbackLog, StructureTree
from taxonomist.domain.reconciliation import (
    CatalogIndex,
    DataStructureResolver,
    ReconciliationEngine,
    RollbackCoordinator,
    build_structure_tree,
)
from tests.helpers.catalog import FakeCatalogStore

PAYLOAD: dict[str, object] = {
    "qualification": "IGCSE",
    "exam_board": "CIE",
    "subject": "Physics - 0625",
    "questions": [{"topic": "Forces", "subtopic": "Motion"}],
}


def _run(store: FakeCatalogStore) -> tuple[RollbackLog, CatalogIndex, StructureTree]:
    log = RollbackLog()
    index = CatalogIndex.empty()
    tree = build_structure_tree(PAYLOAD, index)
    engine = ReconciliationEngine(store=store, index=index, rollback_log=log)
    engine.create_missing(tree)
    region = store.seed_region("Middle East")
    DataStructureResolver(store, rollback_log=log).resolve_for_tree(tree, region.id)
    return log, index, tree


def test_rollback_deletes_newest_first(fake_store: FakeCatalogStore) -> None:
    log, index, tree = _run(fake_store)
    expected = [entry.id for entry in log.reversed()]

    result = RollbackCoordinator(fake_store).rollback(log, index, tree)

    assert result.complete
    assert result.succeeded == 7
    assert fake_store.deleted == expected
    assert fake_store.records == {}
    assert fake_store.data_structures == {}
    assert result.deleted[0].table is CatalogTable.DATA_STRUCTURES
    assert len(log) == 0


def test_rollback_resets_index_and_tree(fake_store: FakeCatalogStore) -> None:
    log, index, tree = _run(fake_store)

    RollbackCoordinator(fake_store).rollback(log, index, tree)

    assert tree.count_missing() == len(tree)
    assert all(node.parent_id is None for node in tree.walk())
    for kind in EntityKind:
        assert index.entries(kind) == ()


def test_rollback_is_best_effort(fake_store: FakeCatalogStore) -> None:
    log, index, tree = _run(fake_store)
    motion = tree.nodes_of_kind(EntityKind.SUBTOPIC)[0]
    assert motion.resolved_id is not None
    fake_store.delete_failures.add(motion.resolved_id)

    result = RollbackCoordinator(fake_store).rollback(log, index, tree)

    # data structure deleted; every ancestor of Motion still has a child
    assert result.succeeded == 1
    assert result.failed == 6
    assert not result.complete
    assert len(result.errors) == 6
    assert motion.exists
    assert len(fake_store.records) == 6
    assert len(log) == 0


def test_rollback_of_empty_log_is_a_no_op(fake_store: FakeCatalogStore) -> None:
    result = RollbackCoordinator(fake_store).rollback(RollbackLog())

    assert result.complete
    assert result.succeeded == 0
    assert fake_store.calls == []


def test_rollback_reports_connectivity_failures(fake_store: FakeCatalogStore) -> None:
    log, index, tree = _run(fake_store)
    fake_store.offline = True

    result = RollbackCoordinator(fake_store).rollback(log, index, tree)

    assert result.failed == 7
    assert result.succeeded == 0
    assert tree.all_exist()
