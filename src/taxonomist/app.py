"""Application orchestration entry points."""

from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from taxonomist.adapters.postgrest import create_rest_store
from taxonomist.adapters.sqlalchemy import (
    SqlAlchemyCatalogStore,
    configured_engine,
    is_started,
    startup,
)
from taxonomist.config import (
    get_catalog_rest_config,
    get_reconciliation_config,
    rest_catalog_configured,
)
from taxonomist.domain.errors import ConfigurationError
from taxonomist.domain.reconciliation import ReconciliationSession

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from taxonomist.domain.model import DataStructureRecord, Region
    from taxonomist.domain.ports import CatalogStore
    from taxonomist.domain.reconciliation import CreationProgress, CreationReport, RollbackResult

log = getLogger(__name__)


def open_catalog_store() -> CatalogStore:
    """REST catalog when ``TAXONOMIST_CATALOG_URL`` is set, else the SQL database."""

    if rest_catalog_configured():
        config = get_catalog_rest_config()
        log.info("Using hosted catalog at %s", config.base_url)
        return create_rest_store(config)
    if not is_started():
        startup()
    return SqlAlchemyCatalogStore(configured_engine())


def load_payload(path: Path) -> object:
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def list_regions(*, store: CatalogStore | None = None) -> tuple[Region, ...]:
    effective_store = store or open_catalog_store()
    return effective_store.list_regions()


def add_region(name: str, *, store: SqlAlchemyCatalogStore | None = None) -> Region:
    """Register a region in the local SQL catalog."""

    if store is None:
        opened = open_catalog_store()
        if not isinstance(opened, SqlAlchemyCatalogStore):
            raise ConfigurationError("Regions can only be added to the local SQL catalog")
        store = opened
    region = store.add_region(name)
    log.info("Added region %s (%s)", region.name, region.id)
    return region


def review_import(raw: object, *, store: CatalogStore | None = None) -> ReconciliationSession:
    """Build the annotated tree for ``raw`` without writing anything."""

    session = ReconciliationSession(
        store=store or open_catalog_store(),
        config=get_reconciliation_config(),
    )
    session.open()
    session.build(raw)
    return session


@dataclass(slots=True)
class ImportOutcome:
    session: ReconciliationSession
    report: CreationReport
    rollback: RollbackResult | None = None

    @property
    def data_structure(self) -> DataStructureRecord | None:
        return self.session.data_structure


def import_structure(
    raw: object,
    *,
    store: CatalogStore | None = None,
    region_name: str | None = None,
    rollback_on_failure: bool = False,
    on_progress: Callable[[CreationProgress], None] | None = None,
) -> ImportOutcome:
    """Build, create everything missing, and resolve the data structure."""

    session = review_import(raw, store=store)
    if region_name is not None:
        region = _find_region(session.regions, region_name)
        session.region_id = region.id

    log.info(
        "Starting import: %s nodes, %s missing, region=%s",
        len(session.tree) if session.tree is not None else 0,
        session.tree.count_missing() if session.tree is not None else 0,
        session.region_id,
    )
    report = session.create_all_missing(on_progress=on_progress)

    rollback: RollbackResult | None = None
    if rollback_on_failure and not session.all_resolved and session.rollback_log:
        if session.offline and not session.check_connectivity():
            log.warning(
                "Import incomplete but catalog offline; %s created rows left in place",
                len(session.rollback_log),
            )
        else:
            log.warning(
                "Import incomplete; rolling back %s created rows", len(session.rollback_log)
            )
            rollback = session.rollback()

    log.info(
        "Finished import: created=%s, failed=%s, skipped=%s, state=%s, data_structure=%s",
        report.created,
        report.failed,
        report.skipped,
        session.state,
        session.data_structure.data_structure_id if session.data_structure else None,
    )
    return ImportOutcome(session=session, report=report, rollback=rollback)


def _find_region(regions: tuple[Region, ...], name: str) -> Region:
    needle = name.strip().lower()
    for region in regions:
        if region.name.lower() == needle:
            return region
    for region in regions:
        if needle in region.name.lower():
            return region
    raise ConfigurationError(f"Unknown region: {name}")
