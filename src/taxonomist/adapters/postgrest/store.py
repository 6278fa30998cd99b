"""``CatalogStore`` backed by the hosted catalog's REST interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from taxonomist.domain.errors import ConnectivityError
from taxonomist.domain.model import CatalogRecord, CatalogSnapshot, CatalogTable, EntityKind

from .schema import (
    PARENT_COLUMN,
    SELECT_COLUMNS,
    CatalogBaseModel,
    EntityRow,
    IdRow,
    RegionRow,
)

if TYPE_CHECKING:
    from uuid import UUID

    from taxonomist.domain.model import DataStructureKey, EntityDraft, Region

    from .client import PostgrestClient, Row

log = logging.getLogger(__name__)

REGIONS_TABLE = "regions"


@dataclass(slots=True)
class RestCatalogStore:
    client: PostgrestClient
    status: str = "active"

    def ping(self) -> None:
        self.client.select(EntityKind.PROGRAM.table, columns="id", limit=1)

    def load_snapshot(self) -> CatalogSnapshot:
        records: list[CatalogRecord] = []
        for kind in EntityKind:
            rows = self.client.select(kind.table, columns=SELECT_COLUMNS[kind])
            records.extend(_to_records(kind, rows))
        return CatalogSnapshot.from_records(records)

    def list_regions(self) -> tuple[Region, ...]:
        rows = self.client.select(REGIONS_TABLE, columns="id,name")
        regions = [_validate(RegionRow, row).to_region() for row in rows]
        return tuple(sorted(regions, key=lambda region: region.name))

    def insert_entity(self, draft: EntityDraft) -> UUID:
        payload: dict[str, object] = {"name": draft.name, "status": draft.status}
        if draft.code is not None:
            payload["code"] = draft.code
        column = PARENT_COLUMN.get(draft.kind)
        if column is not None:
            payload[column] = str(draft.parent_id)
        row = self.client.insert(draft.kind.table, payload)
        return _validate(IdRow, row).id

    def delete_entity(self, kind: EntityKind, entity_id: UUID) -> None:
        self.client.delete(kind.table, entity_id)

    def find_data_structure(self, key: DataStructureKey) -> UUID | None:
        rows = self.client.select(
            CatalogTable.DATA_STRUCTURES,
            columns="id",
            filters=_key_columns(key),
            limit=1,
        )
        if not rows:
            return None
        return _validate(IdRow, rows[0]).id

    def insert_data_structure(self, key: DataStructureKey) -> UUID:
        payload: dict[str, object] = {**_key_columns(key), "status": self.status}
        row = self.client.insert(CatalogTable.DATA_STRUCTURES, payload)
        return _validate(IdRow, row).id

    def delete_data_structure(self, data_structure_id: UUID) -> None:
        self.client.delete(CatalogTable.DATA_STRUCTURES, data_structure_id)


def _key_columns(key: DataStructureKey) -> dict[str, str]:
    return {
        "program_id": str(key.program_id),
        "provider_id": str(key.provider_id),
        "subject_id": str(key.subject_id),
        "region_id": str(key.region_id),
    }


def _to_records(kind: EntityKind, rows: list[Row]) -> list[CatalogRecord]:
    records: list[CatalogRecord] = []
    for row in rows:
        try:
            records.append(EntityRow.model_validate(row).to_record(kind))
        except ValidationError as exc:
            log.warning("Skipping malformed %s row %r: %s", kind, row.get("id"), exc.error_count())
    return records


def _validate[T: CatalogBaseModel](model: type[T], row: Row) -> T:
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        raise ConnectivityError(f"Unexpected catalog row: {exc.error_count()} error(s)") from exc
