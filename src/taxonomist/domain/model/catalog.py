"""Value objects exchanged with the canonical catalog store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import EntityKind

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    """One canonical taxonomy entity as stored in the catalog."""

    id: UUID
    kind: EntityKind
    name: str
    code: str | None = None
    parent_id: UUID | None = None


def _empty_records() -> dict[EntityKind, tuple[CatalogRecord, ...]]:
    return {kind: () for kind in EntityKind}


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    """Every taxonomy record known to the store at load time, grouped by kind."""

    records: dict[EntityKind, tuple[CatalogRecord, ...]] = field(default_factory=_empty_records)

    def of_kind(self, kind: EntityKind) -> tuple[CatalogRecord, ...]:
        return self.records.get(kind, ())

    @classmethod
    def from_records(
        cls, records: tuple[CatalogRecord, ...] | list[CatalogRecord]
    ) -> CatalogSnapshot:
        grouped: dict[EntityKind, list[CatalogRecord]] = {kind: [] for kind in EntityKind}
        for record in records:
            grouped[record.kind].append(record)
        return cls(records={kind: tuple(items) for kind, items in grouped.items()})


@dataclass(frozen=True, slots=True)
class Region:
    id: UUID
    name: str


@dataclass(frozen=True, slots=True)
class EntityDraft:
    """Insert payload for one missing taxonomy entity."""

    kind: EntityKind
    name: str
    code: str | None = None
    parent_id: UUID | None = None
    status: str = "active"

    def __post_init__(self) -> None:
        if self.kind.parent_kind is not None and self.parent_id is None:
            raise ValueError(f"{self.kind} draft requires a parent id")


@dataclass(frozen=True, slots=True)
class DataStructureKey:
    program_id: UUID
    provider_id: UUID
    subject_id: UUID
    region_id: UUID


@dataclass(frozen=True, slots=True)
class DataStructureRecord:
    """Join entity scoping content to one program/provider/subject/region tuple."""

    key: DataStructureKey
    data_structure_id: UUID
    created: bool = False
