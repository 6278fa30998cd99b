"""Session-scoped lookup index over the canonical catalog.

One ``CatalogIndex`` is loaded per import session and then mutated in place as
entities are created or rolled back, so it always reflects what the session
believes exists. It is passed explicitly through the call chain; there is no
module-level cache, and two sessions never share an index.

Top-level kinds (program, provider, subject) are keyed by normalized name, by
normalized code, and, for subjects, by the ``name - code`` / ``name (code)``
composites. Scoped kinds (unit, topic, subtopic) are keyed by
``(parent_id, normalized name)`` because their names repeat across parents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

from taxonomist.domain.model import CatalogRecord, CatalogSnapshot, EntityKind

from .normalize import extract_subject_code, extract_subject_name, normalize, subject_composites

if TYPE_CHECKING:
    from collections.abc import Iterable

    from taxonomist.domain.model import StructureEntity

log = logging.getLogger(__name__)

type IndexKey = str | tuple[UUID, str]


@dataclass(frozen=True, slots=True)
class IndexEntry:
    id: UUID
    canonical_name: str


def _new_maps() -> dict[EntityKind, dict[IndexKey, IndexEntry]]:
    return {kind: {} for kind in EntityKind}


@dataclass(slots=True)
class CatalogIndex:
    """Per-kind maps from normalized key to ``IndexEntry``."""

    _maps: dict[EntityKind, dict[IndexKey, IndexEntry]] = field(
        default_factory=_new_maps, repr=False
    )
    offline: bool = False

    @classmethod
    def load(cls, snapshot: CatalogSnapshot) -> CatalogIndex:
        index = cls()
        for kind in EntityKind:
            for record in snapshot.of_kind(kind):
                index.add_record(record)
        log.debug(
            "Catalog index loaded: %s",
            ", ".join(f"{kind}={len(index.entries(kind))}" for kind in EntityKind),
        )
        return index

    @classmethod
    def empty(cls, *, offline: bool = False) -> CatalogIndex:
        """Index with no entries; every lookup misses."""
        return cls(offline=offline)

    def add_record(self, record: CatalogRecord) -> None:
        entry = IndexEntry(id=record.id, canonical_name=record.name)
        for key in _record_keys(record):
            self._maps[record.kind][key] = entry

    def lookup(
        self,
        kind: EntityKind,
        key: str | None,
        parent_id: UUID | None = None,
    ) -> IndexEntry | None:
        """Return the entry for ``key`` (normalized here), or ``None``."""

        normalized = normalize(key)
        if not normalized:
            return None
        if kind.is_scoped:
            if parent_id is None:
                return None
            return self._maps[kind].get((parent_id, normalized))
        return self._maps[kind].get(normalized)

    def lookup_first(
        self,
        kind: EntityKind,
        keys: Iterable[str | None],
        parent_id: UUID | None = None,
    ) -> IndexEntry | None:
        for key in keys:
            entry = self.lookup(kind, key, parent_id)
            if entry is not None:
                return entry
        return None

    def insert(self, node: StructureEntity, new_id: UUID) -> None:
        """Register a just-created entity so later lookups in this run see it."""

        record = CatalogRecord(
            id=new_id,
            kind=node.kind,
            name=node.canonical_name,
            code=node.code,
            parent_id=node.parent_id,
        )
        self.add_record(record)
        if node.name != node.canonical_name:
            # imported surface form, e.g. "Physics - 0625"
            imported = normalize(node.name)
            if imported and not node.kind.is_scoped:
                self._maps[node.kind][imported] = IndexEntry(
                    id=new_id, canonical_name=node.canonical_name
                )

    def remove(self, kind: EntityKind, entity_id: UUID) -> int:
        """Drop every key pointing at ``entity_id``; return how many were removed."""

        bucket = self._maps[kind]
        stale = [key for key, entry in bucket.items() if entry.id == entity_id]
        for key in stale:
            del bucket[key]
        return len(stale)

    def entries(self, kind: EntityKind) -> tuple[IndexEntry, ...]:
        """Distinct entries of one kind, in insertion order."""

        seen: set[UUID] = set()
        distinct: list[IndexEntry] = []
        for entry in self._maps[kind].values():
            if entry.id in seen:
                continue
            seen.add(entry.id)
            distinct.append(entry)
        return tuple(distinct)

    def contains_id(self, kind: EntityKind, entity_id: UUID) -> bool:
        return any(entry.id == entity_id for entry in self._maps[kind].values())


def _record_keys(record: CatalogRecord) -> tuple[IndexKey, ...]:
    name_key = normalize(record.name)
    if record.kind.is_scoped:
        if record.parent_id is None or not name_key:
            log.warning("Skipping %s %r without parent scope", record.kind, record.name)
            return ()
        return ((record.parent_id, name_key),)

    keys: list[str] = [name_key]
    code = record.code
    if record.kind is EntityKind.SUBJECT:
        # names stored with an embedded code still index under the bare name
        bare = extract_subject_name(record.name)
        keys.append(normalize(bare))
        code = code or extract_subject_code(record.name)
        if code:
            keys.extend(normalize(form) for form in subject_composites(bare, code))
    if code:
        keys.append(normalize(code))
    return tuple(dict.fromkeys(key for key in keys if key))
