"""Creation log consumed by rollback."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID

    from .enums import CatalogTable


@dataclass(frozen=True, slots=True)
class RollbackEntry:
    table: CatalogTable
    id: UUID


@dataclass(slots=True)
class RollbackLog:
    """Entries appended strictly in creation order.

    Reversing the log yields children before parents, which is the only order the
    store's foreign keys accept for deletion.
    """

    _entries: list[RollbackEntry] = field(default_factory=list["RollbackEntry"])

    def record(self, table: CatalogTable, entity_id: UUID) -> RollbackEntry:
        entry = RollbackEntry(table=table, id=entity_id)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> tuple[RollbackEntry, ...]:
        return tuple(self._entries)

    def reversed(self) -> tuple[RollbackEntry, ...]:
        return tuple(reversed(self._entries))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RollbackEntry]:
        return iter(tuple(self._entries))

    def __bool__(self) -> bool:
        return bool(self._entries)
