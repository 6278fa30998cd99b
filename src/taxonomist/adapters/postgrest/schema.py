"""Pydantic models for the hosted catalog's PostgREST rows."""

from __future__ import annotations

import logging
from typing import ClassVar, Final
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from taxonomist.domain.model import CatalogRecord, EntityKind, Region

log = logging.getLogger(__name__)

# foreign key column pointing at the parent, per scoped kind
PARENT_COLUMN: Final[dict[EntityKind, str]] = {
    EntityKind.UNIT: "subject_id",
    EntityKind.TOPIC: "unit_id",
    EntityKind.SUBTOPIC: "topic_id",
}

SELECT_COLUMNS: Final[dict[EntityKind, str]] = {
    EntityKind.PROGRAM: "id,name,code",
    EntityKind.PROVIDER: "id,name,code",
    EntityKind.SUBJECT: "id,name,code",
    EntityKind.UNIT: "id,name,code,subject_id",
    EntityKind.TOPIC: "id,name,unit_id",
    EntityKind.SUBTOPIC: "id,name,topic_id",
}


class CatalogBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Catalog %s: unmodeled keys: %s", type(self).__name__, ", ".join(sorted(new_keys))
        )


class EntityRow(CatalogBaseModel):
    id: UUID
    name: str
    code: str | None = None
    subject_id: UUID | None = None
    unit_id: UUID | None = None
    topic_id: UUID | None = None

    def to_record(self, kind: EntityKind) -> CatalogRecord:
        column = PARENT_COLUMN.get(kind)
        parent_id: UUID | None = getattr(self, column) if column else None
        return CatalogRecord(
            id=self.id,
            kind=kind,
            name=self.name,
            code=self.code,
            parent_id=parent_id,
        )


class RegionRow(CatalogBaseModel):
    id: UUID
    name: str

    def to_region(self) -> Region:
        return Region(id=self.id, name=self.name)


class IdRow(CatalogBaseModel):
    id: UUID


class PostgrestError(BaseModel):
    """Error body returned by PostgREST (Postgres SQLSTATE in ``code``)."""

    model_config = ConfigDict(extra="ignore")

    code: str | None = None
    message: str | None = None
    details: str | None = None
    hint: str | None = None

    @property
    def is_constraint_violation(self) -> bool:
        # SQLSTATE class 23: integrity constraint violation
        return self.code is not None and self.code.startswith("23")
