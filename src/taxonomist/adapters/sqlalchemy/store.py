"""``CatalogStore`` over a relational database via SQLAlchemy Core."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, text
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from taxonomist.domain.errors import ConnectivityError, ConstraintError
from taxonomist.domain.model import CatalogRecord, CatalogSnapshot, EntityKind, Region

from .mappings import PARENT_COLUMN, TABLE_BY_KIND, data_structures_table, regions_table

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID

    from sqlalchemy import Connection, Engine, Row

    from taxonomist.domain.model import DataStructureKey, EntityDraft

log = logging.getLogger(__name__)


class SqlAlchemyCatalogStore:
    """Each call runs in its own short transaction.

    A rejected insert therefore never takes earlier successful inserts down with
    it; the reconciliation run keeps its own rollback log instead.
    """

    def __init__(self, engine: Engine, *, status: str = "active") -> None:
        self._engine = engine
        self._status = status

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        try:
            with self._engine.begin() as connection:
                yield connection
        except IntegrityError as exc:
            raise ConstraintError(str(exc.orig)) from exc
        except (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError) as exc:
            log.warning("Catalog database unavailable: %s", exc)
            raise ConnectivityError(str(exc)) from exc
        except DBAPIError as exc:
            raise ConstraintError(str(exc.orig)) from exc

    def ping(self) -> None:
        with self._transaction() as connection:
            connection.execute(text("SELECT 1"))

    def load_snapshot(self) -> CatalogSnapshot:
        records: list[CatalogRecord] = []
        with self._transaction() as connection:
            for kind, table in TABLE_BY_KIND.items():
                for row in connection.execute(select(table)):
                    records.append(_to_record(kind, row))
        return CatalogSnapshot.from_records(records)

    def list_regions(self) -> tuple[Region, ...]:
        statement = select(regions_table.c.id, regions_table.c.name).order_by(
            regions_table.c.name
        )
        with self._transaction() as connection:
            return tuple(Region(id=row.id, name=row.name) for row in connection.execute(statement))

    def add_region(self, name: str) -> Region:
        region_id = uuid.uuid4()
        with self._transaction() as connection:
            connection.execute(insert(regions_table).values(id=region_id, name=name))
        return Region(id=region_id, name=name)

    def insert_entity(self, draft: EntityDraft) -> UUID:
        table = TABLE_BY_KIND[draft.kind]
        entity_id = uuid.uuid4()
        values: dict[str, object] = {"id": entity_id, "name": draft.name, "status": draft.status}
        if "code" in table.c:
            values["code"] = draft.code
        column = PARENT_COLUMN.get(draft.kind)
        if column is not None:
            values[column] = draft.parent_id
        with self._transaction() as connection:
            connection.execute(insert(table).values(**values))
        log.debug("Inserted %s %r as %s", draft.kind, draft.name, entity_id)
        return entity_id

    def delete_entity(self, kind: EntityKind, entity_id: UUID) -> None:
        table = TABLE_BY_KIND[kind]
        with self._transaction() as connection:
            result = connection.execute(delete(table).where(table.c.id == entity_id))
        if result.rowcount == 0:
            log.debug("%s %s was already gone", kind, entity_id)

    def find_data_structure(self, key: DataStructureKey) -> UUID | None:
        table = data_structures_table
        statement = (
            select(table.c.id)
            .where(table.c.program_id == key.program_id)
            .where(table.c.provider_id == key.provider_id)
            .where(table.c.subject_id == key.subject_id)
            .where(table.c.region_id == key.region_id)
            .limit(1)
        )
        with self._transaction() as connection:
            return connection.execute(statement).scalar_one_or_none()

    def insert_data_structure(self, key: DataStructureKey) -> UUID:
        data_structure_id = uuid.uuid4()
        with self._transaction() as connection:
            connection.execute(
                insert(data_structures_table).values(
                    id=data_structure_id,
                    program_id=key.program_id,
                    provider_id=key.provider_id,
                    subject_id=key.subject_id,
                    region_id=key.region_id,
                    status=self._status,
                )
            )
        return data_structure_id

    def delete_data_structure(self, data_structure_id: UUID) -> None:
        table = data_structures_table
        with self._transaction() as connection:
            connection.execute(delete(table).where(table.c.id == data_structure_id))


def _to_record(kind: EntityKind, row: Row[tuple[object, ...]]) -> CatalogRecord:
    mapping = row._mapping  # noqa: SLF001
    column = PARENT_COLUMN.get(kind)
    return CatalogRecord(
        id=mapping["id"],
        kind=kind,
        name=mapping["name"],
        code=mapping.get("code"),
        parent_id=mapping[column] if column else None,
    )
