"""SQLAlchemy Core tables for the canonical taxonomy catalog."""

from __future__ import annotations

import uuid
from typing import Final

from sqlalchemy import Column, ForeignKey, MetaData, String, Table, UniqueConstraint, Uuid

from taxonomist.domain.model import CatalogTable, EntityKind

UUIDColumnType = Uuid[uuid.UUID]

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def _status_column() -> Column[str]:
    return Column("status", String(16), nullable=False, default="active")


programs_table = Table(
    CatalogTable.PROGRAMS.value,
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("code", String(32), nullable=True),
    _status_column(),
    UniqueConstraint("name"),
)

providers_table = Table(
    CatalogTable.PROVIDERS.value,
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("code", String(32), nullable=True),
    _status_column(),
    UniqueConstraint("name"),
)

subjects_table = Table(
    CatalogTable.SUBJECTS.value,
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("code", String(32), nullable=True),
    _status_column(),
    UniqueConstraint("name", "code"),
)

units_table = Table(
    CatalogTable.UNITS.value,
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("code", String(32), nullable=True),
    Column("subject_id", UUIDColumnType, ForeignKey("edu_subjects.id"), nullable=False),
    _status_column(),
    UniqueConstraint("subject_id", "name"),
)

topics_table = Table(
    CatalogTable.TOPICS.value,
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("unit_id", UUIDColumnType, ForeignKey("edu_units.id"), nullable=False),
    _status_column(),
    UniqueConstraint("unit_id", "name"),
)

subtopics_table = Table(
    CatalogTable.SUBTOPICS.value,
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("topic_id", UUIDColumnType, ForeignKey("edu_topics.id"), nullable=False),
    _status_column(),
    UniqueConstraint("topic_id", "name"),
)

regions_table = Table(
    "regions",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    UniqueConstraint("name"),
)

data_structures_table = Table(
    CatalogTable.DATA_STRUCTURES.value,
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("program_id", UUIDColumnType, ForeignKey("programs.id"), nullable=False),
    Column("provider_id", UUIDColumnType, ForeignKey("providers.id"), nullable=False),
    Column("subject_id", UUIDColumnType, ForeignKey("edu_subjects.id"), nullable=False),
    Column("region_id", UUIDColumnType, ForeignKey("regions.id"), nullable=False),
    _status_column(),
    UniqueConstraint("program_id", "provider_id", "subject_id", "region_id"),
)

TABLE_BY_KIND: Final[dict[EntityKind, Table]] = {
    EntityKind.PROGRAM: programs_table,
    EntityKind.PROVIDER: providers_table,
    EntityKind.SUBJECT: subjects_table,
    EntityKind.UNIT: units_table,
    EntityKind.TOPIC: topics_table,
    EntityKind.SUBTOPIC: subtopics_table,
}

PARENT_COLUMN: Final[dict[EntityKind, str]] = {
    EntityKind.UNIT: "subject_id",
    EntityKind.TOPIC: "unit_id",
    EntityKind.SUBTOPIC: "topic_id",
}
