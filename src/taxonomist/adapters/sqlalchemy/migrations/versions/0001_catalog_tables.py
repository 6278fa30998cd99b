"""Create the taxonomy catalog tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _entity_columns(*, with_code: bool = True) -> list[sa.Column[object]]:
    columns: list[sa.Column[object]] = [
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
    ]
    if with_code:
        columns.append(sa.Column("code", sa.String(32), nullable=True))
    columns.append(sa.Column("status", sa.String(16), nullable=False, server_default="active"))
    return columns


def upgrade() -> None:
    op.create_table(
        "programs",
        *_entity_columns(),
        sa.UniqueConstraint("name", name="uq_programs_name"),
    )
    op.create_table(
        "providers",
        *_entity_columns(),
        sa.UniqueConstraint("name", name="uq_providers_name"),
    )
    op.create_table(
        "edu_subjects",
        *_entity_columns(),
        sa.UniqueConstraint("name", "code", name="uq_edu_subjects_name_code"),
    )
    op.create_table(
        "edu_units",
        *_entity_columns(),
        sa.Column(
            "subject_id",
            sa.Uuid(),
            sa.ForeignKey("edu_subjects.id", name="fk_edu_units_subject_id_edu_subjects"),
            nullable=False,
        ),
        sa.UniqueConstraint("subject_id", "name", name="uq_edu_units_subject_id_name"),
    )
    op.create_table(
        "edu_topics",
        *_entity_columns(with_code=False),
        sa.Column(
            "unit_id",
            sa.Uuid(),
            sa.ForeignKey("edu_units.id", name="fk_edu_topics_unit_id_edu_units"),
            nullable=False,
        ),
        sa.UniqueConstraint("unit_id", "name", name="uq_edu_topics_unit_id_name"),
    )
    op.create_table(
        "edu_subtopics",
        *_entity_columns(with_code=False),
        sa.Column(
            "topic_id",
            sa.Uuid(),
            sa.ForeignKey("edu_topics.id", name="fk_edu_subtopics_topic_id_edu_topics"),
            nullable=False,
        ),
        sa.UniqueConstraint("topic_id", "name", name="uq_edu_subtopics_topic_id_name"),
    )
    op.create_table(
        "regions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.UniqueConstraint("name", name="uq_regions_name"),
    )
    op.create_table(
        "data_structures",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("program_id", sa.Uuid(), sa.ForeignKey("programs.id"), nullable=False),
        sa.Column("provider_id", sa.Uuid(), sa.ForeignKey("providers.id"), nullable=False),
        sa.Column("subject_id", sa.Uuid(), sa.ForeignKey("edu_subjects.id"), nullable=False),
        sa.Column("region_id", sa.Uuid(), sa.ForeignKey("regions.id"), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.UniqueConstraint(
            "program_id",
            "provider_id",
            "subject_id",
            "region_id",
            name="uq_data_structures_key",
        ),
    )


def downgrade() -> None:
    for table in (
        "data_structures",
        "regions",
        "edu_subtopics",
        "edu_topics",
        "edu_units",
        "edu_subjects",
        "providers",
        "programs",
    ):
        op.drop_table(table)
