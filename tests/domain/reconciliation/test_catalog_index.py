from __future__ import annotations

import uuid

from taxonomist.domain.model import CatalogRecord, CatalogSnapshot, EntityKind, StructureEntity
from taxonomist.domain.reconciliation import CatalogIndex


def _record(
    kind: EntityKind,
    name: str,
    *,
    code: str | None = None,
    parent_id: uuid.UUID | None = None,
) -> CatalogRecord:
    return CatalogRecord(id=uuid.uuid4(), kind=kind, name=name, code=code, parent_id=parent_id)


def test_subject_is_reachable_through_every_surface_form() -> None:
    physics = _record(EntityKind.SUBJECT, "Physics", code="0625")
    index = CatalogIndex.load(CatalogSnapshot.from_records([physics]))

    for key in ("physics", "PHYSICS", "0625", "Physics - 0625", "Physics (0625)"):
        entry = index.lookup(EntityKind.SUBJECT, key)
        assert entry is not None, key
        assert entry.id == physics.id
        assert entry.canonical_name == "Physics"


def test_subject_stored_with_embedded_code_is_indexed_by_bare_name_and_code() -> None:
    chemistry = _record(EntityKind.SUBJECT, "Chemistry - 0620")
    index = CatalogIndex.load(CatalogSnapshot.from_records([chemistry]))

    by_name = index.lookup(EntityKind.SUBJECT, "Chemistry")
    by_code = index.lookup(EntityKind.SUBJECT, "0620")

    assert by_name is not None
    assert by_code is not None
    assert by_name.id == by_code.id == chemistry.id


def test_program_is_indexed_by_name_and_code() -> None:
    program = _record(EntityKind.PROGRAM, "International GCSE", code="IGCSE")
    index = CatalogIndex.load(CatalogSnapshot.from_records([program]))

    assert index.lookup(EntityKind.PROGRAM, "international-gcse") is not None
    entry = index.lookup(EntityKind.PROGRAM, "igcse")
    assert entry is not None
    assert entry.id == program.id


def test_scoped_kinds_are_keyed_by_parent() -> None:
    maths = uuid.uuid4()
    physics = uuid.uuid4()
    maths_mechanics = _record(EntityKind.UNIT, "Mechanics", parent_id=maths)
    physics_mechanics = _record(EntityKind.UNIT, "Mechanics", parent_id=physics)
    index = CatalogIndex.load(
        CatalogSnapshot.from_records([maths_mechanics, physics_mechanics])
    )

    maths_entry = index.lookup(EntityKind.UNIT, "mechanics", maths)
    physics_entry = index.lookup(EntityKind.UNIT, "Mechanics", physics)

    assert maths_entry is not None
    assert physics_entry is not None
    assert maths_entry.id == maths_mechanics.id
    assert physics_entry.id == physics_mechanics.id
    assert index.lookup(EntityKind.UNIT, "Mechanics") is None
    assert index.lookup(EntityKind.UNIT, "Mechanics", uuid.uuid4()) is None


def test_lookup_never_raises_for_blank_keys() -> None:
    index = CatalogIndex.empty()

    assert index.lookup(EntityKind.PROGRAM, None) is None
    assert index.lookup(EntityKind.PROGRAM, "") is None
    assert index.lookup(EntityKind.TOPIC, "Forces", None) is None


def test_insert_makes_created_entity_visible_to_later_lookups() -> None:
    index = CatalogIndex.empty()
    subject = StructureEntity(
        index=2,
        kind=EntityKind.SUBJECT,
        name="Physics - 0625",
        canonical_name="Physics",
        code="0625",
    )
    new_id = uuid.uuid4()

    index.insert(subject, new_id)

    for key in ("Physics", "0625", "Physics - 0625", "Physics (0625)"):
        entry = index.lookup(EntityKind.SUBJECT, key)
        assert entry is not None, key
        assert entry.id == new_id
    assert index.contains_id(EntityKind.SUBJECT, new_id)


def test_insert_scoped_entity_uses_parent_id() -> None:
    index = CatalogIndex.empty()
    unit_id = uuid.uuid4()
    topic = StructureEntity(index=4, kind=EntityKind.TOPIC, name="Forces", parent_id=unit_id)
    topic_id = uuid.uuid4()

    index.insert(topic, topic_id)

    entry = index.lookup(EntityKind.TOPIC, "forces", unit_id)
    assert entry is not None
    assert entry.id == topic_id


def test_remove_drops_every_key_for_the_id() -> None:
    physics = _record(EntityKind.SUBJECT, "Physics", code="0625")
    biology = _record(EntityKind.SUBJECT, "Biology", code="0610")
    index = CatalogIndex.load(CatalogSnapshot.from_records([physics, biology]))

    removed = index.remove(EntityKind.SUBJECT, physics.id)

    assert removed >= 2
    assert index.lookup(EntityKind.SUBJECT, "Physics") is None
    assert index.lookup(EntityKind.SUBJECT, "0625") is None
    assert index.lookup(EntityKind.SUBJECT, "Biology") is not None
    assert index.remove(EntityKind.SUBJECT, physics.id) == 0


def test_entries_are_distinct_per_entity() -> None:
    physics = _record(EntityKind.SUBJECT, "Physics", code="0625")
    index = CatalogIndex.load(CatalogSnapshot.from_records([physics]))

    entries = index.entries(EntityKind.SUBJECT)

    assert [entry.id for entry in entries] == [physics.id]


def test_offline_index_is_empty() -> None:
    index = CatalogIndex.empty(offline=True)

    assert index.offline is True
    assert index.entries(EntityKind.PROGRAM) == ()


def test_sessions_do_not_share_index_state() -> None:
    first = CatalogIndex.empty()
    second = CatalogIndex.empty()
    program = StructureEntity(index=0, kind=EntityKind.PROGRAM, name="IGCSE")

    first.insert(program, uuid.uuid4())

    assert first.lookup(EntityKind.PROGRAM, "IGCSE") is not None
    assert second.lookup(EntityKind.PROGRAM, "IGCSE") is None
