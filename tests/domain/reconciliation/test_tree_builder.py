from __future__ import annotations

import uuid

from taxonomist.domain.model import CatalogRecord, CatalogSnapshot, EntityKind
from taxonomist.domain.reconciliation import (
    CatalogIndex,
    ImportPayload,
    build_structure_tree,
    group_questions,
)
from taxonomist.domain.reconciliation.normalize import CAMBRIDGE


def _index(*records: CatalogRecord) -> CatalogIndex:
    return CatalogIndex.load(CatalogSnapshot.from_records(list(records)))


def _record(
    kind: EntityKind,
    name: str,
    *,
    code: str | None = None,
    parent_id: uuid.UUID | None = None,
) -> CatalogRecord:
    return CatalogRecord(id=uuid.uuid4(), kind=kind, name=name, code=code, parent_id=parent_id)


def test_scenario_payload_on_empty_catalog(
    physics_payload: dict[str, object], empty_index: CatalogIndex
) -> None:
    tree = build_structure_tree(physics_payload, empty_index)

    nodes = list(tree.walk())
    assert [node.kind for node in nodes] == list(EntityKind)
    assert [node.canonical_name for node in nodes] == [
        "IGCSE",
        CAMBRIDGE,
        "Physics",
        "All Topics",
        "Forces",
        "Motion",
    ]
    subject = nodes[2]
    assert subject.name == "Physics - 0625"
    assert subject.code == "0625"
    assert all(not node.exists for node in nodes)
    assert all(node.resolved_id is None for node in nodes)
    assert tree.count_missing() == 6


def test_existing_catalog_entries_are_matched(physics_payload: dict[str, object]) -> None:
    program = _record(EntityKind.PROGRAM, "IGCSE")
    provider = _record(EntityKind.PROVIDER, "Cambridge International")
    subject = _record(EntityKind.SUBJECT, "Physics", code="0625")
    unit = _record(EntityKind.UNIT, "All Topics", parent_id=subject.id)
    index = _index(program, provider, subject, unit)

    tree = build_structure_tree(physics_payload, index)

    program_node, provider_node, subject_node, unit_node, topic_node, subtopic_node = tree.walk()
    assert program_node.resolved_id == program.id
    assert provider_node.resolved_id == provider.id
    assert subject_node.resolved_id == subject.id
    assert subject_node.parent_id == provider.id
    assert unit_node.exists
    assert unit_node.resolved_id == unit.id
    assert unit_node.parent_id == subject.id
    assert not topic_node.exists
    assert topic_node.parent_id == unit.id
    assert not subtopic_node.exists
    assert subtopic_node.parent_id is None


def test_cambridge_variant_in_catalog_matches_board_code() -> None:
    provider = _record(EntityKind.PROVIDER, "CIE")
    payload = {"qualification": "IGCSE", "exam_board": "Cambridge", "subject": "Biology"}

    tree = build_structure_tree(payload, _index(provider))

    assert tree.nodes_of_kind(EntityKind.PROVIDER)[0].resolved_id == provider.id


def test_subject_matched_by_code_alone() -> None:
    subject = _record(EntityKind.SUBJECT, "Physics (Extended)", code="0625")
    payload = {"subject": "0625 Physics", "questions": []}

    tree = build_structure_tree(payload, _index(subject))

    assert tree.nodes_of_kind(EntityKind.SUBJECT)[0].resolved_id == subject.id


def test_near_duplicates_are_attached_to_missing_top_level_nodes() -> None:
    similar_subject = _record(EntityKind.SUBJECT, "Physic")
    unrelated = _record(EntityKind.SUBJECT, "History")
    payload = {
        "qualification": "IGCSE",
        "exam_board": "CIE",
        "subject": "Physics - 0625",
        "questions": [{"unit": "Mechanics", "topic": "Forces"}],
    }

    tree = build_structure_tree(payload, _index(similar_subject, unrelated))

    subject = tree.nodes_of_kind(EntityKind.SUBJECT)[0]
    assert not subject.exists
    assert [candidate.id for candidate in subject.potential_duplicates] == [similar_subject.id]
    for kind in (EntityKind.UNIT, EntityKind.TOPIC):
        assert tree.nodes_of_kind(kind)[0].potential_duplicates == ()


def test_records_without_units_share_general_topics_when_others_have_units() -> None:
    payload = {
        "qualification": "A Level",
        "exam_board": "AQA",
        "subject": "Biology",
        "questions": [
            {"unit": "Cells", "topic": "Organelles", "subtopic": "Mitochondria"},
            {"chapter": "Genetics", "topic": "Inheritance"},
            {"topic": "Practical Skills"},
            {"topic": "Data Analysis"},
        ],
    }

    tree = build_structure_tree(payload, CatalogIndex.empty())

    units = [node.name for node in tree.nodes_of_kind(EntityKind.UNIT)]
    assert units == ["Cells", "Genetics", "General Topics"]
    general = tree.nodes_of_kind(EntityKind.UNIT)[2]
    assert [topic.name for topic in tree.children_of(general)] == [
        "Practical Skills",
        "Data Analysis",
    ]


def test_duplicate_topics_and_subtopics_are_merged() -> None:
    payload = {
        "subject": "Physics",
        "questions": [
            {"topic": "Forces", "subtopic": "Motion"},
            {"topic": "forces", "subtopic": "motion"},
            {"topic": "Forces", "subtopic": "Momentum"},
            {"topic": "Forces"},
        ],
    }

    tree = build_structure_tree(payload, CatalogIndex.empty())

    assert len(tree.nodes_of_kind(EntityKind.UNIT)) == 1
    assert len(tree.nodes_of_kind(EntityKind.TOPIC)) == 1
    assert [node.name for node in tree.nodes_of_kind(EntityKind.SUBTOPIC)] == [
        "Motion",
        "Momentum",
    ]


def test_empty_import_still_yields_a_placeholder_branch() -> None:
    tree = build_structure_tree({"qualification": "IGCSE"}, CatalogIndex.empty())

    assert [node.name for node in tree.walk()] == [
        "IGCSE",
        "Unknown Provider",
        "Unknown Subject",
        "All Topics",
        "General",
    ]
    assert tree.nodes_of_kind(EntityKind.SUBTOPIC) == ()


def test_malformed_payload_degrades_to_unknown_names() -> None:
    tree = build_structure_tree("not a payload", CatalogIndex.empty())

    program, provider, subject = tree.primary_path() or (None, None, None)
    assert program is not None
    assert program.name == "Unknown Program"
    assert provider is not None
    assert provider.name == "Unknown Provider"
    assert subject is not None
    assert subject.name == "Unknown Subject"


def test_top_level_fields_fall_back_to_question_records() -> None:
    payload = [
        {"qualification": "a-level", "exam_board": "Pearson Edexcel", "subject": "Economics"},
        {"unit": "Markets", "topic": "Supply"},
    ]

    tree = build_structure_tree(payload, CatalogIndex.empty())

    program, provider, subject = tree.primary_path() or (None, None, None)
    assert program is not None
    assert program.name == "A Level"
    assert provider is not None
    assert provider.name == "Edexcel"
    assert subject is not None
    assert subject.name == "Economics"


def test_group_questions_prefers_unit_then_chapter_then_section() -> None:
    payload = ImportPayload.parse(
        {
            "questions": [
                {"section": "Section A", "topic": "Algebra"},
                {"chapter": "Chapter 2", "section": "ignored", "topic": "Geometry"},
                {"unit": "Unit 3", "chapter": "ignored", "topic": "Calculus"},
                {"unit": "Unit 3"},
            ]
        }
    )

    groups = group_questions(payload)

    assert [(group.unit, group.topic) for group in groups] == [
        ("Section A", "Algebra"),
        ("Chapter 2", "Geometry"),
        ("Unit 3", "Calculus"),
        ("Unit 3", "Unknown Topic"),
    ]


def test_build_never_writes(physics_payload: dict[str, object]) -> None:
    index = CatalogIndex.empty()

    build_structure_tree(physics_payload, index)

    for kind in EntityKind:
        assert index.entries(kind) == ()
