"""Derive the six-level taxonomy tree from an import and annotate existence.

Building never writes to the store. It groups the flat question records into
``(unit, topic) -> subtopics``, then lays out Program -> Provider -> Subject ->
Unit -> Topic -> Subtopic in a ``StructureTree`` and resolves every node against
the session's ``CatalogIndex``. Near-duplicate hints are only computed for the
top three levels, where a wrong match crosses catalogs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from taxonomist.domain.model import DuplicateCandidate, EntityKind, StructureTree

from .normalize import (
    CAMBRIDGE_VARIANTS,
    extract_subject_code,
    extract_subject_name,
    is_potential_duplicate,
    normalize,
    resolve_program_alias,
    resolve_provider_alias,
    subject_composites,
)
from .payload import ImportPayload

if TYPE_CHECKING:
    from taxonomist.domain.model import StructureEntity

    from .index import CatalogIndex, IndexEntry

log = logging.getLogger(__name__)

GENERAL_UNIT: Final[str] = "General Topics"
ALL_TOPICS_UNIT: Final[str] = "All Topics"
GENERAL_TOPIC: Final[str] = "General"
UNKNOWN_TOPIC: Final[str] = "Unknown Topic"


@dataclass(slots=True)
class TopicGroup:
    unit: str
    topic: str
    subtopics: list[str] = field(default_factory=list[str])


def group_questions(payload: ImportPayload) -> list[TopicGroup]:
    """Group question records by ``(unit, topic)``, collecting distinct subtopics.

    Records without a unit/chapter/section share one synthetic unit: "General
    Topics" when some other record in the import does carry a unit, otherwise
    "All Topics". An import without records yields a single placeholder group.
    """

    has_any_units = any(question.unit_name for question in payload.questions)
    fallback_unit = GENERAL_UNIT if has_any_units else ALL_TOPICS_UNIT

    groups: dict[tuple[str, str], TopicGroup] = {}
    seen_subtopics: dict[tuple[str, str], set[str]] = {}
    for question in payload.questions:
        unit = question.unit_name or fallback_unit
        topic = question.topic or UNKNOWN_TOPIC
        key = (normalize(unit), normalize(topic))
        group = groups.get(key)
        if group is None:
            group = groups[key] = TopicGroup(unit=unit, topic=topic)
            seen_subtopics[key] = set()
        subtopic = question.subtopic
        if subtopic and normalize(subtopic) not in seen_subtopics[key]:
            seen_subtopics[key].add(normalize(subtopic))
            group.subtopics.append(subtopic)

    if not groups:
        return [TopicGroup(unit=ALL_TOPICS_UNIT, topic=GENERAL_TOPIC)]
    return list(groups.values())


def build_structure_tree(raw: object, index: CatalogIndex) -> StructureTree:
    """Build the annotated tree for one import. Every node has ``exists`` set."""

    payload = raw if isinstance(raw, ImportPayload) else ImportPayload.parse(raw)
    tree = StructureTree()

    program = tree.add(EntityKind.PROGRAM, resolve_program_alias(payload.program_name))
    _resolve_top_level(program, index, _program_keys(program))

    provider = tree.add(
        EntityKind.PROVIDER,
        resolve_provider_alias(payload.provider_name),
        parent=program.index,
    )
    _resolve_top_level(provider, index, _provider_keys(provider))

    subject_raw = payload.subject_name
    subject_code = extract_subject_code(subject_raw)
    subject = tree.add(
        EntityKind.SUBJECT,
        subject_raw,
        parent=provider.index,
        canonical_name=extract_subject_name(subject_raw) or subject_raw,
        code=subject_code,
    )
    _resolve_top_level(subject, index, _subject_keys(subject))

    units: dict[str, StructureEntity] = {}
    topics: dict[tuple[int, str], StructureEntity] = {}
    for group in group_questions(payload):
        unit = units.get(normalize(group.unit))
        if unit is None:
            unit = tree.add(EntityKind.UNIT, group.unit, parent=subject.index)
            _resolve_scoped(unit, index)
            units[normalize(group.unit)] = unit

        topic_key = (unit.index, normalize(group.topic))
        topic = topics.get(topic_key)
        if topic is None:
            topic = tree.add(EntityKind.TOPIC, group.topic, parent=unit.index)
            _resolve_scoped(topic, index)
            topics[topic_key] = topic

        known = {normalize(tree.node(child).name) for child in topic.children}
        for name in group.subtopics:
            if normalize(name) in known:
                continue
            known.add(normalize(name))
            subtopic = tree.add(EntityKind.SUBTOPIC, name, parent=topic.index)
            _resolve_scoped(subtopic, index)

    log.info(
        "Built structure tree: %s nodes, %s missing (%s)",
        len(tree),
        tree.count_missing(),
        ", ".join(f"{kind}={count}" for kind, count in tree.count_by_kind().items()),
    )
    return tree


def _program_keys(node: StructureEntity) -> tuple[str, ...]:
    return (node.name,)


def _provider_keys(node: StructureEntity) -> tuple[str, ...]:
    if "cambridge" in node.name.lower():
        return (node.name, *CAMBRIDGE_VARIANTS)
    return (node.name,)


def _subject_keys(node: StructureEntity) -> tuple[str | None, ...]:
    keys: list[str | None] = [node.name, node.canonical_name, node.code]
    if node.code:
        keys.extend(subject_composites(node.canonical_name, node.code))
    return tuple(keys)


def _resolve_top_level(
    node: StructureEntity,
    index: CatalogIndex,
    keys: tuple[str | None, ...],
) -> None:
    entry = index.lookup_first(node.kind, keys)
    if entry is not None:
        _apply_match(node, entry)
        return
    node.mark_missing()
    node.potential_duplicates = find_potential_duplicates(node, index)
    if node.potential_duplicates:
        log.info(
            "%s %r has %s potential duplicate(s): %s",
            node.kind,
            node.name,
            len(node.potential_duplicates),
            ", ".join(candidate.name for candidate in node.potential_duplicates),
        )


def _resolve_scoped(node: StructureEntity, index: CatalogIndex) -> None:
    entry = index.lookup(node.kind, node.name, node.parent_id)
    if entry is None:
        node.mark_missing()
        return
    _apply_match(node, entry)


def _apply_match(node: StructureEntity, entry: IndexEntry) -> None:
    node.mark_resolved(entry.id)
    log.debug("%s %r matched catalog entry %s", node.kind, node.name, entry.id)


def find_potential_duplicates(
    node: StructureEntity,
    index: CatalogIndex,
) -> tuple[DuplicateCandidate, ...]:
    """Catalog entries of the same kind whose names are close to the node's."""

    return tuple(
        DuplicateCandidate(id=entry.id, name=entry.canonical_name)
        for entry in index.entries(node.kind)
        if is_potential_duplicate(node.canonical_name, entry.canonical_name)
    )
