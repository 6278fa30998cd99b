"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """The six levels of the academic taxonomy, outermost first."""

    PROGRAM = "program"
    PROVIDER = "provider"
    SUBJECT = "subject"
    UNIT = "unit"
    TOPIC = "topic"
    SUBTOPIC = "subtopic"

    @property
    def depth(self) -> int:
        return _KIND_ORDER.index(self)

    @property
    def parent_kind(self) -> EntityKind | None:
        depth = self.depth
        return _KIND_ORDER[depth - 1] if depth > 0 else None

    @property
    def child_kind(self) -> EntityKind | None:
        depth = self.depth
        return _KIND_ORDER[depth + 1] if depth + 1 < len(_KIND_ORDER) else None

    @property
    def is_scoped(self) -> bool:
        """Unit, topic and subtopic names are only unique within their parent."""
        return self.depth >= _KIND_ORDER.index(EntityKind.UNIT)

    @property
    def table(self) -> CatalogTable:
        return CatalogTable(_TABLE_BY_KIND[self])


_KIND_ORDER: tuple[EntityKind, ...] = tuple(EntityKind)


class CatalogTable(StrEnum):
    """Store tables touched by a reconciliation run (rollback log tags)."""

    PROGRAMS = "programs"
    PROVIDERS = "providers"
    SUBJECTS = "edu_subjects"
    UNITS = "edu_units"
    TOPICS = "edu_topics"
    SUBTOPICS = "edu_subtopics"
    DATA_STRUCTURES = "data_structures"

    @property
    def kind(self) -> EntityKind | None:
        for kind, table in _TABLE_BY_KIND.items():
            if table == self.value:
                return kind
        return None


_TABLE_BY_KIND: dict[EntityKind, str] = {
    EntityKind.PROGRAM: "programs",
    EntityKind.PROVIDER: "providers",
    EntityKind.SUBJECT: "edu_subjects",
    EntityKind.UNIT: "edu_units",
    EntityKind.TOPIC: "edu_topics",
    EntityKind.SUBTOPIC: "edu_subtopics",
}


class FailureKind(StrEnum):
    """Why a node could not be created in the current run."""

    DEFERRED = "deferred"  # connectivity; retry when the store is reachable
    HARD = "hard"  # store rejection; not retried in this session


class RunState(StrEnum):
    IDLE = "idle"
    BUILDING = "building"
    REVIEWED = "reviewed"
    CREATING = "creating"
    COMMITTED = "committed"
    PARTIALLY_FAILED = "partially_failed"
    ROLLED_BACK = "rolled_back"


class NodeOutcome(StrEnum):
    """Result of asking for one node to be created."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    MATCHED = "matched"  # a sibling created the same entity earlier in the run
    DEFERRED = "deferred"
    FAILED = "failed"
