"""Imported taxonomy tree, stored as an arena of index-addressed nodes.

Nodes never hold references to each other. Parents and children are integer
indices into ``StructureTree.nodes``; the catalog ids they resolve to live on the
node itself (``resolved_id``) and on its children (``parent_id``) once known.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import EntityKind, FailureKind

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class DuplicateCandidate:
    """A catalog entity whose name is close to, but not exactly, the imported one."""

    id: UUID
    name: str


@dataclass(slots=True, kw_only=True)
class StructureEntity:
    """One taxonomy node of an import session."""

    index: int
    kind: EntityKind
    name: str
    canonical_name: str = ""
    code: str | None = None
    parent_index: int | None = None
    parent_id: UUID | None = None
    resolved_id: UUID | None = None
    exists: bool = False
    children: list[int] = field(default_factory=list[int])
    potential_duplicates: tuple[DuplicateCandidate, ...] = ()
    creation_error: str | None = None
    failure: FailureKind | None = None

    def __post_init__(self) -> None:
        if not self.canonical_name:
            self.canonical_name = self.name

    @property
    def is_root(self) -> bool:
        return self.parent_index is None

    @property
    def creatable(self) -> bool:
        """Missing, not blocked by a hard error, and its parent is resolved."""
        if self.exists or self.failure is FailureKind.HARD:
            return False
        return self.is_root or self.parent_id is not None

    def mark_resolved(self, entity_id: UUID) -> None:
        self.resolved_id = entity_id
        self.exists = True
        self.creation_error = None
        self.failure = None

    def mark_failed(self, message: str, failure: FailureKind) -> None:
        self.creation_error = message
        self.failure = failure

    def mark_missing(self) -> None:
        self.resolved_id = None
        self.exists = False


@dataclass(slots=True)
class StructureTree:
    """Arena holding every node of one import; index 0 is the program root."""

    nodes: list[StructureEntity] = field(default_factory=list[StructureEntity])

    def add(
        self,
        kind: EntityKind,
        name: str,
        *,
        parent: int | None = None,
        canonical_name: str = "",
        code: str | None = None,
    ) -> StructureEntity:
        if parent is None and self.nodes:
            raise ValueError("Structure tree already has a root")
        if parent is not None:
            parent_node = self.nodes[parent]
            if parent_node.kind.child_kind is not kind:
                raise ValueError(f"{kind} cannot be a child of {parent_node.kind}")
        node = StructureEntity(
            index=len(self.nodes),
            kind=kind,
            name=name,
            canonical_name=canonical_name,
            code=code,
            parent_index=parent,
        )
        self.nodes.append(node)
        if parent is not None:
            parent_node = self.nodes[parent]
            parent_node.children.append(node.index)
            node.parent_id = parent_node.resolved_id
        return node

    @property
    def root(self) -> StructureEntity:
        if not self.nodes:
            raise LookupError("Structure tree is empty")
        return self.nodes[0]

    def node(self, index: int) -> StructureEntity:
        return self.nodes[index]

    def parent_of(self, node: StructureEntity) -> StructureEntity | None:
        if node.parent_index is None:
            return None
        return self.nodes[node.parent_index]

    def children_of(self, node: StructureEntity) -> tuple[StructureEntity, ...]:
        return tuple(self.nodes[index] for index in node.children)

    def walk(self, start: int = 0) -> Iterator[StructureEntity]:
        """Yield nodes depth-first, every parent before its children."""
        if not self.nodes:
            return
        stack = [start]
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def subtree(self, index: int) -> tuple[StructureEntity, ...]:
        return tuple(self.walk(index))

    def descendants(self, index: int) -> tuple[StructureEntity, ...]:
        return self.subtree(index)[1:]

    def nodes_of_kind(self, kind: EntityKind) -> tuple[StructureEntity, ...]:
        return tuple(node for node in self.walk() if node.kind is kind)

    def count_by_kind(self) -> dict[EntityKind, int]:
        counts = Counter(node.kind for node in self.nodes)
        return {kind: counts.get(kind, 0) for kind in EntityKind}

    def count_missing(self) -> int:
        return sum(1 for node in self.nodes if not node.exists)

    def all_exist(self) -> bool:
        return bool(self.nodes) and all(node.exists for node in self.nodes)

    def find_by_resolved_id(self, entity_id: UUID) -> StructureEntity | None:
        for node in self.nodes:
            if node.resolved_id == entity_id:
                return node
        return None

    def propagate_parent_id(self, node: StructureEntity) -> None:
        """Hand a freshly resolved id down to the node's direct children."""
        for child in self.children_of(node):
            child.parent_id = node.resolved_id

    def primary_path(self) -> tuple[StructureEntity, StructureEntity, StructureEntity] | None:
        """Program, first provider under it, first subject under that provider."""
        if not self.nodes:
            return None
        program = self.root
        if not program.children:
            return None
        provider = self.nodes[program.children[0]]
        if not provider.children:
            return None
        subject = self.nodes[provider.children[0]]
        return program, provider, subject

    def __len__(self) -> int:
        return len(self.nodes)
