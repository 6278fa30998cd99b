"""Imported structure reconciliation: build, match, create, roll back."""

from __future__ import annotations

from .data_structure import DataStructureResolver
from .engine import (
    ConnectivityState,
    CreationProgress,
    CreationReport,
    ReconciliationEngine,
)
from .index import CatalogIndex, IndexEntry
from .normalize import (
    extract_subject_code,
    extract_subject_name,
    is_potential_duplicate,
    normalize,
    resolve_program_alias,
    resolve_provider_alias,
)
from .payload import ImportPayload, QuestionRecord
from .rollback import RollbackCoordinator, RollbackResult
from .session import ReconciliationSession, default_region
from .tree import build_structure_tree, group_questions

__all__ = [
    "CatalogIndex",
    "ConnectivityState",
    "CreationProgress",
    "CreationReport",
    "DataStructureResolver",
    "ImportPayload",
    "IndexEntry",
    "QuestionRecord",
    "ReconciliationEngine",
    "ReconciliationSession",
    "RollbackCoordinator",
    "RollbackResult",
    "build_structure_tree",
    "default_region",
    "extract_subject_code",
    "extract_subject_name",
    "group_questions",
    "is_potential_duplicate",
    "normalize",
    "resolve_program_alias",
    "resolve_provider_alias",
]
