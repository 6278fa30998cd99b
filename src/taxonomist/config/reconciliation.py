"""Defaults for structure reconciliation runs."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_REGION_HINT = "middle east"
DEFAULT_ENTITY_CODE_LENGTH = 12
DEFAULT_UNIT_CODE_LENGTH = 16
DEFAULT_UNIT_CODE_SUFFIX_LENGTH = 4
DEFAULT_ENTITY_STATUS = "active"


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    region_hint: str = DEFAULT_REGION_HINT
    entity_code_length: int = DEFAULT_ENTITY_CODE_LENGTH
    unit_code_length: int = DEFAULT_UNIT_CODE_LENGTH
    unit_code_suffix_length: int = DEFAULT_UNIT_CODE_SUFFIX_LENGTH
    entity_status: str = DEFAULT_ENTITY_STATUS


def get_reconciliation_config() -> ReconciliationConfig:
    hint = os.getenv("TAXONOMIST_DEFAULT_REGION")
    if hint and hint.strip():
        return ReconciliationConfig(region_hint=hint.strip().lower())
    return ReconciliationConfig()
