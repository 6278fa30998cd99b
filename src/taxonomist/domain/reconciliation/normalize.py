"""String normalization and alias resolution for imported structure names.

Everything here is pure. ``normalize`` is the key function for every exact-match
lookup in the catalog index; ``is_potential_duplicate`` is the cheap near-match
heuristic shown to operators for review.
"""

from __future__ import annotations

import re
from typing import Final

_SEPARATORS = re.compile(r"[\s\-_]+")
_PARENTHETICAL = re.compile(r"\s*\([^)]*\)\s*")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_WHITESPACE = re.compile(r"\s+")

_DASH_CODE = re.compile(r"\s*-\s*(\d+)$")
_PAREN_CODE = re.compile(r"\s*\((\d+)\)$")
_PREFIX_CODE = re.compile(r"^(\d+)\s+")

CAMBRIDGE: Final[str] = "Cambridge International (CIE)"
CAMBRIDGE_VARIANTS: Final[tuple[str, ...]] = (
    CAMBRIDGE,
    "Cambridge International",
    "Cambridge",
    "CIE",
)

PROGRAM_ALIASES: Final[dict[str, str]] = {
    "igcse": "IGCSE",
    "international gcse": "IGCSE",
    "gcse": "GCSE",
    "a level": "A Level",
    "a-level": "A Level",
    "as level": "AS Level",
    "as-level": "AS Level",
    "ib": "IB",
    "international baccalaureate": "IB",
}

PROVIDER_ALIASES: Final[dict[str, str]] = {
    "cambridge": CAMBRIDGE,
    "cambridge international": CAMBRIDGE,
    "cambridge international (cie)": CAMBRIDGE,
    "cie": CAMBRIDGE,
    "edexcel": "Edexcel",
    "pearson edexcel": "Edexcel",
    "aqa": "AQA",
    "ocr": "OCR",
    "wjec": "WJEC",
}

DUPLICATE_LENGTH_TOLERANCE: Final[int] = 2
DUPLICATE_MISMATCH_TOLERANCE: Final[int] = 2


def normalize(value: str | None) -> str:
    """Return the comparison key for an entity name or code.

    Lowercases, drops parenthetical parts, and collapses runs of whitespace,
    hyphens and underscores into single spaces.
    """

    if not value:
        return ""
    text = _PARENTHETICAL.sub(" ", value.lower())
    return _SEPARATORS.sub(" ", text).strip()


def _alias_key(raw: str) -> str:
    return _WHITESPACE.sub(" ", raw.strip().lower())


def resolve_program_alias(raw: str) -> str:
    """Map known qualification spellings onto their canonical program name."""

    return PROGRAM_ALIASES.get(_alias_key(raw), raw)


def resolve_provider_alias(raw: str) -> str:
    """Map known exam-board spellings onto their canonical provider name."""

    key = _alias_key(raw)
    alias = PROVIDER_ALIASES.get(key)
    if alias is not None:
        return alias
    if "cambridge" in key:
        return CAMBRIDGE
    return raw


def extract_subject_code(value: str | None) -> str | None:
    """Return the numeric syllabus code embedded in a subject string, if any.

    Recognised forms: ``Physics - 0625``, ``Physics (0625)``, ``0625 Physics``.
    """

    if not value:
        return None
    text = value.strip()
    for pattern in (_DASH_CODE, _PAREN_CODE, _PREFIX_CODE):
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def extract_subject_name(value: str | None) -> str:
    """Return the subject string with any embedded syllabus code removed."""

    if not value:
        return ""
    text = value.strip()
    text = _DASH_CODE.sub("", text)
    text = _PAREN_CODE.sub("", text)
    text = _PREFIX_CODE.sub("", text)
    return text.strip()


def subject_composites(name: str, code: str) -> tuple[str, str]:
    """The two surface forms a subject with a code is commonly written in."""

    return f"{name} - {code}", f"{name} ({code})"


def _compact(value: str) -> str:
    return _NON_ALNUM.sub("", value.lower())


def is_potential_duplicate(first: str, second: str) -> bool:
    """Heuristic near-match check used to surface catalog entries for review.

    True when one compacted name contains the other, or when their lengths differ
    by at most two and at most two aligned positions differ. This is a bounded
    positional mismatch count, not an edit distance: transpositions that shift
    alignment and typos changing length by more than two are missed.
    """

    a = _compact(first)
    b = _compact(second)
    if not a or not b:
        return False
    if a in b or b in a:
        return True
    if abs(len(a) - len(b)) > DUPLICATE_LENGTH_TOLERANCE:
        return False
    longest = max(len(a), len(b))
    mismatches = sum(
        1
        for position in range(longest)
        if position >= len(a) or position >= len(b) or a[position] != b[position]
    )
    return mismatches <= DUPLICATE_MISMATCH_TOLERANCE
