from __future__ import annotations

import pytest

from taxonomist.domain.reconciliation.normalize import (
    CAMBRIDGE,
    extract_subject_code,
    extract_subject_name,
    is_potential_duplicate,
    normalize,
    resolve_program_alias,
    resolve_provider_alias,
    subject_composites,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  A-Level  (CIE) ", "a level"),
        ("Pure_Maths   Paper", "pure maths paper"),
        ("Cambridge International (CIE)", "cambridge international"),
        ("Forces--and__Motion", "forces and motion"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_collapses_separators_and_drops_parentheticals(
    raw: str | None, expected: str
) -> None:
    assert normalize(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("International GCSE", "IGCSE"),
        ("igcse", "IGCSE"),
        ("A-Level", "A Level"),
        ("a   level", "A Level"),
        ("AS-Level", "AS Level"),
        ("International Baccalaureate", "IB"),
        ("Diploma Programme", "Diploma Programme"),
    ],
)
def test_resolve_program_alias(raw: str, expected: str) -> None:
    assert resolve_program_alias(raw) == expected


def test_cambridge_provider_variants_share_one_canonical_name() -> None:
    variants = ("CIE", "Cambridge", "Cambridge International (CIE)", "cambridge assessment")

    resolved = {resolve_provider_alias(variant) for variant in variants}

    assert resolved == {CAMBRIDGE}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Pearson Edexcel", "Edexcel"),
        ("edexcel", "Edexcel"),
        ("aqa", "AQA"),
        ("Some Local Board", "Some Local Board"),
    ],
)
def test_resolve_provider_alias(raw: str, expected: str) -> None:
    assert resolve_provider_alias(raw) == expected


@pytest.mark.parametrize(
    ("raw", "code", "name"),
    [
        ("Physics - 0625", "0625", "Physics"),
        ("Physics (0625)", "0625", "Physics"),
        ("0625 Physics", "0625", "Physics"),
        ("Further Mathematics", None, "Further Mathematics"),
    ],
)
def test_subject_code_extraction(raw: str, code: str | None, name: str) -> None:
    assert extract_subject_code(raw) == code
    assert extract_subject_name(raw) == name


@pytest.mark.parametrize(
    "template",
    ["{name} - {code}", "{name} ({code})", "{code} {name}"],
)
def test_subject_name_and_code_recombine(template: str) -> None:
    raw = template.format(name="Computer Science", code="0478")

    name = extract_subject_name(raw)
    code = extract_subject_code(raw)

    assert code is not None
    assert normalize(template.format(name=name, code=code)) == normalize(raw)


def test_extract_subject_helpers_accept_missing_values() -> None:
    assert extract_subject_code(None) is None
    assert extract_subject_name(None) == ""


def test_subject_composites() -> None:
    assert subject_composites("Physics", "0625") == ("Physics - 0625", "Physics (0625)")


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        ("Physics", "Physic", True),
        ("IGCSE", "I.G.C.S.E.", True),
        ("Chemistry", "Chemistri", True),
        ("Physics", "Pyhsics", True),
        ("Biology", "Geography", False),
        # shifted alignment is not an edit distance
        ("Mathematics", "Mathmatics", False),
        ("", "Physics", False),
        ("---", "Physics", False),
    ],
)
def test_is_potential_duplicate(first: str, second: str, expected: bool) -> None:
    assert is_potential_duplicate(first, second) is expected
    assert is_potential_duplicate(second, first) is expected
