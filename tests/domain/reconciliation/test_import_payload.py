from __future__ import annotations

from taxonomist.domain.reconciliation import ImportPayload


def test_malformed_questions_are_dropped_individually() -> None:
    payload = ImportPayload.parse(
        {
            "subject": "Physics",
            "questions": [
                {"topic": "Forces"},
                "not a record",
                {"topic": ["not", "a", "string"]},
                {"topic": "Energy", "difficulty": "hard"},
            ],
        }
    )

    assert [question.topic for question in payload.questions] == ["Forces", "Energy"]


def test_blank_and_numeric_values_are_coerced() -> None:
    payload = ImportPayload.parse(
        {"subject": 625, "exam_board": "   ", "questions": [{"unit": 3, "topic": " "}]}
    )

    assert payload.subject == "625"
    assert payload.exam_board is None
    assert payload.questions[0].unit == "3"
    assert payload.questions[0].topic is None


def test_questions_that_are_not_a_list_are_ignored() -> None:
    payload = ImportPayload.parse({"subject": "Physics", "questions": {"topic": "Forces"}})

    assert payload.subject_name == "Physics"
    assert payload.questions == []


def test_unknown_names_are_used_when_nothing_is_given() -> None:
    payload = ImportPayload.parse(None)

    assert payload.program_name == "Unknown Program"
    assert payload.provider_name == "Unknown Provider"
    assert payload.subject_name == "Unknown Subject"
