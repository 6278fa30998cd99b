"""Lenient schema for parsed question-bank imports.

Imports come from several extraction tools and are loosely structured. Unknown
keys are kept and logged once per key, malformed question records are dropped
individually, and a payload that is not an object at all degrades to an empty
import instead of aborting the build.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, cast

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

log = logging.getLogger(__name__)

UNKNOWN_PROGRAM = "Unknown Program"
UNKNOWN_PROVIDER = "Unknown Provider"
UNKNOWN_SUBJECT = "Unknown Subject"


class ImportBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug("%s: unmodeled keys: %s", type(self).__name__, ", ".join(sorted(new_keys)))

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class QuestionRecord(ImportBaseModel):
    qualification: str | None = None
    exam_board: str | None = None
    subject: str | None = None
    unit: str | None = None
    chapter: str | None = None
    section: str | None = None
    topic: str | None = None
    subtopic: str | None = None

    @property
    def unit_name(self) -> str | None:
        return self.unit or self.chapter or self.section


class ImportPayload(ImportBaseModel):
    qualification: str | None = None
    exam_board: str | None = None
    subject: str | None = None
    questions: list[QuestionRecord] = []

    @property
    def program_name(self) -> str:
        return self.qualification or self._first("qualification") or UNKNOWN_PROGRAM

    @property
    def provider_name(self) -> str:
        return self.exam_board or self._first("exam_board") or UNKNOWN_PROVIDER

    @property
    def subject_name(self) -> str:
        return self.subject or self._first("subject") or UNKNOWN_SUBJECT

    def _first(self, attribute: str) -> str | None:
        for question in self.questions:
            value = getattr(question, attribute)
            if value:
                return cast("str", value)
        return None

    @classmethod
    def parse(cls, raw: object) -> ImportPayload:
        """Validate ``raw`` leniently; never raises for malformed content.

        ``raw`` may be an object with top-level fields and a ``questions`` list,
        or a bare list of flat question records.
        """

        if isinstance(raw, list):
            raw = {"questions": raw}
        if not isinstance(raw, dict):
            log.warning("Import payload is not an object (%s); using an empty import", type(raw))
            return cls()

        data = cast("dict[str, Any]", raw)
        raw_questions = data.get("questions") or []
        if not isinstance(raw_questions, list):
            log.warning("Import payload 'questions' is not a list; ignoring it")
            raw_questions = []

        questions: list[QuestionRecord] = []
        for position, item in enumerate(cast("list[object]", raw_questions)):
            if not isinstance(item, dict):
                log.warning("Skipping question %s: not an object", position)
                continue
            try:
                questions.append(QuestionRecord.model_validate(item))
            except ValidationError as exc:
                log.warning("Skipping question %s: %s", position, exc.error_count())

        header = {key: value for key, value in data.items() if key != "questions"}
        try:
            payload = cls.model_validate(header)
        except ValidationError:
            log.warning("Import payload header is malformed; falling back to unknown names")
            payload = cls()
        payload.questions = questions
        return payload
