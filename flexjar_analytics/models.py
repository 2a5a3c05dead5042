"""Domain model for feedback submissions and text themes.

Submissions arrive from the HTTP layer as camelCase JSON dicts. This module
turns them into frozen dataclasses once, at the boundary, so the aggregators
only ever see well-formed values:

    • ``Answer`` is a sum type with one dataclass per field type, so a TEXT
      answer carrying a rating cannot be represented.
    • Answers whose value does not match their declared field type are
      dropped (with a warning) instead of failing the whole submission.
    • ``survey_type`` is kept as the raw string; unknown types simply never
      match a type-specific aggregator.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from flexjar_analytics.exceptions import InvalidPayloadError
from flexjar_analytics.utils import day_key

__all__ = [
    "FieldType",
    "SurveyType",
    "AnalysisContext",
    "ChoiceOption",
    "Question",
    "Answer",
    "RatingAnswer",
    "TextAnswer",
    "SingleChoiceAnswer",
    "MultiChoiceAnswer",
    "DateAnswer",
    "SubmissionContext",
    "Submission",
    "Theme",
    "answer_from_dict",
    "answer_to_dict",
    "load_submissions",
    "load_themes",
]

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    """Supported answer field types."""

    RATING = "RATING"
    TEXT = "TEXT"
    SINGLE_CHOICE = "SINGLE_CHOICE"
    MULTI_CHOICE = "MULTI_CHOICE"
    DATE = "DATE"


class SurveyType(str, Enum):
    """Survey flavours with a dedicated aggregator."""

    RATING = "rating"
    TOP_TASKS = "topTasks"
    DISCOVERY = "discovery"
    TASK_PRIORITY = "taskPriority"
    CUSTOM = "custom"


class AnalysisContext(str, Enum):
    """Which free-text pool a theme clusters."""

    GENERAL_FEEDBACK = "GENERAL_FEEDBACK"
    BLOCKER = "BLOCKER"


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ChoiceOption:
    id: str
    label: str


@dataclass(frozen=True, slots=True)
class Question:
    label: str
    description: Optional[str] = None
    options: Tuple[ChoiceOption, ...] = ()

    def option_label(self, option_id: str) -> Optional[str]:
        """Return the label of *option_id* or ``None`` if it is not an option."""
        for option in self.options:
            if option.id == option_id:
                return option.label
        return None


@dataclass(frozen=True, slots=True)
class Answer:
    """Fields shared by every answer variant."""

    field_type: ClassVar[FieldType]

    field_id: str
    question: Question


@dataclass(frozen=True, slots=True)
class RatingAnswer(Answer):
    field_type: ClassVar[FieldType] = FieldType.RATING

    rating: int = 0


@dataclass(frozen=True, slots=True)
class TextAnswer(Answer):
    field_type: ClassVar[FieldType] = FieldType.TEXT

    text: str = ""


@dataclass(frozen=True, slots=True)
class SingleChoiceAnswer(Answer):
    field_type: ClassVar[FieldType] = FieldType.SINGLE_CHOICE

    selected_option_id: str = ""

    def resolved_label(self) -> str:
        """Return the selected option's label, falling back to the raw id."""
        return self.question.option_label(self.selected_option_id) or self.selected_option_id


@dataclass(frozen=True, slots=True)
class MultiChoiceAnswer(Answer):
    field_type: ClassVar[FieldType] = FieldType.MULTI_CHOICE

    selected_option_ids: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DateAnswer(Answer):
    field_type: ClassVar[FieldType] = FieldType.DATE

    date: str = ""


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SubmissionContext:
    pathname: Optional[str] = None
    url: Optional[str] = None
    device_type: Optional[str] = None
    viewport_width: Optional[int] = None
    viewport_height: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Submission:
    """One completed feedback response."""

    id: str
    submitted_at: str  # ISO-8601 timestamp
    survey_id: str
    app: Optional[str] = None
    survey_type: Optional[str] = None
    context: Optional[SubmissionContext] = None
    tags: Tuple[str, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)
    duration_ms: Optional[int] = None
    sensitive_data_redacted: bool = False
    answers: Tuple[Answer, ...] = ()

    @property
    def day(self) -> str:
        """Date portion of :pyattr:`submitted_at`."""
        return day_key(self.submitted_at)

    @property
    def device_type(self) -> Optional[str]:
        return self.context.device_type if self.context else None

    @property
    def pathname(self) -> Optional[str]:
        return self.context.pathname if self.context else None

    def text_values(self) -> List[str]:
        """Return the non-empty text of every TEXT answer, in answer order."""
        return [
            a.text
            for a in self.answers
            if isinstance(a, TextAnswer) and a.text and a.text.strip()
        ]

    def has_text(self) -> bool:
        return bool(self.text_values())

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase wire representation (inverse of ``from_dict``)."""
        out: Dict[str, Any] = {
            "id": self.id,
            "submittedAt": self.submitted_at,
            "surveyId": self.survey_id,
            "tags": list(self.tags),
            "metadata": dict(self.metadata),
            "sensitiveDataRedacted": self.sensitive_data_redacted,
            "answers": [answer_to_dict(a) for a in self.answers],
        }
        if self.app is not None:
            out["app"] = self.app
        if self.survey_type is not None:
            out["surveyType"] = self.survey_type
        if self.duration_ms is not None:
            out["durationMs"] = self.duration_ms
        if self.context is not None:
            ctx = {
                "pathname": self.context.pathname,
                "url": self.context.url,
                "deviceType": self.context.device_type,
                "viewportWidth": self.context.viewport_width,
                "viewportHeight": self.context.viewport_height,
            }
            out["context"] = {k: v for k, v in ctx.items() if v is not None}
        return out

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Submission":
        """Build a :class:`Submission` from its camelCase wire representation.

        Raises
        ------
        InvalidPayloadError
            If an identifying field (``id``, ``submittedAt``, ``surveyId``) is
            missing, ``answers``/``tags``/``metadata`` have the wrong shape
            or the payload is not a mapping.
        """
        if not isinstance(payload, Mapping):
            raise InvalidPayloadError("Submission payload must be an object")
        for key in ("id", "submittedAt", "surveyId"):
            if not isinstance(payload.get(key), str) or not payload[key]:
                raise InvalidPayloadError(f"Submission is missing '{key}'")

        sub_id = payload["id"]
        raw_answers = _list_field(payload, "answers")
        tags = _list_field(payload, "tags")
        metadata = payload.get("metadata") or {}
        if not isinstance(metadata, Mapping):
            raise InvalidPayloadError(f"Submission {sub_id} has non-object 'metadata'")

        answers: List[Answer] = []
        for raw in raw_answers:
            try:
                answers.append(answer_from_dict(raw))
            except InvalidPayloadError as exc:
                logger.warning("Dropping answer on submission %s: %s", sub_id, exc)

        duration = payload.get("durationMs")
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            duration = None

        return cls(
            id=sub_id,
            submitted_at=payload["submittedAt"],
            survey_id=payload["surveyId"],
            app=payload.get("app"),
            survey_type=payload.get("surveyType"),
            context=_context_from_dict(payload.get("context")),
            tags=tuple(t for t in tags if isinstance(t, str)),
            metadata={str(k): str(v) for k, v in metadata.items()},
            duration_ms=int(duration) if duration is not None else None,
            sensitive_data_redacted=bool(payload.get("sensitiveDataRedacted", False)),
            answers=tuple(answers),
        )


def _list_field(payload: Mapping[str, Any], key: str) -> List[Any]:
    value = payload.get(key) or []
    if not isinstance(value, list):
        raise InvalidPayloadError(f"Submission {payload['id']} has non-list '{key}'")
    return value


def _context_from_dict(raw: Any) -> Optional[SubmissionContext]:
    if not isinstance(raw, Mapping):
        return None
    return SubmissionContext(
        pathname=raw.get("pathname"),
        url=raw.get("url"),
        device_type=raw.get("deviceType"),
        viewport_width=raw.get("viewportWidth"),
        viewport_height=raw.get("viewportHeight"),
    )


def _question_from_dict(raw: Any) -> Question:
    if not isinstance(raw, Mapping):
        return Question(label="")
    options = tuple(
        ChoiceOption(id=str(o["id"]), label=str(o.get("label", o["id"])))
        for o in raw.get("options") or []
        if isinstance(o, Mapping) and "id" in o
    )
    return Question(
        label=str(raw.get("label", "")),
        description=raw.get("description"),
        options=options,
    )


# value.type expected for each field type
_VALUE_TYPES: Dict[str, str] = {
    FieldType.RATING.value: "rating",
    FieldType.TEXT.value: "text",
    FieldType.SINGLE_CHOICE.value: "singleChoice",
    FieldType.MULTI_CHOICE.value: "multiChoice",
    FieldType.DATE.value: "date",
}


def answer_from_dict(raw: Any) -> Answer:
    """Return the :class:`Answer` variant described by *raw*.

    Raises
    ------
    InvalidPayloadError
        If the field type is unknown or ``value.type`` does not match it.
    """
    if not isinstance(raw, Mapping):
        raise InvalidPayloadError("Answer payload must be an object")

    field_type = raw.get("fieldType")
    expected = _VALUE_TYPES.get(field_type)
    if expected is None:
        raise InvalidPayloadError(f"Unknown field type: {field_type!r}")

    value = raw.get("value")
    if not isinstance(value, Mapping) or value.get("type") != expected:
        raise InvalidPayloadError(
            f"Field {raw.get('fieldId')!r} is {field_type} but value is not '{expected}'"
        )

    field_id = str(raw.get("fieldId", ""))
    question = _question_from_dict(raw.get("question"))

    if expected == "rating":
        rating = value.get("rating")
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise InvalidPayloadError(f"Rating on {field_id!r} is not an integer")
        if not 1 <= rating <= 5:
            raise InvalidPayloadError(f"Rating on {field_id!r} is outside 1-5: {rating}")
        return RatingAnswer(field_id=field_id, question=question, rating=rating)
    if expected == "text":
        return TextAnswer(field_id=field_id, question=question, text=str(value.get("text") or ""))
    if expected == "singleChoice":
        return SingleChoiceAnswer(
            field_id=field_id,
            question=question,
            selected_option_id=str(value.get("selectedOptionId") or ""),
        )
    if expected == "multiChoice":
        ids = value.get("selectedOptionIds") or []
        if not isinstance(ids, list):
            raise InvalidPayloadError(f"Selected options on {field_id!r} are not a list")
        return MultiChoiceAnswer(
            field_id=field_id,
            question=question,
            selected_option_ids=tuple(str(i) for i in ids),
        )
    return DateAnswer(field_id=field_id, question=question, date=str(value.get("date") or ""))


def answer_to_dict(answer: Answer) -> Dict[str, Any]:
    """Return the wire representation of *answer*."""
    expected = _VALUE_TYPES[answer.field_type.value]
    value: Dict[str, Any] = {"type": expected}
    if isinstance(answer, RatingAnswer):
        value["rating"] = answer.rating
    elif isinstance(answer, TextAnswer):
        value["text"] = answer.text
    elif isinstance(answer, SingleChoiceAnswer):
        value["selectedOptionId"] = answer.selected_option_id
    elif isinstance(answer, MultiChoiceAnswer):
        value["selectedOptionIds"] = list(answer.selected_option_ids)
    elif isinstance(answer, DateAnswer):
        value["date"] = answer.date

    question: Dict[str, Any] = {"label": answer.question.label}
    if answer.question.description is not None:
        question["description"] = answer.question.description
    if answer.question.options:
        question["options"] = [
            {"id": o.id, "label": o.label} for o in answer.question.options
        ]
    return {
        "fieldId": answer.field_id,
        "fieldType": answer.field_type.value,
        "question": question,
        "value": value,
    }


# ---------------------------------------------------------------------------
# Themes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Theme:
    """A named keyword cluster, defined outside the engine."""

    id: str
    name: str
    keywords: Tuple[str, ...] = ()
    team: str = ""
    color: Optional[str] = None
    priority: int = 0
    analysis_context: AnalysisContext = AnalysisContext.GENERAL_FEEDBACK

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Theme":
        if not isinstance(payload, Mapping):
            raise InvalidPayloadError("Theme payload must be an object")
        if not payload.get("id") or not payload.get("name"):
            raise InvalidPayloadError("Theme requires 'id' and 'name'")
        try:
            context = AnalysisContext(
                payload.get("analysisContext") or AnalysisContext.GENERAL_FEEDBACK.value
            )
        except ValueError as exc:
            raise InvalidPayloadError(
                f"Unknown analysis context: {payload.get('analysisContext')!r}"
            ) from exc
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]),
            keywords=tuple(str(k) for k in payload.get("keywords") or []),
            team=str(payload.get("team") or ""),
            color=payload.get("color"),
            priority=int(payload.get("priority") or 0),
            analysis_context=context,
        )


# ---------------------------------------------------------------------------
# Bulk loaders
# ---------------------------------------------------------------------------


def load_submissions(payloads: Iterable[Mapping[str, Any]]) -> List[Submission]:
    """Parse *payloads*, skipping (and logging) records that are not valid."""
    items: List[Submission] = []
    for index, raw in enumerate(payloads):
        try:
            items.append(Submission.from_dict(raw))
        except InvalidPayloadError as exc:
            logger.warning("Skipping submission #%d: %s", index, exc)
    return items


def load_themes(payloads: Sequence[Mapping[str, Any]]) -> List[Theme]:
    """Parse theme payloads; an invalid theme is an error for the caller."""
    return [Theme.from_dict(raw) for raw in payloads]
