"""Field lookups shared by the aggregators.

Every helper returns ``None`` when the field is absent or has the wrong
answer variant, so callers can skip the item instead of raising.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence, Type, TypeVar

from flexjar_analytics.models import (
    Answer,
    MultiChoiceAnswer,
    RatingAnswer,
    SingleChoiceAnswer,
    Submission,
    SurveyType,
    TextAnswer,
)

# Field ids used by the Top Tasks / Discovery / Task Priority surveys
TASK_FIELDS = ("task", "category")
SUCCESS_FIELDS = ("taskSuccess", "success")
BLOCKER_FIELDS = ("blocker", "hindring")
PRIORITY_FIELDS = ("priority",)

A = TypeVar("A", bound=Answer)


class SuccessStatus(str, Enum):
    """Ternary task-success signal."""

    YES = "yes"
    PARTIAL = "partial"
    NO = "no"


_STATUS_ALIASES = {
    "ja": SuccessStatus.YES,
    "yes": SuccessStatus.YES,
    "delvis": SuccessStatus.PARTIAL,
    "partial": SuccessStatus.PARTIAL,
    "nei": SuccessStatus.NO,
    "no": SuccessStatus.NO,
}


def find_answer(
    item: Submission, field_ids: Sequence[str], variant: Type[A]
) -> Optional[A]:
    """Return the first answer on one of *field_ids*, if it is a *variant*."""
    for answer in item.answers:
        if answer.field_id in field_ids:
            return answer if isinstance(answer, variant) else None
    return None


def task_label(item: Submission) -> Optional[str]:
    """Resolved Top Tasks label (option label, falling back to the raw id)."""
    if item.survey_type != SurveyType.TOP_TASKS:
        return None
    answer = find_answer(item, TASK_FIELDS, SingleChoiceAnswer)
    if answer is None or not answer.selected_option_id:
        return None
    return answer.resolved_label()


def task_text(item: Submission) -> Optional[str]:
    """Free-text (or chosen) task of a Discovery response."""
    for answer in item.answers:
        if answer.field_id != "task":
            continue
        if isinstance(answer, TextAnswer):
            text = answer.text.strip()
            return text or None
        if isinstance(answer, SingleChoiceAnswer) and answer.selected_option_id:
            return answer.resolved_label()
        return None
    return None


def success_status(item: Submission) -> Optional[SuccessStatus]:
    """Map the success answer (``Ja``/``Delvis``/``Nei`` or English ids)."""
    answer = find_answer(item, SUCCESS_FIELDS, SingleChoiceAnswer)
    if answer is None:
        return None
    for candidate in (answer.selected_option_id, answer.resolved_label()):
        status = _STATUS_ALIASES.get(candidate.strip().lower())
        if status is not None:
            return status
    return None


def blocker_text(item: Submission) -> Optional[str]:
    """Non-empty blocker text of a Top Tasks response."""
    answer = find_answer(item, BLOCKER_FIELDS, TextAnswer)
    if answer is None:
        return None
    text = answer.text.strip()
    return text or None


def rating_value(item: Submission) -> Optional[int]:
    """First RATING answer on the submission, whatever its field id."""
    for answer in item.answers:
        if isinstance(answer, RatingAnswer):
            return answer.rating
    return None


def priority_answer(item: Submission) -> Optional[MultiChoiceAnswer]:
    return find_answer(item, PRIORITY_FIELDS, MultiChoiceAnswer)
