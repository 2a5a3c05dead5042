"""Small builders for submissions and themes used across the test-suite."""
from __future__ import annotations

import itertools
from typing import Dict, Mapping, Optional, Sequence

from flexjar_analytics.models import (
    AnalysisContext,
    Answer,
    ChoiceOption,
    MultiChoiceAnswer,
    Question,
    RatingAnswer,
    SingleChoiceAnswer,
    Submission,
    SubmissionContext,
    TextAnswer,
    Theme,
)

_ids = itertools.count(1)

SUCCESS_OPTIONS = {"ja": "Ja", "delvis": "Delvis", "nei": "Nei"}


def _question(label: str, options: Optional[Mapping[str, str]] = None) -> Question:
    return Question(
        label=label,
        options=tuple(ChoiceOption(id=k, label=v) for k, v in (options or {}).items()),
    )


def rating(value: int, field_id: str = "rating", label: str = "Hvordan var det?") -> RatingAnswer:
    return RatingAnswer(field_id=field_id, question=_question(label), rating=value)


def text(value: str, field_id: str = "comment", label: str = "Kommentar") -> TextAnswer:
    return TextAnswer(field_id=field_id, question=_question(label), text=value)


def choice(
    option_id: str,
    field_id: str,
    options: Optional[Mapping[str, str]] = None,
    label: str = "Velg",
) -> SingleChoiceAnswer:
    return SingleChoiceAnswer(
        field_id=field_id, question=_question(label, options), selected_option_id=option_id
    )


def multi(
    option_ids: Sequence[str],
    field_id: str = "priority",
    options: Optional[Mapping[str, str]] = None,
    label: str = "Hva er viktigst for deg?",
) -> MultiChoiceAnswer:
    return MultiChoiceAnswer(
        field_id=field_id,
        question=_question(label, options),
        selected_option_ids=tuple(option_ids),
    )


def make_submission(
    *answers: Answer,
    submitted_at: str = "2025-01-15T10:00:00Z",
    survey_id: str = "survey-1",
    app: Optional[str] = "app-a",
    survey_type: Optional[str] = "rating",
    device: Optional[str] = None,
    pathname: Optional[str] = None,
    tags: Sequence[str] = (),
    metadata: Optional[Dict[str, str]] = None,
    duration_ms: Optional[int] = None,
    sub_id: Optional[str] = None,
) -> Submission:
    context = None
    if device is not None or pathname is not None:
        context = SubmissionContext(pathname=pathname, device_type=device)
    return Submission(
        id=sub_id or f"sub-{next(_ids)}",
        submitted_at=submitted_at,
        survey_id=survey_id,
        app=app,
        survey_type=survey_type,
        context=context,
        tags=tuple(tags),
        metadata=metadata or {},
        duration_ms=duration_ms,
        answers=tuple(answers),
    )


def make_top_task(
    task: str,
    success: Optional[str] = "ja",
    *,
    blocker: Optional[str] = None,
    duration_ms: Optional[int] = None,
    task_options: Optional[Mapping[str, str]] = None,
    **kwargs,
) -> Submission:
    """Top Tasks submission; *task* is used as option id and label unless options are given."""
    answers = [
        choice(task, "task", task_options or {task: task}, label="Hva kom du for å gjøre?")
    ]
    if success is not None:
        answers.append(choice(success, "taskSuccess", SUCCESS_OPTIONS, label="Fikk du det til?"))
    if blocker is not None:
        answers.append(text(blocker, "blocker", label="Hva hindret deg?"))
    kwargs.setdefault("survey_type", "topTasks")
    return make_submission(*answers, duration_ms=duration_ms, **kwargs)


def make_discovery(
    task: Optional[str], success: Optional[str] = None, **kwargs
) -> Submission:
    answers = []
    if task is not None:
        answers.append(text(task, "task", label="Hva kom du for å gjøre?"))
    if success is not None:
        answers.append(
            choice(success, "success", {"yes": "Ja", "partial": "Delvis", "no": "Nei"})
        )
    kwargs.setdefault("survey_type", "discovery")
    return make_submission(*answers, **kwargs)


def make_vote(*option_ids: str, options: Optional[Mapping[str, str]] = None, **kwargs) -> Submission:
    kwargs.setdefault("survey_type", "taskPriority")
    return make_submission(multi(option_ids, options=options), **kwargs)


def make_theme(
    theme_id: str,
    name: str,
    keywords: Sequence[str],
    *,
    context: AnalysisContext = AnalysisContext.GENERAL_FEEDBACK,
    team: str = "team-a",
    color: Optional[str] = None,
) -> Theme:
    return Theme(
        id=theme_id,
        name=name,
        keywords=tuple(keywords),
        team=team,
        color=color,
        analysis_context=context,
    )
