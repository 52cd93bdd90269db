"""
Weak-area diagnostics for completed tests.

Each incorrect answer contributes:
- time_management, when more than 80% of the time limit was used
- a tag for the question type (meaning / spelling / context usage)
"""

from __future__ import annotations

from collections.abc import Iterable

from lexicon.core.models import QuestionType, TestAnswer, TestQuestion

TIME_PRESSURE_RATIO = 0.8
DEFAULT_TIME_LIMIT_S = 30

TIME_MANAGEMENT = "time_management"

TYPE_TAGS: dict[QuestionType, str] = {
    QuestionType.MULTIPLE_CHOICE: "vocabulary_meaning",
    QuestionType.FILL_BLANK: "spelling",
    QuestionType.CONTEXT: "context_usage",
}


def diagnose_weak_areas(
    questions: Iterable[TestQuestion],
    answers: Iterable[TestAnswer | None],
) -> list[str]:
    """
    Tags for the failure patterns in a test.

    Args:
        questions: The test's questions
        answers: Recorded answers (unanswered slots may be None)

    Returns:
        Unique tags in the order they were first triggered; empty when
        nothing identifiable went wrong
    """
    by_id = {q.id: q for q in questions}
    tags: dict[str, None] = {}

    for answer in answers:
        if answer is None or answer.is_correct:
            continue
        question = by_id.get(answer.question_id)
        if question is None:
            continue

        limit_ms = (question.time_limit_s or DEFAULT_TIME_LIMIT_S) * 1000
        if answer.time_used_ms > limit_ms * TIME_PRESSURE_RATIO:
            tags[TIME_MANAGEMENT] = None

        type_tag = TYPE_TAGS.get(question.type)
        if type_tag:
            tags[type_tag] = None

    return list(tags)
