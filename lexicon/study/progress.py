"""
Progress aggregation over persisted study history.

Derives:
- Daily and weekly progress against the learner's daily goal
- Accuracy per word difficulty (from the words' actual difficulty)
- Mastery-level breakdown
- Achievement signals (level, streak, words studied, perfect test)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from lexicon.content.loader import VocabularyCorpus
from lexicon.core.mastery import MasteryLevel
from lexicon.core.models import LearnerProfile, StudyRecord, TestResult

LEVEL_ACHIEVEMENTS: tuple[tuple[int, str], ...] = (
    (5, "first_milestone"),
    (10, "dedicated_learner"),
    (20, "vocabulary_expert"),
    (30, "word_master"),
    (50, "ielts_legend"),
)

STREAK_ACHIEVEMENTS: tuple[tuple[int, str], ...] = (
    (7, "week_warrior"),
    (30, "monthly_champion"),
    (100, "century_club"),
)

WORD_ACHIEVEMENTS: tuple[tuple[int, str], ...] = (
    (1, "first_word"),
    (50, "half_century"),
    (100, "century"),
    (500, "vocabulary_collector"),
    (1000, "word_conqueror"),
)

PERFECT_SCORE = "perfect_score"


@dataclass(frozen=True)
class DailyProgress:
    """Study activity for one calendar day."""

    day: date
    target: int
    completed: int = 0
    new_words: int = 0
    review_words: int = 0
    accuracy: float = 0.0
    time_spent_s: int = 0

    @property
    def goal_met(self) -> bool:
        return self.completed >= self.target


@dataclass(frozen=True)
class WeeklyProgress:
    """Seven days of progress starting at ``week_start``."""

    week_start: date
    days: tuple[DailyProgress, ...]
    total_words: int
    total_time_s: int
    average_accuracy: float
    achievements: tuple[str, ...] = field(default_factory=tuple)


def daily_progress(
    records: Iterable[StudyRecord],
    day: date,
    daily_goal: int = 20,
) -> DailyProgress:
    """
    Progress from the records last reviewed on ``day``.

    New words have exactly one review; everything else counts as review.
    """
    todays = [r for r in records if r.last_review_at.date() == day]
    total_reviews = sum(r.review_count for r in todays)
    total_correct = sum(r.correct_count for r in todays)
    total_time_ms = sum(r.study_time_ms for r in todays)

    return DailyProgress(
        day=day,
        target=daily_goal,
        completed=len(todays),
        new_words=sum(1 for r in todays if r.review_count == 1),
        review_words=sum(1 for r in todays if r.review_count > 1),
        accuracy=total_correct / total_reviews * 100 if total_reviews else 0.0,
        time_spent_s=total_time_ms // 1000,
    )


def weekly_progress(
    records: Iterable[StudyRecord],
    week_start: date,
    daily_goal: int = 20,
    achievements: Iterable[str] = (),
) -> WeeklyProgress:
    records = list(records)
    days = tuple(
        daily_progress(records, week_start + timedelta(days=offset), daily_goal)
        for offset in range(7)
    )
    active = [d for d in days if d.completed > 0]

    return WeeklyProgress(
        week_start=week_start,
        days=days,
        total_words=sum(d.completed for d in days),
        total_time_s=sum(d.time_spent_s for d in days),
        average_accuracy=sum(d.accuracy for d in active) / len(active) if active else 0.0,
        achievements=tuple(achievements),
    )


def accuracy_by_difficulty(
    records: Iterable[StudyRecord],
    corpus: VocabularyCorpus,
) -> dict[int, dict[str, float]]:
    """
    Review accuracy grouped by each word's corpus difficulty.

    Records for words missing from the corpus are skipped.
    """
    buckets: dict[int, dict[str, float]] = {}
    for record in records:
        entry = corpus.get(record.word_id)
        if entry is None:
            continue
        bucket = buckets.setdefault(
            entry.difficulty, {"words": 0, "reviews": 0, "correct": 0, "accuracy": 0.0}
        )
        bucket["words"] += 1
        bucket["reviews"] += record.review_count
        bucket["correct"] += record.correct_count

    for bucket in buckets.values():
        if bucket["reviews"]:
            bucket["accuracy"] = round(bucket["correct"] / bucket["reviews"] * 100, 1)

    return dict(sorted(buckets.items()))


def mastery_breakdown(records: Iterable[StudyRecord]) -> dict[MasteryLevel, int]:
    counts = {level: 0 for level in MasteryLevel}
    for record in records:
        counts[MasteryLevel.from_score(record.mastery_score)] += 1
    return counts


def _milestones(value: int, table: Sequence[tuple[int, str]]) -> list[str]:
    return [achievement_id for threshold, achievement_id in table if value >= threshold]


def achievement_signals(
    profile: LearnerProfile,
    test_results: Iterable[TestResult] = (),
    records: Iterable[StudyRecord] = (),
) -> list[str]:
    """
    Achievement ids earned by the current state but not yet held.

    Words studied is the larger of the profile counter and the number of
    distinct studied words in ``records``.
    """
    words_studied = max(profile.total_words_studied, len({r.word_id for r in records}))

    earned = (
        _milestones(profile.level, LEVEL_ACHIEVEMENTS)
        + _milestones(profile.streak, STREAK_ACHIEVEMENTS)
        + _milestones(words_studied, WORD_ACHIEVEMENTS)
    )
    if any(result.accuracy >= 100 for result in test_results):
        earned.append(PERFECT_SCORE)

    held = set(profile.achievements)
    return [a for a in dict.fromkeys(earned) if a not in held]


def test_history(results: Iterable[TestResult]) -> list[TestResult]:
    """Completed tests, newest first."""
    return sorted(results, key=lambda r: r.completed_at, reverse=True)
