"""
Core Mastery Module.

Mastery score updates and spaced-repetition scheduling for single words.

Design:
- MasteryLevel: Enum for categorizing 0-100 mastery scores
- MasteryConfig: Tunable constants (rates, seeds, interval ladder)
- MasteryModel: Pure update/scheduling functions; time is always passed in
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from lexicon.core.models import StudyRecord

# Spaced-repetition ladder, in hours
BASE_INTERVALS_HOURS: tuple[float, ...] = (1, 4, 24, 72, 168, 720, 2880)


class MasteryLevel(str, Enum):
    """
    Mastery level categorization.

    Aligned with learning science research on skill acquisition stages.
    """

    NOT_STARTED = "not_started"  # 0
    NOVICE = "novice"  # 1-39
    DEVELOPING = "developing"  # 40-69
    PROFICIENT = "proficient"  # 70-89
    MASTERED = "mastered"  # 90-100

    @classmethod
    def from_score(cls, score: float) -> MasteryLevel:
        """
        Convert a 0-100 mastery score to a level.

        Args:
            score: Mastery score between 0 and 100

        Returns:
            Corresponding MasteryLevel
        """
        if score <= 0:
            return cls.NOT_STARTED
        elif score < 40:
            return cls.NOVICE
        elif score < 70:
            return cls.DEVELOPING
        elif score < 90:
            return cls.PROFICIENT
        else:
            return cls.MASTERED

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("_", " ").title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.NOT_STARTED: "dim",
            MasteryLevel.NOVICE: "red",
            MasteryLevel.DEVELOPING: "yellow",
            MasteryLevel.PROFICIENT: "cyan",
            MasteryLevel.MASTERED: "green",
        }[self]


@dataclass(frozen=True)
class MasteryConfig:
    """Configuration for mastery updates and review intervals."""

    gain_rate: float = 0.3  # fraction of the remaining gap closed on a correct answer
    loss_rate: float = 0.3  # fraction of current mastery lost on a miss
    first_correct_mastery: float = 25.0
    first_incorrect_mastery: float = 5.0
    base_intervals_hours: tuple[float, ...] = BASE_INTERVALS_HOURS
    min_mastery_factor: float = 0.5  # interval scale at mastery 0
    mastery_factor_span: float = 1.5  # added scale at mastery 100
    incorrect_interval_factor: float = 0.5


class MasteryModel:
    """
    Mastery score and next-review calculation.

    Every method is pure arithmetic over its arguments: the caller supplies
    ``now`` so results are reproducible.
    """

    def __init__(self, config: MasteryConfig | None = None):
        self.config = config or MasteryConfig()

    def next_mastery(self, current: float, is_correct: bool) -> float:
        """
        Move mastery toward 100 on success and toward 0 on failure.

        Args:
            current: Mastery before the answer (0-100)
            is_correct: Whether the learner recalled the word

        Returns:
            Updated mastery clamped to [0, 100]
        """
        current = min(max(current, 0.0), 100.0)
        if is_correct:
            return min(current + (100.0 - current) * self.config.gain_rate, 100.0)
        return max(current - current * self.config.loss_rate, 0.0)

    def initial_mastery(self, is_correct: bool) -> float:
        """Mastery seeded on the first-ever review of a word."""
        if is_correct:
            return self.config.first_correct_mastery
        return self.config.first_incorrect_mastery

    def interval_hours(self, mastery: float, review_count: int, is_correct: bool) -> float:
        """Hours until the next review."""
        ladder = self.config.base_intervals_hours
        index = max(0, min(review_count - 1, len(ladder) - 1))
        base = ladder[index]

        mastery_factor = self.config.min_mastery_factor + (
            min(max(mastery, 0.0), 100.0) / 100.0
        ) * self.config.mastery_factor_span
        correctness_factor = 1.0 if is_correct else self.config.incorrect_interval_factor

        return base * mastery_factor * correctness_factor

    def next_review_at(
        self,
        mastery: float,
        review_count: int,
        is_correct: bool,
        now: datetime,
    ) -> datetime:
        """
        Schedule the next review.

        Args:
            mastery: Mastery after applying this answer
            review_count: Review count after applying this answer (>= 1)
            is_correct: Whether this answer was correct
            now: Current time

        Returns:
            A timestamp strictly after ``now``
        """
        hours = self.interval_hours(mastery, review_count, is_correct)
        return now + timedelta(hours=hours)

    def review(
        self,
        record: StudyRecord | None,
        word_id: str,
        learner_id: str,
        is_correct: bool,
        latency_ms: int,
        now: datetime,
    ) -> StudyRecord:
        """
        Apply one answer to a word's record, creating it on first review.

        The input record is left untouched; a new record is returned.
        """
        if record is None:
            mastery = self.initial_mastery(is_correct)
            return StudyRecord(
                id=str(uuid.uuid4()),
                word_id=word_id,
                learner_id=learner_id,
                mastery_score=mastery,
                review_count=1,
                correct_count=1 if is_correct else 0,
                last_review_at=now,
                next_review_at=self.next_review_at(mastery, 1, is_correct, now),
                study_time_ms=max(latency_ms, 0),
                created_at=now,
            )

        mastery = self.next_mastery(record.mastery_score, is_correct)
        review_count = record.review_count + 1
        return replace(
            record,
            mastery_score=mastery,
            review_count=review_count,
            correct_count=record.correct_count + (1 if is_correct else 0),
            last_review_at=now,
            next_review_at=self.next_review_at(mastery, review_count, is_correct, now),
            study_time_ms=record.study_time_ms + max(latency_ms, 0),
        )
