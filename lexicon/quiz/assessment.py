"""
Test Session Manager.

Runs a timed multi-question assessment:
- Picks words from the level's difficulty band and builds questions
- Records (and re-records) answers by exact, case-insensitive match
- Scores, decides pass/fail and diagnoses weak areas on end
- Persists a TestResult and awards experience when passed

State machine: NOT_STARTED → IN_PROGRESS → COMPLETED.
The UI owns the countdown; expiry arrives as ``expire_question``.
"""

from __future__ import annotations

import math
import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from lexicon.content.loader import VocabularyCorpus
from lexicon.core.errors import PersistenceError, SessionStateError, ValidationError
from lexicon.core.models import (
    LearnerProfile,
    SessionMode,
    TestAnswer,
    TestLevel,
    TestQuestion,
    TestResult,
    TestSession,
    TestState,
    utcnow,
)
from lexicon.delivery.storage import StorageBackend
from lexicon.quiz.synthesizer import QuestionSynthesizer
from lexicon.quiz.weak_areas import diagnose_weak_areas
from lexicon.study.profile import RewardConfig, apply_experience, new_profile, unlock_achievements
from lexicon.study.progress import achievement_signals, test_history
from lexicon.study.word_selector import WordSelector

DEFAULT_BANDS: dict[TestLevel, tuple[int, int]] = {
    TestLevel.BEGINNER: (1, 4),
    TestLevel.INTERMEDIATE: (3, 6),
    TestLevel.ADVANCED: (5, 8),
    TestLevel.MASTER: (7, 10),
}

DEFAULT_PASS_THRESHOLDS: dict[TestLevel, float] = {
    TestLevel.BEGINNER: 70.0,
    TestLevel.INTERMEDIATE: 75.0,
    TestLevel.ADVANCED: 80.0,
    TestLevel.MASTER: 85.0,
}


@dataclass(frozen=True)
class TestLevelConfig:
    """Difficulty band and pass threshold (accuracy %) per level."""

    __test__ = False

    difficulty_bands: dict[TestLevel, tuple[int, int]] = field(
        default_factory=lambda: dict(DEFAULT_BANDS)
    )
    pass_thresholds: dict[TestLevel, float] = field(
        default_factory=lambda: dict(DEFAULT_PASS_THRESHOLDS)
    )

    def band(self, level: TestLevel) -> tuple[int, int]:
        return self.difficulty_bands.get(level, DEFAULT_BANDS[level])

    def threshold(self, level: TestLevel) -> float:
        return self.pass_thresholds.get(level, DEFAULT_PASS_THRESHOLDS[level])


@dataclass(frozen=True)
class TestSummary:
    """End-of-test report for the UI."""

    __test__ = False

    result: TestResult
    correct_count: int
    answered_count: int
    experience_gained: int
    achievements_unlocked: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.result.passed

    @property
    def accuracy(self) -> float:
        return self.result.accuracy

    @property
    def weak_areas(self) -> tuple[str, ...]:
        return self.result.weak_areas


def answers_match(given: str, expected: str) -> bool:
    """Exact match after trimming whitespace and lower-casing both sides."""
    return given.strip().lower() == expected.strip().lower()


@dataclass
class _WorkingTest:
    id: str
    level: TestLevel
    questions: list[TestQuestion]
    answers: list[TestAnswer | None]
    started_at: datetime
    requested_count: int
    current_index: int = 0
    ended_at: datetime | None = None
    score: int = 0
    passed: bool = False


class TestSessionManager:
    """
    Single-learner assessment orchestration.

    Question generation is synchronous; only the result and profile writes
    touch the store.
    """

    __test__ = False

    def __init__(
        self,
        store: StorageBackend,
        corpus: VocabularyCorpus,
        learner_id: str,
        username: str = "learner",
        synthesizer: QuestionSynthesizer | None = None,
        selector: WordSelector | None = None,
        levels: TestLevelConfig | None = None,
        reward: RewardConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
        rng: random.Random | None = None,
        question_count: int = 20,
        daily_goal: int = 20,
    ):
        self.store = store
        self.corpus = corpus
        self.learner_id = learner_id
        self.username = username
        self.rng = rng or random.Random()
        self.synthesizer = synthesizer or QuestionSynthesizer(self.rng)
        self.selector = selector or WordSelector()
        self.levels = levels or TestLevelConfig()
        self.reward = reward or RewardConfig()
        self.clock = clock
        self.question_count = question_count
        self.daily_goal = daily_goal

        self._state = TestState.NOT_STARTED
        self._test: _WorkingTest | None = None
        self._profile: LearnerProfile | None = None
        self.last_summary: TestSummary | None = None

    @property
    def state(self) -> TestState:
        return self._state

    @property
    def profile(self) -> LearnerProfile | None:
        return self._profile

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start_test(
        self,
        level: TestLevel | str,
        question_count: int | None = None,
    ) -> TestSession:
        """
        NOT_STARTED/COMPLETED → IN_PROGRESS.

        A band with fewer words than requested yields a shorter test;
        ``requested_count`` on the snapshot keeps the original ask.

        Raises:
            SessionStateError: A test is already in progress
            ValidationError: Unknown level, bad count or an empty band
        """
        if self._state == TestState.IN_PROGRESS:
            raise SessionStateError("A test is already in progress")

        try:
            level = TestLevel(level)
        except ValueError as e:
            raise ValidationError(f"Unknown test level: {level!r}") from e

        count = self.question_count if question_count is None else question_count
        if count < 1:
            raise ValidationError(f"question_count must be >= 1, got {count}")

        low, high = self.levels.band(level)
        candidates = [w.id for w in self.corpus.by_difficulty(low, high)]
        if not candidates:
            raise ValidationError(f"No words with difficulty {low}-{high} for {level.value}")

        now = self.clock()
        ids = self.selector.select(candidates, SessionMode.TEST, count, {}, now, rng=self.rng)
        words = [self.corpus.require(w) for w in ids]
        questions = self.synthesizer.generate_set(words, self.corpus)

        # Always re-read: the study manager may have saved since
        await self._load_profile()

        self._test = _WorkingTest(
            id=str(uuid.uuid4()),
            level=level,
            questions=questions,
            answers=[None] * len(questions),
            started_at=now,
            requested_count=count,
        )
        self._state = TestState.IN_PROGRESS
        self.last_summary = None
        logger.info(
            f"Test {self._test.id} started: {level.value}, {len(questions)}/{count} questions"
        )
        return self.snapshot()

    def answer_question(self, question_id: str, answer: str, time_used_ms: int = 0) -> TestAnswer:
        """
        Fill (or overwrite) the answer slot for a question.

        Raises:
            SessionStateError: No test in progress
            ValidationError: Unknown question id
        """
        test = self._require_in_progress()
        index = self._index_of(test, question_id)
        question = test.questions[index]

        recorded = TestAnswer(
            question_id=question_id,
            user_answer=answer,
            is_correct=answers_match(answer, question.correct_answer),
            time_used_ms=max(int(time_used_ms), 0),
        )
        test.answers[index] = recorded
        logger.debug(
            f"Question {question_id}: {'correct' if recorded.is_correct else 'incorrect'}"
        )
        return recorded

    def expire_question(self, question_id: str, selected: str | None = None) -> TestAnswer:
        """Timer ran out: submit the selected answer (or blank) using the full limit."""
        test = self._require_in_progress()
        question = test.questions[self._index_of(test, question_id)]
        return self.answer_question(question_id, selected or "", question.time_limit_ms)

    def navigate_question(self, delta: int) -> TestQuestion | None:
        """Move the current index by ``delta``, clamped to the question list."""
        test = self._require_in_progress()
        if test.questions:
            test.current_index = max(0, min(test.current_index + delta, len(test.questions) - 1))
        return self.current_question()

    def current_question(self) -> TestQuestion | None:
        test = self._test
        if test is None or self._state != TestState.IN_PROGRESS or not test.questions:
            return None
        return test.questions[test.current_index]

    def score(self) -> dict[str, float]:
        """Live score: correct answers, question count and accuracy over answered slots."""
        test = self._test
        if test is None:
            return {"score": 0, "max_score": 0, "accuracy": 0.0}
        answered = [a for a in test.answers if a is not None]
        correct = sum(1 for a in answered if a.is_correct)
        return {
            "score": correct,
            "max_score": len(test.questions),
            "accuracy": correct / len(answered) * 100 if answered else 0.0,
        }

    async def end_test(self) -> TestSummary:
        """
        IN_PROGRESS → COMPLETED.

        The test is completed in memory before anything is written; a
        failed write raises PersistenceError and ``last_summary`` still
        holds the outcome.
        """
        test = self._require_in_progress()
        now = self.clock()

        live = self.score()
        score = int(live["score"])
        accuracy = float(live["accuracy"])
        threshold = self.levels.threshold(test.level)
        passed = accuracy >= threshold
        weak_areas = diagnose_weak_areas(test.questions, test.answers)
        time_spent_ms = sum(a.time_used_ms for a in test.answers if a is not None)

        test.ended_at = now
        test.score = score
        test.passed = passed
        self._state = TestState.COMPLETED

        result = TestResult(
            id=str(uuid.uuid4()),
            test_id=test.id,
            learner_id=self.learner_id,
            level=test.level,
            score=score,
            max_score=len(test.questions),
            accuracy=accuracy,
            time_spent_ms=time_spent_ms,
            completed_at=now,
            passed=passed,
            weak_areas=tuple(weak_areas),
        )

        gained = math.floor(score * self.reward.test_per_point) if passed else 0
        unlocked: list[str] = []
        if self._profile is not None:
            apply_experience(self._profile, gained, self.reward)
            self._profile.tests_taken += 1
            unlocked = unlock_achievements(
                self._profile, achievement_signals(self._profile, test_results=[result])
            )

        summary = TestSummary(
            result=result,
            correct_count=score,
            answered_count=sum(1 for a in test.answers if a is not None),
            experience_gained=gained,
            achievements_unlocked=tuple(unlocked),
        )
        self.last_summary = summary
        logger.info(
            f"Test {test.id} completed: {score}/{result.max_score}, {accuracy:.1f}% "
            f"({'passed' if passed else f'failed, needed {threshold:.0f}%'})"
        )

        try:
            await self.store.put_test_result(result)
        except Exception as e:
            logger.warning(f"Test result {result.id} not saved: {e}")
            raise PersistenceError("put_test_result", str(e)) from e

        if self._profile is not None:
            try:
                await self.store.put_learner_profile(self._profile)
            except Exception as e:
                logger.warning(f"Profile save failed for {self.learner_id}: {e}")
                raise PersistenceError("put_learner_profile", str(e)) from e

        return summary

    def abort_test(self) -> None:
        """Discard the running test; nothing is persisted."""
        test = self._require_in_progress()
        logger.info(f"Test {test.id} aborted")
        self._test = None
        self._state = TestState.NOT_STARTED

    async def history(self) -> list[TestResult]:
        """Completed test results, newest first."""
        try:
            results = await self.store.get_test_results(self.learner_id)
        except Exception as e:
            raise PersistenceError("get_test_results", str(e)) from e
        return test_history(results)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _load_profile(self) -> LearnerProfile:
        try:
            profile = await self.store.get_learner_profile(self.learner_id)
        except Exception as e:
            raise PersistenceError("get_learner_profile", str(e)) from e
        if profile is None:
            profile = new_profile(self.learner_id, self.username, self.clock(), self.daily_goal)
        self._profile = profile
        return profile

    def _require_in_progress(self) -> _WorkingTest:
        if self._state != TestState.IN_PROGRESS or self._test is None:
            raise SessionStateError("No test in progress")
        return self._test

    @staticmethod
    def _index_of(test: _WorkingTest, question_id: str) -> int:
        for i, question in enumerate(test.questions):
            if question.id == question_id:
                return i
        raise ValidationError(f"Unknown question id: {question_id}")

    def snapshot(self) -> TestSession | None:
        """Frozen view of the current (or last completed) test."""
        test = self._test
        if test is None:
            return None
        return TestSession(
            id=test.id,
            learner_id=self.learner_id,
            level=test.level,
            state=self._state,
            questions=tuple(test.questions),
            answers=tuple(test.answers),
            started_at=test.started_at,
            current_index=test.current_index,
            requested_count=test.requested_count,
            ended_at=test.ended_at,
            score=test.score,
            max_score=len(test.questions),
            passed=test.passed,
        )
