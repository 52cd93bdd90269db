"""
Study Session Manager.

Orchestrates a learn/review session:
- Selects the word queue once at start (difficulty band from the estimator)
- Applies the mastery model per answer and persists the updated record
- Awards experience per answer and for the whole session on end
- Keeps the learner's streak and achievements current

State machine: IDLE → ACTIVE → ENDED (ENDED can start again).
Callers only ever receive frozen StudySession snapshots.
"""

from __future__ import annotations

import random
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from lexicon.adaptive.difficulty import AdaptiveDifficultyEstimator
from lexicon.content.loader import VocabularyCorpus
from lexicon.core.errors import (
    ExhaustionError,
    PersistenceError,
    SessionStateError,
    ValidationError,
)
from lexicon.core.mastery import MasteryModel
from lexicon.core.models import (
    LearnerProfile,
    SessionMode,
    StudyRecord,
    StudySession,
    StudyState,
    VocabularyEntry,
    utcnow,
)
from lexicon.delivery.storage import StorageBackend
from lexicon.study.profile import (
    RewardConfig,
    apply_experience,
    new_profile,
    touch_streak,
    unlock_achievements,
)
from lexicon.study.progress import achievement_signals
from lexicon.study.word_selector import WordSelector, filter_to_band

STUDY_MODES = (SessionMode.LEARN, SessionMode.REVIEW)


@dataclass(frozen=True)
class AnswerFeedback:
    """Result of one answered word."""

    word_id: str
    is_correct: bool
    record: StudyRecord
    experience_gained: int
    offer_hint: bool
    session: StudySession
    summary: StudySummary | None = None  # set when the answer ended the session


@dataclass(frozen=True)
class StudySummary:
    """End-of-session totals."""

    session_id: str
    mode: SessionMode
    words_studied: int
    total_correct: int
    accuracy: float
    experience_gained: int
    duration_ms: int
    achievements_unlocked: tuple[str, ...] = ()
    aborted: bool = False


@dataclass
class _WorkingSession:
    id: str
    mode: SessionMode
    started_at: datetime
    queue: list[str]
    requested_count: int
    band: tuple[int, int]
    studied: list[str] = field(default_factory=list)
    total_correct: int = 0
    elapsed_ms: int = 0
    experience: int = 0
    ended_at: datetime | None = None


class StudySessionManager:
    """
    Single-learner study session orchestration.

    All collaborators are injected; the manager holds the only mutable
    session copy and the learner's profile while a session runs.
    """

    def __init__(
        self,
        store: StorageBackend,
        corpus: VocabularyCorpus,
        learner_id: str,
        username: str = "learner",
        mastery: MasteryModel | None = None,
        estimator: AdaptiveDifficultyEstimator | None = None,
        selector: WordSelector | None = None,
        reward: RewardConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
        rng: random.Random | None = None,
        session_word_count: int = 20,
        daily_goal: int = 20,
    ):
        """
        Args:
            store: Async storage collaborator
            corpus: Loaded vocabulary
            learner_id: Whose records and profile to use
            username: Name for a newly created profile
            mastery: Mastery/scheduling model
            estimator: Rolling difficulty window for this learner
            selector: Word ordering
            reward: Experience constants
            clock: Returns the current time
            rng: Shuffles the candidate pool; None keeps corpus order
            session_word_count: Default words per session
            daily_goal: Daily goal for a newly created profile
        """
        self.store = store
        self.corpus = corpus
        self.learner_id = learner_id
        self.username = username
        self.mastery = mastery or MasteryModel()
        self.estimator = estimator or AdaptiveDifficultyEstimator()
        self.selector = selector or WordSelector()
        self.reward = reward or RewardConfig()
        self.clock = clock
        self.rng = rng
        self.session_word_count = session_word_count
        self.daily_goal = daily_goal

        self._state = StudyState.IDLE
        self._session: _WorkingSession | None = None
        self._profile: LearnerProfile | None = None
        self._history: dict[str, StudyRecord] = {}
        self.last_summary: StudySummary | None = None

    @property
    def state(self) -> StudyState:
        return self._state

    @property
    def profile(self) -> LearnerProfile | None:
        return self._profile

    # =========================================================================
    # Persistence helpers
    # =========================================================================

    async def _load_history(self) -> dict[str, StudyRecord]:
        try:
            records = await self.store.get_records_by_learner(self.learner_id)
        except Exception as e:
            raise PersistenceError("get_records_by_learner", str(e)) from e
        return {r.word_id: r for r in records}

    async def load_profile(self) -> LearnerProfile:
        """Fetch the learner profile, creating one on first use."""
        try:
            profile = await self.store.get_learner_profile(self.learner_id)
        except Exception as e:
            raise PersistenceError("get_learner_profile", str(e)) from e

        if profile is None:
            profile = new_profile(self.learner_id, self.username, self.clock(), self.daily_goal)
            logger.info(f"Created profile for learner {self.learner_id}")
        self._profile = profile
        return profile

    async def _save_profile(self) -> None:
        if self._profile is None:
            return
        try:
            await self.store.put_learner_profile(self._profile)
        except Exception as e:
            logger.warning(f"Profile save failed for {self.learner_id}: {e}")
            raise PersistenceError("put_learner_profile", str(e)) from e

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start_session(
        self,
        mode: SessionMode | str,
        count: int | None = None,
        pool: Sequence[str] | None = None,
    ) -> StudySession:
        """
        IDLE/ENDED → ACTIVE.

        Args:
            mode: learn or review
            count: Words to queue (session_word_count if None)
            pool: Explicit candidate ids; defaults to the corpus, filtered to
                  the estimator's difficulty band in learn mode

        Raises:
            SessionStateError: A session is already active
            ValidationError: Unknown mode, bad count or unknown pool ids
            ExhaustionError: Nothing to study (e.g. no words due)
            PersistenceError: History or profile could not be loaded/saved
        """
        if self._state == StudyState.ACTIVE:
            raise SessionStateError("A study session is already active")

        try:
            mode = SessionMode(mode)
        except ValueError as e:
            raise ValidationError(f"Unknown session mode: {mode!r}") from e
        if mode not in STUDY_MODES:
            raise ValidationError(f"Mode {mode.value} is not a study mode")

        count = self.session_word_count if count is None else count
        if count < 1:
            raise ValidationError(f"count must be >= 1, got {count}")

        if pool is not None:
            unknown = [w for w in pool if w not in self.corpus]
            if unknown:
                raise ValidationError(f"Unknown word ids: {', '.join(unknown)}")

        history = await self._load_history()
        now = self.clock()

        # Band is fixed for the whole session
        band = self.estimator.target_band()
        if pool is None:
            candidates = [w.id for w in self.corpus]
            if mode == SessionMode.LEARN:
                banded = filter_to_band(self.corpus, band)
                if banded:
                    candidates = banded
                else:
                    logger.warning(f"No words in difficulty band {band}, using full corpus")
        else:
            candidates = list(pool)

        queue = self.selector.select(candidates, mode, count, history, now, rng=self.rng)
        if not queue:
            raise ExhaustionError(count, 0)

        # Re-read every start so saves from other managers are not overwritten
        profile = await self.load_profile()

        self._history = history
        self._session = _WorkingSession(
            id=str(uuid.uuid4()),
            mode=mode,
            started_at=now,
            queue=queue,
            requested_count=count,
            band=band,
        )
        self._state = StudyState.ACTIVE
        self.last_summary = None
        logger.info(
            f"Study session {self._session.id} started: {mode.value}, "
            f"{len(queue)}/{count} words, band {band[0]}-{band[1]}"
        )

        touch_streak(profile, now)
        await self._save_profile()
        return self.snapshot()

    async def answer_word(
        self,
        word_id: str,
        is_correct: bool,
        latency_ms: int = 0,
    ) -> AnswerFeedback:
        """
        Record one answer: update mastery, persist, accumulate, award exp.

        Each queued word is answered once. If the store rejects the write
        the session still counts the answer (and ends when that was the last
        queued word); the PersistenceError is raised afterwards.

        Raises:
            SessionStateError: No active session, or the word was already answered
            ValidationError: Unknown word, or a word outside the session queue
            PersistenceError: The record could not be read or written
        """
        session = self._require_active()
        entry: VocabularyEntry = self.corpus.require(word_id)
        if word_id not in session.queue:
            raise ValidationError(f"Word {word_id} is not in this session's queue")
        if word_id in session.studied:
            raise SessionStateError(f"Word {word_id} already answered in this session")
        latency_ms = max(int(latency_ms), 0)
        now = self.clock()

        try:
            current = await self.store.get_record(word_id, self.learner_id)
        except Exception as e:
            raise PersistenceError("get_record", str(e)) from e

        record = self.mastery.review(current, word_id, self.learner_id, is_correct, latency_ms, now)
        logger.debug(
            f"{entry.word}: {'correct' if is_correct else 'incorrect'}, "
            f"mastery {current.mastery_score if current else 0:.1f} → {record.mastery_score:.1f}, "
            f"next review {record.next_review_at.isoformat()}"
        )

        write_error: Exception | None = None
        try:
            await self.store.put_record(record)
        except Exception as e:
            write_error = e

        self._history[word_id] = record
        self.estimator.record_outcome(is_correct, latency_ms, entry.difficulty)
        session.studied.append(word_id)
        if is_correct:
            session.total_correct += 1
        session.elapsed_ms += latency_ms

        gained = self.reward.answer_reward(is_correct)
        session.experience += gained
        if self._profile is not None:
            apply_experience(self._profile, gained, self.reward)

        summary = None
        if not self._remaining(session):
            logger.info(f"Study session {session.id} queue exhausted")
            summary = await self._finish(aborted=False)

        if write_error is not None:
            logger.warning(f"Study record for {word_id} not saved: {write_error}")
            raise PersistenceError("put_record", str(write_error)) from write_error

        return AnswerFeedback(
            word_id=word_id,
            is_correct=is_correct,
            record=record,
            experience_gained=gained,
            offer_hint=self.estimator.should_offer_hint(),
            session=self.snapshot(),
            summary=summary,
        )

    def add_elapsed(self, elapsed_ms: int) -> StudySession:
        """Fold UI-measured time (e.g. reading a card) into the session."""
        session = self._require_active()
        session.elapsed_ms += max(int(elapsed_ms), 0)
        return self.snapshot()

    async def end_session(self) -> StudySummary:
        """ACTIVE → ENDED, applying the session experience bonus."""
        self._require_active()
        return await self._finish(aborted=False)

    async def abort_session(self) -> StudySummary:
        """Early stop. Same bookkeeping as a normal end; answers already saved stay."""
        self._require_active()
        return await self._finish(aborted=True)

    async def _finish(self, aborted: bool) -> StudySummary:
        session = self._session
        assert session is not None
        session.ended_at = self.clock()
        self._state = StudyState.ENDED

        words = len(session.studied)
        bonus = self.reward.session_reward(words, session.total_correct)
        session.experience += bonus

        unlocked: list[str] = []
        if self._profile is not None:
            apply_experience(self._profile, bonus, self.reward)
            self._profile.total_words_studied += words
            self._profile.total_study_time_ms += session.elapsed_ms
            unlocked = unlock_achievements(
                self._profile,
                achievement_signals(self._profile, records=self._history.values()),
            )

        summary = StudySummary(
            session_id=session.id,
            mode=session.mode,
            words_studied=words,
            total_correct=session.total_correct,
            accuracy=session.total_correct / words * 100 if words else 0.0,
            experience_gained=session.experience,
            duration_ms=session.elapsed_ms,
            achievements_unlocked=tuple(unlocked),
            aborted=aborted,
        )
        self.last_summary = summary
        logger.info(
            f"Study session {session.id} {'aborted' if aborted else 'ended'}: "
            f"{words} words, {summary.accuracy:.0f}% correct, +{summary.experience_gained} exp"
        )

        await self._save_profile()
        return summary

    # =========================================================================
    # Snapshots
    # =========================================================================

    def _require_active(self) -> _WorkingSession:
        if self._state != StudyState.ACTIVE or self._session is None:
            raise SessionStateError("No active study session")
        return self._session

    @staticmethod
    def _remaining(session: _WorkingSession) -> list[str]:
        studied = set(session.studied)
        return [w for w in session.queue if w not in studied]

    def snapshot(self) -> StudySession | None:
        """Frozen view of the current (or last) session."""
        session = self._session
        if session is None:
            return None
        return StudySession(
            id=session.id,
            learner_id=self.learner_id,
            mode=session.mode,
            state=self._state,
            started_at=session.started_at,
            word_queue=tuple(session.queue),
            words_studied=tuple(session.studied),
            total_correct=session.total_correct,
            elapsed_ms=session.elapsed_ms,
            requested_count=session.requested_count,
            difficulty_band=session.band,
            ended_at=session.ended_at,
        )

    def current_word(self) -> VocabularyEntry | None:
        """Next unanswered word in the queue."""
        if self._state != StudyState.ACTIVE or self._session is None:
            return None
        remaining = self._remaining(self._session)
        return self.corpus.get(remaining[0]) if remaining else None

    # =========================================================================
    # History queries
    # =========================================================================

    async def due_words(self, limit: int = 50) -> list[VocabularyEntry]:
        """Words due for review now, weakest first."""
        history = await self._load_history()
        now = self.clock()
        due = sorted(
            (r for r in history.values() if r.word_id in self.corpus and r.is_due(now)),
            key=lambda r: r.mastery_score,
        )
        return [self.corpus.require(r.word_id) for r in due[:limit]]

    async def study_history(self, limit: int = 50) -> list[StudyRecord]:
        """Study records, most recently reviewed first."""
        history = await self._load_history()
        records = sorted(history.values(), key=lambda r: r.last_review_at, reverse=True)
        return records[:limit]

    async def mastery_of(self, word_id: str) -> float:
        """Mastery score for a word; 0 when never studied."""
        try:
            record = await self.store.get_record(word_id, self.learner_id)
        except Exception as e:
            raise PersistenceError("get_record", str(e)) from e
        return record.mastery_score if record else 0.0
