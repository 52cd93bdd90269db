"""
Domain models for the vocabulary trainer.

Corpus entries and generated questions are immutable. StudyRecord and
LearnerProfile are the mutable per-learner state the storage collaborator
persists. Session and test objects handed to callers are frozen snapshots;
the managers keep the only mutable copy.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utcnow() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


# =============================================================================
# Enums
# =============================================================================


class SessionMode(str, Enum):
    """How a word pool is ordered for a session."""

    LEARN = "learn"
    REVIEW = "review"
    TEST = "test"


class QuestionType(str, Enum):
    """Supported question types."""

    MULTIPLE_CHOICE = "multiple_choice"
    FILL_BLANK = "fill_blank"
    CONTEXT = "context"
    MATCHING = "matching"


class TestLevel(str, Enum):
    """Assessment levels, easiest first."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    MASTER = "master"


class StudyState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"


class TestState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# =============================================================================
# Corpus
# =============================================================================


@dataclass(frozen=True)
class Definition:
    """One sense of a headword."""

    part_of_speech: str
    meaning: str
    examples: tuple[str, ...] = ()
    synonyms: tuple[str, ...] = ()
    antonyms: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> Definition:
        return cls(
            part_of_speech=data.get("part_of_speech") or data.get("partOfSpeech", ""),
            meaning=data["meaning"],
            examples=tuple(data.get("examples") or ()),
            synonyms=tuple(data.get("synonyms") or ()),
            antonyms=tuple(data.get("antonyms") or ()),
        )


@dataclass(frozen=True)
class VocabularyEntry:
    """
    A corpus item.

    Created at corpus load time and never mutated; every component holds
    references to the same instances.
    """

    id: str
    word: str
    pronunciation: str
    definitions: tuple[Definition, ...]
    difficulty: int  # 1-10
    frequency: int  # 0-100
    tags: tuple[str, ...] = ()

    @property
    def primary_meaning(self) -> str:
        return self.definitions[0].meaning

    @property
    def first_example(self) -> str | None:
        examples = self.definitions[0].examples
        return examples[0] if examples else None

    @classmethod
    def from_dict(cls, data: dict) -> VocabularyEntry:
        return cls(
            id=str(data["id"]),
            word=data["word"],
            pronunciation=data.get("pronunciation", ""),
            definitions=tuple(Definition.from_dict(d) for d in data.get("definitions", [])),
            difficulty=int(data.get("difficulty", 5)),
            frequency=int(data.get("frequency", 50)),
            tags=tuple(data.get("tags") or ()),
        )


# =============================================================================
# Per-learner state
# =============================================================================


@dataclass
class StudyRecord:
    """Scheduling state for one (learner, word) pair."""

    id: str
    word_id: str
    learner_id: str
    mastery_score: float  # 0-100
    review_count: int
    correct_count: int
    last_review_at: datetime
    next_review_at: datetime
    study_time_ms: int = 0
    created_at: datetime | None = None

    def is_due(self, now: datetime) -> bool:
        return self.next_review_at <= now

    @property
    def correct_rate(self) -> float:
        if self.review_count == 0:
            return 0.0
        return self.correct_count / self.review_count * 100

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("last_review_at", "next_review_at", "created_at"):
            data[key] = _iso(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> StudyRecord:
        return cls(
            id=data["id"],
            word_id=data["word_id"],
            learner_id=data["learner_id"],
            mastery_score=float(data["mastery_score"]),
            review_count=int(data["review_count"]),
            correct_count=int(data["correct_count"]),
            last_review_at=parse_datetime(data["last_review_at"]),
            next_review_at=parse_datetime(data["next_review_at"]),
            study_time_ms=int(data.get("study_time_ms", 0)),
            created_at=parse_datetime(data.get("created_at")),
        )


@dataclass
class LearnerProfile:
    """Aggregate learner state: experience, level, streak, achievements."""

    learner_id: str
    username: str
    level: int = 1
    experience: int = 0
    streak: int = 0
    achievements: list[str] = field(default_factory=list)
    total_words_studied: int = 0
    total_study_time_ms: int = 0
    tests_taken: int = 0
    daily_goal: int = 20
    created_at: datetime | None = None
    last_active_at: datetime | None = None

    def reset_progress(self) -> LearnerProfile:
        """Clear progress counters, keeping identity and the daily goal."""
        self.level = 1
        self.experience = 0
        self.streak = 0
        self.achievements = []
        self.total_words_studied = 0
        self.total_study_time_ms = 0
        self.tests_taken = 0
        return self

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = _iso(self.created_at)
        data["last_active_at"] = _iso(self.last_active_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> LearnerProfile:
        data = dict(data)
        data["achievements"] = list(data.get("achievements") or [])
        data["created_at"] = parse_datetime(data.get("created_at"))
        data["last_active_at"] = parse_datetime(data.get("last_active_at"))
        return cls(**data)


# =============================================================================
# Study sessions
# =============================================================================


@dataclass(frozen=True)
class StudySession:
    """Snapshot of a learn/review session."""

    id: str
    learner_id: str
    mode: SessionMode
    state: StudyState
    started_at: datetime
    word_queue: tuple[str, ...] = ()
    words_studied: tuple[str, ...] = ()
    total_correct: int = 0
    elapsed_ms: int = 0
    requested_count: int = 0
    difficulty_band: tuple[int, int] = (1, 10)
    ended_at: datetime | None = None

    @property
    def remaining(self) -> tuple[str, ...]:
        studied = set(self.words_studied)
        return tuple(w for w in self.word_queue if w not in studied)

    @property
    def accuracy(self) -> float:
        if not self.words_studied:
            return 0.0
        return self.total_correct / len(self.words_studied) * 100


# =============================================================================
# Tests
# =============================================================================


@dataclass(frozen=True)
class TestQuestion:
    """A generated question; immutable once built."""

    __test__ = False

    id: str
    type: QuestionType
    word_id: str
    prompt: str
    correct_answer: str
    difficulty: int
    time_limit_s: int
    options: tuple[str, ...] | None = None
    context: str | None = None

    @property
    def time_limit_ms(self) -> int:
        return self.time_limit_s * 1000


@dataclass(frozen=True)
class TestAnswer:
    """The learner's current answer for one question slot."""

    __test__ = False

    question_id: str
    user_answer: str
    is_correct: bool
    time_used_ms: int


@dataclass(frozen=True)
class TestSession:
    """Snapshot of an assessment."""

    __test__ = False

    id: str
    learner_id: str
    level: TestLevel
    state: TestState
    questions: tuple[TestQuestion, ...]
    answers: tuple[TestAnswer | None, ...]
    started_at: datetime
    current_index: int = 0
    requested_count: int = 0
    ended_at: datetime | None = None
    score: int = 0
    max_score: int = 0
    passed: bool = False

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    @property
    def correct_count(self) -> int:
        return sum(1 for a in self.answers if a is not None and a.is_correct)

    @property
    def accuracy(self) -> float:
        answered = self.answered_count
        return self.correct_count / answered * 100 if answered else 0.0


@dataclass(frozen=True)
class TestResult:
    """Persisted summary of a completed test."""

    __test__ = False

    id: str
    test_id: str
    learner_id: str
    level: TestLevel
    score: int
    max_score: int
    accuracy: float
    time_spent_ms: int
    completed_at: datetime
    passed: bool = False
    weak_areas: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["level"] = self.level.value
        data["completed_at"] = _iso(self.completed_at)
        data["weak_areas"] = list(self.weak_areas)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> TestResult:
        return cls(
            id=data["id"],
            test_id=data["test_id"],
            learner_id=data["learner_id"],
            level=TestLevel(data["level"]),
            score=int(data["score"]),
            max_score=int(data["max_score"]),
            accuracy=float(data["accuracy"]),
            time_spent_ms=int(data["time_spent_ms"]),
            completed_at=parse_datetime(data["completed_at"]),
            passed=bool(data.get("passed", False)),
            weak_areas=tuple(data.get("weak_areas") or ()),
        )
