"""
Core domain: models, errors and the mastery model.
"""

from lexicon.core.errors import (
    ExhaustionError,
    LexiconError,
    PersistenceError,
    SessionStateError,
    ValidationError,
)
from lexicon.core.mastery import MasteryConfig, MasteryLevel, MasteryModel
from lexicon.core.models import (
    Definition,
    LearnerProfile,
    QuestionType,
    SessionMode,
    StudyRecord,
    StudySession,
    StudyState,
    TestAnswer,
    TestLevel,
    TestQuestion,
    TestResult,
    TestSession,
    TestState,
    VocabularyEntry,
    utcnow,
)

__all__ = [
    # Errors
    "LexiconError",
    "ValidationError",
    "SessionStateError",
    "PersistenceError",
    "ExhaustionError",
    # Mastery
    "MasteryConfig",
    "MasteryLevel",
    "MasteryModel",
    # Models
    "Definition",
    "VocabularyEntry",
    "StudyRecord",
    "LearnerProfile",
    "StudySession",
    "TestQuestion",
    "TestAnswer",
    "TestSession",
    "TestResult",
    # Enums
    "SessionMode",
    "QuestionType",
    "TestLevel",
    "StudyState",
    "TestState",
    "utcnow",
]
