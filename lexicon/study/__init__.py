"""
Study Module.

Provides:
- Word selection for learn/review sessions
- Study session orchestration
- Learner profile updates (experience, streak, achievements)
- Progress aggregation
"""

from lexicon.study.profile import RewardConfig
from lexicon.study.progress import DailyProgress, WeeklyProgress
from lexicon.study.study_service import AnswerFeedback, StudySessionManager, StudySummary
from lexicon.study.word_selector import WordSelector, filter_to_band

__all__ = [
    "WordSelector",
    "filter_to_band",
    "StudySessionManager",
    "AnswerFeedback",
    "StudySummary",
    "RewardConfig",
    "DailyProgress",
    "WeeklyProgress",
]
