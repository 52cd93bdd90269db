"""
Quiz Module: question synthesis, test sessions and weak-area diagnostics.
"""

from lexicon.quiz.synthesizer import QuestionSynthesizer
from lexicon.quiz.assessment import TestLevelConfig, TestSessionManager, TestSummary
from lexicon.quiz.weak_areas import diagnose_weak_areas

__all__ = [
    "QuestionSynthesizer",
    "TestSessionManager",
    "TestLevelConfig",
    "TestSummary",
    "diagnose_weak_areas",
]
