"""
Lexicon: vocabulary mastery trainer.

Core components:
- MasteryModel: Mastery updates and spaced-repetition scheduling
- AdaptiveDifficultyEstimator: Rolling-window difficulty targeting
- WordSelector: Session word ordering
- QuestionSynthesizer: Test question generation
- StudySessionManager / TestSessionManager: Session orchestration
"""

__version__ = "1.0.0"
