"""
Adaptive difficulty: rolling outcome window, target band and hint signal.
"""

from lexicon.adaptive.difficulty import (
    AdaptiveDifficultyEstimator,
    EstimatorConfig,
    Outcome,
    difficulty_band,
)

__all__ = [
    "AdaptiveDifficultyEstimator",
    "EstimatorConfig",
    "Outcome",
    "difficulty_band",
]
