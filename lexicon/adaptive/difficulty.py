"""
Adaptive Difficulty Estimation.

Tracks a bounded window of recent outcomes for one learner and derives:
- A target word difficulty (1-10)
- Whether the next item should offer a hint

The window is a FIFO ring: once full, the oldest outcome is dropped.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10
NEUTRAL_DIFFICULTY = 5


@dataclass(frozen=True)
class Outcome:
    """A single answered item."""

    correct: bool
    latency_ms: float
    difficulty: int


@dataclass(frozen=True)
class EstimatorConfig:
    """Configuration for the difficulty estimator."""

    window_size: int = 20
    recent_size: int = 10  # samples used for the target calculation
    min_samples: int = 5  # below this the target stays neutral
    high_accuracy: float = 0.8
    low_accuracy: float = 0.6
    fast_latency_ms: float = 5000
    slow_latency_ms: float = 15000
    hint_bootstrap_samples: int = 3  # hints always on below this
    hint_window: int = 5
    hint_min_incorrect: int = 2
    band_spread: int = 2


def difficulty_band(target: int, spread: int = 2) -> tuple[int, int]:
    """Admissible (low, high) difficulty range around a target."""
    return max(MIN_DIFFICULTY, target - spread), min(MAX_DIFFICULTY, target + spread)


class AdaptiveDifficultyEstimator:
    """
    Rolling-window difficulty estimator.

    Signals:
    1. Accuracy over the recent window - above 80% raises the target, below 60% lowers it
    2. Mean latency over the recent window - under 5s raises, over 15s lowers
    3. Misses in the last five outcomes - two or more suggest a hint
    """

    def __init__(self, config: EstimatorConfig | None = None):
        """
        Initialize the estimator with an empty window.

        Args:
            config: Custom thresholds (uses defaults if None)
        """
        self.config = config or EstimatorConfig()
        self._window: deque[Outcome] = deque(maxlen=self.config.window_size)

    def record_outcome(self, correct: bool, latency_ms: float, difficulty: int) -> None:
        """Append an outcome, evicting the oldest when the window is full."""
        self._window.append(
            Outcome(correct=correct, latency_ms=max(latency_ms, 0), difficulty=difficulty)
        )

    @property
    def samples(self) -> list[Outcome]:
        return list(self._window)

    def __len__(self) -> int:
        return len(self._window)

    def current_target_difficulty(self) -> int:
        """
        Target difficulty from the most recent outcomes.

        Returns:
            Integer difficulty in [1, 10]; 5 until enough samples exist
        """
        if len(self._window) < self.config.min_samples:
            return NEUTRAL_DIFFICULTY

        recent = self.samples[-self.config.recent_size :]
        accuracy = sum(1 for o in recent if o.correct) / len(recent)
        mean_latency = sum(o.latency_ms for o in recent) / len(recent)

        difficulty = NEUTRAL_DIFFICULTY

        if accuracy > self.config.high_accuracy:
            difficulty += 1
        elif accuracy < self.config.low_accuracy:
            difficulty -= 1

        if mean_latency < self.config.fast_latency_ms:
            difficulty += 1
        elif mean_latency > self.config.slow_latency_ms:
            difficulty -= 1

        return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))

    def should_offer_hint(self) -> bool:
        """Hints are on for new learners and after repeated recent misses."""
        if len(self._window) < self.config.hint_bootstrap_samples:
            return True

        recent = self.samples[-self.config.hint_window :]
        misses = sum(1 for o in recent if not o.correct)
        return misses >= self.config.hint_min_incorrect

    def target_band(self) -> tuple[int, int]:
        """Admissible difficulty range around the current target."""
        return difficulty_band(self.current_target_difficulty(), self.config.band_spread)

    def reset(self) -> None:
        self._window.clear()
