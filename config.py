"""
Configuration settings for the lexicon vocabulary trainer.

Uses Pydantic Settings for environment variable management with .env file support.
The core never reads these directly; the CLI builds the plain config
dataclasses from them and injects those into the session managers.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lexicon.adaptive.difficulty import EstimatorConfig
from lexicon.core.models import TestLevel
from lexicon.quiz.assessment import TestLevelConfig
from lexicon.study.profile import RewardConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage & Corpus
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".lexicon",
        description="Directory holding the learner state database",
    )
    state_db_name: str = Field(
        default="state.db",
        description="SQLite file name inside data_dir",
    )
    corpus_path: Path | None = Field(
        default=None,
        description="Vocabulary JSON file (bundled corpus when unset)",
    )

    # ========================================
    # Learner
    # ========================================
    learner_id: str = Field(default="local", description="Learner identifier")
    learner_name: str = Field(default="learner", description="Display name")
    daily_goal: int = Field(default=20, ge=1, description="Words per day target")

    # ========================================
    # Sessions
    # ========================================
    session_word_count: int = Field(default=20, ge=1)
    test_question_count: int = Field(default=20, ge=1)

    # ─── Adaptive difficulty window ─────────────────────────────────────────────
    adaptive_window_size: int = Field(default=20, ge=1)
    adaptive_recent_size: int = Field(default=10, ge=1)
    adaptive_min_samples: int = Field(default=5, ge=1)

    # ─── Pass thresholds (accuracy %) ───────────────────────────────────────────
    pass_threshold_beginner: float = Field(default=70.0, ge=0, le=100)
    pass_threshold_intermediate: float = Field(default=75.0, ge=0, le=100)
    pass_threshold_advanced: float = Field(default=80.0, ge=0, le=100)
    pass_threshold_master: float = Field(default=85.0, ge=0, le=100)

    # ─── Experience ─────────────────────────────────────────────────────────────
    exp_answer_correct: int = Field(default=10, ge=0)
    exp_answer_incorrect: int = Field(default=5, ge=0)
    exp_session_per_word: int = Field(default=10, ge=0)
    exp_session_per_correct: int = Field(default=5, ge=0)
    exp_test_per_point: float = Field(default=5.0, ge=0)
    exp_per_level: int = Field(default=1000, ge=1)

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level for the stderr sink",
    )

    @property
    def state_db_path(self) -> Path:
        return self.data_dir / self.state_db_name

    def get_reward_config(self) -> RewardConfig:
        """Experience constants for study and test rewards."""
        return RewardConfig(
            answer_correct=self.exp_answer_correct,
            answer_incorrect=self.exp_answer_incorrect,
            session_per_word=self.exp_session_per_word,
            session_per_correct=self.exp_session_per_correct,
            test_per_point=self.exp_test_per_point,
            exp_per_level=self.exp_per_level,
        )

    def get_estimator_config(self) -> EstimatorConfig:
        return EstimatorConfig(
            window_size=self.adaptive_window_size,
            recent_size=self.adaptive_recent_size,
            min_samples=self.adaptive_min_samples,
        )

    def get_test_level_config(self) -> TestLevelConfig:
        """Per-level pass thresholds; difficulty bands keep their defaults."""
        return TestLevelConfig(
            pass_thresholds={
                TestLevel.BEGINNER: self.pass_threshold_beginner,
                TestLevel.INTERMEDIATE: self.pass_threshold_intermediate,
                TestLevel.ADVANCED: self.pass_threshold_advanced,
                TestLevel.MASTER: self.pass_threshold_master,
            }
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
