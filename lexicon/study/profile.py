"""
Learner profile updates: experience, level, streak and achievements.

Functions mutate the profile passed in (the session manager owns the only
copy) and leave persistence to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger

from lexicon.core.models import LearnerProfile


@dataclass(frozen=True)
class RewardConfig:
    """Experience constants for answers, sessions and tests."""

    answer_correct: int = 10
    answer_incorrect: int = 5
    session_per_word: int = 10
    session_per_correct: int = 5
    test_per_point: float = 5.0
    exp_per_level: int = 1000

    def answer_reward(self, is_correct: bool) -> int:
        return self.answer_correct if is_correct else self.answer_incorrect

    def session_reward(self, words_studied: int, total_correct: int) -> int:
        return words_studied * self.session_per_word + total_correct * self.session_per_correct


def new_profile(
    learner_id: str,
    username: str,
    now: datetime,
    daily_goal: int = 20,
) -> LearnerProfile:
    return LearnerProfile(
        learner_id=learner_id,
        username=username,
        daily_goal=daily_goal,
        created_at=now,
        last_active_at=now,
    )


def level_for(experience: int, exp_per_level: int = 1000) -> int:
    return experience // exp_per_level + 1


def apply_experience(
    profile: LearnerProfile,
    amount: int,
    reward: RewardConfig | None = None,
) -> int:
    """
    Add experience and recompute the level.

    Returns:
        The new level
    """
    reward = reward or RewardConfig()
    previous = profile.level
    profile.experience += max(amount, 0)
    profile.level = level_for(profile.experience, reward.exp_per_level)

    if profile.level > previous:
        logger.info(f"Learner {profile.learner_id} reached level {profile.level}")
    return profile.level


def touch_streak(profile: LearnerProfile, now: datetime) -> int:
    """
    Update the daily streak for activity at ``now``.

    Same calendar day keeps the streak, the day after extends it, any
    longer gap (or no previous activity) restarts it at 1.
    """
    today = now.date()
    last = profile.last_active_at.date() if profile.last_active_at else None

    if last == today - timedelta(days=1):
        profile.streak += 1
    elif last != today or profile.streak == 0:
        profile.streak = 1

    profile.last_active_at = now
    return profile.streak


def unlock_achievements(profile: LearnerProfile, ids: Iterable[str]) -> list[str]:
    """Append achievements the profile does not hold yet; return the new ones."""
    unlocked: list[str] = []
    for achievement_id in ids:
        if achievement_id in profile.achievements or achievement_id in unlocked:
            continue
        unlocked.append(achievement_id)

    if unlocked:
        profile.achievements.extend(unlocked)
        logger.info(f"Achievements unlocked for {profile.learner_id}: {', '.join(unlocked)}")
    return unlocked

