"""
Unit tests for learner profile updates.

Tests:
- Experience and level derivation
- Daily streak rules
- Achievement unlocking
"""

from datetime import timedelta

import pytest

from lexicon.study.profile import (
    RewardConfig,
    apply_experience,
    level_for,
    new_profile,
    touch_streak,
    unlock_achievements,
)


@pytest.fixture
def profile(fixed_now):
    return new_profile("learner-1", "alex", fixed_now)


class TestRewards:
    def test_answer_reward(self):
        reward = RewardConfig()
        assert reward.answer_reward(True) == 10
        assert reward.answer_reward(False) == 5

    def test_session_reward(self):
        assert RewardConfig().session_reward(10, 7) == 10 * 10 + 7 * 5


class TestExperience:
    @pytest.mark.parametrize(
        "experience, level",
        [(0, 1), (999, 1), (1000, 2), (2500, 3)],
    )
    def test_level_for(self, experience, level):
        assert level_for(experience) == level

    def test_apply_experience_levels_up(self, profile):
        apply_experience(profile, 900)
        assert profile.level == 1

        assert apply_experience(profile, 150) == 2
        assert profile.experience == 1050

    def test_negative_amount_is_ignored(self, profile):
        apply_experience(profile, -40)
        assert profile.experience == 0

    def test_custom_level_size(self, profile):
        apply_experience(profile, 250, RewardConfig(exp_per_level=100))
        assert profile.level == 3


class TestStreak:
    def test_first_activity_starts_streak(self, profile, fixed_now):
        assert touch_streak(profile, fixed_now) == 1

    def test_same_day_keeps_streak(self, profile, fixed_now):
        touch_streak(profile, fixed_now)
        assert touch_streak(profile, fixed_now + timedelta(hours=3)) == 1

    def test_next_day_extends_streak(self, profile, fixed_now):
        touch_streak(profile, fixed_now)
        touch_streak(profile, fixed_now + timedelta(days=1))
        assert touch_streak(profile, fixed_now + timedelta(days=2)) == 3

    def test_gap_restarts_streak(self, profile, fixed_now):
        touch_streak(profile, fixed_now)
        touch_streak(profile, fixed_now + timedelta(days=1))
        assert touch_streak(profile, fixed_now + timedelta(days=4)) == 1

    def test_updates_last_active(self, profile, fixed_now):
        later = fixed_now + timedelta(days=1)
        touch_streak(profile, later)
        assert profile.last_active_at == later


class TestAchievements:
    def test_unlock_returns_only_new(self, profile):
        assert unlock_achievements(profile, ["first_word"]) == ["first_word"]
        assert unlock_achievements(profile, ["first_word", "week_warrior"]) == ["week_warrior"]
        assert profile.achievements == ["first_word", "week_warrior"]

    def test_duplicates_in_input_collapse(self, profile):
        assert unlock_achievements(profile, ["century", "century"]) == ["century"]
        assert profile.achievements == ["century"]


class TestReset:
    def test_reset_keeps_identity_and_goal(self, fixed_now):
        profile = new_profile("learner-1", "alex", fixed_now, daily_goal=30)
        apply_experience(profile, 4200)
        touch_streak(profile, fixed_now)
        unlock_achievements(profile, ["first_word"])
        profile.total_words_studied = 12

        profile.reset_progress()

        assert profile.learner_id == "learner-1"
        assert profile.username == "alex"
        assert profile.daily_goal == 30
        assert profile.level == 1
        assert profile.experience == 0
        assert profile.streak == 0
        assert profile.achievements == []
        assert profile.total_words_studied == 0
