"""
Unit tests for progress aggregation.

Tests:
- Daily and weekly progress against the daily goal
- Accuracy grouped by word difficulty
- Mastery breakdown
- Achievement signals and test history ordering
"""

from datetime import timedelta

import pytest

from lexicon.core import models
from lexicon.core.mastery import MasteryLevel
from lexicon.core.models import StudyRecord, TestResult
from lexicon.study import progress
from lexicon.study.profile import new_profile


def record(word_id, now, reviews=1, correct=1, mastery=25.0, time_ms=4000):
    return StudyRecord(
        id=f"r-{word_id}",
        word_id=word_id,
        learner_id="learner",
        mastery_score=mastery,
        review_count=reviews,
        correct_count=correct,
        last_review_at=now,
        next_review_at=now + timedelta(hours=1),
        study_time_ms=time_ms,
    )


def result(result_id, completed_at, accuracy=75.0):
    return TestResult(
        id=result_id,
        test_id=f"test-{result_id}",
        learner_id="learner",
        level=models.TestLevel.INTERMEDIATE,
        score=15,
        max_score=20,
        accuracy=accuracy,
        time_spent_ms=60000,
        completed_at=completed_at,
        passed=True,
    )


@pytest.fixture
def records(fixed_now):
    yesterday = fixed_now - timedelta(days=1)
    return [
        record("w1", fixed_now, reviews=1, correct=1),
        record("w2", fixed_now, reviews=4, correct=2, mastery=55.0),
        record("w3", fixed_now, reviews=3, correct=3, mastery=92.0),
        record("w5", yesterday, reviews=2, correct=1, mastery=0.0),
    ]


class TestDailyProgress:
    def test_counts_records_reviewed_today(self, records, fixed_now):
        daily = progress.daily_progress(records, fixed_now.date(), daily_goal=3)

        assert daily.completed == 3
        assert daily.new_words == 1
        assert daily.review_words == 2
        assert daily.accuracy == pytest.approx(6 / 8 * 100)
        assert daily.time_spent_s == 12
        assert daily.goal_met is True

    def test_empty_day(self, records, fixed_now):
        daily = progress.daily_progress(records, (fixed_now + timedelta(days=3)).date())

        assert daily.completed == 0
        assert daily.accuracy == 0.0
        assert daily.goal_met is False


class TestWeeklyProgress:
    def test_seven_days_from_start(self, records, fixed_now):
        start = (fixed_now - timedelta(days=1)).date()
        weekly = progress.weekly_progress(records, start, achievements=["first_word"])

        assert len(weekly.days) == 7
        assert weekly.days[0].day == start
        assert weekly.total_words == 4
        assert weekly.total_time_s == 16
        # Mean over active days only
        assert weekly.average_accuracy == pytest.approx((50.0 + 75.0) / 2)
        assert weekly.achievements == ("first_word",)


class TestAccuracyByDifficulty:
    def test_groups_by_actual_word_difficulty(self, records, small_corpus):
        stats = progress.accuracy_by_difficulty(records, small_corpus)

        assert list(stats) == [1, 2, 3, 5]
        assert stats[2] == {"words": 1, "reviews": 4, "correct": 2, "accuracy": 50.0}
        assert stats[3]["accuracy"] == 100.0

    def test_words_missing_from_corpus_are_skipped(self, small_corpus, fixed_now):
        assert progress.accuracy_by_difficulty([record("ghost", fixed_now)], small_corpus) == {}


class TestMasteryBreakdown:
    def test_counts_every_level(self, records):
        breakdown = progress.mastery_breakdown(records)

        assert breakdown[MasteryLevel.NOT_STARTED] == 1
        assert breakdown[MasteryLevel.NOVICE] == 1
        assert breakdown[MasteryLevel.DEVELOPING] == 1
        assert breakdown[MasteryLevel.PROFICIENT] == 0
        assert breakdown[MasteryLevel.MASTERED] == 1


class TestAchievementSignals:
    def test_new_learner_has_none(self, fixed_now):
        profile = new_profile("learner", "alex", fixed_now)
        assert progress.achievement_signals(profile) == []

    def test_milestones_from_profile_and_records(self, records, fixed_now):
        profile = new_profile("learner", "alex", fixed_now)
        profile.level = 10
        profile.streak = 7

        signals = progress.achievement_signals(profile, records=records)

        assert signals == ["first_milestone", "dedicated_learner", "week_warrior", "first_word"]

    def test_profile_counter_wins_when_larger(self, fixed_now):
        profile = new_profile("learner", "alex", fixed_now)
        profile.total_words_studied = 60

        assert progress.achievement_signals(profile) == ["first_word", "half_century"]

    def test_perfect_score(self, fixed_now):
        profile = new_profile("learner", "alex", fixed_now)
        results = [result("a", fixed_now, 80.0), result("b", fixed_now, 100.0)]

        assert progress.achievement_signals(profile, test_results=results) == ["perfect_score"]

    def test_held_achievements_are_excluded(self, records, fixed_now):
        profile = new_profile("learner", "alex", fixed_now)
        profile.achievements = ["first_word"]

        assert progress.achievement_signals(profile, records=records) == []


class TestHistory:
    def test_newest_first(self, fixed_now):
        older = result("old", fixed_now - timedelta(days=2))
        newest = result("new", fixed_now)
        middle = result("mid", fixed_now - timedelta(days=1))

        ordered = progress.test_history([older, newest, middle])

        assert [r.id for r in ordered] == ["new", "mid", "old"]
