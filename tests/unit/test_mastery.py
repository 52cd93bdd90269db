"""
Unit tests for MasteryModel.

Tests:
- Mastery update bounds and direction
- First-review seeding
- Interval ladder, mastery scaling and the incorrect-answer penalty
- Worked scheduling examples
"""

from datetime import timedelta

import pytest

from lexicon.core.mastery import BASE_INTERVALS_HOURS, MasteryConfig, MasteryLevel, MasteryModel


@pytest.fixture
def model():
    return MasteryModel()


class TestNextMastery:
    """Tests for the mastery score update."""

    @pytest.mark.parametrize("mastery", [0, 1, 25, 50, 79.9, 99, 100])
    def test_stays_in_bounds(self, model, mastery):
        for is_correct in (True, False):
            result = model.next_mastery(mastery, is_correct)
            assert 0 <= result <= 100

    @pytest.mark.parametrize("mastery", [0, 10, 50, 90, 100])
    def test_correct_never_lowers_incorrect_never_raises(self, model, mastery):
        assert model.next_mastery(mastery, True) >= mastery
        assert model.next_mastery(mastery, False) <= mastery

    def test_correct_closes_thirty_percent_of_gap(self, model):
        assert model.next_mastery(50, True) == pytest.approx(65.0)

    def test_incorrect_loses_thirty_percent(self, model):
        assert model.next_mastery(80, False) == pytest.approx(56.0)

    def test_zero_stays_zero_on_miss(self, model):
        assert model.next_mastery(0, False) == 0

    def test_out_of_range_input_is_clamped(self, model):
        assert model.next_mastery(150, True) == 100
        assert model.next_mastery(-20, False) == 0


class TestInitialMastery:
    def test_seeds(self, model):
        assert model.initial_mastery(True) == 25
        assert model.initial_mastery(False) == 5

    def test_custom_seeds(self):
        model = MasteryModel(MasteryConfig(first_correct_mastery=40, first_incorrect_mastery=0))
        assert model.initial_mastery(True) == 40
        assert model.initial_mastery(False) == 0


class TestNextReviewAt:
    """Tests for interval scheduling."""

    def test_first_correct_review_is_52_5_minutes_out(self, model, fixed_now):
        due = model.next_review_at(25, 1, True, fixed_now)
        assert due - fixed_now == timedelta(minutes=52.5)

    def test_mastery_80_review_5_incorrect(self, model, fixed_now):
        mastery = model.next_mastery(80, False)
        due = model.next_review_at(mastery, 5, False, fixed_now)

        assert mastery == pytest.approx(56.0)
        hours = (due - fixed_now).total_seconds() / 3600
        assert hours == pytest.approx(168 * 1.34 * 0.5)
        assert hours == pytest.approx(112.56)

    @pytest.mark.parametrize("review_count", [1, 2, 5, 7, 50])
    @pytest.mark.parametrize("mastery", [0, 40, 100])
    def test_always_strictly_future(self, model, fixed_now, review_count, mastery):
        for is_correct in (True, False):
            assert model.next_review_at(mastery, review_count, is_correct, fixed_now) > fixed_now

    @pytest.mark.parametrize("review_count", [1, 3, 6, 10])
    def test_incorrect_is_never_later_than_correct(self, model, fixed_now, review_count):
        wrong = model.next_review_at(60, review_count, False, fixed_now)
        right = model.next_review_at(60, review_count, True, fixed_now)
        assert wrong <= right

    def test_ladder_index_caps_at_last_step(self, model):
        last = BASE_INTERVALS_HOURS[-1]
        assert model.interval_hours(0, 7, True) == pytest.approx(last * 0.5)
        assert model.interval_hours(0, 70, True) == pytest.approx(last * 0.5)

    def test_review_count_zero_uses_first_step(self, model):
        assert model.interval_hours(0, 0, True) == pytest.approx(BASE_INTERVALS_HOURS[0] * 0.5)

    def test_full_mastery_doubles_interval(self, model):
        assert model.interval_hours(100, 3, True) == pytest.approx(24 * 2.0)


class TestReview:
    """Tests for applying one answer to a StudyRecord."""

    def test_creates_record_on_first_review(self, model, fixed_now):
        record = model.review(None, "w1", "learner", True, 1500, fixed_now)

        assert record.word_id == "w1"
        assert record.learner_id == "learner"
        assert record.mastery_score == 25
        assert record.review_count == 1
        assert record.correct_count == 1
        assert record.last_review_at == fixed_now
        assert record.next_review_at - fixed_now == timedelta(minutes=52.5)
        assert record.study_time_ms == 1500

    def test_updates_existing_record_without_mutating_it(self, model, fixed_now):
        first = model.review(None, "w1", "learner", False, 1000, fixed_now)
        later = fixed_now + timedelta(days=1)
        second = model.review(first, "w1", "learner", True, 2000, later)

        assert first.review_count == 1
        assert first.mastery_score == 5
        assert second.id == first.id
        assert second.review_count == 2
        assert second.correct_count == 1
        assert second.mastery_score == pytest.approx(5 + 95 * 0.3)
        assert second.study_time_ms == 3000
        assert second.next_review_at >= second.last_review_at

    def test_correct_count_never_exceeds_reviews(self, model, fixed_now):
        record = None
        for _ in range(5):
            record = model.review(record, "w1", "learner", True, 0, fixed_now)
        assert record.correct_count == record.review_count == 5


class TestMasteryLevel:
    @pytest.mark.parametrize(
        "score, level",
        [
            (0, MasteryLevel.NOT_STARTED),
            (1, MasteryLevel.NOVICE),
            (39.9, MasteryLevel.NOVICE),
            (40, MasteryLevel.DEVELOPING),
            (70, MasteryLevel.PROFICIENT),
            (90, MasteryLevel.MASTERED),
            (100, MasteryLevel.MASTERED),
        ],
    )
    def test_from_score(self, score, level):
        assert MasteryLevel.from_score(score) == level

    def test_display_name(self):
        assert MasteryLevel.NOT_STARTED.display_name == "Not Started"
