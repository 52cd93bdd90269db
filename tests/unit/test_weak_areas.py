"""
Unit tests for weak-area diagnostics.
"""

import pytest

from lexicon.core.models import QuestionType, TestAnswer, TestQuestion
from lexicon.quiz.weak_areas import diagnose_weak_areas


def question(qid, qtype, limit_s=30):
    return TestQuestion(
        id=qid,
        type=qtype,
        word_id=f"word-{qid}",
        prompt="prompt",
        correct_answer="answer",
        difficulty=3,
        time_limit_s=limit_s,
    )


def answer(qid, correct, used_ms=1000):
    return TestAnswer(
        question_id=qid,
        user_answer="answer" if correct else "wrong",
        is_correct=correct,
        time_used_ms=used_ms,
    )


@pytest.fixture
def questions():
    return [
        question("mc_0", QuestionType.MULTIPLE_CHOICE, 30),
        question("fb_1", QuestionType.FILL_BLANK, 20),
        question("ctx_2", QuestionType.CONTEXT, 25),
    ]


class TestDiagnoseWeakAreas:
    def test_all_correct_has_no_weak_areas(self, questions):
        answers = [answer(q.id, True) for q in questions]
        assert diagnose_weak_areas(questions, answers) == []

    def test_unanswered_slots_are_ignored(self, questions):
        assert diagnose_weak_areas(questions, [None, None, None]) == []

    def test_type_tags_for_each_miss(self, questions):
        answers = [answer(q.id, False) for q in questions]
        assert diagnose_weak_areas(questions, answers) == [
            "vocabulary_meaning",
            "spelling",
            "context_usage",
        ]

    def test_time_pressure_above_eighty_percent(self, questions):
        # fill_blank limit 20s: 16s is exactly 80%, 16.001s is over
        assert diagnose_weak_areas(questions, [answer("fb_1", False, 16000)]) == ["spelling"]
        assert diagnose_weak_areas(questions, [answer("fb_1", False, 16001)]) == [
            "time_management",
            "spelling",
        ]

    def test_slow_correct_answer_is_not_a_weak_area(self, questions):
        assert diagnose_weak_areas(questions, [answer("mc_0", True, 29000)]) == []

    def test_tags_are_unique(self, questions):
        answers = [
            answer("mc_0", False, 29000),
            answer("fb_1", False, 19000),
            answer("mc_0", False, 29000),
        ]
        result = diagnose_weak_areas(questions, answers)

        assert result == ["time_management", "vocabulary_meaning", "spelling"]
        assert len(result) == len(set(result))

    def test_idempotent(self, questions):
        answers = [answer("ctx_2", False, 24000), answer("mc_0", False)]
        assert diagnose_weak_areas(questions, answers) == diagnose_weak_areas(questions, answers)

    def test_unknown_question_id_is_skipped(self, questions):
        assert diagnose_weak_areas(questions, [answer("zz_9", False)]) == []
