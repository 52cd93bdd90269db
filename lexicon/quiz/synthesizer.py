"""
Question Synthesis for vocabulary tests.

Turns a corpus entry into a TestQuestion:
- multiple_choice: pick the meaning; distractors come from other words
- fill_blank: headword blanked out of its first example sentence
- context: same blank, framed as a word-choice task with the full sentence

Types are assigned round-robin over the word order so the same word order
always yields the same type mix. Distractor sampling and option shuffling
use the injected Random.
"""

from __future__ import annotations

import random
import re
from collections.abc import Callable, Iterable, Sequence

from loguru import logger

from lexicon.core.errors import ValidationError
from lexicon.core.models import QuestionType, TestQuestion, VocabularyEntry

BLANK = "_____"
OPTION_COUNT = 4

# Seconds per question type
TIME_LIMITS: dict[QuestionType, int] = {
    QuestionType.MULTIPLE_CHOICE: 30,
    QuestionType.FILL_BLANK: 20,
    QuestionType.CONTEXT: 25,
}

# Round-robin order for generated sets
ROTATION: tuple[QuestionType, ...] = (
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.FILL_BLANK,
    QuestionType.CONTEXT,
)

Builder = Callable[["QuestionSynthesizer", VocabularyEntry, list[VocabularyEntry], int], TestQuestion]

# Builder registry - populated by @register
BUILDERS: dict[QuestionType, Builder] = {}


def register(question_type: QuestionType):
    """Decorator to register a question builder."""

    def decorator(func: Builder) -> Builder:
        BUILDERS[question_type] = func
        return func

    return decorator


def blank_out(sentence: str, headword: str) -> str:
    """Replace every case-insensitive occurrence of the headword with a blank."""
    return re.sub(re.escape(headword), BLANK, sentence, flags=re.IGNORECASE)


def fallback_sentence(headword: str) -> str:
    return f'The meaning of "{headword}" is {BLANK}'


class QuestionSynthesizer:
    """
    Builds test questions from corpus entries.

    The corpus is only read; entries are referenced, never copied.
    """

    def __init__(self, rng: random.Random | None = None):
        """
        Args:
            rng: Random source for distractors and option order
                 (a fresh unseeded Random if None)
        """
        self.rng = rng or random.Random()

    def generate(
        self,
        word: VocabularyEntry,
        corpus: Iterable[VocabularyEntry],
        question_type: QuestionType | str,
        index: int = 0,
    ) -> TestQuestion:
        """
        Build one question for ``word``.

        Args:
            word: Source entry
            corpus: All entries (distractor pool for multiple choice)
            question_type: Type to build
            index: Position in the test, used in the question id

        Raises:
            ValidationError: Unknown or unsupported question type
        """
        try:
            question_type = QuestionType(question_type)
        except ValueError as e:
            raise ValidationError(f"Unknown question type: {question_type!r}") from e

        builder = BUILDERS.get(question_type)
        if builder is None:
            raise ValidationError(f"Question type {question_type.value} cannot be generated")

        return builder(self, word, list(corpus), index)

    def generate_set(
        self,
        words: Sequence[VocabularyEntry],
        corpus: Iterable[VocabularyEntry],
    ) -> list[TestQuestion]:
        """One question per word, cycling multiple_choice → fill_blank → context."""
        pool = list(corpus)
        questions = [
            self.generate(word, pool, ROTATION[i % len(ROTATION)], index=i)
            for i, word in enumerate(words)
        ]
        logger.debug(f"Generated {len(questions)} questions")
        return questions

    def distractor_options(
        self,
        word: VocabularyEntry,
        corpus: Sequence[VocabularyEntry],
    ) -> list[str]:
        """
        Correct meaning plus up to three distinct wrong meanings, shuffled.

        Other words are drawn without replacement; a meaning already among
        the options is skipped. A small corpus yields fewer options.
        """
        correct = word.primary_meaning
        options = [correct]
        others = [w for w in corpus if w.id != word.id]

        while len(options) < OPTION_COUNT and others:
            candidate = others.pop(self.rng.randrange(len(others)))
            meaning = candidate.primary_meaning
            if meaning not in options:
                options.append(meaning)

        if len(options) < OPTION_COUNT:
            logger.debug(f"Only {len(options)} options available for '{word.word}'")

        self.rng.shuffle(options)
        return options


# =============================================================================
# Builders
# =============================================================================


@register(QuestionType.MULTIPLE_CHOICE)
def _multiple_choice(
    synth: QuestionSynthesizer,
    word: VocabularyEntry,
    corpus: list[VocabularyEntry],
    index: int,
) -> TestQuestion:
    return TestQuestion(
        id=f"mc_{index}",
        type=QuestionType.MULTIPLE_CHOICE,
        word_id=word.id,
        prompt=f'What does "{word.word}" mean?',
        correct_answer=word.primary_meaning,
        difficulty=word.difficulty,
        time_limit_s=TIME_LIMITS[QuestionType.MULTIPLE_CHOICE],
        options=tuple(synth.distractor_options(word, corpus)),
    )


@register(QuestionType.FILL_BLANK)
def _fill_blank(
    synth: QuestionSynthesizer,
    word: VocabularyEntry,
    corpus: list[VocabularyEntry],
    index: int,
) -> TestQuestion:
    example = word.first_example
    prompt = blank_out(example, word.word) if example else fallback_sentence(word.word)
    return TestQuestion(
        id=f"fb_{index}",
        type=QuestionType.FILL_BLANK,
        word_id=word.id,
        prompt=prompt,
        correct_answer=word.word,
        difficulty=word.difficulty,
        time_limit_s=TIME_LIMITS[QuestionType.FILL_BLANK],
    )


@register(QuestionType.CONTEXT)
def _context(
    synth: QuestionSynthesizer,
    word: VocabularyEntry,
    corpus: list[VocabularyEntry],
    index: int,
) -> TestQuestion:
    example = word.first_example
    blanked = blank_out(example, word.word) if example else fallback_sentence(word.word)
    return TestQuestion(
        id=f"ctx_{index}",
        type=QuestionType.CONTEXT,
        word_id=word.id,
        prompt=f"Choose the correct word: {blanked}",
        correct_answer=word.word,
        difficulty=word.difficulty,
        time_limit_s=TIME_LIMITS[QuestionType.CONTEXT],
        context=example,
    )
