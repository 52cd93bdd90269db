"""
Word Selection for learn, review and test sessions.

Orders a candidate pool against the learner's study history:
- review: only due words, most fragile first
- learn: unseen words first, then weakest seen words
- test: pool order (optionally shuffled by an injected Random)

Selection is deterministic for identical inputs. Any shuffling goes through
the ``rng`` argument so tests can pin a seed.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

from loguru import logger

from lexicon.core.errors import ExhaustionError, ValidationError
from lexicon.core.models import SessionMode, StudyRecord, VocabularyEntry


def filter_to_band(
    words: Iterable[VocabularyEntry],
    band: tuple[int, int],
) -> list[str]:
    """Ids of words whose difficulty falls inside an inclusive (low, high) band."""
    low, high = band
    return [w.id for w in words if low <= w.difficulty <= high]


def _coerce_mode(mode: SessionMode | str) -> SessionMode:
    try:
        return SessionMode(mode)
    except ValueError as e:
        raise ValidationError(f"Unknown session mode: {mode!r}") from e


class WordSelector:
    """
    Orders and truncates a word pool for one session.

    Stateless: the difficulty band is applied by the caller before
    ``select`` so it is computed once per session.
    """

    def select(
        self,
        pool: Sequence[str],
        mode: SessionMode | str,
        count: int,
        history: Mapping[str, StudyRecord],
        now: datetime,
        rng: random.Random | None = None,
        strict: bool = False,
    ) -> list[str]:
        """
        Pick up to ``count`` word ids from ``pool``.

        Args:
            pool: Candidate word ids, in corpus order
            mode: learn, review or test
            count: Max ids to return
            history: StudyRecord per word id for this learner
            now: Current time (decides due-ness in review mode)
            rng: Shuffles the pool before ordering; None keeps pool order
            strict: Raise ExhaustionError instead of returning a short list

        Returns:
            Ordered word ids (possibly fewer than ``count``)

        Raises:
            ValidationError: Unknown mode or negative count
            ExhaustionError: strict=True and the pool could not fill ``count``
        """
        mode = _coerce_mode(mode)
        if count < 0:
            raise ValidationError(f"count must be >= 0, got {count}")

        candidates = list(dict.fromkeys(pool))
        if rng is not None:
            rng.shuffle(candidates)

        if mode == SessionMode.REVIEW:
            ordered = self._order_review(candidates, history, now)
        elif mode == SessionMode.LEARN:
            ordered = self._order_learn(candidates, history)
        else:
            ordered = candidates

        selected = ordered[:count]

        if len(selected) < count:
            logger.warning(
                f"Selection short for {mode.value}: requested {count}, available {len(selected)}"
            )
            if strict:
                raise ExhaustionError(count, len(selected), partial=selected)

        logger.debug(f"Selected {len(selected)} words for {mode.value} from pool of {len(pool)}")
        return selected

    @staticmethod
    def _order_review(
        candidates: list[str],
        history: Mapping[str, StudyRecord],
        now: datetime,
    ) -> list[str]:
        # Unseen words never enter review
        due = [w for w in candidates if w in history and history[w].is_due(now)]
        due.sort(key=lambda w: history[w].mastery_score)
        return due

    @staticmethod
    def _order_learn(
        candidates: list[str],
        history: Mapping[str, StudyRecord],
    ) -> list[str]:
        unseen = [w for w in candidates if w not in history]
        seen = [w for w in candidates if w in history]
        seen.sort(key=lambda w: history[w].mastery_score)
        return unseen + seen
