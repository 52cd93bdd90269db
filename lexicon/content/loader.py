"""
Vocabulary Corpus: Word Loader and Search.

Loads vocabulary entries from:
- The bundled JSON corpus (lexicon/data/vocabulary.json)
- Any JSON file with the same shape (list, or {category: [entries]})
- In-memory dicts (tests, importers)

Features:
- Validation on load (ids, definitions, difficulty/frequency ranges)
- Grouping by category and difficulty
- Relevance-ranked search and similar-word lookup
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from lexicon.core.errors import ValidationError
from lexicon.core.models import VocabularyEntry

DEFAULT_CORPUS_PATH = Path(__file__).resolve().parent.parent / "data" / "vocabulary.json"
DEFAULT_CATEGORY = "core"

# Search relevance weights
WEIGHT_EXACT_WORD = 100
WEIGHT_PARTIAL_WORD = 50
WEIGHT_PRONUNCIATION = 30
WEIGHT_SYNONYM = 25
WEIGHT_MEANING = 20
WEIGHT_EXAMPLE = 15
WEIGHT_TAG = 10


@dataclass(frozen=True)
class SearchResult:
    """A ranked search hit."""

    word: VocabularyEntry
    relevance: int
    matched_fields: tuple[str, ...] = field(default_factory=tuple)


def _validate_entry(entry: VocabularyEntry) -> None:
    if not entry.word.strip():
        raise ValidationError(f"Entry {entry.id} has an empty headword")
    if not entry.definitions:
        raise ValidationError(f"Entry {entry.id} ({entry.word}) has no definitions")
    if not 1 <= entry.difficulty <= 10:
        raise ValidationError(f"Entry {entry.id} difficulty {entry.difficulty} outside 1-10")
    if not 0 <= entry.frequency <= 100:
        raise ValidationError(f"Entry {entry.id} frequency {entry.frequency} outside 0-100")


class VocabularyCorpus:
    """
    Read-only collection of vocabulary entries.

    Loaded once before any session starts and shared by reference; nothing
    downstream copies or mutates entries.
    """

    def __init__(self, categories: dict[str, Iterable[VocabularyEntry]]):
        """
        Build and validate the corpus.

        Args:
            categories: Mapping of category name to entries, in corpus order

        Raises:
            ValidationError: Empty corpus, duplicate ids or malformed entries
        """
        self._entries: dict[str, VocabularyEntry] = {}
        self._by_category: dict[str, list[str]] = {}

        for category, entries in categories.items():
            ids = self._by_category.setdefault(category, [])
            for entry in entries:
                _validate_entry(entry)
                if entry.id in self._entries:
                    raise ValidationError(f"Duplicate word id {entry.id}")
                self._entries[entry.id] = entry
                ids.append(entry.id)

        if not self._entries:
            raise ValidationError("Vocabulary corpus is empty")

        self._words: tuple[VocabularyEntry, ...] = tuple(self._entries.values())

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_dicts(cls, data: list[dict] | dict[str, list[dict]]) -> VocabularyCorpus:
        """Build from raw dicts (a flat list or a {category: [...]} mapping)."""
        if isinstance(data, list):
            data = {DEFAULT_CATEGORY: data}
        if not isinstance(data, dict):
            raise ValidationError("Corpus must be a list or a mapping of categories")

        try:
            categories = {
                name: [VocabularyEntry.from_dict(item) for item in items]
                for name, items in data.items()
            }
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed vocabulary entry: {e}") from e

        return cls(categories)

    @classmethod
    def from_file(cls, path: Path) -> VocabularyCorpus:
        """Load a corpus from a JSON file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValidationError(f"Failed to load corpus {path}: {e}") from e

        corpus = cls.from_dicts(data)
        logger.info(
            f"Corpus loaded: {len(corpus)} words in {len(corpus.categories())} categories from {path}"
        )
        return corpus

    # =========================================================================
    # Access
    # =========================================================================

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[VocabularyEntry]:
        return iter(self._words)

    def __contains__(self, word_id: object) -> bool:
        return word_id in self._entries

    def all_words(self) -> list[VocabularyEntry]:
        return list(self._words)

    def get(self, word_id: str) -> VocabularyEntry | None:
        return self._entries.get(word_id)

    def require(self, word_id: str) -> VocabularyEntry:
        """Get an entry or raise ValidationError for unknown ids."""
        entry = self._entries.get(word_id)
        if entry is None:
            raise ValidationError(f"Unknown word id: {word_id}")
        return entry

    def categories(self) -> list[str]:
        return list(self._by_category)

    def by_category(self, name: str) -> list[VocabularyEntry]:
        return [self._entries[i] for i in self._by_category.get(name, [])]

    def by_difficulty(self, low: int, high: int) -> list[VocabularyEntry]:
        """Entries with low <= difficulty <= high, in corpus order."""
        return [w for w in self._words if low <= w.difficulty <= high]

    def by_level(self, level: int) -> list[VocabularyEntry]:
        """Entries suited to a learner level: difficulty in [level-1, level+2]."""
        return self.by_difficulty(max(level - 1, 1), min(level + 2, 10))

    # =========================================================================
    # Search
    # =========================================================================

    def search(
        self,
        query: str,
        difficulty: tuple[int, int] | None = None,
        tags: list[str] | None = None,
        category: str | None = None,
        limit: int = 20,
    ) -> list[SearchResult]:
        """
        Relevance-ranked search over headwords, meanings, examples and tags.

        Args:
            query: Case-insensitive search text
            difficulty: Optional (min, max) filter
            tags: Keep entries sharing at least one tag
            category: Keep entries from this category
            limit: Max results

        Returns:
            Results sorted by relevance (ties keep corpus order)
        """
        needle = query.strip().lower()
        if not needle:
            return []

        candidates = self._words
        if difficulty:
            low, high = difficulty
            candidates = tuple(w for w in candidates if low <= w.difficulty <= high)
        if tags:
            wanted = set(tags)
            candidates = tuple(w for w in candidates if wanted.intersection(w.tags))
        if category:
            members = set(self._by_category.get(category, []))
            candidates = tuple(w for w in candidates if w.id in members)

        results: list[SearchResult] = []
        for word in candidates:
            relevance, matched = self._score(word, needle)
            if relevance > 0:
                results.append(SearchResult(word=word, relevance=relevance, matched_fields=matched))

        results.sort(key=lambda r: r.relevance, reverse=True)
        return results[:limit]

    @staticmethod
    def _score(word: VocabularyEntry, needle: str) -> tuple[int, tuple[str, ...]]:
        relevance = 0
        matched: list[str] = []

        headword = word.word.lower()
        if headword == needle:
            relevance += WEIGHT_EXACT_WORD
            matched.append("word")
        elif needle in headword:
            relevance += WEIGHT_PARTIAL_WORD
            matched.append("word")

        if needle in word.pronunciation.lower():
            relevance += WEIGHT_PRONUNCIATION
            matched.append("pronunciation")

        for definition in word.definitions:
            if needle in definition.meaning.lower():
                relevance += WEIGHT_MEANING
                matched.append("meaning")
            for example in definition.examples:
                if needle in example.lower():
                    relevance += WEIGHT_EXAMPLE
                    matched.append("example")
            for synonym in definition.synonyms:
                if synonym.lower() == needle:
                    relevance += WEIGHT_SYNONYM
                    matched.append("synonym")

        for tag in word.tags:
            if needle in tag.lower():
                relevance += WEIGHT_TAG
                matched.append("tag")

        return relevance, tuple(dict.fromkeys(matched))

    def similar_words(self, word_id: str, limit: int = 5) -> list[VocabularyEntry]:
        """Entries sharing difficulty, tags, length or part of speech with a word."""
        target = self._entries.get(word_id)
        if target is None:
            return []

        target_pos = [d.part_of_speech for d in target.definitions]
        scored: list[tuple[int, VocabularyEntry]] = []

        for word in self._words:
            if word.id == word_id:
                continue

            score = 0
            if abs(word.difficulty - target.difficulty) <= 1:
                score += 20
            score += 15 * sum(1 for tag in word.tags if tag in target.tags)
            if abs(len(word.word) - len(target.word)) <= 2:
                score += 10
            word_pos = {d.part_of_speech for d in word.definitions}
            score += 10 * sum(1 for pos in target_pos if pos in word_pos)

            if score > 0:
                scored.append((score, word))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [word for _, word in scored[:limit]]

    def statistics(self) -> dict:
        """Corpus size by category and difficulty."""
        by_difficulty: dict[int, int] = {}
        for word in self._words:
            by_difficulty[word.difficulty] = by_difficulty.get(word.difficulty, 0) + 1

        average = sum(w.difficulty for w in self._words) / len(self._words)
        return {
            "total_words": len(self._words),
            "by_category": {name: len(ids) for name, ids in self._by_category.items()},
            "by_difficulty": dict(sorted(by_difficulty.items())),
            "average_difficulty": round(average, 2),
        }


def load_default_corpus(path: Path | None = None) -> VocabularyCorpus:
    """Load the configured corpus, falling back to the bundled one."""
    return VocabularyCorpus.from_file(path or DEFAULT_CORPUS_PATH)
