"""
Unit tests for VocabularyCorpus.

Tests:
- Bundled corpus loading and category grouping
- Validation on load
- Relevance-ranked search with filters
- Level, similar-word and statistics queries
"""

import json

import pytest

from lexicon.content.loader import (
    DEFAULT_CORPUS_PATH,
    VocabularyCorpus,
    load_default_corpus,
)
from lexicon.core.errors import ValidationError


@pytest.fixture(scope="module")
def bundled():
    return load_default_corpus()


class TestBundledCorpus:
    def test_loads_every_category(self, bundled):
        assert len(bundled) == 24
        assert bundled.categories() == ["core", "academic", "general"]
        assert len(bundled.by_category("core")) == 8
        assert len(bundled.by_category("academic")) == 11
        assert len(bundled.by_category("general")) == 5

    def test_every_difficulty_band_is_populated(self, bundled):
        for low, high in [(1, 3), (3, 6), (5, 8), (7, 10)]:
            assert bundled.by_difficulty(low, high), f"no words in {low}-{high}"

    def test_entries_parse_definitions(self, bundled):
        academic = bundled.require("3")
        assert academic.word == "academic"
        assert len(academic.definitions) == 2
        assert academic.definitions[1].part_of_speech == "noun"

    def test_path_points_at_package_data(self):
        assert DEFAULT_CORPUS_PATH.name == "vocabulary.json"
        assert DEFAULT_CORPUS_PATH.exists()


class TestValidation:
    def test_empty_corpus(self):
        with pytest.raises(ValidationError):
            VocabularyCorpus.from_dicts([])

    def test_duplicate_ids(self, word_factory):
        with pytest.raises(ValidationError, match="Duplicate"):
            VocabularyCorpus.from_dicts(
                {"a": [word_factory("1", "alpha", 2)], "b": [word_factory("1", "beta", 2)]}
            )

    def test_difficulty_out_of_range(self, word_factory):
        with pytest.raises(ValidationError):
            VocabularyCorpus.from_dicts([word_factory("1", "alpha", 11)])

    def test_entry_without_definitions(self, word_factory):
        entry = word_factory("1", "alpha", 2)
        entry["definitions"] = []
        with pytest.raises(ValidationError):
            VocabularyCorpus.from_dicts([entry])

    def test_missing_headword(self):
        with pytest.raises(ValidationError, match="Malformed"):
            VocabularyCorpus.from_dicts([{"id": "1", "definitions": [{"meaning": "x"}]}])

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError):
            VocabularyCorpus.from_file(path)

    def test_from_file_round_trip(self, tmp_path, word_factory):
        path = tmp_path / "words.json"
        path.write_text(json.dumps([word_factory("9", "zephyr", 6)]), encoding="utf-8")

        corpus = VocabularyCorpus.from_file(path)

        assert corpus.require("9").word == "zephyr"
        assert "9" in corpus

    def test_require_unknown_id(self, small_corpus):
        with pytest.raises(ValidationError):
            small_corpus.require("nope")
        assert small_corpus.get("nope") is None


class TestSearch:
    def test_exact_headword_ranks_first(self, bundled):
        results = bundled.search("ability")

        assert results[0].word.word == "ability"
        assert "word" in results[0].matched_fields

    def test_case_insensitive(self, bundled):
        assert bundled.search("ABILITY")[0].word.word == "ability"

    def test_meaning_matches(self, small_corpus):
        results = small_corpus.search("idea")
        assert [r.word.id for r in results] == ["w3"]
        assert results[0].matched_fields == ("meaning",)

    def test_blank_query_returns_nothing(self, small_corpus):
        assert small_corpus.search("   ") == []

    def test_difficulty_filter(self, bundled):
        results = bundled.search("academic", difficulty=(6, 10))
        assert results
        assert all(6 <= r.word.difficulty <= 10 for r in results)

    def test_category_and_limit(self, bundled):
        results = bundled.search("a", category="general", limit=2)
        assert len(results) == 2
        general = {w.id for w in bundled.by_category("general")}
        assert all(r.word.id in general for r in results)


class TestQueries:
    def test_by_level_window(self, small_corpus):
        assert [w.id for w in small_corpus.by_level(1)] == ["w1", "w2", "w3"]
        assert [w.id for w in small_corpus.by_level(5)] == ["w4", "w5", "w6", "w7"]

    def test_similar_words_excludes_target(self, small_corpus):
        similar = small_corpus.similar_words("w4", limit=3)

        assert len(similar) == 3
        assert all(w.id != "w4" for w in similar)

    def test_similar_words_unknown_id(self, small_corpus):
        assert small_corpus.similar_words("missing") == []

    def test_statistics(self, small_corpus):
        stats = small_corpus.statistics()

        assert stats["total_words"] == 8
        assert stats["by_category"] == {"core": 8}
        assert stats["by_difficulty"] == {d: 1 for d in range(1, 9)}
        assert stats["average_difficulty"] == 4.5
