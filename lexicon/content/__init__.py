"""
Vocabulary corpus loading and search.
"""

from lexicon.content.loader import (
    DEFAULT_CORPUS_PATH,
    SearchResult,
    VocabularyCorpus,
    load_default_corpus,
)

__all__ = [
    "DEFAULT_CORPUS_PATH",
    "SearchResult",
    "VocabularyCorpus",
    "load_default_corpus",
]
