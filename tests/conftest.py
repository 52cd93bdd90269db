"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from lexicon.content.loader import VocabularyCorpus  # noqa: E402
from lexicon.delivery.storage import InMemoryStore  # noqa: E402

FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (session managers + stores)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def make_word(word_id, word, difficulty, meaning=None, example=None, tags=None) -> dict:
    """Raw corpus entry dict."""
    return {
        "id": word_id,
        "word": word,
        "pronunciation": f"/{word}/",
        "definitions": [
            {
                "part_of_speech": "noun",
                "meaning": meaning or f"meaning of {word}",
                "examples": [example] if example else [],
                "synonyms": [],
                "antonyms": [],
            }
        ],
        "difficulty": difficulty,
        "frequency": 50,
        "tags": tags or ["common"],
    }


SMALL_CORPUS = [
    make_word("w1", "ability", 1, "the power to do something", "She has the ability to lead."),
    make_word("w2", "benefit", 2, "an advantage gained", "The benefit of Benefit plans is clear."),
    make_word("w3", "concept", 3, "an abstract idea", "The concept is simple."),
    make_word("w4", "context", 4, "the surrounding circumstances", "Read it in context."),
    make_word("w5", "analyze", 5, "to examine in detail", "We analyze data daily."),
    make_word("w6", "paradigm", 6, "a model or pattern"),
    make_word("w7", "ephemeral", 7, "lasting a very short time", "Fame is ephemeral."),
    make_word("w8", "obfuscate", 8, "to make unclear", "Do not obfuscate the facts."),
]


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def small_corpus() -> VocabularyCorpus:
    """Eight words, one per difficulty 1-8."""
    return VocabularyCorpus.from_dicts(SMALL_CORPUS)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def word_factory():
    """Build raw corpus entry dicts."""
    return make_word
