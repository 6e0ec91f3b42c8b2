"""Shared test fixtures and configuration."""

import logging

import pytest

from ja_search_repro.config import Settings
from ja_search_repro.domain.model import DocumentStore


# Every variable Settings reads; cleared so a developer's shell or .env cannot leak into tests
SETTINGS_ENV_VARS = (
    "SEARCH_TOKENIZER",
    "SEARCH_WILDCARD",
    "NGRAM_MIN_SIZE",
    "NGRAM_MAX_SIZE",
    "BM25_K1",
    "BM25_B",
    "MAX_RESULTS",
    "LOG_LEVEL",
    "LOG_JSON",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Run every test from an empty directory with no settings in the environment."""
    for key in SETTINGS_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging replaces root handlers; put the originals back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class WhitespaceSegmenter:
    """Deterministic stand-in for TinySegmenter: splits on single spaces."""

    def tokenize(self, text: str) -> list[str]:
        return text.split(" ")


@pytest.fixture
def whitespace_segmenter():
    return WhitespaceSegmenter()


@pytest.fixture
def ngram_settings():
    """Settings for the n-gram analyzer, whose output does not depend on a segmentation model."""
    return Settings(search_tokenizer="ngram", ngram_min_size=1, ngram_max_size=15)


@pytest.fixture
def sample_store():
    """Three documents: Document 1..3."""
    return DocumentStore.empty().add("東京タワー").add("大阪城").add("東京駅と東京タワー")
