"""Shared test fixtures for rolling-bayes tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from rolling_bayes.classifier import NaiveBayesClassifier
from rolling_bayes.store import CountingStore


@pytest.fixture
def store() -> CountingStore:
    """An empty store with the default capacity."""
    return CountingStore()


@pytest.fixture
def classifier() -> NaiveBayesClassifier:
    """An empty classifier with the default capacity."""
    return NaiveBayesClassifier()


@pytest.fixture
def sentiment_classifier() -> NaiveBayesClassifier:
    """Three positive and three negative records, positives learned first."""
    nb = NaiveBayesClassifier()
    for _ in range(3):
        nb.learn("positive", ["good", "great"])
    for _ in range(3):
        nb.learn("negative", ["bad", "terrible"])
    return nb


@pytest.fixture
def review_lines() -> list[str]:
    """Labelled review snippets in ``category<TAB>text`` form."""
    return [
        "positive\tA great phone with a good battery",
        "negative\tTerrible screen and bad support",
        "positive\tGreat camera, good value",
        "negative\tBad battery, terrible build",
        "positive\tGood sound and a great display",
        "negative\tThe worst purchase, bad and terrible",
        "positive\tReally great, really good",
        "negative\tBad, bad, bad",
    ]


@pytest.fixture
def reviews_file(tmp_path: Path, review_lines: list[str]) -> Path:
    """Temporary training file with labelled reviews."""
    file = tmp_path / "reviews.tsv"
    file.write_text("# category\ttext\n" + "\n".join(review_lines) + "\n", encoding="utf-8")
    return file
