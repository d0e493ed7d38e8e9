"""Turn raw text into feature tokens for the classifier.

The classifier itself accepts any hashable features; this module is only a
convenience front end used by the command line. Features are lowercase
words, optionally with stopwords removed, plus word n-grams joined with
``_`` (``"not_good"``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .models import Classification

_WORD_RE = re.compile(r"\b[a-zA-Z][a-zA-Z'-]*[a-zA-Z]\b|\b[a-zA-Z]\b|\b\d+\b")

STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "it",
    "its", "this", "that", "these", "those", "i", "me", "my", "we", "our",
    "you", "your", "he", "she", "they", "them", "their", "his", "her",
    "so", "if", "then", "than", "there", "here", "just", "very", "too",
})


def tokenize(text: str) -> list[str]:
    """Extract lowercase word tokens from text."""
    return [m.group().lower() for m in _WORD_RE.finditer(text)]


def ngrams(tokens: list[str], n: int) -> list[str]:
    """Word n-grams of a token list, joined with underscores."""
    if n <= 1:
        return list(tokens)
    return ["_".join(tokens[i : i + n]) for i in range(len(tokens) - n + 1)]


@dataclass
class FeatureExtractor:
    """Configurable text-to-features conversion.

    Args:
        ngram_range: ``(min_n, max_n)`` of the n-grams to emit.
        use_stopwords: Drop common English words before building n-grams.
    """

    ngram_range: tuple[int, int] = (1, 1)
    use_stopwords: bool = True

    def __post_init__(self) -> None:
        min_n, max_n = self.ngram_range
        if min_n < 1 or max_n < min_n:
            raise ValueError(f"Invalid ngram_range: {self.ngram_range}")

    def extract(self, text: str) -> list[str]:
        """Features of ``text``. Repeated words yield repeated features."""
        tokens = tokenize(text)
        if self.use_stopwords:
            tokens = [t for t in tokens if t not in STOP_WORDS]

        features: list[str] = []
        min_n, max_n = self.ngram_range
        for n in range(min_n, max_n + 1):
            features.extend(ngrams(tokens, n))
        return features

    def to_dict(self) -> dict:
        return {
            "ngram_range": list(self.ngram_range),
            "use_stopwords": self.use_stopwords,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeatureExtractor":
        return cls(
            ngram_range=tuple(data.get("ngram_range", (1, 1))),
            use_stopwords=data.get("use_stopwords", True),
        )


def read_labelled_text(path: str | Path, extractor: FeatureExtractor) -> list[Classification]:
    """Read ``category<TAB>text`` lines into training records.

    Blank lines and lines starting with ``#`` are skipped.

    Raises:
        ValueError: If a line has no tab or an empty category.
    """
    records: list[Classification] = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            line = line.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            category, sep, text = line.partition("\t")
            category = category.strip()
            if not sep or not category:
                raise ValueError(f"{path}:{lineno}: expected 'category<TAB>text'")
            records.append(Classification(extractor.extract(text), category))
    return records
