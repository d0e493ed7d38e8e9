"""Tests for the text feature front end."""

from __future__ import annotations

from pathlib import Path

import pytest

from rolling_bayes.features import FeatureExtractor, ngrams, read_labelled_text, tokenize


class TestTokenize:
    def test_lowercase_words(self) -> None:
        assert tokenize("Great Phone, GOOD value!") == ["great", "phone", "good", "value"]

    def test_keeps_contractions_and_numbers(self) -> None:
        assert tokenize("Don't buy 2 of them") == ["don't", "buy", "2", "of", "them"]

    def test_empty(self) -> None:
        assert tokenize("  ... ") == []


class TestNgrams:
    def test_unigrams_are_a_copy(self) -> None:
        tokens = ["a", "b"]
        result = ngrams(tokens, 1)
        assert result == tokens
        assert result is not tokens

    def test_bigrams(self) -> None:
        assert ngrams(["not", "very", "good"], 2) == ["not_very", "very_good"]

    def test_too_short(self) -> None:
        assert ngrams(["one"], 2) == []


class TestFeatureExtractor:
    """Tests for FeatureExtractor."""

    def test_default_drops_stopwords(self) -> None:
        assert FeatureExtractor().extract("The phone is good") == ["phone", "good"]

    def test_keep_stopwords(self) -> None:
        extractor = FeatureExtractor(use_stopwords=False)
        assert extractor.extract("The phone is good") == ["the", "phone", "is", "good"]

    def test_repeats_are_kept(self) -> None:
        assert FeatureExtractor().extract("bad bad bad") == ["bad", "bad", "bad"]

    def test_ngram_range(self) -> None:
        extractor = FeatureExtractor(ngram_range=(1, 2))
        assert extractor.extract("not good phone") == [
            "not", "good", "phone", "not_good", "good_phone",
        ]

    def test_invalid_ngram_range(self) -> None:
        with pytest.raises(ValueError):
            FeatureExtractor(ngram_range=(0, 1))
        with pytest.raises(ValueError):
            FeatureExtractor(ngram_range=(3, 2))

    def test_dict_round_trip(self) -> None:
        extractor = FeatureExtractor(ngram_range=(1, 3), use_stopwords=False)
        assert FeatureExtractor.from_dict(extractor.to_dict()) == extractor

    def test_from_empty_dict_uses_defaults(self) -> None:
        assert FeatureExtractor.from_dict({}) == FeatureExtractor()


class TestReadLabelledText:
    """Tests for reading category<TAB>text files."""

    def test_reads_records(self, reviews_file: Path, review_lines: list[str]) -> None:
        records = read_labelled_text(reviews_file, FeatureExtractor())
        assert len(records) == len(review_lines)
        assert records[0].category == "positive"
        assert records[0].features == ("great", "phone", "good", "battery")
        assert records[-1].features == ("bad", "bad", "bad")

    def test_skips_blank_and_comment_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "data.tsv"
        path.write_text("# header\n\nspam\tbuy now\n   \n", encoding="utf-8")
        records = read_labelled_text(path, FeatureExtractor())
        assert [r.category for r in records] == ["spam"]

    def test_missing_tab_reports_line(self, tmp_path: Path) -> None:
        path = tmp_path / "data.tsv"
        path.write_text("spam\tbuy now\nno tab here\n", encoding="utf-8")
        with pytest.raises(ValueError, match=":2:"):
            read_labelled_text(path, FeatureExtractor())

    def test_empty_category_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "data.tsv"
        path.write_text("\tsome text\n", encoding="utf-8")
        with pytest.raises(ValueError):
            read_labelled_text(path, FeatureExtractor())
