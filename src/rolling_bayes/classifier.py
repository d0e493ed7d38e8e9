"""Online naive Bayes classifier on top of a bounded counting store.

Probabilities come straight from the counts kept by
:class:`~rolling_bayes.store.CountingStore`:

- ``P(f | c)`` is the share of ``f``'s occurrences seen under ``c``.
- That estimate is shrunk towards an assumed probability (0.5 by default)
  in proportion to how little evidence there is for ``f``.
- A category's score is its prior times the product of the shrunk
  estimates over the input features (duplicates count every time).

Example::

    classifier = NaiveBayesClassifier(memory_capacity=500)
    classifier.learn("positive", ["good", "great"])
    classifier.learn("negative", ["bad", "terrible"])

    result = classifier.classify(["good"])
    print(result.category)     # "positive"
    print(result.probability)  # 0.375

    classifier.save("model.json")
    loaded = NaiveBayesClassifier.load("model.json")
"""

from __future__ import annotations

import json
import logging
from collections.abc import Hashable, Iterable
from pathlib import Path
from typing import Optional, Union

from .models import Classification, FeatureProbabilitySource, StoreSnapshot, as_features
from .store import ANY_CATEGORY, DEFAULT_MEMORY_CAPACITY, CountingStore

logger = logging.getLogger(__name__)

MODEL_FORMAT_VERSION = 1


class NaiveBayesClassifier:
    """Naive Bayes estimator that learns incrementally and forgets.

    Only the ``memory_capacity`` most recent training records contribute to
    the counts; older ones are forgotten exactly.

    Args:
        memory_capacity: Number of training records remembered.
        store: Existing store to classify from. A fresh one is created
            when omitted.
        metadata: Free-form JSON-encodable details saved with the model
            (e.g. how features were extracted).
    """

    def __init__(
        self,
        memory_capacity: int = DEFAULT_MEMORY_CAPACITY,
        store: Optional[CountingStore] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        self._store = store if store is not None else CountingStore(memory_capacity)
        self.metadata = dict(metadata or {})

    @property
    def store(self) -> CountingStore:
        return self._store

    # ------------------------------------------------------------------
    # Training (delegated to the store)
    # ------------------------------------------------------------------

    def learn(
        self,
        category: Union[Hashable, Classification],
        features: Optional[Iterable[Hashable]] = None,
    ) -> Classification:
        """Learn one record. See :meth:`CountingStore.learn`."""
        return self._store.learn(category, features)

    def reset(self) -> None:
        self._store.reset()

    @property
    def memory_capacity(self) -> int:
        return self._store.memory_capacity

    @memory_capacity.setter
    def memory_capacity(self, capacity: int) -> None:
        self._store.set_memory_capacity(capacity)

    def set_memory_capacity(self, capacity: int) -> None:
        self._store.set_memory_capacity(capacity)

    @property
    def categories(self) -> set:
        return self._store.get_categories()

    @property
    def features(self) -> set:
        return self._store.get_features()

    def get_feature_count(self, feature: Hashable, category: Hashable = ANY_CATEGORY) -> int:
        return self._store.get_feature_count(feature, category)

    def get_category_count(self, category: Hashable) -> int:
        return self._store.get_category_count(category)

    def get_categories_total(self) -> int:
        return self._store.get_categories_total()

    def snapshot(self) -> StoreSnapshot:
        return self._store.snapshot()

    def restore(self, snapshot: StoreSnapshot) -> None:
        self._store.restore(snapshot)

    # ------------------------------------------------------------------
    # Probabilities
    # ------------------------------------------------------------------

    def feature_probability(self, feature: Hashable, category: Hashable) -> float:
        """Maximum-likelihood estimate of P(feature | category).

        Returns 0.0 for a feature that has never been seen.
        """
        total = self._store.get_feature_count(feature)
        if total == 0:
            return 0.0
        return self._store.get_feature_count(feature, category) / total

    def feature_weighed_average(
        self,
        feature: Hashable,
        category: Hashable,
        source: Optional[FeatureProbabilitySource] = None,
        weight: float = 1.0,
        assumed_probability: float = 0.5,
    ) -> float:
        """Smoothed P(feature | category).

        Mixes the basic estimate with ``assumed_probability``, giving the
        assumption the weight of ``weight`` observations::

            (weight * assumed + totals * basic) / (weight + totals)

        where ``totals`` is how often the feature was seen at all. An unseen
        feature yields exactly ``assumed_probability``.

        Args:
            feature: Feature to estimate.
            category: Category to condition on.
            source: Alternative provider of the basic estimate. Defaults
                to :meth:`feature_probability`.
            weight: Weight of the assumed probability, in observations.
            assumed_probability: Estimate used without any evidence.
        """
        source = source if source is not None else self
        basic = source.feature_probability(feature, category)
        totals = self._store.get_feature_count(feature)
        denominator = weight + totals
        if denominator == 0:
            return assumed_probability
        return (weight * assumed_probability + totals * basic) / denominator

    def features_probability_product(self, features: Iterable[Hashable], category: Hashable) -> float:
        """Product of the smoothed estimates of every feature, duplicates included."""
        product = 1.0
        for feature in features:
            product *= self.feature_weighed_average(feature, category)
        return product

    def category_probability(self, features: Iterable[Hashable], category: Hashable) -> float:
        """Naive Bayes score of ``category`` for ``features``.

        Prior is the category's learn count over the number of known
        categories, so scores are only comparable with each other and may
        exceed 1. With no categories at all the score is 0.0.

        Raises:
            TypeError: If ``features`` is a bare string.
        """
        features = as_features(features)
        with self._store.lock:
            categories_total = self._store.get_categories_total()
            if categories_total == 0:
                return 0.0
            prior = self._store.get_category_count(category) / categories_total
            return prior * self.features_probability_product(features, category)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify_detailed(self, features: Iterable[Hashable]) -> list[Classification]:
        """Score every known category, ascending by probability.

        Equal probabilities are ordered by when the category was first
        learned: the earlier category sorts after (ranks above) the later
        one. Distinct categories are therefore never merged.

        Returns:
            One :class:`Classification` per known category, lowest score
            first. Empty when nothing has been learned.
        """
        features = as_features(features)
        scored = []
        with self._store.lock:
            for rank, category in enumerate(self._store.iter_categories()):
                probability = self.category_probability(features, category)
                scored.append((probability, -rank, Classification(features, category, probability)))
        scored.sort(key=lambda item: (item[0], item[1]))
        return [record for _, _, record in scored]

    def classify(self, features: Iterable[Hashable]) -> Optional[Classification]:
        """Most probable category for ``features``.

        Returns:
            The best :class:`Classification`, or ``None`` if no category
            has been learned.
        """
        ranked = self.classify_detailed(features)
        if not ranked:
            return None
        return ranked[-1]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize the classifier state."""
        return {
            "version": MODEL_FORMAT_VERSION,
            "metadata": self.metadata,
            "store": self._store.snapshot().to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NaiveBayesClassifier":
        """Deserialize a classifier from :meth:`to_dict` output.

        Raises:
            ValueError: If the model format version is not supported.
        """
        version = data.get("version")
        if version != MODEL_FORMAT_VERSION:
            raise ValueError(f"Unsupported model version: {version!r}")
        snapshot = StoreSnapshot.from_dict(data["store"])
        return cls(
            store=CountingStore.from_snapshot(snapshot),
            metadata=data.get("metadata", {}),
        )

    def save(self, path: str | Path) -> None:
        """Save the model to a JSON file.

        Features and categories must be JSON-encodable values (strings,
        numbers, booleans, None, or tuples of those).
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug("Saved model to %s", path)

    @classmethod
    def load(cls, path: str | Path) -> "NaiveBayesClassifier":
        """Load a model saved with :meth:`save`."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        classifier = cls.from_dict(data)
        logger.debug("Loaded model from %s", path)
        return classifier
