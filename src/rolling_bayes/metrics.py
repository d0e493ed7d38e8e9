"""Prequential evaluation of an online classifier.

Batch cross-validation makes little sense for a model that forgets, so
evaluation is prequential: every record is first classified with the model
as it stands, then learned. The outcome is tallied as a confusion counter
over ``(true, predicted)`` pairs.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .models import Classification

if TYPE_CHECKING:
    from .classifier import NaiveBayesClassifier

logger = logging.getLogger(__name__)


@dataclass
class EvaluationReport:
    """Outcome of a prequential run.

    Attributes:
        confusion: Count of every ``(true, predicted)`` category pair.
        unscored: Records that arrived while no category was known.
    """

    confusion: Counter = field(default_factory=Counter)
    unscored: int = 0

    def add(self, true: Hashable, predicted: Hashable) -> None:
        self.confusion[(true, predicted)] += 1

    @property
    def total(self) -> int:
        """Number of scored predictions."""
        return sum(self.confusion.values())

    @property
    def correct(self) -> int:
        return sum(n for (true, predicted), n in self.confusion.items() if true == predicted)

    @property
    def accuracy(self) -> float:
        total = self.total
        return self.correct / total if total else 0.0

    @property
    def categories(self) -> list:
        """Every category seen as a label or a prediction, sorted by name."""
        seen = {true for true, _ in self.confusion} | {pred for _, pred in self.confusion}
        return sorted(seen, key=str)

    def support(self, category: Hashable) -> int:
        """Scored records whose true category is ``category``."""
        return sum(n for (true, _), n in self.confusion.items() if true == category)

    def predicted(self, category: Hashable) -> int:
        return sum(n for (_, pred), n in self.confusion.items() if pred == category)

    def precision(self, category: Hashable) -> float:
        predicted = self.predicted(category)
        return self.confusion[(category, category)] / predicted if predicted else 0.0

    def recall(self, category: Hashable) -> float:
        support = self.support(category)
        return self.confusion[(category, category)] / support if support else 0.0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "unscored": self.unscored,
            "correct": self.correct,
            "accuracy": round(self.accuracy, 4),
            "categories": {
                str(c): {
                    "support": self.support(c),
                    "precision": round(self.precision(c), 4),
                    "recall": round(self.recall(c), 4),
                }
                for c in self.categories
            },
            "confusion": [
                {"true": true, "predicted": pred, "count": n}
                for (true, pred), n in sorted(self.confusion.items(), key=lambda item: str(item[0]))
            ],
        }


def evaluate_prequential(
    classifier: "NaiveBayesClassifier",
    records: Iterable[Classification],
) -> EvaluationReport:
    """Test-then-train evaluation over a stream of labelled records.

    Each record is classified before it is learned, so a prediction never
    sees its own label. Records arriving while the model knows no category
    (typically the first one) have no prediction and only count towards
    :attr:`EvaluationReport.unscored`.

    Args:
        classifier: Model to evaluate. It is trained as a side effect.
        records: Labelled records, in stream order.
    """
    report = EvaluationReport()
    for record in records:
        prediction = classifier.classify(record.features)
        if prediction is None:
            report.unscored += 1
        else:
            report.add(record.category, prediction.category)
        classifier.learn(record)

    logger.debug("Prequential evaluation: %d scored, %d unscored", report.total, report.unscored)
    return report
