"""Data models shared by the counting store and the classifier."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

SNAPSHOT_VERSION = 1


def as_features(features: Iterable[Hashable]) -> tuple:
    """Normalize a feature collection into a tuple (a multiset)."""
    if isinstance(features, str):
        raise TypeError("Features must be a collection of values, not a string")
    return tuple(features)


def _freeze(value: Any) -> Any:
    """Turn JSON lists back into (hashable) tuples, recursively."""
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@runtime_checkable
class FeatureProbabilitySource(Protocol):
    """Anything able to estimate P(feature | category)."""

    def feature_probability(self, feature: Hashable, category: Hashable) -> float:
        ...


@dataclass(frozen=True)
class Classification:
    """A set of features paired with a category.

    Used both for training records kept in memory and for ranked estimates
    returned by the classifier.

    Attributes:
        features: Feature multiset. Duplicates are meaningful.
        category: Category label.
        probability: Score of ``category`` for ``features``. Training
            records keep the default of 1.0.
    """

    features: tuple
    category: Hashable
    probability: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", as_features(self.features))

    def to_dict(self) -> dict:
        return {
            "features": [_thaw(f) for f in self.features],
            "category": _thaw(self.category),
            "probability": self.probability,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Classification":
        return cls(
            features=tuple(_freeze(f) for f in data["features"]),
            category=_freeze(data["category"]),
            probability=data.get("probability", 1.0),
        )


@dataclass(frozen=True)
class StoreSnapshot:
    """Complete copy of a counting store's state.

    Holds everything needed to rebuild an identical store: the three count
    mappings, the remembered records (oldest first) and the memory capacity.
    The mappings are private copies; mutating the originating store does
    not affect a snapshot.

    Fields cannot be reassigned, but the mappings themselves are plain
    dicts, so a snapshot is unhashable and should be treated as read-only.
    """

    __hash__ = None  # type: ignore[assignment]

    memory_capacity: int
    feature_count_per_category: dict = field(default_factory=dict)
    total_feature_count: dict = field(default_factory=dict)
    total_category_count: dict = field(default_factory=dict)
    memory: tuple[Classification, ...] = ()
    version: int = SNAPSHOT_VERSION

    def to_dict(self) -> dict:
        """Serialize to JSON-safe primitives.

        Mappings are written as lists of ``[key, value]`` pairs so that
        non-string keys (ints, tuples) survive a JSON round trip.
        """
        return {
            "version": self.version,
            "memory_capacity": self.memory_capacity,
            "feature_count_per_category": [
                [_thaw(category), [[_thaw(f), n] for f, n in counts.items()]]
                for category, counts in self.feature_count_per_category.items()
            ],
            "total_feature_count": [
                [_thaw(f), n] for f, n in self.total_feature_count.items()
            ],
            "total_category_count": [
                [_thaw(c), n] for c, n in self.total_category_count.items()
            ],
            "memory": [record.to_dict() for record in self.memory],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StoreSnapshot":
        """Deserialize a snapshot produced by :meth:`to_dict`.

        Raises:
            ValueError: If the snapshot format version is not supported.
        """
        version = data.get("version")
        if version != SNAPSHOT_VERSION:
            raise ValueError(
                f"Unsupported snapshot version: {version!r} (expected {SNAPSHOT_VERSION})"
            )
        return cls(
            memory_capacity=int(data["memory_capacity"]),
            feature_count_per_category={
                _freeze(category): {_freeze(f): int(n) for f, n in pairs}
                for category, pairs in data["feature_count_per_category"]
            },
            total_feature_count={
                _freeze(f): int(n) for f, n in data["total_feature_count"]
            },
            total_category_count={
                _freeze(c): int(n) for c, n in data["total_category_count"]
            },
            memory=tuple(Classification.from_dict(r) for r in data["memory"]),
            version=version,
        )
