"""Counting store with a bounded, forgettable learning memory.

Keeps three count tables:

- per-category feature counts (``category -> feature -> count``)
- total feature counts across every category
- learn events per category

plus a FIFO memory of the most recent training records. When the memory
overflows, the oldest record is forgotten: every count it added is taken
back, so the tables always describe exactly the records still in memory.

Counts are never stored at zero. Lookups of unknown keys return 0 and
decrementing something that is not there does nothing.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Hashable, Iterable, Iterator
from typing import Any, Optional, Union

from .models import Classification, StoreSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_CAPACITY = 1000

# Default for lookups that span every category.
ANY_CATEGORY: Any = object()


class CountingStore:
    """Feature/category occurrence counts over a sliding window of records.

    All mutations and multi-step reads go through :attr:`lock`, a re-entrant
    lock, so a ``learn`` is atomic with respect to readers holding it.

    Args:
        memory_capacity: Maximum number of training records remembered.
    """

    def __init__(self, memory_capacity: int = DEFAULT_MEMORY_CAPACITY) -> None:
        _check_capacity(memory_capacity)
        self._memory_capacity = memory_capacity
        self._lock = threading.RLock()
        self.reset()

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding the count tables and memory as one unit."""
        return self._lock

    def reset(self) -> None:
        """Forget everything. The memory capacity is kept."""
        with self._lock:
            self._feature_count_per_category: dict[Hashable, dict[Hashable, int]] = {}
            self._total_feature_count: dict[Hashable, int] = {}
            self._total_category_count: dict[Hashable, int] = {}
            self._memory: deque[Classification] = deque()

    # ------------------------------------------------------------------
    # Low-level counters
    # ------------------------------------------------------------------
    # Calling these directly (outside of learn) lets the counts drift away
    # from what the memory will undo on eviction.

    def increment_feature(self, feature: Hashable, category: Hashable) -> None:
        with self._lock:
            features = self._feature_count_per_category.setdefault(category, {})
            features[feature] = features.get(feature, 0) + 1
            self._total_feature_count[feature] = self._total_feature_count.get(feature, 0) + 1

    def decrement_feature(self, feature: Hashable, category: Hashable) -> None:
        with self._lock:
            features = self._feature_count_per_category.get(category)
            if features is None or feature not in features:
                return
            if features[feature] == 1:
                del features[feature]
                if not features:
                    del self._feature_count_per_category[category]
            else:
                features[feature] -= 1

            total = self._total_feature_count.get(feature)
            if total is None:
                return
            if total == 1:
                del self._total_feature_count[feature]
            else:
                self._total_feature_count[feature] = total - 1

    def increment_category(self, category: Hashable) -> None:
        with self._lock:
            self._total_category_count[category] = self._total_category_count.get(category, 0) + 1

    def decrement_category(self, category: Hashable) -> None:
        with self._lock:
            count = self._total_category_count.get(category)
            if count is None:
                return
            if count == 1:
                del self._total_category_count[category]
            else:
                self._total_category_count[category] = count - 1

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_feature_count(self, feature: Hashable, category: Hashable = ANY_CATEGORY) -> int:
        """Times ``feature`` was seen, overall or within ``category``.

        ``None`` is a valid category; leave ``category`` out for the total.
        """
        if category is ANY_CATEGORY:
            return self._total_feature_count.get(feature, 0)
        features = self._feature_count_per_category.get(category)
        if features is None:
            return 0
        return features.get(feature, 0)

    def get_category_count(self, category: Hashable) -> int:
        """Number of remembered learn events for ``category``."""
        return self._total_category_count.get(category, 0)

    def get_categories_total(self) -> int:
        """Number of distinct categories currently known."""
        return len(self._total_category_count)

    def get_features(self) -> set:
        with self._lock:
            return set(self._total_feature_count)

    def get_categories(self) -> set:
        with self._lock:
            return set(self._total_category_count)

    def iter_categories(self) -> Iterator[Hashable]:
        """Known categories in the order they were first (re)learned."""
        with self._lock:
            categories = list(self._total_category_count)
        return iter(categories)

    @property
    def memory(self) -> tuple[Classification, ...]:
        """Remembered training records, oldest first."""
        with self._lock:
            return tuple(self._memory)

    def __len__(self) -> int:
        return len(self._memory)

    # ------------------------------------------------------------------
    # Learning and forgetting
    # ------------------------------------------------------------------

    @property
    def memory_capacity(self) -> int:
        return self._memory_capacity

    @memory_capacity.setter
    def memory_capacity(self, capacity: int) -> None:
        self.set_memory_capacity(capacity)

    def set_memory_capacity(self, capacity: int) -> None:
        """Change how many records are remembered.

        Shrinking below the current memory size forgets the oldest records
        straight away, undoing their counts.

        Raises:
            ValueError: If ``capacity`` is negative.
        """
        _check_capacity(capacity)
        with self._lock:
            old = self._memory_capacity
            self._memory_capacity = capacity
            evicted = 0
            while len(self._memory) > capacity:
                self.forget_oldest()
                evicted += 1
        logger.debug("Memory capacity changed %d -> %d (%d records forgotten)", old, capacity, evicted)

    def learn(
        self,
        category: Union[Hashable, Classification],
        features: Optional[Iterable[Hashable]] = None,
    ) -> Classification:
        """Count a training record and remember it.

        Accepts either ``learn(category, features)`` or
        ``learn(classification)``. Every feature is counted, duplicates
        included, and the category is counted once. If the memory then holds
        more than :attr:`memory_capacity` records the oldest is forgotten.

        Returns:
            The record that was stored.

        Raises:
            TypeError: If ``features`` is missing or is a bare string.
        """
        if isinstance(category, Classification):
            record = category
        else:
            if features is None:
                raise TypeError("learn() needs features when given a category")
            record = Classification(features, category)

        with self._lock:
            for feature in record.features:
                self.increment_feature(feature, record.category)
            self.increment_category(record.category)
            self._memory.append(record)

            if len(self._memory) > self._memory_capacity:
                self.forget_oldest()
        return record

    def forget_oldest(self) -> Optional[Classification]:
        """Drop the oldest remembered record and take back its counts."""
        with self._lock:
            if not self._memory:
                return None
            record = self._memory.popleft()
            for feature in record.features:
                self.decrement_feature(feature, record.category)
            self.decrement_category(record.category)
        logger.debug("Forgot record for category %r (%d features)", record.category, len(record.features))
        return record

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        """Copy the complete state of the store."""
        with self._lock:
            return StoreSnapshot(
                memory_capacity=self._memory_capacity,
                feature_count_per_category={
                    category: dict(counts)
                    for category, counts in self._feature_count_per_category.items()
                },
                total_feature_count=dict(self._total_feature_count),
                total_category_count=dict(self._total_category_count),
                memory=tuple(self._memory),
            )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Replace the current state with ``snapshot``'s."""
        _check_capacity(snapshot.memory_capacity)
        with self._lock:
            self._memory_capacity = snapshot.memory_capacity
            self._feature_count_per_category = {
                category: dict(counts)
                for category, counts in snapshot.feature_count_per_category.items()
            }
            self._total_feature_count = dict(snapshot.total_feature_count)
            self._total_category_count = dict(snapshot.total_category_count)
            self._memory = deque(snapshot.memory)
        logger.debug(
            "Restored store: %d categories, %d features, %d records",
            len(snapshot.total_category_count),
            len(snapshot.total_feature_count),
            len(snapshot.memory),
        )

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> "CountingStore":
        store = cls(memory_capacity=snapshot.memory_capacity)
        store.restore(snapshot)
        return store


def _check_capacity(capacity: int) -> None:
    if capacity < 0:
        raise ValueError(f"memory_capacity must be non-negative, got {capacity}")
