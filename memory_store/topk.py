"""Bounded top-K accumulator"""
import heapq
import math
from typing import Any, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class BoundedTopK(Generic[T]):
    """
    Keeps the K highest scoring items offered so far.

    Backed by a min-heap keyed on ``(score, -sequence)``: the root is the
    lowest score and, among equal lowest scores, the most recently admitted
    item. Ties never displace an item already held.

    Example:
        >>> top = BoundedTopK(2)
        >>> top.offer("a", 0.1)
        True
        >>> top.offer("b", 0.9)
        True
        >>> top.offer("c", 0.5)
        True
        >>> top.drain_sorted()
        [('b', 0.9), ('c', 0.5)]
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._heap: List[Tuple[float, int, Any]] = []
        self._sequence = 0

    def __len__(self) -> int:
        return len(self._heap)

    @property
    def min_score(self) -> Optional[float]:
        """Lowest score currently held, None when empty"""
        if not self._heap:
            return None
        return self._heap[0][0]

    def offer(self, item: T, score: float) -> bool:
        """
        Offer an item; returns True if it was admitted.

        Raises:
            ValueError: If score is NaN
        """
        if math.isnan(score):
            raise ValueError("score must not be NaN")

        entry = (score, -self._sequence, item)
        if len(self._heap) < self.capacity:
            heapq.heappush(self._heap, entry)
        elif score > self._heap[0][0]:
            heapq.heapreplace(self._heap, entry)
        else:
            return False

        self._sequence += 1
        return True

    def drain_sorted(self) -> List[Tuple[T, float]]:
        """Return held items by descending score (ties in admission order) and reset."""
        entries = sorted(self._heap, key=lambda entry: (-entry[0], -entry[1]))
        self._heap = []
        self._sequence = 0
        return [(item, score) for score, _, item in entries]
