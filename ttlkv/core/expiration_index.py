"""Key-indexed min-heap of expiration timestamps.

- Earliest-expiring key available in O(1) via peek()
- insert / extract_min / remove(key) in O(log n)
- A key appears at most once; inserting it again replaces its timestamp

The heap lives in a plain list; ``_positions`` maps each key to its current
list index so arbitrary keys can be updated or removed without a scan.
"""

from __future__ import annotations

from ttlkv.shared.types import ExpirationEntry


class ExpirationIndex:
    """Indexed min-priority structure mapping key -> expires_at."""

    def __init__(self) -> None:
        self._heap: list[ExpirationEntry] = []
        self._positions: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    def get(self, key: str) -> float | None:
        """Return the expiration timestamp for key, or None."""
        idx = self._positions.get(key)
        if idx is None:
            return None
        return self._heap[idx].expires_at

    def peek(self) -> ExpirationEntry | None:
        """Return the entry with the smallest timestamp without removing it."""
        return self._heap[0] if self._heap else None

    def insert(self, key: str, expires_at: float) -> None:
        """Insert a key, or replace its timestamp when already present."""
        if key in self._positions:
            self._update(key, expires_at)
            return
        self._heap.append(ExpirationEntry(key, expires_at))
        last = len(self._heap) - 1
        self._positions[key] = last
        self._bubble_up(last)

    def extract_min(self) -> ExpirationEntry | None:
        """Remove and return the entry with the smallest timestamp."""
        if not self._heap:
            return None
        return self._remove_at(0)

    def remove(self, key: str) -> ExpirationEntry | None:
        """Remove a key's entry wherever it sits. Returns None if absent."""
        idx = self._positions.get(key)
        if idx is None:
            return None
        return self._remove_at(idx)

    def clear(self) -> None:
        self._heap = []
        self._positions = {}

    # -- internals --

    def _update(self, key: str, expires_at: float) -> None:
        idx = self._positions[key]
        entry = self._heap[idx]
        previous = entry.expires_at
        entry.expires_at = expires_at
        if expires_at > previous:
            self._bubble_down(idx)
        elif expires_at < previous:
            self._bubble_up(idx)

    def _remove_at(self, idx: int) -> ExpirationEntry:
        last = len(self._heap) - 1
        if idx != last:
            self._swap(idx, last)
        removed = self._heap.pop()
        del self._positions[removed.key]
        if idx < len(self._heap):
            # The displaced entry came from a leaf; it may belong above or below idx.
            if idx > 0 and self._heap[idx].expires_at < self._heap[(idx - 1) // 2].expires_at:
                self._bubble_up(idx)
            else:
                self._bubble_down(idx)
        return removed

    def _swap(self, i: int, j: int) -> None:
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]
        self._positions[heap[i].key] = i
        self._positions[heap[j].key] = j

    def _bubble_up(self, idx: int) -> None:
        heap = self._heap
        while idx > 0:
            parent = (idx - 1) // 2
            if heap[parent].expires_at <= heap[idx].expires_at:
                break
            self._swap(parent, idx)
            idx = parent

    def _bubble_down(self, idx: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            left = 2 * idx + 1
            right = left + 1
            smallest = idx
            if left < size and heap[left].expires_at < heap[smallest].expires_at:
                smallest = left
            if right < size and heap[right].expires_at < heap[smallest].expires_at:
                smallest = right
            if smallest == idx:
                break
            self._swap(idx, smallest)
            idx = smallest
