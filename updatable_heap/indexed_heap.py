from __future__ import annotations

import logging
from typing import Any, Hashable

from updatable_heap.diagnostics import HeapStatus, format_status, inspect_entries
from updatable_heap.errors import EmptyHeapError, HeapInvariantError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class UpdatableHeap:
    """Max-heap of (key, priority) pairs addressable by key.

    Entries are ordered by priority first and by key among equal priorities,
    so the root is always the element with the greatest ``(priority, key)``.
    Any element can be re-prioritised or erased by key in O(log n).

    Note:
    - ``self.heap`` holds ``[priority, key]`` lists, whose lexicographic
      comparison is the heap order.
    - Do not modify ``self.heap`` without also modifying ``self.position``.
    """

    def __init__(self, *, debug: bool = False) -> None:
        self.heap: list[list[Any]] = []   # list of [priority, key]
        self.position: dict[Hashable, int] = {}   # key -> index in heap
        self.debug = debug

    # ---------- internal helpers ----------

    def _swap(self, i: int, j: int) -> None:
        self.heap[i], self.heap[j] = self.heap[j], self.heap[i]
        self.position[self.heap[i][1]] = i
        self.position[self.heap[j][1]] = j

    def _sift_up(self, idx: int) -> None:
        """Move the entry at idx toward the root while it outranks its parent."""
        heap = self.heap
        while idx > 0:
            parent = (idx - 1) // 2
            if heap[idx] > heap[parent]:
                self._swap(idx, parent)
                idx = parent
            else:
                break

    def _sift_down(self, idx: int) -> None:
        """Move the entry at idx toward the leaves while a child outranks it."""
        heap = self.heap
        n = len(heap)
        while True:
            left = 2 * idx + 1
            right = left + 1
            best = idx

            if left < n and heap[left] > heap[best]:
                best = left
            if right < n and heap[right] > heap[best]:
                best = right

            if best == idx:
                break

            self._swap(idx, best)
            idx = best

    def _repair(self, idx: int) -> None:
        if idx > 0 and self.heap[idx] > self.heap[(idx - 1) // 2]:
            self._sift_up(idx)
        else:
            self._sift_down(idx)

    def _mutated(self) -> None:
        if self.debug:
            self.check_invariants()

    def _stable_index(self) -> int:
        heap = self.heap
        greatest = heap[0][0]
        best = 0
        for i in range(1, len(heap)):
            if heap[i][0] == greatest and heap[best][1] < heap[i][1]:
                best = i
        return best

    # ---------- public API ----------

    def insert_or_update(self, key: Hashable, priority: Any) -> None:
        """Insert key with priority, or overwrite the priority of a present key."""
        if key in self.position:
            idx = self.position[key]
            self.heap[idx][0] = priority
            self._repair(idx)
        else:
            idx = len(self.heap)
            self.heap.append([priority, key])
            self.position[key] = idx
            self._sift_up(idx)
        self._mutated()

    def erase(self, key: Hashable) -> None:
        """Remove key from the heap. Erasing an absent key does nothing."""
        if key not in self.position:
            return

        idx = self.position.pop(key)
        last = self.heap.pop()
        if idx < len(self.heap):
            self.heap[idx] = last
            self.position[last[1]] = idx
            self._repair(idx)
        self._mutated()

    def pop(self) -> tuple[Any, Any] | None:
        """Remove the top element and return it, or None if the heap is empty."""
        if not self.heap:
            return None

        top_priority, top_key = self.heap[0]
        last = self.heap.pop()
        del self.position[top_key]

        if self.heap:
            self.heap[0] = last
            self.position[last[1]] = 0
            self._sift_down(0)

        self._mutated()
        return top_key, top_priority

    def stable_remove(self) -> tuple[Any, Any] | None:
        """Erase the element ``stable_top`` would return; None if the heap is empty."""
        if not self.heap:
            return None

        priority, key = self.heap[self._stable_index()]
        self.erase(key)
        return key, priority

    def top(self) -> tuple[Any, Any]:
        if not self.heap:
            raise EmptyHeapError("top of empty heap")
        priority, key = self.heap[0]
        return key, priority

    def stable_top(self) -> tuple[Any, Any]:
        """Element with the greatest priority, greatest key among ties.

        Found by scanning every entry against the root's priority. With the
        heap order intact this always agrees with ``top``.
        """
        if not self.heap:
            raise EmptyHeapError("stable_top of empty heap")
        priority, key = self.heap[self._stable_index()]
        return key, priority

    def is_inserted(self, key: Hashable) -> bool:
        return key in self.position

    def size(self) -> int:
        return len(self.heap)

    def get_priority(self, key: Hashable) -> Any:
        if key not in self.position:
            raise KeyError(f"Key not found: {key!r}")
        return self.heap[self.position[key]][0]

    def clear(self) -> None:
        logger.debug("clearing heap of %d elements", len(self.heap))
        self.heap.clear()
        self.position.clear()

    # ---------- diagnostics ----------

    def validate(self) -> HeapStatus:
        return inspect_entries(self.heap, self.position)

    def check_invariants(self) -> None:
        status = self.validate()
        if not status.ok:
            report = format_status(status)
            logger.error("heap invariant violated:\n%s", report)
            raise HeapInvariantError(report)

    def show_status(self) -> HeapStatus:
        status = self.validate()
        logger.debug("heap status:\n%s", format_status(status))
        return status

    def __contains__(self, key: Hashable) -> bool:
        return key in self.position

    def __len__(self) -> int:
        return len(self.heap)

    def __repr__(self) -> str:
        top = self.top() if self.heap else None
        return f"{type(self).__name__}(size={len(self.heap)}, top={top!r})"
