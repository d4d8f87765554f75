from __future__ import annotations

import heapq
from typing import Iterator, List, Optional, Set


class FloorQueue:
    """Priority queue of floor stops with duplicates collapsed.

    ``ascending=True`` pops the lowest floor first (the up sweep),
    ``ascending=False`` pops the highest floor first (the down sweep).
    """

    def __init__(self, ascending: bool = True) -> None:
        self.ascending = ascending
        self._heap: List[int] = []
        self._members: Set[int] = set()

    def _key(self, floor: int) -> int:
        return floor if self.ascending else -floor

    def push(self, floor: int) -> bool:
        if floor in self._members:
            return False
        self._members.add(floor)
        heapq.heappush(self._heap, self._key(floor))
        return True

    def pop(self) -> int:
        if not self._heap:
            raise IndexError("pop from an empty floor queue")
        floor = self._key(heapq.heappop(self._heap))
        self._members.discard(floor)
        return floor

    def peek(self) -> Optional[int]:
        if not self._heap:
            return None
        return self._key(self._heap[0])

    def discard(self, floor: int) -> bool:
        if floor not in self._members:
            return False
        self._members.discard(floor)
        self._heap.remove(self._key(floor))
        heapq.heapify(self._heap)
        return True

    def clear(self) -> List[int]:
        floors = self.floors()
        self._heap.clear()
        self._members.clear()
        return floors

    def floors(self) -> List[int]:
        """Floors in the order they would be served."""
        return sorted(self._members, reverse=not self.ascending)

    def __contains__(self, floor: object) -> bool:
        return floor in self._members

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __iter__(self) -> Iterator[int]:
        return iter(self.floors())

    def __repr__(self) -> str:
        order = "asc" if self.ascending else "desc"
        return f"FloorQueue({order}, {self.floors()})"
