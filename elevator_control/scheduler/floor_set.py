"""Thread-safe ordered set of floor numbers."""

import threading
from bisect import bisect_left, bisect_right, insort
from typing import Iterator, List, Optional


class FloorSet:
    """
    Ordered set of floors guarded by its own lock.

    Callers never need external locking to insert, remove or iterate:
    every operation takes the internal lock, and iteration walks a copy
    taken under it.

    Args:
        descending: Iterate from the highest floor down instead of ascending.
    """

    def __init__(self, descending: bool = False):
        self._floors: List[int] = []
        self._descending = descending
        self._lock = threading.Lock()

    def add(self, floor: int) -> bool:
        """Add a floor. Returns False if it was already present."""
        with self._lock:
            index = bisect_left(self._floors, floor)
            if index < len(self._floors) and self._floors[index] == floor:
                return False
            insort(self._floors, floor)
            return True

    def discard(self, floor: int) -> bool:
        """Remove a floor. Returns False if it was not present."""
        with self._lock:
            index = bisect_left(self._floors, floor)
            if index < len(self._floors) and self._floors[index] == floor:
                del self._floors[index]
                return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._floors.clear()

    def first_above(self, floor: int) -> Optional[int]:
        """Smallest member strictly greater than floor."""
        with self._lock:
            index = bisect_right(self._floors, floor)
            return self._floors[index] if index < len(self._floors) else None

    def first_below(self, floor: int) -> Optional[int]:
        """Largest member strictly less than floor."""
        with self._lock:
            index = bisect_left(self._floors, floor)
            return self._floors[index - 1] if index > 0 else None

    def lowest(self) -> Optional[int]:
        with self._lock:
            return self._floors[0] if self._floors else None

    def highest(self) -> Optional[int]:
        with self._lock:
            return self._floors[-1] if self._floors else None

    def __contains__(self, floor: object) -> bool:
        with self._lock:
            index = bisect_left(self._floors, floor)
            return index < len(self._floors) and self._floors[index] == floor

    def __iter__(self) -> Iterator[int]:
        with self._lock:
            floors = list(self._floors)
        if self._descending:
            floors.reverse()
        return iter(floors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._floors)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)})"
