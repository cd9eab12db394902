"""Bounded history of Bloch vector positions for display."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray

from bloch_precession.utils.constants import TRAIL_CAPACITY

Point = tuple[float, float, float]


class TrailBuffer:
    """FIFO of the most recent cartesian points, oldest first.

    Appending at capacity evicts the single oldest point, so the length
    never exceeds capacity.
    """

    def __init__(self, capacity: int = TRAIL_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"Trail capacity must be >= 1, got {capacity}")
        self._points: deque[Point] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._points.maxlen  # type: ignore[return-value]

    def append(self, point: Point) -> None:
        x, y, z = point
        self._points.append((float(x), float(y), float(z)))

    def clear(self) -> None:
        self._points.clear()

    def all(self) -> list[Point]:
        """Current contents in chronological order."""
        return list(self._points)

    def as_array(self) -> NDArray[np.float64]:
        """(n, 3) array of the current contents, for vertex upload."""
        if not self._points:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array(self._points, dtype=np.float64)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"TrailBuffer({len(self)}/{self.capacity})"
