from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

from .datastructures import Site


class SiteQueue:
    """
    Site events ordered by descending y, ties by ascending x.
    Sites sharing a position with an already queued site are dropped.
    """

    def __init__(self, sites: Iterable[Site] = ()):
        self._heap: List[Tuple[float, float, int, Site]] = []
        self._seen: Set[Tuple[float, float]] = set()
        self._counter = itertools.count()
        for s in sites:
            self.push(s)

    def push(self, site: Site) -> bool:
        key = (site.x, site.y)
        if key in self._seen:
            return False
        self._seen.add(key)
        heapq.heappush(self._heap, (-site.y, site.x, next(self._counter), site))
        return True

    def pop(self) -> Site:
        return heapq.heappop(self._heap)[3]

    def peek_y(self) -> Optional[float]:
        return -self._heap[0][0] if self._heap else None

    def __len__(self) -> int:
        return len(self._heap)


@dataclass(order=True)
class CircleEvent:
    """
    Predicted sweep position at which `arc` vanishes.
    Only valid while the arc is alive and still at `generation`.
    """
    sort_key: Tuple[float, float, int]
    y: float = field(compare=False)
    center: Tuple[float, float] = field(compare=False)
    arc: int = field(compare=False)
    generation: int = field(compare=False)


class CircleQueue:
    def __init__(self):
        self._heap: List[CircleEvent] = []
        self._counter = itertools.count()

    def push(self, y: float, center: Tuple[float, float], arc: int, generation: int) -> CircleEvent:
        ev = CircleEvent(
            sort_key=(-y, center[0], next(self._counter)),
            y=y,
            center=center,
            arc=arc,
            generation=generation,
        )
        heapq.heappush(self._heap, ev)
        return ev

    def pop(self) -> CircleEvent:
        return heapq.heappop(self._heap)

    def peek_y(self) -> Optional[float]:
        return self._heap[0].y if self._heap else None

    def __len__(self) -> int:
        return len(self._heap)
