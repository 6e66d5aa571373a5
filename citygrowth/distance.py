"""Shortest weighted distances inside a cluster."""

from __future__ import annotations

import heapq
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import Link


class DistanceOracle:
    """All-pairs Dijkstra over one cluster's links.

    Port links weigh 1, auto links ``distance * decay_factor``. Parallel edges
    are kept; the search takes the cheaper one.
    """

    def __init__(self, indexes: Sequence[int], links: Iterable[Link]) -> None:
        self.indexes: List[int] = list(indexes)
        self._graph: Dict[int, List[Tuple[int, float]]] = defaultdict(list)
        for link in links:
            weight = link.weight
            self._graph[link.a].append((link.b, weight))
            self._graph[link.b].append((link.a, weight))
        self._distances: Dict[int, Dict[int, float]] = {
            start: self._dijkstra(start) for start in self.indexes
        }

    def _dijkstra(self, start: int) -> Dict[int, float]:
        dist = {index: math.inf for index in self.indexes}
        dist[start] = 0.0
        frontier: List[Tuple[float, int]] = [(0.0, start)]
        while frontier:
            current, node = heapq.heappop(frontier)
            if current > dist[node]:
                continue
            for neighbour, weight in self._graph[node]:
                candidate = current + weight
                if candidate < dist.get(neighbour, math.inf):
                    dist[neighbour] = candidate
                    heapq.heappush(frontier, (candidate, neighbour))
        return dist

    def distance(self, a: int, b: int) -> float:
        return self._distances[a].get(b, math.inf)

    def nearest_distance(self, index: int) -> float:
        """Distance to the closest other member, or 0 when there is none."""

        nearest = min(
            (d for other, d in self._distances[index].items() if other != index),
            default=math.inf,
        )
        return nearest if math.isfinite(nearest) else 0.0


__all__ = ["DistanceOracle"]
