"""Link discovery and cluster partitioning."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .geometry import manhattan
from .models import AUTO_LINK, PORT_LINK, Building, Cluster, Link, Template


logger = logging.getLogger(__name__)


class UnionFind:
    """Array-backed disjoint sets over slots ``0..n-1``."""

    def __init__(self, size: int) -> None:
        self.parent: List[int] = list(range(size))
        self.rank: List[int] = [0] * size

    def find(self, x: int) -> int:
        root = x
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]
        return root

    def union(self, a: int, b: int) -> int:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return ra
        if self.rank[ra] < self.rank[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        if self.rank[ra] == self.rank[rb]:
            self.rank[ra] += 1
        return ra


def _port_link(a: Building, b: Building) -> bool:
    ports_b = b.absolute_ports()
    for port in a.absolute_ports():
        if any(port.mates_with(other) for other in ports_b):
            return True
    return False


def _min_cell_distance(a: Building, b: Building) -> int:
    cells_b = b.cells()
    return min(manhattan(ca, cb) for ca in a.cells() for cb in cells_b)


def find_link(
    i: int, j: int, a: Building, b: Building, catalogue: Mapping[str, Template]
) -> Optional[Link]:
    """Return the link between two buildings, if any.

    Port adjacency wins; proximity is only checked when no port pair mates and
    at least one side auto-connects. Proximity is measured between footprint
    cells, not ports.
    """

    if _port_link(a, b):
        return Link(i, j, PORT_LINK, distance=1, decay_factor=1.0)

    ta = catalogue[a.template_id]
    tb = catalogue[b.template_id]
    if not (ta.auto_connect or tb.auto_connect):
        return None
    distance = _min_cell_distance(a, b)
    if distance > max(ta.range, tb.range):
        return None
    decay = (ta.decay_coefficient + tb.decay_coefficient) / 2.0
    return Link(i, j, AUTO_LINK, distance=distance, decay_factor=decay)


def discover_links(
    buildings: Sequence[Building], catalogue: Mapping[str, Template]
) -> List[Link]:
    links: List[Link] = []
    for i in range(len(buildings)):
        for j in range(i + 1, len(buildings)):
            link = find_link(i, j, buildings[i], buildings[j], catalogue)
            if link is not None:
                links.append(link)
    return links


def rebuild_clusters(
    buildings: Sequence[Building], catalogue: Mapping[str, Template]
) -> Tuple[List[Link], List[Cluster]]:
    """Recompute every link and cluster from scratch.

    Each building's ``cluster_id`` is overwritten. Cluster ids are numbered in
    order of the lowest building index in each group.
    """

    links = discover_links(buildings, catalogue)
    sets = UnionFind(len(buildings))
    for link in links:
        sets.union(link.a, link.b)

    groups: Dict[int, List[int]] = {}
    for index in range(len(buildings)):
        groups.setdefault(sets.find(index), []).append(index)

    membership: Dict[int, Cluster] = {}
    clusters: List[Cluster] = []
    for number, (root, indexes) in enumerate(groups.items(), start=1):
        cluster = Cluster(
            id=f"c-{number}",
            root=root,
            indexes=indexes,
            building_ids=[buildings[index].id for index in indexes],
        )
        for index in indexes:
            buildings[index].cluster_id = cluster.id
            membership[index] = cluster
        clusters.append(cluster)

    for link in links:
        # Linked buildings always share a root.
        membership[link.a].links.append(link)

    logger.debug(
        "Connectivity rebuilt: buildings=%s links=%s clusters=%s",
        len(buildings),
        len(links),
        len(clusters),
    )
    return links, clusters


__all__ = [
    "UnionFind",
    "discover_links",
    "find_link",
    "rebuild_clusters",
]
