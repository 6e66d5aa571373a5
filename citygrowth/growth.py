"""Yearly supply distribution and threshold-driven growth."""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Mapping, Sequence

from . import config
from .distance import DistanceOracle
from .models import Building, Cluster, Template


logger = logging.getLogger(__name__)


def distribution_weight(template: Template, level: int, nearest_distance: float) -> float:
    weight = (
        template.port_count
        * level ** config.LEVEL_WEIGHT_EXPONENT
        / (1.0 + nearest_distance * config.DISTANCE_WEIGHT_FACTOR)
    )
    return max(config.MIN_DISTRIBUTION_WEIGHT, weight)


def distribute_cluster_supply(
    cluster: Cluster, buildings: Sequence[Building], catalogue: Mapping[str, Template]
) -> Dict[int, float]:
    """Produce one year of supply for ``cluster`` and split it among members.

    Returns the share credited to each member index. ``cluster.total_supply``
    is set to the amount produced.
    """

    members = [buildings[index] for index in cluster.indexes]
    templates = [catalogue[building.template_id] for building in members]
    total = sum(tpl.supply(b.level) for tpl, b in zip(templates, members))
    cluster.total_supply = total

    oracle = DistanceOracle(cluster.indexes, cluster.links)
    weights = [
        distribution_weight(tpl, b.level, oracle.nearest_distance(index))
        for index, tpl, b in zip(cluster.indexes, templates, members)
    ]
    weight_sum = sum(weights)

    shares: Dict[int, float] = {}
    for index, building, weight in zip(cluster.indexes, members, weights):
        share = total * (weight / weight_sum)
        building.stored_supply += share
        shares[index] = share
    return shares


def supply_phase(
    clusters: Sequence[Cluster], buildings: Sequence[Building], catalogue: Mapping[str, Template]
) -> float:
    """Run the supply phase for every cluster and return the year's production."""

    produced = 0.0
    for cluster in clusters:
        distribute_cluster_supply(cluster, buildings, catalogue)
        produced += cluster.total_supply
    return produced


def growth_cap(template: Template, cluster_size: int) -> int:
    hub_bonus = config.HUB_CAP_BONUS if template.port_count >= config.HUB_PORT_THRESHOLD else 0
    return template.base_cap + math.floor(cluster_size * config.CLUSTER_CAP_FACTOR) + hub_bonus


def level_up(building: Building, template: Template, cap: int) -> int:
    """Spend stored supply on levels until the cap or threshold stops it.

    Returns the number of levels gained. A misconfigured threshold (zero or
    negative) would climb forever, so the loop stops after
    ``config.LEVEL_UP_GUARD`` iterations.
    """

    gained = 0
    while building.level < cap and building.stored_supply >= template.threshold(building.level):
        if gained >= config.LEVEL_UP_GUARD:
            logger.warning(
                "Level-up guard tripped for %s (%s) at level %s",
                building.id,
                template.id,
                building.level,
            )
            break
        building.stored_supply -= template.threshold(building.level)
        building.level += 1
        gained += 1
    return gained


def growth_phase(
    clusters: Sequence[Cluster], buildings: Sequence[Building], catalogue: Mapping[str, Template]
) -> List[str]:
    """Level up every building independently; return ids of those that grew."""

    sizes = {cluster.id: cluster.size for cluster in clusters}
    grown: List[str] = []
    for building in buildings:
        template = catalogue[building.template_id]
        cap = growth_cap(template, sizes.get(building.cluster_id, 1))
        if level_up(building, template, cap):
            grown.append(building.id)
    return grown


__all__ = [
    "distribute_cluster_supply",
    "distribution_weight",
    "growth_cap",
    "growth_phase",
    "level_up",
    "supply_phase",
]
