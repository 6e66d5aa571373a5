"""Aggregate score over the current city."""

from __future__ import annotations

from typing import Mapping, Sequence

from . import config
from .models import Building, Template


def building_complexity(building: Building, template: Template) -> float:
    directions = len({port.direction for port in template.ports})
    complexity = (
        len(template.shape)
        + template.port_count * config.SCORE_PORT_WEIGHT
        + directions * config.SCORE_DIRECTION_WEIGHT
    )
    if template.is_exponential:
        complexity += building.level * config.SCORE_EXPONENTIAL_LEVEL_WEIGHT
    return complexity


def compute_score(
    buildings: Sequence[Building],
    catalogue: Mapping[str, Template],
    cumulative_supply: float,
) -> float:
    levels = sum(building.level for building in buildings)
    complexity = sum(
        building_complexity(building, catalogue[building.template_id]) for building in buildings
    )
    return levels + cumulative_supply * config.SCORE_SUPPLY_WEIGHT + complexity
