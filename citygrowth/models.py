"""Data models for the city growth simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from . import config
from .geometry import Cell, Port, translate


@dataclass(frozen=True, slots=True)
class Template:
    """Immutable catalogue entry describing a placeable structure."""

    id: str
    name: str
    shape: Tuple[Cell, ...]
    ports: Tuple[Port, ...]
    growth_type: str
    base_threshold: float
    base_cap: int
    auto_connect: bool
    range: int
    decay_coefficient: float

    @property
    def port_count(self) -> int:
        return len(self.ports)

    @property
    def is_exponential(self) -> bool:
        return self.growth_type == config.EXPONENTIAL

    def supply(self, level: int) -> float:
        """Raw supply produced in one year at ``level``."""

        if self.is_exponential:
            return level ** config.EXPONENTIAL_SUPPLY_EXPONENT * config.EXPONENTIAL_SUPPLY_FACTOR
        return level * config.LINEAR_SUPPLY_PER_LEVEL

    def threshold(self, level: int) -> float:
        """Stored supply required to climb from ``level`` to ``level + 1``."""

        if self.is_exponential:
            return self.base_threshold * level ** config.EXPONENTIAL_THRESHOLD_EXPONENT
        return self.base_threshold * level

    def to_payload(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "shape": [list(cell) for cell in self.shape],
            "ports": [port.to_payload() for port in self.ports],
            "growth_type": self.growth_type,
            "base_threshold": self.base_threshold,
            "base_cap": self.base_cap,
            "auto_connect": self.auto_connect,
            "range": self.range,
            "port_count": self.port_count,
            "decay": self.decay_coefficient,
        }


@dataclass(slots=True)
class Building:
    """Placed instance of a template.

    ``shape`` and ``ports`` are already rotated and normalised, relative to
    ``origin``. Only ``level``, ``stored_supply`` and ``cluster_id`` change after
    placement.
    """

    id: str
    template_id: str
    rotation: int
    origin: Cell
    shape: Tuple[Cell, ...]
    ports: Tuple[Port, ...]
    level: int = 1
    stored_supply: float = 0.0
    cluster_id: Optional[str] = None

    def cells(self) -> Tuple[Cell, ...]:
        return translate(self.shape, self.origin)

    def absolute_ports(self) -> Tuple[Port, ...]:
        return tuple(port.translated(self.origin) for port in self.ports)

    def to_payload(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "template_id": self.template_id,
            "rotation": self.rotation,
            "position": {"x": self.origin[0], "y": self.origin[1]},
            "shape": [list(cell) for cell in self.shape],
            "ports": [port.to_payload() for port in self.ports],
            "cells": [list(cell) for cell in self.cells()],
            "level": self.level,
            "stored_supply": self.stored_supply,
            "cluster_id": self.cluster_id,
        }


PORT_LINK = "port"
AUTO_LINK = "auto"


@dataclass(frozen=True, slots=True)
class Link:
    """Connection between the buildings at indices ``a`` and ``b`` (a < b)."""

    a: int
    b: int
    type: str
    distance: int
    decay_factor: float = 1.0

    @property
    def weight(self) -> float:
        if self.type == PORT_LINK:
            return 1.0
        return self.distance * self.decay_factor

    def to_payload(self) -> Dict[str, object]:
        return {
            "a": self.a,
            "b": self.b,
            "type": self.type,
            "distance": self.distance,
            "decay": self.decay_factor,
        }


@dataclass(slots=True)
class Cluster:
    """Buildings transitively connected by links."""

    id: str
    root: int
    indexes: List[int]
    building_ids: List[str]
    links: List[Link] = field(default_factory=list)
    total_supply: float = 0.0

    @property
    def size(self) -> int:
        return len(self.indexes)

    def to_payload(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "root": self.root,
            "building_ids": list(self.building_ids),
            "indexes": list(self.indexes),
            "size": self.size,
            "total_supply": self.total_supply,
            "links": [link.to_payload() for link in self.links],
        }


@dataclass(frozen=True, slots=True)
class YearSummary:
    """Log record appended after each simulated year."""

    year: int
    cluster_count: int
    total_supply: float
    top_level: int

    def __str__(self) -> str:
        return (
            f"Year {self.year}: clusters={self.cluster_count}, "
            f"supply={self.total_supply:.2f}, topLv={self.top_level}"
        )

    def to_payload(self) -> Dict[str, object]:
        return {
            "year": self.year,
            "cluster_count": self.cluster_count,
            "total_supply": self.total_supply,
            "top_level": self.top_level,
            "text": str(self),
        }
