"""Occupancy grid and placement validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from . import config
from .geometry import Cell, Port, rotate_ports, rotate_shape, translate
from .models import Building, Template
from .template_catalog import get_template


logger = logging.getLogger(__name__)


class PlacementError(ValueError):
    """Raised when a placement command violates the catalogue contract."""


class InvalidRotationError(PlacementError):
    """Raised when a rotation is not a multiple of 90 degrees."""


@dataclass(frozen=True, slots=True)
class Placement:
    """Rotated footprint of a template anchored at ``origin``."""

    template_id: str
    rotation: int
    origin: Cell
    shape: Tuple[Cell, ...]
    ports: Tuple[Port, ...]

    @property
    def cells(self) -> Tuple[Cell, ...]:
        return translate(self.shape, self.origin)

    @property
    def absolute_ports(self) -> Tuple[Port, ...]:
        return tuple(port.translated(self.origin) for port in self.ports)


def _coerce_origin(origin: object) -> Cell:
    if isinstance(origin, Mapping):
        origin = (origin.get("x"), origin.get("y"))
    try:
        x, y = origin  # type: ignore[misc]
        return (int(x), int(y))
    except (TypeError, ValueError, OverflowError) as exc:
        raise PlacementError(f"Invalid origin: {origin!r}") from exc


class PlacementGrid:
    """Fixed-size board mapping each cell to the id of the building on it."""

    def __init__(self, catalogue: Mapping[str, Template], size: int = config.GRID_SIZE) -> None:
        self.catalogue = catalogue
        self.size = int(size)
        self._cells: List[List[Optional[str]]] = []
        self.buildings: List[Building] = []
        self._next_id = 1
        self.reset()

    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._cells = [[None for _ in range(self.size)] for _ in range(self.size)]
        self.buildings = []
        self._next_id = 1

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.size and 0 <= y < self.size

    def occupant(self, cell: Cell) -> Optional[str]:
        if not self.in_bounds(cell):
            return None
        x, y = cell
        return self._cells[y][x]

    # ------------------------------------------------------------------
    def resolve(self, template_id: str, rotation: object, origin: object) -> Placement:
        """Return the rotated footprint for a placement command.

        Raises :class:`UnknownTemplateError` or :class:`InvalidRotationError`
        for malformed commands; bounds and occupancy are not checked here.
        """

        template = get_template(self.catalogue, template_id)
        try:
            degrees = config.normalise_rotation(rotation)
        except ValueError as exc:
            raise InvalidRotationError(str(exc)) from exc
        return Placement(
            template_id=template.id,
            rotation=degrees,
            origin=_coerce_origin(origin),
            shape=rotate_shape(template.shape, degrees),
            ports=rotate_ports(template.ports, degrees, template.shape),
        )

    def fits(self, placement: Placement) -> bool:
        return all(
            self.in_bounds(cell) and self.occupant(cell) is None for cell in placement.cells
        )

    def can_place(self, template_id: str, rotation: object, origin: object) -> bool:
        return self.fits(self.resolve(template_id, rotation, origin))

    def preview(self, template_id: str, rotation: object, origin: object) -> Dict[str, object]:
        placement = self.resolve(template_id, rotation, origin)
        return {
            "template_id": placement.template_id,
            "rotation": placement.rotation,
            "origin": {"x": placement.origin[0], "y": placement.origin[1]},
            "cells": [list(cell) for cell in placement.cells],
            "ports": [port.to_payload() for port in placement.absolute_ports],
            "valid": self.fits(placement),
        }

    def place(self, template_id: str, rotation: object, origin: object) -> Optional[Building]:
        """Commit a placement, returning the new building or ``None`` if blocked."""

        placement = self.resolve(template_id, rotation, origin)
        if not self.fits(placement):
            logger.info(
                "Placement rejected template=%s rotation=%s origin=%s",
                placement.template_id,
                placement.rotation,
                placement.origin,
            )
            return None
        building = Building(
            id=f"b-{self._next_id}",
            template_id=placement.template_id,
            rotation=placement.rotation,
            origin=placement.origin,
            shape=placement.shape,
            ports=placement.ports,
        )
        self._next_id += 1
        for x, y in placement.cells:
            self._cells[y][x] = building.id
        self.buildings.append(building)
        return building

    # ------------------------------------------------------------------
    def snapshot(self) -> List[List[Optional[str]]]:
        return [list(row) for row in self._cells]


__all__ = [
    "InvalidRotationError",
    "Placement",
    "PlacementError",
    "PlacementGrid",
]
