"""Grid geometry: directions, ports and rotation helpers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Sequence, Tuple

from .config import normalise_rotation

Cell = Tuple[int, int]


class Direction(str, Enum):
    """Cardinal directions in clockwise order (y grows downward)."""

    N = "N"
    E = "E"
    S = "S"
    W = "W"

    @property
    def order(self) -> int:
        return _ORDER.index(self)

    @property
    def vector(self) -> Cell:
        return _VECTORS[self]

    @property
    def opposite(self) -> "Direction":
        return _ORDER[(self.order + 2) % 4]

    def rotated(self, rotation: int) -> "Direction":
        step = normalise_rotation(rotation) // 90
        return _ORDER[(self.order + step) % 4]


_ORDER: Tuple[Direction, ...] = (Direction.N, Direction.E, Direction.S, Direction.W)
_VECTORS: Dict[Direction, Cell] = {
    Direction.N: (0, -1),
    Direction.E: (1, 0),
    Direction.S: (0, 1),
    Direction.W: (-1, 0),
}


def direction_from_id(value: Direction | str) -> Direction:
    if isinstance(value, Direction):
        return value
    try:
        return Direction(str(value).strip().upper())
    except ValueError as exc:
        raise ValueError(f"Unknown direction: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class Port:
    """Directional connection point on a footprint cell."""

    x: int
    y: int
    direction: Direction

    @property
    def cell(self) -> Cell:
        return (self.x, self.y)

    @property
    def facing(self) -> Cell:
        """Cell this port points into."""

        dx, dy = self.direction.vector
        return (self.x + dx, self.y + dy)

    def translated(self, origin: Cell) -> "Port":
        return Port(self.x + origin[0], self.y + origin[1], self.direction)

    def mates_with(self, other: "Port") -> bool:
        return other.cell == self.facing and other.direction is self.direction.opposite

    def to_payload(self) -> Dict[str, object]:
        return {"x": self.x, "y": self.y, "dir": self.direction.value}


# ---------------------------------------------------------------------------
# Rotation


def rotate_point(point: Cell, rotation: int) -> Cell:
    x, y = point
    step = normalise_rotation(rotation) // 90
    if step == 1:
        return (-y, x)
    if step == 2:
        return (-x, -y)
    if step == 3:
        return (y, -x)
    return (x, y)


def _min_offset(cells: Iterable[Cell]) -> Cell:
    cells = list(cells)
    if not cells:
        return (0, 0)
    return (min(x for x, _ in cells), min(y for _, y in cells))


def normalise_shape(shape: Iterable[Cell]) -> Tuple[Cell, ...]:
    cells = list(shape)
    min_x, min_y = _min_offset(cells)
    return tuple((x - min_x, y - min_y) for x, y in cells)


def rotate_shape(shape: Sequence[Cell], rotation: int) -> Tuple[Cell, ...]:
    """Rotate ``shape`` about the origin and shift it back to min x/y of zero."""

    return normalise_shape(rotate_point(cell, rotation) for cell in shape)


def rotate_ports(
    ports: Sequence[Port], rotation: int, shape_before: Sequence[Cell]
) -> Tuple[Port, ...]:
    """Rotate ``ports`` alongside ``shape_before``.

    The translation is taken from the rotated shape, not from the ports, so a
    port stays on the same footprint cell after normalisation.
    """

    min_x, min_y = _min_offset(rotate_point(cell, rotation) for cell in shape_before)
    rotated: List[Port] = []
    for port in ports:
        x, y = rotate_point(port.cell, rotation)
        rotated.append(Port(x - min_x, y - min_y, port.direction.rotated(rotation)))
    return tuple(rotated)


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def translate(shape: Iterable[Cell], origin: Cell) -> Tuple[Cell, ...]:
    ox, oy = origin
    return tuple((x + ox, y + oy) for x, y in shape)


__all__ = [
    "Cell",
    "Direction",
    "Port",
    "direction_from_id",
    "manhattan",
    "normalise_shape",
    "rotate_point",
    "rotate_ports",
    "rotate_shape",
    "translate",
]
