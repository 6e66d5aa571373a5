"""Centralised configuration for the city growth simulation."""
from __future__ import annotations

from typing import Tuple

# ---------------------------------------------------------------------------
# Board and calendar

GRID_SIZE: int = 10
MAX_YEAR: int = 50
DEFAULT_SEED: int = 42

VALID_ROTATIONS: Tuple[int, ...] = (0, 90, 180, 270)

# ---------------------------------------------------------------------------
# Template catalogue

# Each template receives ``DECAY_BASE + rnd() * DECAY_SPREAD`` once at start-up.
DECAY_BASE: float = 0.7
DECAY_SPREAD: float = 0.5

LINEAR = "linear"
EXPONENTIAL = "exponential"
GROWTH_TYPES: Tuple[str, ...] = (LINEAR, EXPONENTIAL)

# ---------------------------------------------------------------------------
# Supply production and distribution

LINEAR_SUPPLY_PER_LEVEL: float = 5.0
EXPONENTIAL_SUPPLY_EXPONENT: float = 1.5
EXPONENTIAL_SUPPLY_FACTOR: float = 4.0

LEVEL_WEIGHT_EXPONENT: float = 0.8
DISTANCE_WEIGHT_FACTOR: float = 0.3
MIN_DISTRIBUTION_WEIGHT: float = 0.01

# ---------------------------------------------------------------------------
# Growth

EXPONENTIAL_THRESHOLD_EXPONENT: float = 1.8
CLUSTER_CAP_FACTOR: float = 0.8
HUB_PORT_THRESHOLD: int = 4
HUB_CAP_BONUS: int = 2
LEVEL_UP_GUARD: int = 999

# ---------------------------------------------------------------------------
# Scoring

SCORE_SUPPLY_WEIGHT: float = 0.1
SCORE_PORT_WEIGHT: float = 1.5
SCORE_DIRECTION_WEIGHT: float = 2.0
SCORE_EXPONENTIAL_LEVEL_WEIGHT: float = 2.0

YEAR_LOG_LIMIT = 100


def normalise_template_key(value: str) -> str:
    if not isinstance(value, str):
        raise ValueError("Template identifier must be a string")
    key = value.strip().lower().replace("_", "-")
    if not key:
        raise ValueError("Template identifier is empty")
    return key


def normalise_rotation(value: object) -> int:
    """Return ``value`` folded into ``VALID_ROTATIONS``.

    Any integral multiple of 90 is accepted (``-90`` becomes ``270``); anything
    else raises :class:`ValueError`.
    """

    if isinstance(value, bool):
        raise ValueError(f"Invalid rotation: {value!r}")
    if isinstance(value, int):
        degrees = value
    else:
        try:
            numeric = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValueError(f"Invalid rotation: {value!r}") from exc
        if not numeric.is_integer():
            raise ValueError(f"Rotation must be a multiple of 90 degrees: {value!r}")
        degrees = int(numeric)
    if degrees % 90 != 0:
        raise ValueError(f"Rotation must be a multiple of 90 degrees: {value!r}")
    return degrees % 360
