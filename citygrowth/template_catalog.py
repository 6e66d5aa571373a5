"""Catalogue of placeable templates."""

from __future__ import annotations

import logging
import random
from typing import Dict, Mapping

from . import config
from .geometry import Port, direction_from_id, normalise_shape
from .models import Template


logger = logging.getLogger(__name__)


DEFAULT_TEMPLATE_DATA = {
    "templates": [
        {
            "id": "residential-line",
            "name": "Residential Row",
            "shape": [[0, 0], [1, 0]],
            "ports": [
                {"x": 0, "y": 0, "dir": "N"},
                {"x": 1, "y": 0, "dir": "S"},
            ],
            "growth_type": "linear",
            "base_threshold": 20,
            "base_cap": 4,
            "auto_connect": False,
            "range": 0,
        },
        {
            "id": "industry-l",
            "name": "Industrial L-Block",
            "shape": [[0, 0], [0, 1], [1, 1]],
            "ports": [
                {"x": 0, "y": 0, "dir": "E"},
                {"x": 0, "y": 1, "dir": "N"},
                {"x": 1, "y": 1, "dir": "W"},
            ],
            "growth_type": "linear",
            "base_threshold": 26,
            "base_cap": 5,
            "auto_connect": True,
            "range": 2,
        },
        {
            "id": "hub-cross",
            "name": "Crossroads Hub Tower",
            "shape": [[0, 0]],
            "ports": [
                {"x": 0, "y": 0, "dir": "N"},
                {"x": 0, "y": 0, "dir": "E"},
                {"x": 0, "y": 0, "dir": "S"},
                {"x": 0, "y": 0, "dir": "W"},
            ],
            "growth_type": "linear",
            "base_threshold": 22,
            "base_cap": 6,
            "auto_connect": True,
            "range": 3,
        },
        {
            "id": "research-z",
            "name": "Research Quarter",
            "shape": [[0, 0], [1, 0], [1, 1]],
            "ports": [
                {"x": 0, "y": 0, "dir": "E"},
                {"x": 1, "y": 0, "dir": "S"},
                {"x": 1, "y": 1, "dir": "W"},
            ],
            "growth_type": "exponential",
            "base_threshold": 28,
            "base_cap": 5,
            "auto_connect": True,
            "range": 2,
        },
        {
            "id": "power-core",
            "name": "Power Core",
            "shape": [[0, 0], [1, 0], [2, 0]],
            "ports": [
                {"x": 0, "y": 0, "dir": "W"},
                {"x": 1, "y": 0, "dir": "N"},
                {"x": 1, "y": 0, "dir": "S"},
                {"x": 2, "y": 0, "dir": "E"},
            ],
            "growth_type": "exponential",
            "base_threshold": 34,
            "base_cap": 7,
            "auto_connect": True,
            "range": 3,
        },
    ]
}


class UnknownTemplateError(ValueError):
    """Raised when a template identifier is not part of the catalogue."""

    def __init__(self, template_id: object):
        self.template_id = template_id
        super().__init__(f"Unknown template: {template_id}")


def _build_template(entry: Mapping[str, object], decay: float) -> Template:
    growth_type = str(entry.get("growth_type", config.LINEAR)).lower()
    if growth_type not in config.GROWTH_TYPES:
        raise ValueError(f"Unsupported growth type for {entry.get('id')}: {growth_type}")

    shape = [(int(x), int(y)) for x, y in entry["shape"]]
    if not shape:
        raise ValueError(f"Template {entry.get('id')} has an empty shape")
    if normalise_shape(shape) != tuple(shape):
        raise ValueError(f"Template {entry.get('id')} shape is not normalised")

    ports = tuple(
        Port(int(port["x"]), int(port["y"]), direction_from_id(port["dir"]))
        for port in entry.get("ports", [])
    )
    footprint = set(shape)
    for port in ports:
        if port.cell not in footprint:
            raise ValueError(
                f"Template {entry.get('id')} port at {port.cell} is outside its shape"
            )
    return Template(
        id=config.normalise_template_key(str(entry["id"])),
        name=str(entry.get("name", entry["id"])),
        shape=tuple(shape),
        ports=ports,
        growth_type=growth_type,
        base_threshold=float(entry.get("base_threshold", 0.0)),
        base_cap=int(entry.get("base_cap", 1)),
        auto_connect=bool(entry.get("auto_connect", False)),
        range=int(entry.get("range", 0)),
        decay_coefficient=float(decay),
    )


def load_catalog(data: Mapping[str, object], seed: int = config.DEFAULT_SEED) -> Dict[str, Template]:
    """Build the catalogue from ``data``, drawing one decay value per template.

    Templates are visited in declaration order so the same seed always yields
    the same decay coefficients.
    """

    rng = random.Random(seed)
    catalogue: Dict[str, Template] = {}
    for entry in data["templates"]:
        decay = config.DECAY_BASE + rng.random() * config.DECAY_SPREAD
        template = _build_template(entry, decay)
        if template.id in catalogue:
            raise ValueError(f"Duplicate template id: {template.id}")
        catalogue[template.id] = template
    logger.debug("Loaded %s templates (seed=%s)", len(catalogue), seed)
    return catalogue


def load_default_catalog(seed: int = config.DEFAULT_SEED) -> Dict[str, Template]:
    """Return the default catalogue seeded with ``seed``."""

    return load_catalog(DEFAULT_TEMPLATE_DATA, seed)


def get_template(catalogue: Mapping[str, Template], template_id: object) -> Template:
    try:
        key = config.normalise_template_key(template_id)  # type: ignore[arg-type]
    except ValueError as exc:
        raise UnknownTemplateError(template_id) from exc
    template = catalogue.get(key)
    if template is None:
        raise UnknownTemplateError(template_id)
    return template


__all__ = [
    "DEFAULT_TEMPLATE_DATA",
    "UnknownTemplateError",
    "get_template",
    "load_catalog",
    "load_default_catalog",
]
