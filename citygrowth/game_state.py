"""Simulation controller owning all mutable city state."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, List, Mapping, Optional

from . import config
from .connectivity import rebuild_clusters
from .grid import PlacementGrid
from .growth import growth_cap, growth_phase, supply_phase
from .models import Building, Cluster, Link, Template, YearSummary
from .scoring import compute_score
from .template_catalog import get_template, load_default_catalog


logger = logging.getLogger(__name__)


class GameState:
    """Central storage for the city; every mutation goes through this class."""

    _instance: Optional["GameState"] = None

    def __init__(
        self,
        seed: int = config.DEFAULT_SEED,
        catalogue: Mapping[str, Template] | None = None,
        grid_size: int = config.GRID_SIZE,
        max_year: int = config.MAX_YEAR,
    ) -> None:
        self._lock = threading.RLock()
        self.seed = int(seed)
        self.catalogue: Mapping[str, Template] = (
            catalogue if catalogue is not None else load_default_catalog(self.seed)
        )
        self.max_year = int(max_year)
        self.grid = PlacementGrid(self.catalogue, grid_size)
        self.logs: Deque[YearSummary] = deque(maxlen=config.YEAR_LOG_LIMIT)
        self._initialise_state()

    # ------------------------------------------------------------------
    @classmethod
    def get_instance(cls) -> "GameState":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def reset(self) -> None:
        self._initialise_state()

    def _initialise_state(self) -> None:
        with self._lock:
            self.year = 1
            self.cumulative_supply = 0.0
            self.grid.reset()
            self.links: List[Link] = []
            self.clusters: List[Cluster] = []
            self.logs.clear()
            self._state_version = 0

    # ------------------------------------------------------------------
    @property
    def buildings(self) -> List[Building]:
        return self.grid.buildings

    @property
    def finished(self) -> bool:
        return self.year > self.max_year

    def get_template(self, template_id: str) -> Template:
        return get_template(self.catalogue, template_id)

    def get_building(self, building_id: str) -> Optional[Building]:
        for building in self.buildings:
            if building.id == building_id:
                return building
        return None

    def get_cluster(self, cluster_id: Optional[str]) -> Optional[Cluster]:
        for cluster in self.clusters:
            if cluster.id == cluster_id:
                return cluster
        return None

    # ------------------------------------------------------------------
    def can_place(self, template_id: str, rotation: object, origin: object) -> bool:
        with self._lock:
            return self.grid.can_place(template_id, rotation, origin)

    def preview_placement(
        self, template_id: str, rotation: object, origin: object
    ) -> Dict[str, object]:
        with self._lock:
            return self.grid.preview(template_id, rotation, origin)

    def place_building(self, template_id: str, rotation: object, origin: object) -> bool:
        """Place a building and rebuild connectivity; ``False`` if blocked."""

        return self.place(template_id, rotation, origin) is not None

    def place(
        self, template_id: str, rotation: object, origin: object
    ) -> Optional[Building]:
        """Like :meth:`place_building` but returns the new building or ``None``."""

        with self._lock:
            building = self.grid.place(template_id, rotation, origin)
            if building is None:
                return None
            self.recompute_connections()
            self._state_version += 1
        logger.info(
            "Placed %s (%s) at %s rotation=%s cluster=%s",
            building.id,
            building.template_id,
            building.origin,
            building.rotation,
            building.cluster_id,
        )
        return building

    def recompute_connections(self) -> None:
        with self._lock:
            self.links, self.clusters = rebuild_clusters(self.buildings, self.catalogue)

    # ------------------------------------------------------------------
    def advance_year(self) -> bool:
        """Simulate one year. Returns ``False`` once the final year has passed."""

        with self._lock:
            if self.finished:
                logger.debug("Year %s is past the final year; nothing to do", self.year)
                return False
            self.recompute_connections()
            produced = supply_phase(self.clusters, self.buildings, self.catalogue)
            self.cumulative_supply += produced
            grown = growth_phase(self.clusters, self.buildings, self.catalogue)
            summary = YearSummary(
                year=self.year,
                cluster_count=len(self.clusters),
                total_supply=produced,
                top_level=max((b.level for b in self.buildings), default=0),
            )
            self.logs.appendleft(summary)
            self.year += 1
            self._state_version += 1
        logger.info("%s (grew=%s)", summary, len(grown))
        return True

    def run_to_max_year(self) -> int:
        """Advance until the final year has been simulated; return years run."""

        advanced = 0
        while self.advance_year():
            advanced += 1
        return advanced

    # ------------------------------------------------------------------
    def growth_cap_for(self, building: Building) -> int:
        cluster = self.get_cluster(building.cluster_id)
        size = cluster.size if cluster else 1
        return growth_cap(self.catalogue[building.template_id], size)

    def score(self) -> float:
        with self._lock:
            return compute_score(self.buildings, self.catalogue, self.cumulative_supply)

    def list_logs(self) -> List[str]:
        return [str(entry) for entry in self.logs]

    # ------------------------------------------------------------------
    def response_metadata(self, version: Optional[int] = None) -> Dict[str, object]:
        if version is None:
            with self._lock:
                version_value = int(self._state_version)
        else:
            version_value = int(version)
        timestamp = (
            datetime.now(timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )
        return {
            "request_id": uuid.uuid4().hex,
            "server_time": timestamp,
            "version": version_value,
        }

    def snapshot_hud(self) -> Dict[str, object]:
        with self._lock:
            return {
                "year": min(self.year, self.max_year),
                "max_year": self.max_year,
                "finished": self.finished,
                "building_count": len(self.buildings),
                "cluster_count": len(self.clusters),
                "cumulative_supply": round(self.cumulative_supply, 2),
                "score": round(self.score(), 2),
            }

    def snapshot_buildings(self) -> List[Dict[str, object]]:
        with self._lock:
            payload = []
            for building in self.buildings:
                entry = building.to_payload()
                entry["growth_cap"] = self.growth_cap_for(building)
                entry["next_threshold"] = self.catalogue[building.template_id].threshold(
                    building.level
                )
                payload.append(entry)
            return payload

    def snapshot_clusters(self) -> List[Dict[str, object]]:
        with self._lock:
            return [cluster.to_payload() for cluster in self.clusters]

    def snapshot_templates(self) -> List[Dict[str, object]]:
        return [template.to_payload() for template in self.catalogue.values()]

    def snapshot_state(self) -> Dict[str, object]:
        with self._lock:
            return {
                "seed": self.seed,
                "grid_size": self.grid.size,
                "grid": self.grid.snapshot(),
                "hud": self.snapshot_hud(),
                "buildings": self.snapshot_buildings(),
                "clusters": self.snapshot_clusters(),
                "logs": [entry.to_payload() for entry in self.logs],
                "version": int(self._state_version),
            }


def get_game_state() -> GameState:
    return GameState.get_instance()
