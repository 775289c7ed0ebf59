from __future__ import annotations

import logging
from time import perf_counter
from typing import Iterable, List, Optional, Tuple

from pygame.math import Vector2

from .agent import Drone, DroneState
from .config import GameConfig
from .rng import DeterministicRng
from .spatial_grid import CellKey, SpatialGrid
from ..systems import metrics as metrics_system, rules
from ..types.metrics import StepMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld
from ..utils.math2d import _heading_from_velocity, _unit_from_angle

LOGGER = logging.getLogger(__name__)


class FlockWorld:
    """Owns the drones and the spatial grid and advances the flock one frame at a time.

    Every drone's next state is computed from the same frame-start snapshot and
    committed only after all drones have been processed, so processing order never
    changes the outcome of a step.
    """

    def __init__(self, config: GameConfig, drones: Optional[Iterable[Drone]] = None):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._grid: SpatialGrid[DroneState] = SpatialGrid(config.spatial_map_cell_size)
        self._drones: List[Drone] = []
        self._metrics: StepMetrics | None = None
        self._next_id = 0
        self._refresh_query_cache()
        if drones is None:
            self._spawn_drones(config.drone_count)
        else:
            for drone in drones:
                self._drones.append(drone)
                self._next_id = max(self._next_id, drone.id + 1)

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def drones(self) -> List[Drone]:
        return self._drones

    @property
    def grid(self) -> SpatialGrid[DroneState]:
        return self._grid

    @property
    def metrics(self) -> StepMetrics | None:
        return self._metrics

    def reset(self) -> None:
        self._drones.clear()
        self._grid.clear()
        self._rng.reset()
        self._metrics = None
        self._next_id = 0
        self._spawn_drones(self._config.drone_count)

    def rebuild_index(self) -> List[DroneState]:
        LOGGER.debug("Clearing and repopulating the spatial grid with %d drones.", len(self._drones))
        grid = self._grid
        grid.clear()
        states = [DroneState.of(drone) for drone in self._drones]
        for state in states:
            grid.add(state.position, state)
        return states

    def candidates(self, position: Vector2) -> List[DroneState]:
        if self._query_offsets is None:
            return self._grid.neighbors(position)
        return self._grid.collect_precomputed(position, self._query_offsets)

    def step(self, dt: float, tick: int = 0) -> StepMetrics:
        start = perf_counter()
        states = self.rebuild_index()

        config = self._config
        neighbor_checks = 0
        neighbor_matches = 0
        results: List[Tuple[Vector2, Vector2]] = []

        for state in states:
            candidates = self.candidates(state.position)
            neighbor_checks += len(candidates)
            velocity, matches = rules.steer(state, candidates, config)
            neighbor_matches += matches
            position = state.position + velocity * dt
            results.append((position, velocity))

        for drone, (position, velocity) in zip(self._drones, results):
            drone.position = position
            drone.velocity = velocity
            drone.heading = _heading_from_velocity(velocity, drone.heading)

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(
            tick=tick,
            drones=len(self._drones),
            neighbor_checks=neighbor_checks,
            neighbor_matches=neighbor_matches,
            occupied_cells=self._grid.occupied_cells,
            avg_speed=metrics_system.average_speed(velocity for _, velocity in results),
            duration_ms=duration_ms,
        )
        LOGGER.debug(
            "Step %d: %d drones, %d candidates, %d neighbors, %.3f ms",
            tick,
            len(self._drones),
            neighbor_checks,
            neighbor_matches,
            duration_ms,
        )
        return self._metrics

    def snapshot(self, tick: int) -> Snapshot:
        config = self._config
        drones = [
            {
                "id": drone.id,
                "x": drone.position.x,
                "y": drone.position.y,
                "vx": drone.velocity.x,
                "vy": drone.velocity.y,
                "heading": drone.heading,
                "speed": drone.velocity.length(),
            }
            for drone in self._drones
        ]
        return Snapshot(
            tick=tick,
            metrics=self._metrics,
            drones=drones,
            world=SnapshotWorld(
                width=config.world_width,
                height=config.world_height,
                cell_size=config.spatial_map_cell_size,
            ),
            metadata=SnapshotMetadata(
                sim_dt=config.time_step,
                tick_rate=1.0 / config.time_step,
                seed=config.seed,
                max_speed=config.drone_max_speed,
            ),
        )

    def _refresh_query_cache(self) -> None:
        config = self._config
        self._query_offsets: List[CellKey] | None = None
        if config.exact_neighbor_radius:
            self._query_offsets = self._grid.build_neighbor_cell_offsets(config.max_rule_radius)

    def _spawn_drones(self, count: int) -> None:
        LOGGER.debug("Spawning %d drones.", count)
        half_w = self._config.world_width / 2.0
        half_h = self._config.world_height / 2.0
        for _ in range(count):
            position = Vector2(
                self._rng.next_range(-half_w, half_w),
                self._rng.next_range(-half_h, half_h),
            )
            heading = self._rng.next_angle()
            drone = Drone(
                id=self._next_id,
                position=position,
                velocity=_unit_from_angle(heading),
                heading=heading,
            )
            self._next_id += 1
            self._drones.append(drone)
