from __future__ import annotations

import math
from typing import Iterable

from pygame.math import Vector2

from ..types.metrics import StepMetrics


def average_speed(velocities: Iterable[Vector2]) -> float:
    total = 0.0
    count = 0
    for velocity in velocities:
        total += math.hypot(velocity.x, velocity.y)
        count += 1
    return total / count if count else 0.0


def create_metrics(
    tick: int,
    drones: int,
    neighbor_checks: int,
    neighbor_matches: int,
    occupied_cells: int,
    avg_speed: float,
    duration_ms: float,
) -> StepMetrics:
    return StepMetrics(
        tick=tick,
        drones=drones,
        neighbor_checks=neighbor_checks,
        neighbor_matches=neighbor_matches,
        occupied_cells=occupied_cells,
        average_speed=avg_speed,
        step_duration_ms=duration_ms,
    )
