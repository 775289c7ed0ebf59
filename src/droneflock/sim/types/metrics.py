from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class StepMetrics:
    tick: int
    drones: int
    neighbor_checks: int
    neighbor_matches: int
    occupied_cells: int
    average_speed: float
    step_duration_ms: float = 0.0
