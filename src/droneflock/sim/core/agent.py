from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from pygame.math import Vector2


@dataclass(slots=True)
class Drone:
    id: int
    position: Vector2
    velocity: Vector2 = field(default_factory=Vector2)
    heading: float = 0.0


class DroneState(NamedTuple):
    """Frame-start copy of a drone, as stored in the spatial grid."""

    id: int
    position: Vector2
    velocity: Vector2

    @classmethod
    def of(cls, drone: Drone) -> "DroneState":
        return cls(drone.id, Vector2(drone.position), Vector2(drone.velocity))
