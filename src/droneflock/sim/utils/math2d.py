from __future__ import annotations

import math

from pygame.math import Vector2


def _clamp_length(vector: Vector2, max_length: float) -> Vector2:
    if max_length <= 0:
        return Vector2()
    magnitude_sq = vector.length_squared()
    if magnitude_sq <= max_length * max_length:
        return Vector2(vector)
    return vector * (max_length / math.sqrt(magnitude_sq))


def _heading_from_velocity(vector: Vector2, fallback: float) -> float:
    # A zero vector has no direction; keep whatever heading the caller had.
    if vector.x == 0.0 and vector.y == 0.0:
        return fallback
    # Same [0, 2*pi) range as spawn headings.
    heading = math.atan2(vector.y, vector.x)
    if heading < 0.0:
        heading += math.tau
    return heading if heading < math.tau else 0.0


def _unit_from_angle(angle: float) -> Vector2:
    return Vector2(math.cos(angle), math.sin(angle))
