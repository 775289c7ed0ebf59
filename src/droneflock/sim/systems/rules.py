from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Sequence, Tuple

from pygame.math import Vector2

from ..core.agent import DroneState
from ..core.config import RuleConfig
from ..utils.math2d import _clamp_length

if TYPE_CHECKING:
    from ..core.config import GameConfig

LOGGER = logging.getLogger(__name__)


def within_radius(state: DroneState, candidates: Sequence[DroneState], radius: float) -> List[DroneState]:
    pos_x = state.position.x
    pos_y = state.position.y
    radius_sq = radius * radius
    found = []
    for other in candidates:
        if other.id == state.id:
            continue
        offset_x = other.position.x - pos_x
        offset_y = other.position.y - pos_y
        if offset_x * offset_x + offset_y * offset_y <= radius_sq:
            found.append(other)
    return found


def cohesion(state: DroneState, candidates: Sequence[DroneState], config: RuleConfig) -> Vector2:
    """Steer toward the center of mass of the neighbors within the rule radius."""
    neighbors = within_radius(state, candidates, config.radius)
    if not neighbors:
        return Vector2()
    sum_x = 0.0
    sum_y = 0.0
    for other in neighbors:
        sum_x += other.position.x
        sum_y += other.position.y
    inv = 1.0 / len(neighbors)
    center = Vector2(sum_x * inv, sum_y * inv)
    return (center - state.position) * config.strength


def separation(state: DroneState, candidates: Sequence[DroneState], config: RuleConfig) -> Vector2:
    """Push away from every neighbor within the rule radius.

    Offsets are summed without normalisation, so the push grows with local density.
    """
    accum_x = 0.0
    accum_y = 0.0
    for other in within_radius(state, candidates, config.radius):
        accum_x += state.position.x - other.position.x
        accum_y += state.position.y - other.position.y
    return Vector2(accum_x * config.strength, accum_y * config.strength)


def alignment(state: DroneState, candidates: Sequence[DroneState], config: RuleConfig) -> Vector2:
    neighbors = within_radius(state, candidates, config.radius)
    if not neighbors:
        return Vector2()
    sum_x = 0.0
    sum_y = 0.0
    for other in neighbors:
        sum_x += other.velocity.x
        sum_y += other.velocity.y
    scale = config.strength / len(neighbors)
    return Vector2(sum_x * scale, sum_y * scale)


def steer(state: DroneState, candidates: Sequence[DroneState], config: GameConfig) -> Tuple[Vector2, int]:
    """Apply all three rules in one pass over the candidates and clamp the result.

    Returns the new velocity and the number of candidates within the largest rule radius.
    Agrees with adding :func:`cohesion`, :func:`separation` and :func:`alignment`.
    """
    cohesion_config = config.cohesion
    separation_config = config.separation
    alignment_config = config.alignment
    cohesion_sq = cohesion_config.radius * cohesion_config.radius
    separation_sq = separation_config.radius * separation_config.radius
    alignment_sq = alignment_config.radius * alignment_config.radius
    match_sq = max(cohesion_sq, separation_sq, alignment_sq)

    pos_x = state.position.x
    pos_y = state.position.y
    center_x = 0.0
    center_y = 0.0
    center_count = 0
    push_x = 0.0
    push_y = 0.0
    heading_x = 0.0
    heading_y = 0.0
    heading_count = 0
    matches = 0

    for other in candidates:
        if other.id == state.id:
            continue
        other_pos = other.position
        offset_x = other_pos.x - pos_x
        offset_y = other_pos.y - pos_y
        dist_sq = offset_x * offset_x + offset_y * offset_y
        if dist_sq > match_sq:
            continue
        matches += 1
        if dist_sq <= cohesion_sq:
            center_x += other_pos.x
            center_y += other_pos.y
            center_count += 1
        if dist_sq <= separation_sq:
            push_x += pos_x - other_pos.x
            push_y += pos_y - other_pos.y
        if dist_sq <= alignment_sq:
            heading_x += other.velocity.x
            heading_y += other.velocity.y
            heading_count += 1

    cohesion_x = cohesion_y = 0.0
    if center_count:
        inv = 1.0 / center_count
        cohesion_x = (center_x * inv - pos_x) * cohesion_config.strength
        cohesion_y = (center_y * inv - pos_y) * cohesion_config.strength
    separation_x = push_x * separation_config.strength
    separation_y = push_y * separation_config.strength
    alignment_x = alignment_y = 0.0
    if heading_count:
        scale = alignment_config.strength / heading_count
        alignment_x = heading_x * scale
        alignment_y = heading_y * scale

    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug(
            "drone %d: %d neighbors, cohesion=(%.4f, %.4f) separation=(%.4f, %.4f) alignment=(%.4f, %.4f)",
            state.id,
            matches,
            cohesion_x,
            cohesion_y,
            separation_x,
            separation_y,
            alignment_x,
            alignment_y,
        )
    velocity = Vector2(
        state.velocity.x + cohesion_x + separation_x + alignment_x,
        state.velocity.y + cohesion_y + separation_y + alignment_y,
    )
    return _clamp_length(velocity, config.drone_max_speed), matches
