from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

import yaml

from ...errors import ConfigError

LOGGER = logging.getLogger(__name__)

_RULE_ALIASES = {
    "cohesion_config": "cohesion",
    "separation_config": "separation",
    "alignment_config": "alignment",
}


@dataclass(frozen=True)
class RuleConfig:
    radius: float = 50.0
    strength: float = 0.01


@dataclass(frozen=True)
class GameConfig:
    drone_count: int = 300
    spatial_map_cell_size: float = 50.0
    drone_max_speed: float = 200.0
    cohesion: RuleConfig = field(default_factory=lambda: RuleConfig(radius=50.0, strength=0.01))
    separation: RuleConfig = field(default_factory=lambda: RuleConfig(radius=20.0, strength=0.05))
    alignment: RuleConfig = field(default_factory=lambda: RuleConfig(radius=40.0, strength=0.05))
    world_width: float = 1280.0
    world_height: float = 720.0
    time_step: float = 1.0 / 60.0
    seed: int = 42
    exact_neighbor_radius: bool = False

    @property
    def rules(self) -> Dict[str, RuleConfig]:
        return {"cohesion": self.cohesion, "separation": self.separation, "alignment": self.alignment}

    @property
    def max_rule_radius(self) -> float:
        return max(rule.radius for rule in self.rules.values())

    def validate(self) -> "GameConfig":
        if self.spatial_map_cell_size <= 0:
            raise ConfigError(f"spatial_map_cell_size must be positive, got {self.spatial_map_cell_size}")
        if self.drone_count < 0:
            raise ConfigError(f"drone_count must not be negative, got {self.drone_count}")
        if self.drone_max_speed < 0:
            raise ConfigError(f"drone_max_speed must not be negative, got {self.drone_max_speed}")
        if self.time_step <= 0:
            raise ConfigError(f"time_step must be positive, got {self.time_step}")
        for name, rule in self.rules.items():
            if rule.radius < 0:
                raise ConfigError(f"{name} radius must not be negative, got {rule.radius}")
            if rule.radius > self.spatial_map_cell_size and not self.exact_neighbor_radius:
                LOGGER.warning(
                    "%s radius %.3f exceeds cell size %.3f; neighbors near cell-block edges will be missed",
                    name,
                    rule.radius,
                    self.spatial_map_cell_size,
                )
        return self

    @staticmethod
    def from_yaml(path: Path) -> "GameConfig":
        data = yaml.safe_load(Path(path).read_text())
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at the top level")
        return load_config(data)


def _rule(name: str, value: Any) -> RuleConfig:
    if isinstance(value, RuleConfig):
        return value
    if not isinstance(value, dict):
        raise ConfigError(f"{name} must be a mapping with radius and strength")
    unknown = set(value) - {"radius", "strength"}
    if unknown:
        raise ConfigError(f"unknown {name} keys: {', '.join(sorted(unknown))}")
    default = getattr(GameConfig(), name)
    return RuleConfig(
        radius=float(value.get("radius", default.radius)),
        strength=float(value.get("strength", default.strength)),
    )


def load_config(raw: dict) -> GameConfig:
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        values[_RULE_ALIASES.get(key, key)] = value

    known = {f.name for f in fields(GameConfig)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"unknown configuration keys: {', '.join(sorted(unknown))}")

    for name in ("cohesion", "separation", "alignment"):
        if name in values:
            values[name] = _rule(name, values[name])
    return GameConfig(**values).validate()
