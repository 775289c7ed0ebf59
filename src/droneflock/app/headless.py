from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..sim.core.config import GameConfig
from ..sim.core.world import FlockWorld
from ..sim.types.metrics import StepMetrics

LOGGER = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "drones",
    "neighbor_checks",
    "neighbor_matches",
    "occupied_cells",
    "avg_speed",
    "step_ms",
]


def _format_row(metrics: StepMetrics, step_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.drones,
        metrics.neighbor_checks,
        metrics.neighbor_matches,
        metrics.occupied_cells,
        f"{metrics.average_speed:.4f}",
        f"{step_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    config_path: Optional[Path] = None,
    summary_path: Optional[Path] = None,
) -> FlockWorld:
    config = GameConfig.from_yaml(config_path) if config_path else GameConfig().validate()
    if seed is not None:
        config = replace(config, seed=seed)
    world = FlockWorld(config)
    LOGGER.info("Running %d steps with %d drones (seed %d)", steps, len(world.drones), config.seed)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    step_ms_series: list[float] = []
    neighbor_checks_series: list[float] = []
    try:
        for tick in range(steps):
            metrics = world.step(config.time_step, tick)
            step_ms = 0.0 if deterministic_log else metrics.step_duration_ms
            step_ms_series.append(step_ms)
            neighbor_checks_series.append(float(metrics.neighbor_checks))
            if writer:
                writer.writerow(_format_row(metrics, step_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        summary = {
            "steps": steps,
            "seed": config.seed,
            "drones": len(world.drones),
            "deterministic_log": deterministic_log,
            "step_ms": _summary_stats(step_ms_series),
            "neighbor_checks": _summary_stats(neighbor_checks_series),
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless drone flock simulation")
    parser.add_argument("--steps", type=int, default=600)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-step metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (step_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        config_path=args.config,
        summary_path=args.summary,
    )


if __name__ == "__main__":
    main()
