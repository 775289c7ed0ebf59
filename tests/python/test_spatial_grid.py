from __future__ import annotations

import pytest
from pygame.math import Vector2

from droneflock.sim.core.spatial_grid import SpatialGrid


def test_rejects_non_positive_cell_size():
    with pytest.raises(ValueError):
        SpatialGrid(0.0)
    with pytest.raises(ValueError):
        SpatialGrid(-1.0)


def test_added_entry_is_its_own_neighbor_candidate():
    grid = SpatialGrid(cell_size=2.5)
    points = [Vector2(0, 0), Vector2(-3.2, 7.9), Vector2(100.0, -0.01), Vector2(2.5, 2.5)]
    for idx, point in enumerate(points):
        grid.add(point, idx)
    for idx, point in enumerate(points):
        assert idx in grid.neighbors(point)


def test_three_by_three_block_returns_one_entry_per_cell():
    grid = SpatialGrid(cell_size=1.0)
    for y in range(3):
        for x in range(3):
            grid.add(Vector2(x + 0.5, y + 0.5), (x, y))

    neighbors = grid.neighbors(Vector2(1.5, 1.5))

    assert len(neighbors) == 9
    assert sorted(neighbors) == [(x, y) for x in range(3) for y in range(3)]


def test_neighbors_skip_cells_outside_the_block():
    grid = SpatialGrid(cell_size=1.0)
    grid.add(Vector2(0.5, 0.5), "near")
    grid.add(Vector2(2.5, 0.5), "far")

    assert grid.neighbors(Vector2(0.5, 0.5)) == ["near"]


def test_negative_coordinates_floor_into_negative_cells():
    grid = SpatialGrid(cell_size=1.0)

    assert grid.cell_key(Vector2(-0.5, 0.5)) == (-1, 0)
    assert grid.cell_key(Vector2(-1.0, -2.01)) == (-1, -3)

    grid.add(Vector2(-0.5, -0.5), "a")
    grid.add(Vector2(0.5, 0.5), "b")
    assert grid.bucket((-1, -1)) == ["a"]
    assert sorted(grid.neighbors(Vector2(-0.5, -0.5))) == ["a", "b"]


def test_cell_order_is_insertion_order():
    grid = SpatialGrid(cell_size=10.0)
    for label in "abc":
        grid.add(Vector2(1.0, 1.0), label)
    assert grid.neighbors(Vector2(5.0, 5.0)) == ["a", "b", "c"]


def test_clear_drops_every_entry():
    grid = SpatialGrid(cell_size=1.0)
    grid.add(Vector2(0.5, 0.5), 1)
    grid.add(Vector2(5.5, 5.5), 2)
    assert len(grid) == 2
    assert grid.occupied_cells == 2

    grid.clear()

    assert len(grid) == 0
    assert grid.occupied_cells == 0
    assert grid.neighbors(Vector2(0.5, 0.5)) == []
    assert grid.neighbors(Vector2(5.5, 5.5)) == []

    grid.add(Vector2(0.5, 0.5), 3)
    assert grid.neighbors(Vector2(0.5, 0.5)) == [3]
    assert grid.occupied_cells == 1


def test_querying_empty_cells_leaves_results_unchanged():
    grid = SpatialGrid(cell_size=1.0)
    assert grid.neighbors(Vector2(40.0, 40.0)) == []
    grid.add(Vector2(0.5, 0.5), 1)
    assert grid.neighbors(Vector2(40.0, 40.0)) == []
    assert grid.neighbors(Vector2(1.5, 1.5)) == [1]


def test_neighbors_in_radius_matches_bruteforce():
    grid = SpatialGrid(cell_size=1.0)
    points = [Vector2(x * 0.7, y * 0.9) for x in range(-6, 7) for y in range(-6, 7)]
    for idx, point in enumerate(points):
        grid.add(point, idx)

    center = Vector2(0.3, -0.2)
    radius = 2.6
    candidates = grid.neighbors_in_radius(center, radius)
    found = sorted(idx for idx in candidates if (points[idx] - center).length_squared() <= radius * radius)
    brute = sorted(idx for idx, point in enumerate(points) if (point - center).length_squared() <= radius * radius)
    assert found == brute


def test_neighbor_block_never_shrinks_below_three_by_three():
    grid = SpatialGrid(cell_size=5.0)
    assert len(grid.build_neighbor_cell_offsets(0.0)) == 9
    assert len(grid.build_neighbor_cell_offsets(5.0)) == 9
    assert len(grid.build_neighbor_cell_offsets(5.1)) == 25
