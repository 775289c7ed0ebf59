from __future__ import annotations

import math
from typing import Dict, Generic, List, Tuple, TypeVar

from pygame.math import Vector2

T = TypeVar("T")

CellKey = Tuple[int, int]

_MOORE_OFFSETS: List[CellKey] = [(dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1)]


class SpatialGrid(Generic[T]):
    """Uniform grid over the plane mapping cell coordinates to the entries placed there.

    Queries return *candidates*: everything stored in the block of cells around the
    query point. Callers apply their own exact distance filter. The default 3x3 block
    only covers radii up to ``cell_size``.
    """

    def __init__(self, cell_size: float) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size!r}")
        self._cell_size = float(cell_size)
        self._cells: Dict[CellKey, List[T]] = {}
        self._active_keys: List[CellKey] = []
        self._count = 0

    @property
    def cell_size(self) -> float:
        return self._cell_size

    @property
    def occupied_cells(self) -> int:
        return len(self._active_keys)

    def __len__(self) -> int:
        return self._count

    def build_neighbor_cell_offsets(self, radius: float) -> List[CellKey]:
        cell_range = max(1, int(math.ceil(radius / self._cell_size)))
        return [
            (dx, dy)
            for dy in range(-cell_range, cell_range + 1)
            for dx in range(-cell_range, cell_range + 1)
        ]

    def clear(self) -> None:
        for key in self._active_keys:
            bucket = self._cells.get(key)
            if bucket:
                bucket.clear()
        self._active_keys.clear()
        self._count = 0

    def add(self, position: Vector2, entry: T) -> None:
        key = self.cell_key(position)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
            self._active_keys.append(key)
        elif not bucket:
            # Bucket survived the last clear empty; mark it active again.
            self._active_keys.append(key)
        bucket.append(entry)
        self._count += 1

    def neighbors(self, position: Vector2) -> List[T]:
        return self._collect(self.cell_key(position), _MOORE_OFFSETS)

    def neighbors_in_radius(self, position: Vector2, radius: float) -> List[T]:
        return self._collect(self.cell_key(position), self.build_neighbor_cell_offsets(radius))

    def collect_precomputed(self, position: Vector2, cell_offsets: List[CellKey]) -> List[T]:
        """Same as :meth:`neighbors_in_radius` with offsets from :meth:`build_neighbor_cell_offsets`."""
        return self._collect(self.cell_key(position), cell_offsets)

    def bucket(self, key: CellKey) -> List[T]:
        return list(self._cells.get(key, ()))

    def cell_key(self, position: Vector2) -> CellKey:
        return (int(math.floor(position.x / self._cell_size)), int(math.floor(position.y / self._cell_size)))

    def _collect(self, base_key: CellKey, cell_offsets: List[CellKey]) -> List[T]:
        found: List[T] = []
        cells = self._cells
        base_x, base_y = base_key
        for dx, dy in cell_offsets:
            bucket = cells.get((base_x + dx, base_y + dy))
            if bucket:
                found.extend(bucket)
        return found
