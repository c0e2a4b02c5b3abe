"""
Grid layout of split polygons.

Places one split polygon per cell of a rows x cols lattice. Side counts can
sweep linearly across the cells (fractional counts give the in-between
shapes), and every cell gets its own seed derived from the base seed, so the
output does not depend on the number of worker threads.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from typing import Optional

import numpy as np

from config import SplitConfig
from errors import InvalidParameter
from geometry import Point
from polygon_splitter import SplitResult
from split_polygon import run

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cell:
    """One grid cell: where it is, what was generated, and the split result."""
    row: int
    col: int
    center: Point
    n_sides: float
    seed: int
    result: SplitResult

    @property
    def index(self) -> tuple[int, int]:
        return (self.row, self.col)


def grid_centers(
    rows: int,
    cols: int,
    spacing: float,
    origin: Point = (0.0, 0.0)
) -> np.ndarray:
    """
    Centers of a rows x cols lattice in row-major order.

    Row 0 is at the top (largest y), column 0 at the left.

    Returns:
        Array of shape (rows * cols, 2).
    """
    if rows < 1 or cols < 1:
        raise InvalidParameter(f"grid must be at least 1 x 1, got {rows} x {cols}")
    xs = origin[0] + np.arange(cols) * spacing
    ys = origin[1] - np.arange(rows) * spacing
    grid_x, grid_y = np.meshgrid(xs, ys)
    return np.column_stack([grid_x.ravel(), grid_y.ravel()])


def sweep_side_counts(start: float, end: Optional[float], count: int) -> np.ndarray:
    """
    Side counts for count cells, interpolated linearly from start to end.

    Values are rounded to 12 decimals so float noise never adds a spurious
    vertex (ceil(4.000000000000001) would be 5).
    """
    if end is None:
        return np.full(count, float(start))
    return np.round(np.linspace(start, end, count), 12)


def derive_seeds(seed: Optional[int], count: int) -> list[int]:
    """Independent per-cell seeds spawned from one base seed."""
    children = np.random.SeedSequence(seed).spawn(count)
    return [int(child.generate_state(1)[0]) for child in children]


def split_grid(config: SplitConfig, workers: int = 1) -> list[Cell]:
    """
    Generate and split one polygon per grid cell.

    Args:
        config: Split configuration (grid size, spacing, sweep, seed, ...)
        workers: Number of threads; results are identical for any value

    Returns:
        Cells in row-major order.
    """
    errors = config.validate()
    if errors:
        raise InvalidParameter("; ".join(errors))

    centers = grid_centers(config.rows, config.cols, config.spacing,
                           (config.center_x, config.center_y))
    sides = sweep_side_counts(config.n_sides, config.sides_end, config.cell_count)
    seeds = derive_seeds(config.seed, config.cell_count)

    def split_cell(index: int) -> Cell:
        cx, cy = float(centers[index][0]), float(centers[index][1])
        px = py = None
        if config.has_split_point:
            px = cx + config.split_x
            py = cy + config.split_y
        result = run(
            float(sides[index]),
            config.offset_degrees,
            cx,
            cy,
            config.radius,
            px,
            py,
            np.random.default_rng(seeds[index]),
            config.max_sample_attempts,
        )
        row, col = divmod(index, config.cols)
        return Cell(row, col, (cx, cy), float(sides[index]), seeds[index], result)

    indices = range(config.cell_count)
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            cells = list(pool.map(split_cell, indices))
    else:
        cells = [split_cell(i) for i in indices]

    logger.debug("Split %d grid cells into %d polygons",
                 len(cells), sum(len(c.result) for c in cells))
    return cells
