"""
Colours, areas and plots for split polygons.

Consumers of the split engine: they only read the polygons and attach
colour and area to them.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence

import matplotlib
import matplotlib.pyplot as plt
from matplotlib.patches import PathPatch
from matplotlib.patches import Polygon as MplPolygon
from matplotlib.path import Path as MplPath
import numpy as np

from config import COLORMAP_PRESETS
from errors import InvalidParameter
from geometry import Polygon
from layout import Cell
from polygon_splitter import SplitResult
from sampling import RandomLike, make_rng


def polygon_areas(result: SplitResult) -> np.ndarray:
    """Area of every polygon in a split result."""
    return np.array([p.area for p in result], dtype=float)


def area_summary(cells: Sequence[Cell]) -> dict:
    """Aggregate piece areas over a grid of cells."""
    areas = np.concatenate([polygon_areas(cell.result) for cell in cells]) if cells else np.array([])
    if areas.size == 0:
        return {"pieces": 0, "total": 0.0, "mean": 0.0, "min": 0.0, "max": 0.0}
    return {
        "pieces": int(areas.size),
        "total": float(areas.sum()),
        "mean": float(areas.mean()),
        "min": float(areas.min()),
        "max": float(areas.max()),
    }


def assign_colours(count: int, colormap: str = "tab20", rng: RandomLike = None) -> np.ndarray:
    """
    Pick count colours spread evenly over a colormap, shuffled by rng.

    colormap is a matplotlib colormap name or a COLORMAP_PRESETS key.

    Returns:
        RGBA array of shape (count, 4).
    """
    name = COLORMAP_PRESETS.get(colormap, colormap)
    try:
        cmap = matplotlib.colormaps[name]
    except KeyError:
        raise InvalidParameter(f"Unknown colormap: {colormap}") from None

    colours = cmap(np.linspace(0, 1, max(count, 1)))[:count]
    make_rng(rng).shuffle(colours)
    return colours


def _polygon_patch(polygon: Polygon, **kwargs):
    """Patch for a polygon; holes need a compound path."""
    if not polygon.holes:
        return MplPolygon(polygon.outer.to_list(), closed=True, **kwargs)

    paths = []
    for ring in polygon.rings():
        vertices = ring.to_list() + [ring[0]]
        paths.append(MplPath(vertices, closed=True))
    return PathPatch(MplPath.make_compound_path(*paths), **kwargs)


def plot_cells(
    cells: Sequence[Cell],
    filename: Path | str,
    colormap: str = "tab20",
    rng: RandomLike = None,
    title: Optional[str] = None,
    show_split_points: bool = True
) -> Path:
    """
    Plot every split polygon of a grid and save the figure.

    Args:
        cells: Cells from split_grid()
        filename: Output image path (format from the suffix)
        colormap: Matplotlib colormap name or preset
        rng: Random source for the colour shuffle
        title: Figure title (defaults to a piece count)
        show_split_points: Mark each cell's split point

    Returns:
        Path of the written file.
    """
    rng = make_rng(rng)
    colours = [assign_colours(len(cell.result), colormap, rng) for cell in cells]

    fig, ax = plt.subplots(1, 1, figsize=(10, 10))

    total = 0
    for cell, cell_colours in zip(cells, colours):
        for i, piece in enumerate(cell.result):
            ax.add_patch(_polygon_patch(
                piece, facecolor=cell_colours[i], edgecolor='black', linewidth=0.5
            ))
        total += len(cell.result)

        if show_split_points and cell.result.split_point is not None:
            sx, sy = cell.result.split_point
            ax.plot(sx, sy, 'ko', markersize=2)

    ax.set_aspect('equal')
    ax.set_title(title or f"{len(cells)} polygons, {total} pieces")
    ax.autoscale()
    ax.axis('off')

    filename = Path(filename)
    fig.savefig(filename, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return filename
