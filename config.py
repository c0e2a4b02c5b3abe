"""
Configuration for polygon splitting runs.

Defines the polygon parameters, the split point, the random seed and the grid
and colour settings used by the layout and rendering helpers.
"""

from dataclasses import dataclass
from typing import Optional
import json
import math
from pathlib import Path


@dataclass
class SplitConfig:
    """
    Configuration for generating and splitting regular polygons.

    Attributes:
        n_sides: Number of polygon sides (>= 3, may be fractional)
        offset_degrees: Rotation of the first vertex away from straight up
        radius: Circumradius of each polygon
        center_x, center_y: Center of a single polygon / of the grid origin
        split_x, split_y: Split point (both or neither; None = random point).
            For grids the point is relative to each cell center.
        seed: Random seed (None = unseeded)
        max_sample_attempts: Rejection sampling budget per polygon
        rows, cols: Grid size (1 x 1 = single polygon)
        spacing: Distance between neighbouring grid cell centers
        sides_end: If set, side counts sweep linearly from n_sides to
            sides_end across the grid cells
        colormap: Matplotlib colormap or COLORMAP_PRESETS key for polygon colours
    """
    # Polygon
    n_sides: float = 6.0
    offset_degrees: float = 0.0
    radius: float = 1.0
    center_x: float = 0.0
    center_y: float = 0.0

    # Split point
    split_x: Optional[float] = None
    split_y: Optional[float] = None

    # Sampling
    seed: Optional[int] = None
    max_sample_attempts: int = 1000

    # Grid
    rows: int = 1
    cols: int = 1
    spacing: float = 2.5
    sides_end: Optional[float] = None

    # Rendering
    colormap: str = "tab20"

    def validate(self) -> list[str]:
        """
        Validate configuration values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not math.isfinite(self.n_sides) or self.n_sides < 3:
            errors.append(f"n_sides must be >= 3, got {self.n_sides}")

        if self.sides_end is not None and (not math.isfinite(self.sides_end) or self.sides_end < 3):
            errors.append(f"sides_end must be >= 3, got {self.sides_end}")

        if not math.isfinite(self.radius) or self.radius <= 0:
            errors.append(f"radius must be positive, got {self.radius}")

        if (self.split_x is None) != (self.split_y is None):
            errors.append(
                f"split_x and split_y must be given together, got {self.split_x}, {self.split_y}"
            )

        if self.max_sample_attempts < 1:
            errors.append(f"max_sample_attempts must be >= 1, got {self.max_sample_attempts}")

        if self.rows < 1 or self.cols < 1:
            errors.append(f"grid must be at least 1 x 1, got {self.rows} x {self.cols}")

        if self.spacing <= 0:
            errors.append(f"spacing must be positive, got {self.spacing}")
        elif self.rows * self.cols > 1 and self.spacing < 2 * self.radius:
            errors.append(
                f"spacing {self.spacing} is smaller than the polygon diameter {2 * self.radius}"
            )

        return errors

    @property
    def has_split_point(self) -> bool:
        """Check if an explicit split point is configured."""
        return self.split_x is not None and self.split_y is not None

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "n_sides": self.n_sides,
            "offset_degrees": self.offset_degrees,
            "radius": self.radius,
            "center_x": self.center_x,
            "center_y": self.center_y,
            "split_x": self.split_x,
            "split_y": self.split_y,
            "seed": self.seed,
            "max_sample_attempts": self.max_sample_attempts,
            "rows": self.rows,
            "cols": self.cols,
            "spacing": self.spacing,
            "sides_end": self.sides_end,
            "colormap": self.colormap,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SplitConfig":
        """Create from dictionary."""
        # Accept a combined "grid": [rows, cols] entry as well
        rows, cols = data.get("grid", (data.get("rows", 1), data.get("cols", 1)))

        return cls(
            n_sides=data.get("n_sides", 6.0),
            offset_degrees=data.get("offset_degrees", 0.0),
            radius=data.get("radius", 1.0),
            center_x=data.get("center_x", 0.0),
            center_y=data.get("center_y", 0.0),
            split_x=data.get("split_x"),
            split_y=data.get("split_y"),
            seed=data.get("seed"),
            max_sample_attempts=data.get("max_sample_attempts", 1000),
            rows=rows,
            cols=cols,
            spacing=data.get("spacing", 2.5),
            sides_end=data.get("sides_end"),
            colormap=data.get("colormap", "tab20"),
        )

    def save(self, filepath: Path | str) -> None:
        """Save configuration to JSON file."""
        filepath = Path(filepath)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: Path | str) -> "SplitConfig":
        """Load configuration from JSON file."""
        filepath = Path(filepath)
        if not filepath.exists():
            return cls()  # Return defaults if file doesn't exist

        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)


# Colormap presets (qualitative maps suit disjoint pieces best)
COLORMAP_PRESETS = {
    "qualitative": "tab20",
    "pastel": "Pastel1",
    "bold": "Set1",
    "muted": "Set3",
    "gradient": "viridis",
}
