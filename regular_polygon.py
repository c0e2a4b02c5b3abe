"""
Regular polygon generation.

Vertices are placed counter-clockwise on a circle, starting at the top
(angle pi/2) rotated by an offset in degrees.

Side counts need not be integers: a count of 3.5 gives ceil(3.5) = 4 vertices
spaced 2*pi/3.5 apart. The result is an "almost regular" polygon that lets a
sweep of side counts morph smoothly from an n-gon to an (n+1)-gon.
"""

from __future__ import annotations
import math

from errors import InvalidParameter
from geometry import Point, Polygon, Ring


def vertex_count(n_sides: float) -> int:
    """Number of vertices generated for a (possibly fractional) side count."""
    return math.ceil(n_sides)


def build_regular_polygon(
    n_sides: float,
    offset_degrees: float,
    center: Point,
    radius: float
) -> Ring:
    """
    Build the vertex ring of a regular polygon.

    Args:
        n_sides: Number of sides (>= 3, may be fractional)
        offset_degrees: Rotation of the first vertex away from straight up
        center: (x, y) center of the circumscribed circle
        radius: Circumradius (> 0)

    Returns:
        Ring with ceil(n_sides) vertices in counter-clockwise order.

    Raises:
        InvalidParameter: for n_sides < 3, radius <= 0 or non-finite input.
    """
    values = (n_sides, offset_degrees, center[0], center[1], radius)
    if not all(math.isfinite(v) for v in values):
        raise InvalidParameter(f"Polygon parameters must be finite, got {values}")
    if n_sides < 3:
        raise InvalidParameter(f"n_sides must be >= 3, got {n_sides}")
    if radius <= 0:
        raise InvalidParameter(f"radius must be positive, got {radius}")

    cx, cy = center
    step = 2 * math.pi / n_sides
    start = math.pi / 2 + math.radians(offset_degrees)

    vertices = []
    for i in range(vertex_count(n_sides)):
        angle = start + i * step
        vertices.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))

    return Ring(tuple(vertices))


def regular_polygon(
    n_sides: float,
    offset_degrees: float,
    center: Point,
    radius: float
) -> Polygon:
    """Same as build_regular_polygon(), wrapped as a hole-free Polygon."""
    return Polygon(build_regular_polygon(n_sides, offset_degrees, center, radius))
