"""
Interior point sampling.

Draws uniform points in a polygon's bounding box until one lands strictly
inside the polygon (outside all holes). The loop is bounded; when it runs out
of attempts a deterministic fallback point is used instead.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

import numpy as np

from errors import DegeneratePolygon
from geometry import (
    INSIDE,
    Point,
    Polygon,
    area_centroid,
    get_interior_test_point,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 1000

# Anything accepted where a random source is expected
RandomLike = Union[None, int, np.random.Generator]


def make_rng(source: RandomLike = None) -> np.random.Generator:
    """
    Return a numpy Generator for a seed, an existing Generator, or None.

    An existing generator is returned as-is so its state keeps advancing;
    None gives a fresh, unseeded generator.
    """
    if isinstance(source, np.random.Generator):
        return source
    return np.random.default_rng(source)


def fallback_point(polygon: Polygon) -> Optional[Point]:
    """
    Deterministic interior point: the area centroid if it is strictly inside,
    otherwise an edge midpoint nudged inward.
    """
    tol = polygon.tolerance
    centroid = polygon.centroid
    if polygon.locate(centroid, tol) == INSIDE:
        return centroid

    candidate = get_interior_test_point(
        polygon.outer.vertices,
        [hole.vertices for hole in polygon.holes],
        tol
    )
    if polygon.locate(candidate, tol) == INSIDE:
        return candidate

    candidate = area_centroid(polygon.outer.vertices)
    if polygon.locate(candidate, tol) == INSIDE:
        return candidate
    return None


def sample_interior_point(
    polygon: Polygon,
    rng: RandomLike = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
) -> Point:
    """
    Sample a point strictly inside a polygon.

    Args:
        polygon: Simple polygon (holes allowed)
        rng: numpy Generator, seed or None
        max_attempts: Rejection sampling budget before the fallback is used

    Returns:
        (x, y) point for which polygon.locate() reports INSIDE at
        polygon.tolerance.

    Raises:
        DegeneratePolygon: if the polygon has zero area or no interior point
            can be found.
    """
    if polygon.area <= 0.0:
        raise DegeneratePolygon(f"Cannot sample inside a zero-area polygon (area={polygon.area})")

    rng = make_rng(rng)
    bbox = polygon.bounding_box
    tol = polygon.tolerance

    for _ in range(max_attempts):
        point = (
            float(rng.uniform(bbox.min_x, bbox.max_x)),
            float(rng.uniform(bbox.min_y, bbox.max_y)),
        )
        if polygon.locate(point, tol) == INSIDE:
            return point

    logger.warning("No interior sample after %d attempts, using fallback point", max_attempts)
    point = fallback_point(polygon)
    if point is None:
        raise DegeneratePolygon("Could not find any point strictly inside the polygon")
    return point
