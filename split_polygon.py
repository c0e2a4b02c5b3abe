"""
Split Polygon - generate a regular polygon and split it from a point.

Composes the polygon builder, the interior sampler, the cut builder and the
splitter into one call. The split point is either given as both px and py,
or sampled inside the polygon from the supplied random source.
"""

from __future__ import annotations
import logging
from typing import Optional

from cuts import build_cut_segments
from errors import InvalidParameter
from polygon_splitter import SplitResult, split_polygon
from regular_polygon import build_regular_polygon
from sampling import DEFAULT_MAX_ATTEMPTS, RandomLike, sample_interior_point
from geometry import Point, Polygon

logger = logging.getLogger(__name__)


def resolve_split_point(
    polygon: Polygon,
    px: Optional[float],
    py: Optional[float],
    rng: RandomLike = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
) -> Point:
    """
    Return (px, py) when both are given, or a sampled interior point when
    neither is.

    Raises:
        InvalidParameter: if only one of px, py is given.
    """
    if px is None and py is None:
        return sample_interior_point(polygon, rng, max_attempts)
    if px is None or py is None:
        raise InvalidParameter(
            f"Split point needs both coordinates or neither, got px={px}, py={py}"
        )
    return (float(px), float(py))


def run(
    n_sides: float,
    offset_degrees: float,
    ox: float,
    oy: float,
    radius: float,
    px: Optional[float] = None,
    py: Optional[float] = None,
    rng: RandomLike = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
) -> SplitResult:
    """
    Generate an n-gon centred at (ox, oy) and split it from (px, py) or from
    a random interior point.

    Args:
        n_sides: Number of sides (>= 3, may be fractional)
        offset_degrees: Rotation of the first vertex away from straight up
        ox, oy: Polygon center
        radius: Circumradius (> 0)
        px, py: Split point; both or neither
        rng: numpy Generator, seed or None, used only when sampling
        max_attempts: Sampling budget before the deterministic fallback

    Returns:
        SplitResult with the sub-polygons.

    Raises:
        InvalidParameter: bad polygon parameters or a lone px/py.
        DegeneratePolygon: the polygon has (numerically) zero area, or the
            sampler finds no interior point.
        InvalidPolygon: the generated ring repeats a vertex or is not simple,
            e.g. a side count just above an integer closes on a sliver edge.
    """
    ring = build_regular_polygon(n_sides, offset_degrees, (ox, oy), radius)
    polygon = Polygon(ring)
    point = resolve_split_point(polygon, px, py, rng, max_attempts)
    cuts = build_cut_segments(ring, point)
    result = split_polygon(polygon, cuts)
    logger.debug("Split %.3f-gon at (%g, %g) into %d polygons (%s)",
                 n_sides, ox, oy, len(result), result.method)
    return result


def run_config(config, rng: RandomLike = None) -> SplitResult:
    """
    Run a single split from a SplitConfig.

    The config seed is used when no random source is passed.
    """
    errors = config.validate()
    if errors:
        raise InvalidParameter("; ".join(errors))
    return run(
        config.n_sides,
        config.offset_degrees,
        config.center_x,
        config.center_y,
        config.radius,
        config.split_x,
        config.split_y,
        rng if rng is not None else config.seed,
        config.max_sample_attempts,
    )
