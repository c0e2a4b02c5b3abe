"""Cut segment generation: one segment from the split point to every vertex."""

from __future__ import annotations

from geometry import Point, Ring, Segment, SegmentBundle


def build_cut_segments(ring: Ring, point: Point) -> SegmentBundle:
    """
    Build the cutting fan for a ring.

    Segment i runs from `point` to vertex i, so the bundle follows the ring's
    vertex order. Nothing is validated here: the point may lie inside, on or
    outside the ring, and segments may have zero length.
    """
    start = (float(point[0]), float(point[1]))
    return tuple(Segment(start, vertex) for vertex in ring)
