"""
Polygon Splitter - Split a polygon by a fan of cut segments.

Every cut in a bundle starts at the same split point P, so the cuts form a
star around P rather than an arbitrary arrangement:

- P strictly inside a strictly convex, hole-free polygon whose bundle runs
  to the vertices in ring order: the split is the fan triangulation
  (P, V_i, V_{i+1}), one triangle per cut, emitted in bundle order.
- Anything else (P on the boundary or outside, non-convex rings, holes,
  unaligned bundles): the planar subdivision clips the cuts to the polygon
  and traces the faces. Faces are emitted by the polar angle of their
  centroid around P, measured from the direction P -> polygon centroid,
  with larger faces first on ties.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import math
from typing import Iterator, Optional, Sequence, Union

from errors import DegeneratePolygon, InvalidPolygon
from geometry import (
    EPS,
    INSIDE,
    Point,
    Polygon,
    Ring,
    Segment,
    ensure_ccw,
    get_interior_test_point,
    point_on_segment,
    points_equal,
)
from planar_subdivision import PlanarSubdivision

logger = logging.getLogger(__name__)

# Split methods
FAN = "fan"
GENERAL = "general"


@dataclass(frozen=True)
class SplitResult:
    """Ordered sub-polygons produced by split_polygon()."""
    polygons: tuple[Polygon, ...]
    split_point: Optional[Point]
    # INSIDE, BOUNDARY or OUTSIDE (None for an empty bundle)
    location: Optional[str]
    method: str
    dropped_cuts: int = 0

    def __len__(self):
        return len(self.polygons)

    def __getitem__(self, index):
        return self.polygons[index]

    def __iter__(self) -> Iterator[Polygon]:
        return iter(self.polygons)

    @property
    def areas(self) -> list[float]:
        return [p.area for p in self.polygons]

    @property
    def total_area(self) -> float:
        return sum(p.area for p in self.polygons)

    def to_lists(self) -> list[list[list[Point]]]:
        """Plain vertex rings per polygon, for external consumers."""
        return [p.to_lists() for p in self.polygons]


def shared_start(cuts: Sequence[Segment], eps: float = EPS) -> Optional[Point]:
    """Return the common start point of a bundle, or None if the starts differ."""
    if not cuts:
        return None
    first = cuts[0].start
    for cut in cuts[1:]:
        if not points_equal(cut.start, first, eps):
            return None
    return first


def is_ring_aligned(ring: Ring, cuts: Sequence[Segment], point: Point, eps: float = EPS) -> bool:
    """Check that cut i runs from point to vertex i for every vertex of the ring."""
    if len(cuts) != len(ring):
        return False
    for cut, vertex in zip(cuts, ring):
        if not points_equal(cut.start, point, eps) or not points_equal(cut.end, vertex, eps):
            return False
    return True


def fan_triangles(point: Point, ring: Ring) -> tuple[Polygon, ...]:
    """Triangles (P, V_i, V_{i+1}) for i = 0..n-1, each counter-clockwise."""
    n = len(ring)
    triangles = []
    for i in range(n):
        triangle = ensure_ccw([point, ring[i], ring[(i + 1) % n]])
        triangles.append(Polygon(Ring(tuple(triangle))))
    return tuple(triangles)


def order_faces(
    faces: Sequence[Polygon],
    point: Point,
    reference: Point,
    eps: float = EPS
) -> list[Polygon]:
    """Sort faces by polar angle of their centroid around point, starting at reference."""
    if points_equal(point, reference, eps):
        base = 0.0
    else:
        base = math.atan2(reference[1] - point[1], reference[0] - point[0])

    def key(face: Polygon) -> tuple[float, float]:
        cx, cy = face.centroid
        angle = math.atan2(cy - point[1], cx - point[0]) - base
        angle = (angle + math.pi) % (2 * math.pi) - math.pi
        return (angle, -face.area)

    return sorted(faces, key=key)


def split_polygon(
    polygon: Union[Polygon, Ring],
    cuts: Sequence[Segment]
) -> SplitResult:
    """
    Split a simple polygon by a bundle of cut segments sharing a start point.

    Args:
        polygon: Polygon (or bare Ring) to split
        cuts: Cut segments, normally from build_cut_segments()

    Returns:
        SplitResult whose polygons partition the input: positive areas,
        disjoint interiors, union equal to the input.

    Raises:
        DegeneratePolygon: if the polygon has zero area.
        InvalidPolygon: if any ring of the polygon is not simple.
    """
    if isinstance(polygon, Ring):
        polygon = Polygon(polygon)
    cuts = tuple(cuts)

    tol = polygon.tolerance
    # Zero or below float noise for a polygon of this size
    if polygon.area <= 0.0 or polygon.area <= EPS * polygon.bounding_box.diagonal ** 2:
        raise DegeneratePolygon(f"Cannot split a zero-area polygon (area={polygon.area})")
    if not polygon.is_simple(tol):
        raise InvalidPolygon("Polygon ring is not simple (self-intersecting or folded)")

    if not cuts:
        logger.debug("Empty cut bundle, returning polygon unchanged")
        return SplitResult((polygon,), None, None, GENERAL)

    point = shared_start(cuts, tol)
    if point is None:
        logger.debug("Cuts do not share a start point, using the general path")
        point = cuts[0].start
    location = polygon.locate(point, tol)

    if (location == INSIDE and not polygon.holes and polygon.outer.is_convex()
            and is_ring_aligned(polygon.outer, cuts, point, tol)):
        logger.debug("Fan split of %d-vertex polygon at %s", len(polygon.outer), point)
        return SplitResult(fan_triangles(point, polygon.outer), point, location, FAN)

    logger.debug("General split of %d-vertex polygon, split point %s", len(polygon.outer), location)
    subdivision = PlanarSubdivision(
        polygon.outer.vertices,
        [hole.vertices for hole in polygon.holes],
        [(cut.start, cut.end) for cut in cuts],
        tolerance=tol
    )
    faces = subdivision.faces()
    if not faces:
        raise DegeneratePolygon("Face extraction produced no faces")

    ordered = order_faces(faces, point, polygon.centroid, tol)
    return SplitResult(tuple(ordered), point, location, GENERAL, subdivision.dropped_cuts)


# =============================================================================
# Partition Diagnostics
# =============================================================================

def area_residual(polygon: Polygon, result: SplitResult) -> float:
    """Relative difference between the input area and the summed output area."""
    expected = polygon.area
    if expected == 0:
        return math.inf
    return abs(result.total_area - expected) / expected


def edge_on_carriers(
    start: Point,
    end: Point,
    carriers: Sequence[tuple[Point, Point]],
    eps: float = EPS
) -> bool:
    """
    Check that the edge start -> end is covered by carrier segments.

    The edge is cut at every carrier endpoint lying on it and each piece must
    lie on a single carrier, so an edge merged from collinear pieces of the
    boundary and of a cut still passes.
    """
    breaks = [start, end]
    for a, b in carriers:
        for q in (a, b):
            if point_on_segment(q, start, end, eps):
                breaks.append(q)

    dx = end[0] - start[0]
    dy = end[1] - start[1]
    breaks.sort(key=lambda p: (p[0] - start[0]) * dx + (p[1] - start[1]) * dy)

    for p1, p2 in zip(breaks, breaks[1:]):
        if points_equal(p1, p2, eps):
            continue
        if not any(point_on_segment(p1, a, b, eps) and point_on_segment(p2, a, b, eps)
                   for a, b in carriers):
            return False
    return True


def verify_partition(
    polygon: Union[Polygon, Ring],
    result: SplitResult,
    rel_tol: float = 1e-9,
    cuts: Optional[Sequence[Segment]] = None
) -> list[str]:
    """
    Check that a split result partitions the polygon.

    Every face must be simple with positive area and lie inside the input;
    the summed area must match the input area. Together these rule out
    overlapping faces. When the cuts are given, every face edge must also lie
    on the input boundary or on one of the cuts.

    Returns:
        List of error messages (empty if valid)
    """
    if isinstance(polygon, Ring):
        polygon = Polygon(polygon)
    errors = []

    residual = area_residual(polygon, result)
    if residual > rel_tol:
        errors.append(
            f"Area not conserved: input {polygon.area}, output {result.total_area} "
            f"(relative error {residual:.3e})"
        )

    tol = polygon.tolerance
    carriers = None
    if cuts is not None:
        carriers = [edge for ring in polygon.rings() for edge in ring.edges()]
        carriers.extend((cut.start, cut.end) for cut in cuts)

    for i, face in enumerate(result):
        if face.area <= 0:
            errors.append(f"Face {i} has non-positive area {face.area}")
            continue
        if not face.is_simple(tol):
            errors.append(f"Face {i} is not simple")
        test_point = get_interior_test_point(
            face.outer.vertices, [hole.vertices for hole in face.holes], tol
        )
        if polygon.locate(test_point, tol) != INSIDE:
            errors.append(f"Face {i} lies outside the input polygon")

        if carriers is None:
            continue
        # Snapped vertices may sit a few tolerances off the segment they came from
        for ring in face.rings():
            for start, end in ring.edges():
                if not edge_on_carriers(start, end, carriers, 10 * tol):
                    errors.append(
                        f"Face {i} edge {start} -> {end} is not on the boundary or a cut"
                    )

    return errors
