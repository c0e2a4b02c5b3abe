"""
Geometry primitives for regular-polygon splitting.

Points are plain (x, y) tuples. Rings, polygons and segments are frozen
dataclasses; every transformation (sampling, clipping, splitting) builds new
values instead of mutating existing ones.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Iterator, Optional, Sequence

from errors import InvalidPolygon


# Type aliases
Point = tuple[float, float]

# Default tolerance for coincidence and point-on-segment tests. Geometry of a
# known size uses EPS scaled by its extent instead (scaled_tolerance).
EPS = 1e-9

# Point location results
INSIDE = "INSIDE"
BOUNDARY = "BOUNDARY"
OUTSIDE = "OUTSIDE"


# =============================================================================
# Basic Geometry Functions
# =============================================================================

def signed_area(polygon: Sequence[Point]) -> float:
    """
    Calculate signed area of polygon using shoelace formula.

    Returns:
        Positive for CCW winding, negative for CW winding.
    """
    n = len(polygon)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1]
        area -= polygon[j][0] * polygon[i][1]
    return area / 2.0


def ensure_ccw(polygon: Sequence[Point]) -> list[Point]:
    """Ensure polygon has counter-clockwise winding order."""
    if signed_area(polygon) < 0:
        return list(reversed(polygon))
    return list(polygon)


def ensure_cw(polygon: Sequence[Point]) -> list[Point]:
    """Ensure polygon has clockwise winding order."""
    if signed_area(polygon) > 0:
        return list(reversed(polygon))
    return list(polygon)


def points_equal(p1: Point, p2: Point, eps: float = EPS) -> bool:
    """Check if two points are equal within epsilon tolerance."""
    return abs(p1[0] - p2[0]) < eps and abs(p1[1] - p2[1]) < eps


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def cross(o: Point, a: Point, b: Point) -> float:
    """2D cross product of vectors OA and OB."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def point_on_segment(p: Point, a: Point, b: Point, eps: float = EPS) -> bool:
    """Check if point p lies on segment ab (within eps distance)."""
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    len_sq = dx * dx + dy * dy
    if len_sq == 0.0:
        return distance(p, a) <= eps

    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / len_sq
    t = max(0.0, min(1.0, t))
    closest = (a[0] + t * dx, a[1] + t * dy)
    return distance(p, closest) <= eps


def proper_intersection(
    a: Point, b: Point,
    c: Point, d: Point,
    eps: float = EPS
) -> Optional[Point]:
    """
    Find the crossing point of segments ab and cd.

    Only proper crossings count: each segment must have its endpoints strictly
    on opposite sides of the other. Touching and collinear overlaps return None;
    callers handle those through point_on_segment() on the endpoints.
    """
    len_ab = distance(a, b)
    len_cd = distance(c, d)
    if len_ab <= eps or len_cd <= eps:
        return None

    # Signed distances of each endpoint to the other segment's line
    d1 = cross(c, d, a) / len_cd
    d2 = cross(c, d, b) / len_cd
    if not ((d1 > eps and d2 < -eps) or (d1 < -eps and d2 > eps)):
        return None

    d3 = cross(a, b, c) / len_ab
    d4 = cross(a, b, d) / len_ab
    if not ((d3 > eps and d4 < -eps) or (d3 < -eps and d4 > eps)):
        return None

    t = d1 / (d1 - d2)
    return (a[0] + t * (b[0] - a[0]), a[1] + t * (b[1] - a[1]))


def segments_intersect(
    p1: Point, p2: Point,
    p3: Point, p4: Point,
    eps: float = EPS
) -> bool:
    """
    Check if line segment (p1, p2) intersects line segment (p3, p4).

    Touching at an endpoint and collinear overlap both count as intersecting.
    """
    if proper_intersection(p1, p2, p3, p4, eps) is not None:
        return True
    return (point_on_segment(p1, p3, p4, eps) or
            point_on_segment(p2, p3, p4, eps) or
            point_on_segment(p3, p1, p2, eps) or
            point_on_segment(p4, p1, p2, eps))


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """
    Check if point is inside polygon using ray casting algorithm.

    Points exactly on the boundary may go either way; use locate_point() when
    the boundary case matters.
    """
    x, y = point
    n = len(polygon)
    inside = False

    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]

        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside
        j = i

    return inside


def locate_point(point: Point, polygon: Sequence[Point], eps: float = EPS) -> str:
    """
    Classify a point against a simple polygon ring.

    Returns:
        INSIDE, BOUNDARY or OUTSIDE.
    """
    n = len(polygon)
    for i in range(n):
        if point_on_segment(point, polygon[i], polygon[(i + 1) % n], eps):
            return BOUNDARY
    if point_in_polygon(point, polygon):
        return INSIDE
    return OUTSIDE


def is_simple(polygon: Sequence[Point], eps: float = EPS) -> bool:
    """
    Check that a closed ring does not touch or cross itself.

    Adjacent edges may only share their common vertex; any other contact
    (including an edge folding back over its neighbour) makes the ring
    non-simple.
    """
    n = len(polygon)
    if n < 3:
        return False

    edges = [(polygon[i], polygon[(i + 1) % n]) for i in range(n)]
    for i in range(n):
        a, b = edges[i]
        for j in range(i + 1, n):
            c, d = edges[j]
            if j == i + 1:
                # Shared vertex b == c
                if point_on_segment(d, a, b, eps) or point_on_segment(a, c, d, eps):
                    return False
            elif i == 0 and j == n - 1:
                # Shared vertex a == d
                if point_on_segment(c, a, b, eps) or point_on_segment(b, c, d, eps):
                    return False
            elif segments_intersect(a, b, c, d, eps):
                return False
    return True


def is_strictly_convex(polygon: Sequence[Point]) -> bool:
    """Check that every vertex turns the same way with a non-zero angle."""
    n = len(polygon)
    if n < 3:
        return False

    sign = 0
    for i in range(n):
        prev = polygon[i - 1]
        curr = polygon[i]
        nxt = polygon[(i + 1) % n]
        scale = distance(prev, curr) * distance(curr, nxt)
        if scale == 0.0:
            return False
        turn = cross(prev, curr, nxt) / scale
        if abs(turn) < 1e-12:
            return False
        s = 1 if turn > 0 else -1
        if sign == 0:
            sign = s
        elif s != sign:
            return False
    return True


def polygon_centroid(polygon: Sequence[Point]) -> Point:
    """Calculate the vertex average of a polygon."""
    if len(polygon) == 0:
        return (0.0, 0.0)
    cx = sum(v[0] for v in polygon) / len(polygon)
    cy = sum(v[1] for v in polygon) / len(polygon)
    return (cx, cy)


def area_centroid(polygon: Sequence[Point]) -> Point:
    """
    Calculate the centroid of the area enclosed by a polygon.

    Falls back to the vertex average for zero-area rings.
    """
    n = len(polygon)
    area = signed_area(polygon)
    if n < 3 or area == 0.0:
        return polygon_centroid(polygon)

    cx = 0.0
    cy = 0.0
    for i in range(n):
        x0, y0 = polygon[i]
        x1, y1 = polygon[(i + 1) % n]
        f = x0 * y1 - x1 * y0
        cx += (x0 + x1) * f
        cy += (y0 + y1) * f
    return (cx / (6.0 * area), cy / (6.0 * area))


def get_interior_test_point(
    region: Sequence[Point],
    holes: Sequence[Sequence[Point]] = (),
    eps: float = EPS
) -> Point:
    """
    Get a point that is definitely inside the region (and outside its holes).

    Tries the area centroid first, then the midpoint of each edge offset
    slightly inward based on winding order. Falls back to the vertex average.
    """
    if len(region) < 3:
        return polygon_centroid(region)

    def is_interior(p: Point) -> bool:
        if locate_point(p, region, eps) != INSIDE:
            return False
        return all(locate_point(p, hole, eps) == OUTSIDE for hole in holes)

    centroid = area_centroid(region)
    if is_interior(centroid):
        return centroid

    area = signed_area(region)

    for i in range(len(region)):
        p1 = region[i]
        p2 = region[(i + 1) % len(region)]

        mid_x = (p1[0] + p2[0]) / 2
        mid_y = (p1[1] + p2[1]) / 2

        dx = p2[0] - p1[0]
        dy = p2[1] - p1[1]
        length = math.sqrt(dx * dx + dy * dy)
        if length <= eps:
            continue

        # For CCW polygon (positive area), inward is to the left: (-dy, dx)
        # For CW polygon (negative area), inward is to the right: (dy, -dx)
        if area > 0:
            nx, ny = -dy / length, dx / length
        else:
            nx, ny = dy / length, -dx / length

        offset = min(length * 0.01, 0.1)
        test_point = (mid_x + nx * offset, mid_y + ny * offset)

        if is_interior(test_point):
            return test_point

    return polygon_centroid(region)


# =============================================================================
# Value Types
# =============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return (
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2
        )

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def expand(self, margin: float) -> BoundingBox:
        return BoundingBox(
            self.min_x - margin,
            self.min_y - margin,
            self.max_x + margin,
            self.max_y + margin
        )


def bounding_box_of(points: Sequence[Point]) -> BoundingBox:
    if not points:
        return BoundingBox(0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return BoundingBox(min(xs), min(ys), max(xs), max(ys))


def scaled_tolerance(points: Sequence[Point], eps: float = EPS) -> float:
    """
    Tolerance proportional to the size of a point set.

    eps times the bounding box diagonal, so a polygon of radius 1e-7 snaps and
    classifies exactly like the same polygon scaled up to radius 1. The floor
    keeps the tolerance above float rounding when small geometry sits far from
    the origin.
    """
    bbox = bounding_box_of(points)
    magnitude = max(abs(bbox.min_x), abs(bbox.min_y), abs(bbox.max_x), abs(bbox.max_y))
    return max(eps * bbox.diagonal, 1e-14 * magnitude)


@dataclass(frozen=True)
class Ring:
    """
    Closed ring of vertices (last connects back to first).

    Raises InvalidPolygon for fewer than 3 vertices or when two consecutive
    vertices are equal.
    """
    vertices: tuple[Point, ...]

    def __post_init__(self):
        vertices = tuple((float(x), float(y)) for x, y in self.vertices)
        object.__setattr__(self, "vertices", vertices)

        n = len(vertices)
        if n < 3:
            raise InvalidPolygon(f"Ring needs at least 3 vertices, got {n}")
        for i in range(n):
            if vertices[i] == vertices[(i + 1) % n]:
                raise InvalidPolygon(f"Ring has repeated consecutive vertex {vertices[i]}")

    def __len__(self):
        return len(self.vertices)

    def __getitem__(self, index):
        return self.vertices[index]

    def __iter__(self) -> Iterator[Point]:
        return iter(self.vertices)

    @property
    def signed_area(self) -> float:
        return signed_area(self.vertices)

    @property
    def area(self) -> float:
        return abs(signed_area(self.vertices))

    @property
    def is_ccw(self) -> bool:
        return signed_area(self.vertices) > 0

    @property
    def bounding_box(self) -> BoundingBox:
        return bounding_box_of(self.vertices)

    @property
    def centroid(self) -> Point:
        return area_centroid(self.vertices)

    def edges(self) -> list[tuple[Point, Point]]:
        """Return list of edges as (start, end) point tuples."""
        n = len(self.vertices)
        return [(self.vertices[i], self.vertices[(i + 1) % n]) for i in range(n)]

    def reversed(self) -> Ring:
        return Ring(tuple(reversed(self.vertices)))

    def ccw(self) -> Ring:
        return self if self.signed_area >= 0 else self.reversed()

    def cw(self) -> Ring:
        return self if self.signed_area <= 0 else self.reversed()

    def is_simple(self, eps: float = EPS) -> bool:
        return is_simple(self.vertices, eps)

    def is_convex(self) -> bool:
        return is_strictly_convex(self.vertices)

    def locate(self, point: Point, eps: float = EPS) -> str:
        return locate_point(point, self.vertices, eps)

    def to_list(self) -> list[Point]:
        return list(self.vertices)


@dataclass(frozen=True)
class Polygon:
    """A polygon: one outer ring and zero or more hole rings."""
    outer: Ring
    holes: tuple[Ring, ...] = ()

    def __post_init__(self):
        outer = self.outer if isinstance(self.outer, Ring) else Ring(tuple(self.outer))
        holes = tuple(h if isinstance(h, Ring) else Ring(tuple(h)) for h in self.holes)
        object.__setattr__(self, "outer", outer)
        object.__setattr__(self, "holes", holes)

    @property
    def area(self) -> float:
        return self.outer.area - sum(h.area for h in self.holes)

    @property
    def bounding_box(self) -> BoundingBox:
        return self.outer.bounding_box

    @property
    def centroid(self) -> Point:
        """Area centroid, accounting for holes."""
        if not self.holes:
            return self.outer.centroid
        total = self.area
        if total <= 0:
            return self.outer.centroid
        cx, cy = self.outer.centroid
        sx = cx * self.outer.area
        sy = cy * self.outer.area
        for hole in self.holes:
            hx, hy = hole.centroid
            sx -= hx * hole.area
            sy -= hy * hole.area
        return (sx / total, sy / total)

    @property
    def tolerance(self) -> float:
        """Snapping and classification distance scaled to the outer ring."""
        return scaled_tolerance(self.outer.vertices)

    @property
    def vertex_count(self) -> int:
        return len(self.outer) + sum(len(h) for h in self.holes)

    def rings(self) -> list[Ring]:
        return [self.outer, *self.holes]

    def locate(self, point: Point, eps: float = EPS) -> str:
        """Classify a point as INSIDE, BOUNDARY or OUTSIDE of the polygon area."""
        location = self.outer.locate(point, eps)
        if location != INSIDE:
            return location
        for hole in self.holes:
            hole_location = hole.locate(point, eps)
            if hole_location == BOUNDARY:
                return BOUNDARY
            if hole_location == INSIDE:
                return OUTSIDE
        return INSIDE

    def contains(self, point: Point) -> bool:
        return self.locate(point, self.tolerance) == INSIDE

    def is_simple(self, eps: float = EPS) -> bool:
        return all(ring.is_simple(eps) for ring in self.rings())

    def to_lists(self) -> list[list[Point]]:
        """Plain vertex rings, outer first, for external consumers."""
        return [ring.to_list() for ring in self.rings()]


@dataclass(frozen=True)
class Segment:
    """A directed line segment from start to end."""
    start: Point
    end: Point

    def __post_init__(self):
        object.__setattr__(self, "start", (float(self.start[0]), float(self.start[1])))
        object.__setattr__(self, "end", (float(self.end[0]), float(self.end[1])))

    @property
    def length(self) -> float:
        return distance(self.start, self.end)

    @property
    def midpoint(self) -> Point:
        return (
            (self.start[0] + self.end[0]) / 2,
            (self.start[1] + self.end[1]) / 2
        )

    @property
    def angle(self) -> float:
        """Angle in radians."""
        dx = self.end[0] - self.start[0]
        dy = self.end[1] - self.start[1]
        return math.atan2(dy, dx)

    def is_degenerate(self, eps: float = EPS) -> bool:
        return self.length <= eps


SegmentBundle = tuple[Segment, ...]
