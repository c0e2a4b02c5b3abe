"""
Planar Subdivision Module

Partitions a polygon (with holes) into faces using finite cutting segments.
Used by the polygon splitter whenever the fan shortcut does not apply (split
point on the boundary or outside, non-convex rings, holes).

Algorithm:
1. Clip every cutting segment to the polygon interior (zero or more pieces)
2. Split boundary edges and cut pieces at every crossing and at every
   endpoint that lies on another edge; snap nearby vertices together so
   collinear overlapping pieces collapse into a single edge
3. Build vertex adjacency and trace faces using the "next clockwise edge" rule
4. Keep CCW faces inside the outer ring and outside the holes; attach islands
   (components not connected to the outer ring) to their containing face
"""

from __future__ import annotations
from collections import deque
import logging
import math
from typing import Optional, Sequence

from errors import DegenerateCut
from geometry import (
    EPS,
    INSIDE,
    OUTSIDE,
    Point,
    Polygon,
    Ring,
    bounding_box_of,
    cross,
    distance,
    ensure_ccw,
    ensure_cw,
    get_interior_test_point,
    locate_point,
    point_on_segment,
    points_equal,
    proper_intersection,
    scaled_tolerance,
    signed_area,
)

logger = logging.getLogger(__name__)

# Type aliases
Edge = tuple[Point, Point]


# =============================================================================
# Helpers
# =============================================================================

def locate_in_region(
    point: Point,
    outer: Sequence[Point],
    holes: Sequence[Sequence[Point]],
    eps: float = EPS
) -> str:
    """Classify a point against an outer ring with holes (INSIDE/BOUNDARY/OUTSIDE)."""
    location = locate_point(point, outer, eps)
    if location != INSIDE:
        return location
    for hole in holes:
        hole_location = locate_point(point, hole, eps)
        if hole_location == INSIDE:
            return OUTSIDE
        if hole_location != OUTSIDE:
            return hole_location
    return INSIDE


def _sorted_unique_along(
    start: Point,
    end: Point,
    points: list[Point],
    eps: float
) -> list[Point]:
    """Sort points by their projection on start->end and merge near-duplicates."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]

    def project(p: Point) -> float:
        return (p[0] - start[0]) * dx + (p[1] - start[1]) * dy

    ordered = sorted(points, key=project)
    unique = [ordered[0]]
    for p in ordered[1:]:
        if not points_equal(p, unique[-1], eps):
            unique.append(p)
    return unique


def remove_spikes(loop: list[int]) -> list[int]:
    """
    Remove zero-width spikes (A, B, A) from a closed vertex-index loop.

    Spikes appear when a face walks around a dangling cut piece.
    """
    loop = list(loop)
    changed = True
    while changed and len(loop) >= 3:
        changed = False
        n = len(loop)
        for i in range(n):
            if loop[i - 1] == loop[(i + 1) % n]:
                drop = {i, (i + 1) % n}
                loop = [v for k, v in enumerate(loop) if k not in drop]
                changed = True
                break
    return loop


def drop_collinear_vertices(points: list[Point], eps: float = EPS) -> list[Point]:
    """Remove vertices lying on the straight line between their neighbours."""
    points = list(points)
    changed = True
    while changed and len(points) > 3:
        changed = False
        n = len(points)
        for i in range(n):
            prev = points[i - 1]
            curr = points[i]
            nxt = points[(i + 1) % n]
            span = distance(prev, nxt)
            if span <= eps:
                continue
            if abs(cross(prev, curr, nxt)) / span > eps:
                continue
            # Only drop if curr lies between its neighbours (no fold-back)
            dot = (curr[0] - prev[0]) * (nxt[0] - curr[0]) + (curr[1] - prev[1]) * (nxt[1] - curr[1])
            if dot > 0:
                del points[i]
                changed = True
                break
    return points


# =============================================================================
# Planar Subdivision Class
# =============================================================================

class PlanarSubdivision:
    """
    Computes faces by partitioning a polygon (with holes) using cutting segments.

    Uses boundary tracing: treats all edges (outer, holes, clipped cut pieces)
    as a planar graph and traces faces using the "next clockwise edge" rule.

    Example:
        >>> outer = [(0, 0), (4, 0), (4, 4), (0, 4)]
        >>> cuts = [((2, -1), (2, 5))]  # vertical cut through the middle
        >>> subdivision = PlanarSubdivision(outer, [], cuts)
        >>> faces = subdivision.faces()
        >>> len(faces)
        2
    """

    def __init__(
        self,
        outer: Sequence[Point],
        holes: Sequence[Sequence[Point]],
        segments: Sequence[Edge],
        tolerance: Optional[float] = None
    ):
        """
        Initialize planar subdivision.

        Args:
            outer: Outer boundary ring (will be converted to CCW)
            holes: Hole rings (will be converted to CW)
            segments: Cutting segments as (start, end) point pairs
            tolerance: Snapping distance; defaults to scaled_tolerance() of
                the outer ring
        """
        self.outer = ensure_ccw(outer)
        self.holes = [ensure_cw(h) for h in holes]
        self.segments = [(tuple(a), tuple(b)) for a, b in segments]

        extent = bounding_box_of(self.outer).diagonal
        self.tolerance = tolerance if tolerance is not None else scaled_tolerance(self.outer)
        self.area_tolerance = self.tolerance * extent

        # Populated by compute()
        self.vertices: list[Point] = []
        self._vertex_grid: dict[tuple[int, int], list[int]] = {}
        self.edges: list[tuple[int, int]] = []
        self._edge_keys: set[tuple[int, int]] = set()
        self.vertex_edges: dict[int, list[tuple[float, int]]] = {}
        self.outer_vertices: set[int] = set()
        self.cut_pieces: list[Edge] = []
        self.dropped_cuts = 0
        self.regions: list[list[int]] = []
        self.components: dict[int, int] = {}
        self._computed = False

    # -------------------------------------------------------------------------
    # Graph construction
    # -------------------------------------------------------------------------

    def _add_vertex(self, point: Point) -> int:
        """Add vertex (snapping to an existing one within tolerance) and return its index."""
        tol = self.tolerance
        cx = math.floor(point[0] / tol)
        cy = math.floor(point[1] / tol)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for idx in self._vertex_grid.get((cx + dx, cy + dy), []):
                    if points_equal(self.vertices[idx], point, tol):
                        return idx

        idx = len(self.vertices)
        self.vertices.append(point)
        self._vertex_grid.setdefault((cx, cy), []).append(idx)
        return idx

    def _add_edge(self, start_idx: int, end_idx: int) -> None:
        """Add edge between two vertices, ignoring loops and duplicates."""
        if start_idx == end_idx:
            return
        key = (min(start_idx, end_idx), max(start_idx, end_idx))
        if key in self._edge_keys:
            return
        self._edge_keys.add(key)
        self.edges.append((start_idx, end_idx))

    def _ring_edges(self, ring: Sequence[Point]) -> list[Edge]:
        n = len(ring)
        return [(ring[i], ring[(i + 1) % n]) for i in range(n)]

    def clip_segment(self, start: Point, end: Point) -> list[Edge]:
        """
        Clip a cutting segment to the polygon interior.

        A segment may come back as several pieces when it leaves and re-enters
        the polygon. Portions running along the boundary are discarded (the
        boundary already carries those edges).

        Raises:
            DegenerateCut: if the segment has zero length or nothing of it
                lies strictly inside the polygon.
        """
        tol = self.tolerance
        if distance(start, end) <= tol:
            raise DegenerateCut(f"Cut {start} -> {end} has zero length")

        points = [start, end]
        for ring in [self.outer] + self.holes:
            for c, d in self._ring_edges(ring):
                for q in (c, d):
                    if point_on_segment(q, start, end, tol):
                        points.append(q)
                crossing = proper_intersection(start, end, c, d, tol)
                if crossing is not None:
                    points.append(crossing)

        unique = _sorted_unique_along(start, end, points, tol)

        pieces = []
        for p1, p2 in zip(unique, unique[1:]):
            mid = ((p1[0] + p2[0]) / 2, (p1[1] + p2[1]) / 2)
            if locate_in_region(mid, self.outer, self.holes, tol) == INSIDE:
                pieces.append((p1, p2))

        if not pieces:
            raise DegenerateCut(f"Cut {start} -> {end} has no part inside the polygon")
        return pieces

    def _split_at_crossings(self, edges: list[tuple[Edge, bool]]) -> list[tuple[Edge, bool]]:
        """
        Split every edge at crossings with other edges and at other edges'
        endpoints lying on it.
        """
        tol = self.tolerance
        boxes = [
            (min(a[0], b[0]) - tol, min(a[1], b[1]) - tol,
             max(a[0], b[0]) + tol, max(a[1], b[1]) + tol)
            for (a, b), _ in edges
        ]

        result = []
        for i, ((a, b), is_outer) in enumerate(edges):
            points = [a, b]
            min_x, min_y, max_x, max_y = boxes[i]
            for j, ((c, d), _) in enumerate(edges):
                if i == j:
                    continue
                other = boxes[j]
                if other[0] > max_x or other[2] < min_x or other[1] > max_y or other[3] < min_y:
                    continue
                for q in (c, d):
                    if point_on_segment(q, a, b, tol):
                        points.append(q)
                crossing = proper_intersection(a, b, c, d, tol)
                if crossing is not None:
                    points.append(crossing)

            unique = _sorted_unique_along(a, b, points, tol)
            for p1, p2 in zip(unique, unique[1:]):
                result.append(((p1, p2), is_outer))
        return result

    def compute(self, debug: bool = False) -> list[list[Point]]:
        """
        Compute the planar subdivision and trace all face loops.

        Args:
            debug: If True, log graph sizes at INFO level instead of DEBUG.

        Returns:
            List of traced loops (including the unbounded face and faces
            inside holes - use faces() for the filtered result).
        """
        if self._computed:
            return [self._loop_points(loop) for loop in self.regions]
        log = logger.info if debug else logger.debug

        # Step 1: Collect all edges
        raw_edges: list[tuple[Edge, bool]] = []
        raw_edges.extend((edge, True) for edge in self._ring_edges(self.outer))
        for hole in self.holes:
            raw_edges.extend((edge, False) for edge in self._ring_edges(hole))

        for start, end in self.segments:
            try:
                pieces = self.clip_segment(start, end)
            except DegenerateCut as exc:
                self.dropped_cuts += 1
                logger.debug("Dropping cut: %s", exc)
                continue
            self.cut_pieces.extend(pieces)
            raw_edges.extend((piece, False) for piece in pieces)

        log("Boundary edges: %d, cut pieces: %d, dropped cuts: %d",
            len(raw_edges) - len(self.cut_pieces), len(self.cut_pieces), self.dropped_cuts)

        # Step 2: Split at crossings and build vertex and edge lists
        for (start, end), is_outer in self._split_at_crossings(raw_edges):
            start_idx = self._add_vertex(start)
            end_idx = self._add_vertex(end)
            self._add_edge(start_idx, end_idx)
            if is_outer:
                self.outer_vertices.update((start_idx, end_idx))

        log("Total vertices: %d, total edges: %d", len(self.vertices), len(self.edges))

        # Step 3: Build adjacency - for each vertex, neighbours in angular order
        self.vertex_edges = {i: [] for i in range(len(self.vertices))}
        for start_idx, end_idx in self.edges:
            start = self.vertices[start_idx]
            end = self.vertices[end_idx]
            angle_forward = math.atan2(end[1] - start[1], end[0] - start[0])
            angle_backward = math.atan2(start[1] - end[1], start[0] - end[0])
            self.vertex_edges[start_idx].append((angle_forward, end_idx))
            self.vertex_edges[end_idx].append((angle_backward, start_idx))

        for v_idx in self.vertex_edges:
            self.vertex_edges[v_idx].sort(key=lambda x: x[0])

        self._label_components()

        # Step 4: Trace regions
        self._trace_regions()
        self._computed = True

        return [self._loop_points(loop) for loop in self.regions]

    def _label_components(self) -> None:
        """Label connected components of the graph (BFS)."""
        self.components = {}
        label = 0
        for start in range(len(self.vertices)):
            if start in self.components:
                continue
            queue = deque([start])
            self.components[start] = label
            while queue:
                v = queue.popleft()
                for _, w in self.vertex_edges[v]:
                    if w not in self.components:
                        self.components[w] = label
                        queue.append(w)
            label += 1

    # -------------------------------------------------------------------------
    # Face tracing
    # -------------------------------------------------------------------------

    def _trace_regions(self) -> None:
        """Trace all region boundaries using the 'next CW edge' rule."""
        used: set[tuple[int, int]] = set()

        for start_idx, end_idx in self.edges:
            for from_v, to_v in ((start_idx, end_idx), (end_idx, start_idx)):
                if (from_v, to_v) in used:
                    continue
                loop = self._trace_one_region(from_v, to_v, used)
                if loop:
                    self.regions.append(loop)

    def _next_clockwise(self, from_v: int, to_v: int) -> int:
        """
        At to_v, pick the outgoing edge that comes first clockwise from the
        edge we arrived on. Going straight back is the last resort (dead end).
        """
        here = self.vertices[to_v]
        there = self.vertices[from_v]
        reversed_incoming = math.atan2(there[1] - here[1], there[0] - here[0])

        best = from_v
        best_diff = 2 * math.pi
        for angle, w in self.vertex_edges[to_v]:
            if w == from_v:
                continue
            diff = (reversed_incoming - angle) % (2 * math.pi)
            if 0 < diff < best_diff:
                best_diff = diff
                best = w
        return best

    def _trace_one_region(
        self,
        start_from: int,
        start_to: int,
        used: set[tuple[int, int]]
    ) -> list[int]:
        """Trace one face loop starting from the directed edge start_from -> start_to."""
        boundary: list[int] = []
        from_v, to_v = start_from, start_to

        max_steps = len(self.edges) * 2 + 10
        for _ in range(max_steps):
            if (from_v, to_v) in used:
                break
            used.add((from_v, to_v))
            boundary.append(from_v)

            next_v = self._next_clockwise(from_v, to_v)
            from_v, to_v = to_v, next_v
            if (from_v, to_v) == (start_from, start_to):
                break

        return boundary

    def _loop_points(self, loop: list[int]) -> list[Point]:
        return [self.vertices[i] for i in loop]

    # -------------------------------------------------------------------------
    # Face extraction
    # -------------------------------------------------------------------------

    def faces(self, debug: bool = False) -> list[Polygon]:
        """
        Compute the subdivision and return the valid faces as polygons.

        A valid face has positive area (CCW loop) and an interior test point
        inside the outer boundary and outside every hole. Islands (graph
        components not connected to the outer boundary, e.g. holes no cut
        touches) become holes of the face that contains them.
        """
        self.compute(debug=debug)

        main_components = {self.components[v] for v in self.outer_vertices}

        positive: list[list[Point]] = []
        islands: list[list[Point]] = []
        for loop in self.regions:
            cleaned = remove_spikes(loop)
            if len(cleaned) < 3:
                continue
            points = self._loop_points(cleaned)
            area = signed_area(points)
            if area > self.area_tolerance:
                positive.append(points)
            elif area < -self.area_tolerance and self.components[cleaned[0]] not in main_components:
                islands.append(points)

        # Attach each island to the smallest positive loop containing it
        face_islands: list[list[list[Point]]] = [[] for _ in positive]
        for island in islands:
            best = None
            for i, loop in enumerate(positive):
                if locate_point(island[0], loop, self.tolerance) != INSIDE:
                    continue
                if best is None or signed_area(loop) < signed_area(positive[best]):
                    best = i
            if best is not None:
                face_islands[best].append(island)

        return filter_valid_faces(
            list(zip(positive, face_islands)),
            self.outer,
            self.holes,
            self.tolerance
        )


# =============================================================================
# Face Filtering
# =============================================================================

def filter_valid_faces(
    candidates: list[tuple[list[Point], list[list[Point]]]],
    outer: Sequence[Point],
    holes: Sequence[Sequence[Point]],
    eps: float = EPS
) -> list[Polygon]:
    """
    Filter traced faces to those covering polygon material.

    Args:
        candidates: (face loop, island loops) pairs with CCW face loops
        outer: Original outer boundary
        holes: Original hole rings
        eps: Tolerance for point location and collinearity

    Returns:
        Valid faces as Polygon objects (outer CCW, holes CW).
    """
    valid = []
    for loop, islands in candidates:
        test_point = get_interior_test_point(loop, islands, eps)
        if locate_in_region(test_point, outer, holes, eps) != INSIDE:
            continue

        face_outer = Ring(tuple(drop_collinear_vertices(loop, eps))).ccw()
        face_holes = tuple(
            Ring(tuple(drop_collinear_vertices(island, eps))).cw() for island in islands
        )
        valid.append(Polygon(face_outer, face_holes))

    return valid


def split_by_segments(
    outer: Sequence[Point],
    holes: Sequence[Sequence[Point]],
    segments: Sequence[Edge],
    tolerance: Optional[float] = None
) -> list[Polygon]:
    """Convenience wrapper: faces of a polygon cut by a set of segments."""
    return PlanarSubdivision(outer, holes, segments, tolerance).faces()
