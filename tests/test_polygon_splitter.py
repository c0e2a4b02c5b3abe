"""
Unit tests for polygon_splitter module.

Covers the fan shortcut, the general path for split points on the boundary
or outside, and the partition checks.
"""

import pytest
import math
import sys
import os

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cuts import build_cut_segments
from errors import DegeneratePolygon, InvalidPolygon
from geometry import BOUNDARY, INSIDE, OUTSIDE, Polygon, Ring, Segment
from polygon_splitter import (
    FAN,
    GENERAL,
    area_residual,
    edge_on_carriers,
    is_ring_aligned,
    order_faces,
    shared_start,
    split_polygon,
    verify_partition,
)
from regular_polygon import build_regular_polygon
from sampling import sample_interior_point


def split_at(ring, point):
    """Split a ring from a point using the standard cut bundle."""
    return split_polygon(ring, build_cut_segments(ring, point))


def split_checked(ring, point):
    """Split a ring from a point and check the result against its own cuts."""
    cuts = build_cut_segments(ring, point)
    result = split_polygon(ring, cuts)
    assert verify_partition(ring, result, cuts=cuts) == [], point
    return result


def edge_point(ring, i, t):
    """Point at parameter t along edge i of a ring."""
    a = ring[i]
    b = ring[(i + 1) % len(ring)]
    return (a[0] + t * (b[0] - a[0]), a[1] + t * (b[1] - a[1]))


class TestFanSplit:
    """Split point strictly inside a convex polygon."""

    @pytest.mark.parametrize("n_sides", range(3, 13))
    def test_n_triangles(self, n_sides):
        """An n-gon split from an interior point gives n triangles."""
        ring = build_regular_polygon(n_sides, 17, (0.3, -0.2), 2.0)
        point = sample_interior_point(Polygon(ring), rng=n_sides)
        result = split_checked(ring, point)

        assert result.method == FAN
        assert result.location == INSIDE
        assert len(result) == n_sides
        assert all(len(p.outer) == 3 for p in result)
        assert result.total_area == pytest.approx(ring.area, rel=1e-9)

    def test_square_from_center(self):
        """Square with circumradius 1 split at its center: 4 triangles of 0.5."""
        ring = build_regular_polygon(4, 45, (0, 0), 1)
        result = split_at(ring, (0, 0))

        assert len(result) == 4
        assert ring.area == pytest.approx(2.0)
        for area in result.areas:
            assert area == pytest.approx(0.5)

    def test_triangle_from_center(self):
        ring = build_regular_polygon(3, 0, (0, 0), 1)
        result = split_at(ring, (0, 0))

        assert len(result) == 3
        for area in result.areas:
            assert area == pytest.approx(math.sqrt(3) / 4)

    def test_hexagon_from_center(self, hexagon):
        """Hexagon of radius 2 splits into 6 equilateral triangles of side 2."""
        result = split_at(hexagon, (1, -1))

        assert len(result) == 6
        for area in result.areas:
            assert area == pytest.approx(math.sqrt(3))

    def test_bundle_order(self, hexagon):
        """Triangle i is (P, V_i, V_i+1)."""
        point = (1.2, -0.7)
        result = split_at(hexagon, point)

        for i, triangle in enumerate(result):
            expected = {point, hexagon[i], hexagon[(i + 1) % 6]}
            assert set(triangle.outer) == expected

    def test_triangles_are_ccw(self, hexagon):
        result = split_at(hexagon, (1.5, -1.5))
        assert all(p.outer.is_ccw for p in result)

    def test_fractional_sides(self):
        """3.5 sides gives 4 vertices and 4 triangles."""
        ring = build_regular_polygon(3.5, 0, (0, 0), 1)
        result = split_at(ring, (0, 0))
        assert len(result) == 4
        assert verify_partition(ring, result) == []

    def test_split_point_is_recorded(self, hexagon):
        result = split_at(hexagon, (1.1, -0.9))
        assert result.split_point == (1.1, -0.9)
        assert result.dropped_cuts == 0


class TestBoundarySplit:
    """Split point on the polygon boundary."""

    def test_split_at_vertex(self):
        """At a vertex of a square only the diagonal cut survives."""
        ring = build_regular_polygon(4, 45, (0, 0), 1)
        result = split_checked(ring, ring[3])

        assert result.method == GENERAL
        assert result.location == BOUNDARY
        assert len(result) == 2
        assert result.dropped_cuts == 3
        assert sorted(result.areas) == pytest.approx([1.0, 1.0])

    @pytest.mark.parametrize("n_sides", [3, 5, 6, 9])
    def test_split_at_vertex_gives_n_minus_2(self, n_sides):
        ring = build_regular_polygon(n_sides, 0, (0, 0), 1)
        result = split_checked(ring, ring[0])

        assert len(result) == n_sides - 2

    def test_split_at_edge_midpoint(self):
        """Midpoint of a square edge: two cuts run along the edge and are dropped."""
        ring = build_regular_polygon(4, 45, (0, 0), 1)
        result = split_checked(ring, edge_point(ring, 2, 0.5))

        assert result.location == BOUNDARY
        assert len(result) == 3
        assert result.dropped_cuts == 2
        assert sorted(result.areas) == pytest.approx([0.5, 0.5, 1.0])

    def test_general_order(self):
        """Faces are ordered counter-clockwise around P, starting toward the centroid."""
        ring = build_regular_polygon(4, 45, (0, 0), 1)
        result = split_at(ring, edge_point(ring, 2, 0.5))

        assert result.areas == pytest.approx([0.5, 1.0, 0.5])
        assert result[0].centroid[1] > 0
        assert result[2].centroid[1] < 0

    @pytest.mark.parametrize("n_sides", [4, 5, 7, 10])
    def test_split_on_edge_gives_n_minus_1(self, n_sides):
        ring = build_regular_polygon(n_sides, 0, (0, 0), 1)
        result = split_checked(ring, edge_point(ring, 1, 0.3))

        assert len(result) == n_sides - 1


class TestOutsideSplit:
    """Split point outside the polygon."""

    def test_far_outside_square(self):
        """Only the cuts crossing the square survive."""
        ring = build_regular_polygon(4, 45, (0, 0), 1)
        result = split_checked(ring, (10, 0))

        assert result.location == OUTSIDE
        assert result.method == GENERAL
        assert len(result) == 3
        assert result.dropped_cuts == 2
        assert result.total_area == pytest.approx(2.0, rel=1e-9)

    def test_far_outside_triangle(self):
        ring = build_regular_polygon(3, 0, (0, 0), 1)
        result = split_checked(ring, (100, 100))

        assert 1 <= len(result) <= 3

    def test_collinear_cuts(self):
        """A cut passing through a vertex on its way in splits at that vertex."""
        ring = build_regular_polygon(4, 0, (0, 0), 1)
        result = split_checked(ring, (0, 3))

        assert len(result) == 2
        assert result.dropped_cuts == 3
        assert sorted(result.areas) == pytest.approx([1.0, 1.0])

    def test_collinear_cuts_even_sides(self):
        """
        Hexagon with P on the extension of a long diagonal: the cuts to the
        two ends of that diagonal are collinear.
        """
        ring = build_regular_polygon(6, 0, (0, 0), 1)
        result = split_checked(ring, (0, 3))

        assert result.location == OUTSIDE
        assert len(result) == 4
        assert result.dropped_cuts == 3
        assert result.total_area == pytest.approx(ring.area, rel=1e-9)

    def test_random_outside_points(self):
        rng = np.random.default_rng(2024)
        for n_sides in (3, 4, 6, 8):
            ring = build_regular_polygon(n_sides, 11, (0, 0), 1)
            for _ in range(15):
                angle = rng.uniform(0, 2 * math.pi)
                distance = rng.uniform(1.2, 6.0)
                point = (distance * math.cos(angle), distance * math.sin(angle))
                split_checked(ring, point)


class TestSmallPolygons:
    """Tolerances follow the polygon's size, so tiny polygons split like large ones."""

    @pytest.mark.parametrize("radius", [1e-3, 1e-5, 1e-7])
    def test_inside(self, radius):
        ring = build_regular_polygon(6, 0, (0, 0), radius)
        result = split_checked(ring, (0.1 * radius, -0.2 * radius))

        assert result.method == FAN
        assert result.location == INSIDE
        assert len(result) == 6

    @pytest.mark.parametrize("radius", [1e-3, 1e-5, 1e-7])
    def test_sampled_point(self, radius):
        ring = build_regular_polygon(6, 0, (0, 0), radius)
        point = sample_interior_point(Polygon(ring), rng=17)
        result = split_checked(ring, point)

        assert result.method == FAN
        assert len(result) == 6

    @pytest.mark.parametrize("radius", [1e-3, 1e-5, 1e-7])
    def test_outside(self, radius):
        ring = build_regular_polygon(6, 0, (0, 0), radius)
        result = split_checked(ring, (5 * radius, 0.3 * radius))

        assert result.method == GENERAL
        assert result.location == OUTSIDE
        assert 1 <= len(result) < 6

    @pytest.mark.parametrize("radius", [1e-3, 1e-5, 1e-7])
    def test_vertex(self, radius):
        ring = build_regular_polygon(6, 0, (0, 0), radius)
        result = split_checked(ring, ring[0])

        assert result.location == BOUNDARY
        assert len(result) == 4
        assert result.dropped_cuts == 3

    def test_same_faces_at_every_scale(self):
        """Splitting a scaled copy gives the scaled faces."""
        unit = build_regular_polygon(7, 20, (0, 0), 1.0)
        tiny = build_regular_polygon(7, 20, (0, 0), 1e-6)
        big = split_at(unit, (3.0, 0.4))
        small = split_at(tiny, (3e-6, 4e-7))

        assert len(small) == len(big)
        assert small.dropped_cuts == big.dropped_cuts
        assert [a * 1e-12 for a in big.areas] == pytest.approx(small.areas, rel=1e-6)


class TestGeneralSplit:
    """Inputs that never qualify for the fan shortcut."""

    def test_concave_polygon(self):
        ring = Ring(((0, 0), (4, 0), (4, 2), (2, 2), (2, 4), (0, 4)))
        result = split_checked(ring, (1, 1))

        assert result.method == GENERAL
        assert len(result) == 6

    def test_polygon_with_hole(self, square_with_hole):
        cuts = build_cut_segments(square_with_hole.outer, (1, 1))
        result = split_polygon(square_with_hole, cuts)

        assert result.method == GENERAL
        assert result.total_area == pytest.approx(64.0, rel=1e-9)
        assert verify_partition(square_with_hole, result) == []

    def test_unaligned_bundle(self, unit_square):
        """Cuts in a different order than the ring skip the fan shortcut."""
        cuts = tuple(reversed(build_cut_segments(unit_square, (1, 2))))
        result = split_polygon(unit_square, cuts)

        assert result.method == GENERAL
        assert len(result) == 4
        assert result.total_area == pytest.approx(16.0)

    def test_cuts_with_different_starts(self, unit_square):
        cuts = [Segment((-1, 2), (5, 2)), Segment((2, -1), (2, 5))]
        result = split_polygon(unit_square, cuts)

        assert len(result) == 4
        assert result.split_point == (-1.0, 2.0)
        for area in result.areas:
            assert area == pytest.approx(4.0)

    def test_empty_bundle(self, unit_square):
        result = split_polygon(unit_square, [])

        assert len(result) == 1
        assert result[0].outer == unit_square
        assert result.split_point is None


class TestSplitErrors:
    """Invalid inputs."""

    def test_self_intersecting(self):
        bowtie = Ring(((0, 0), (2, 2), (2, 0), (0, 1)))
        with pytest.raises(InvalidPolygon):
            split_at(bowtie, (1, 0.5))

    def test_zero_area(self):
        flat = Ring(((0, 0), (1, 0), (2, 0)))
        with pytest.raises(DegeneratePolygon):
            split_at(flat, (1, 0))

    def test_errors_are_value_errors(self):
        flat = Ring(((0, 0), (1, 0), (2, 0)))
        with pytest.raises(ValueError):
            split_at(flat, (1, 0))


class TestHelpers:
    """Bundle inspection and ordering helpers."""

    def test_shared_start(self, unit_square):
        cuts = build_cut_segments(unit_square, (1, 1))
        assert shared_start(cuts) == (1.0, 1.0)
        assert shared_start([Segment((0, 0), (1, 1)), Segment((1, 0), (1, 1))]) is None
        assert shared_start([]) is None

    def test_is_ring_aligned(self, unit_square):
        cuts = build_cut_segments(unit_square, (1, 1))
        assert is_ring_aligned(unit_square, cuts, (1, 1))
        assert not is_ring_aligned(unit_square, cuts[1:], (1, 1))
        assert not is_ring_aligned(unit_square, tuple(reversed(cuts)), (1, 1))

    def test_order_faces_from_reference(self):
        """Angles run counter-clockwise from the reference direction, within (-pi, pi]."""
        right = Polygon(Ring(((1, 1), (2, 1), (2, 2))))
        left = Polygon(Ring(((-1, 1), (-2, 2), (-2, 1))))
        ordered = order_faces([left, right], (0, 0), (0, 1))
        assert ordered == [right, left]


class TestPartitionChecks:
    """Tests for area_residual and verify_partition."""

    def test_area_residual(self, hexagon):
        result = split_at(hexagon, (1, -1))
        assert area_residual(Polygon(hexagon), result) < 1e-12

    def test_detects_missing_piece(self, hexagon):
        result = split_at(hexagon, (1, -1))
        partial = type(result)(result.polygons[1:], result.split_point,
                               result.location, result.method)
        errors = verify_partition(hexagon, partial)
        assert len(errors) == 1
        assert "Area not conserved" in errors[0]

    def test_detects_face_outside(self, unit_square):
        result = split_polygon(unit_square, [])
        moved = Polygon(Ring(((10, 0), (14, 0), (14, 4), (10, 4))))
        shifted = type(result)((moved,), None, None, GENERAL)
        errors = verify_partition(unit_square, shifted)
        assert any("outside" in e for e in errors)

    def test_detects_edge_off_every_cut(self, unit_square):
        """A face edge that lies on neither the boundary nor a cut is reported."""
        cuts = [Segment((-1, 2), (5, 2))]
        result = split_polygon(unit_square, cuts)

        assert verify_partition(unit_square, result, cuts=cuts) == []
        errors = verify_partition(unit_square, result, cuts=[Segment((2, -1), (2, 5))])
        assert len(errors) == 2
        assert all("not on the boundary or a cut" in e for e in errors)

    def test_edge_on_carriers(self):
        carriers = [((0, 0), (2, 0)), ((2, 0), (4, 0)), ((0, 0), (0, 4))]
        assert edge_on_carriers((0, 0), (4, 0), carriers)
        assert edge_on_carriers((1, 0), (3, 0), carriers)
        assert edge_on_carriers((0, 3), (0, 1), carriers)
        assert not edge_on_carriers((0, 0), (5, 0), carriers)
        assert not edge_on_carriers((0, 0), (4, 4), carriers)

    def test_to_lists(self, unit_square):
        result = split_at(unit_square, (2, 2))
        rings = result.to_lists()
        assert len(rings) == 4
        assert len(rings[0]) == 1
        assert len(rings[0][0]) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
