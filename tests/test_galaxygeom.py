"""Tests for the segment intersection predicate."""

import numpy as np
import pytest

from galaxygeom import Orientation, on_segment, orientation, segments_intersect


class TestOrientation:
    """Test orientation of ordered triplets."""

    def test_colinear(self):
        assert orientation((0, 0), (1, 1), (2, 2)) == Orientation.COLINEAR

    def test_clockwise(self):
        assert orientation((0, 0), (0, 1), (1, 1)) == Orientation.CLOCKWISE

    def test_counter_clockwise(self):
        assert orientation((0, 0), (1, 0), (1, 1)) == Orientation.COUNTER_CLOCKWISE

    def test_near_colinear_rounds_to_colinear(self):
        """Cross products below 0.5 in magnitude count as colinear."""
        assert orientation((0, 0), (10, 0), (20, 0.04)) == Orientation.COLINEAR

    def test_accepts_numpy_rows(self):
        pts = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        assert orientation(pts[0], pts[1], pts[2]) == Orientation.CLOCKWISE


class TestOnSegment:
    """Test the bounding-box check for colinear points."""

    def test_inside(self):
        assert on_segment((0, 0), (1, 0), (2, 0))

    def test_endpoint(self):
        assert on_segment((0, 0), (2, 0), (2, 0))

    def test_outside(self):
        assert not on_segment((0, 0), (3, 0), (2, 0))


class TestSegmentsIntersect:
    """Test the reference cases for segment intersection."""

    def test_crossing(self):
        assert segments_intersect((0, 0), (2, 2), (0, 2), (2, 0))

    def test_parallel_not_touching(self):
        assert not segments_intersect((0, 0), (1, 0), (0, 1), (1, 1))

    def test_colinear_overlapping(self):
        assert segments_intersect((0, 0), (2, 0), (1, 0), (3, 0))

    def test_touching_at_endpoint(self):
        assert segments_intersect((0, 0), (1, 1), (1, 1), (2, 0))

    def test_disjoint(self):
        assert not segments_intersect((0, 0), (1, 0), (5, 5), (6, 6))

    def test_colinear_disjoint(self):
        assert not segments_intersect((0, 0), (1, 0), (2, 0), (3, 0))

    @pytest.mark.parametrize("order", [(0, 1, 2, 3), (2, 3, 0, 1), (1, 0, 3, 2)])
    def test_symmetric(self, order):
        """Swapping segments or endpoint order does not change the answer."""
        pts = [(0, 0), (4, 4), (0, 4), (4, 0)]
        p1, q1, p2, q2 = (pts[i] for i in order)
        assert segments_intersect(p1, q1, p2, q2)
