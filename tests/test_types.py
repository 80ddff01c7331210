"""
Tests for calibridge.types value aggregates and matrix type codes.
"""

import numpy as np
import pytest

from calibridge.types import (
    CV_8U,
    CV_32F,
    CV_32S,
    CV_64F,
    Point,
    Point3,
    Rect,
    Scalar,
    Size,
    TermCriteria,
    depth_to_dtype,
    dtype_to_depth,
    make_type,
    type_channels,
    type_depth,
)


class TestPoint:
    def test_defaults(self):
        assert Point().to_tuple() == (0.0, 0.0)
        assert Point3().to_tuple() == (0.0, 0.0, 0.0)

    def test_set_fills_in_place(self):
        p = Point()
        p.set([1.5, -2.0])
        assert (p.x, p.y) == (1.5, -2.0)

    def test_set_short_sequence(self):
        p = Point3(1, 2, 3)
        p.set([4.0])
        assert p.to_tuple() == (4.0, 0.0, 0.0)

    def test_slots(self):
        with pytest.raises(AttributeError):
            Point().w = 1


class TestSize:
    def test_empty(self):
        assert Size().empty()
        assert not Size(640, 480).empty()

    def test_to_tuple(self):
        assert Size(640, 480).to_tuple() == (640, 480)


class TestRect:
    def test_area(self):
        assert Rect(1, 2, 10, 20).area() == 200

    def test_set_truncates_to_int(self):
        r = Rect()
        r.set([1.0, 2.0, 30.0, 40.0])
        assert r == Rect(1, 2, 30, 40)
        assert isinstance(r.width, int)

    def test_empty(self):
        assert Rect().empty()
        assert not Rect(0, 0, 1, 1).empty()


class TestScalarAndCriteria:
    def test_scalar_pads(self):
        s = Scalar()
        s.set([1.0, 2.0])
        assert s.to_tuple() == (1.0, 2.0, 0.0, 0.0)

    def test_term_criteria(self):
        tc = TermCriteria(3, 30, 1e-6)
        assert tc.to_tuple() == (3, 30, 1e-6)
        tc.set([1, 10, 0.5])
        assert (tc.type, tc.max_count, tc.epsilon) == (1, 10, 0.5)


class TestMatrixTypes:
    def test_make_type(self):
        assert make_type(CV_8U, 1) == 0
        assert make_type(CV_32F, 2) == 13
        assert make_type(CV_32S, 2) == 12
        assert make_type(CV_64F, 3) == 22

    def test_split_type(self):
        t = make_type(CV_32F, 3)
        assert type_depth(t) == CV_32F
        assert type_channels(t) == 3

    def test_invalid_channels(self):
        with pytest.raises(ValueError):
            make_type(CV_8U, 0)

    def test_dtype_mapping(self):
        assert dtype_to_depth(np.float64) == CV_64F
        assert dtype_to_depth(np.dtype(np.uint8)) == CV_8U
        assert depth_to_dtype(CV_32F) == np.float32

    def test_unsupported_dtype(self):
        with pytest.raises(ValueError, match="int64"):
            dtype_to_depth(np.int64)
