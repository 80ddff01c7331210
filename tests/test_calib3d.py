"""
Tests for the Calib3d / Core namespaces.
"""

import pytest

from calibridge.calib3d import Calib3d, Core, Namespace, Operation
from calibridge.constants import RANSAC
from calibridge.entries import ENTRY_POINTS


class TestNamespace:
    def test_operations_per_module(self, canned_dispatcher):
        calib3d = Calib3d(canned_dispatcher)
        core = Core(canned_dispatcher)
        assert len(calib3d) == len(ENTRY_POINTS.in_module("calib3d"))
        assert len(core) == 1
        assert all(isinstance(op, Operation) for op in calib3d)

    def test_dir_lists_operations(self, canned_dispatcher):
        names = dir(Calib3d(canned_dispatcher))
        assert "calibrateCamera" in names
        assert "fisheye_undistortImage" in names

    def test_unknown_attribute(self, canned_dispatcher):
        with pytest.raises(AttributeError, match="calib3d has no operation"):
            Calib3d(canned_dispatcher).calibrateEverything

    def test_explicit_module(self, canned_dispatcher):
        namespace = Namespace(canned_dispatcher, "core")
        assert namespace.perspectiveTransform.entry.module == "core"

    def test_repr(self, canned_dispatcher):
        assert repr(Core(canned_dispatcher)) == "<Core 1 operations>"


class TestOperation:
    def test_metadata(self, canned_dispatcher):
        op = Calib3d(canned_dispatcher).findHomography
        assert op.__name__ == "findHomography"
        assert "homography" in op.__doc__.lower() or "perspective" in op.__doc__.lower()
        assert repr(op) == "<Operation calib3d.findHomography>"

    def test_signature(self, canned_dispatcher):
        signature = Calib3d(canned_dispatcher).findHomography.signature
        assert signature.startswith("findHomography(src_points, dst_points, method=0")
        assert signature.endswith("-> mat")

    def test_options(self, canned_dispatcher):
        opts = Calib3d(canned_dispatcher).findHomography.options(method=RANSAC)
        assert opts["method"] == RANSAC
        assert opts["confidence"] == 0.995
        assert opts["max_iters"] == 2000

    def test_call_forwards(self, canned_dispatcher, canned_boundary, square_points):
        calib3d = Calib3d(canned_dispatcher)
        calib3d.findHomography(square_points, square_points, method=RANSAC)
        assert canned_boundary.last.symbol == "calib3d_Calib3d_findHomography_10"
        assert canned_boundary.last.group("method") == [RANSAC]
