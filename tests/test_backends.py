"""
Tests for the native boundary backends.

The shared-library backend runs against a fake library object whose
matrices live in real ctypes buffers.
"""

import ctypes

import cv2
import numpy as np
import pytest

from calibridge.backends.opencv import OpenCVBackend, keyword_name, resolve_function
from calibridge.backends.shared_library import (
    DEFAULT_DEBUG_SYMBOLS,
    DEFAULT_MAT_SYMBOLS,
    SharedLibraryBackend,
)
from calibridge.dispatch import Dispatcher
from calibridge.entries import ENTRY_POINTS
from calibridge.errors import NativeError, NullResultError
from calibridge.handle import Mat
from calibridge.marshal import INT, MAT_IN
from calibridge.table import EntryPoint, EntryPointTable, Param
from calibridge.types import CV_64F, depth_to_dtype, type_channels, type_depth


class FakeFunction:
    def __init__(self, impl):
        self.impl = impl
        self.argtypes = None
        self.restype = None
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)
        return self.impl(*args)


class FakeLibrary:
    """Stand-in for ctypes.CDLL: exports are attributes, missing ones raise AttributeError."""

    def __init__(self, mat_symbols=None):
        self.mats = {}
        self._next = 0x1000
        self.debug_mode = False
        self.log_func = None
        names = {**DEFAULT_MAT_SYMBOLS, **(mat_symbols or {})}
        self.exports = {
            names["new"]: FakeFunction(lambda: self._alloc(0, 0, 0)),
            names["create"]: FakeFunction(self._alloc),
            names["share"]: FakeFunction(self._share),
            names["release"]: FakeFunction(lambda a: self.mats.pop(a)),
            names["data"]: FakeFunction(lambda a: ctypes.addressof(self.mats[a][3])),
            names["rows"]: FakeFunction(lambda a: self.mats[a][0]),
            names["cols"]: FakeFunction(lambda a: self.mats[a][1]),
            names["type"]: FakeFunction(lambda a: self.mats[a][2]),
            names["step1"]: FakeFunction(lambda a: self.mats[a][4]),
            DEFAULT_DEBUG_SYMBOLS["debug_mode"]: FakeFunction(self._set_debug_mode),
            DEFAULT_DEBUG_SYMBOLS["debug_log"]: FakeFunction(self._set_log_func),
        }

    def _set_debug_mode(self, flag):
        self.debug_mode = flag

    def _set_log_func(self, func):
        self.log_func = func

    def log_error(self, message):
        """What the native side does when it catches a cv::Exception."""
        if self.debug_mode and self.log_func is not None:
            self.log_func(message.encode())

    def _alloc(self, rows, cols, mat_type, step1=None):
        itemsize = depth_to_dtype(type_depth(mat_type)).itemsize
        if step1 is None:
            step1 = cols * type_channels(mat_type)
        buffer = (ctypes.c_char * max(rows * step1 * itemsize, 1))()
        self._next += 0x10
        self.mats[self._next] = (rows, cols, mat_type, buffer, step1)
        return self._next

    def _share(self, address):
        self._next += 0x10
        self.mats[self._next] = self.mats[address]
        return self._next

    def export(self, name, impl):
        self.exports[name] = FakeFunction(impl)
        return self.exports[name]

    def __getattr__(self, name):
        try:
            return self.__dict__["exports"][name]
        except KeyError:
            raise AttributeError(name) from None


@pytest.fixture
def fake_library():
    return FakeLibrary()


@pytest.fixture
def shared_backend(fake_library):
    return SharedLibraryBackend(library=fake_library)


class TestSharedLibraryMatrices:
    @pytest.mark.parametrize("array", [
        np.arange(12, dtype=np.float64).reshape(3, 4),
        np.arange(24, dtype=np.float32).reshape(4, 3, 2),
        np.arange(5, dtype=np.int32),
        np.zeros((2, 2), dtype=np.uint8),
    ])
    def test_roundtrip(self, shared_backend, array):
        address = shared_backend.mat_from_array(array)
        result = shared_backend.mat_to_array(address)
        expected = array.reshape(-1, 1) if array.ndim == 1 else array
        np.testing.assert_array_equal(result, expected)
        assert result.dtype == array.dtype

    def test_empty_array_is_new_mat(self, shared_backend):
        address = shared_backend.mat_from_array(np.empty((0, 2)))
        assert shared_backend.mat_to_array(address).size == 0

    def test_unsupported_dtype(self, shared_backend):
        with pytest.raises(ValueError):
            shared_backend.mat_from_array(np.arange(3, dtype=np.int64))

    def test_share_and_release(self, shared_backend, fake_library):
        mat = Mat.from_array(np.eye(2), shared_backend)
        shared = mat.share()
        mat.dispose()
        np.testing.assert_array_equal(shared.to_array(), np.eye(2))
        shared.dispose()
        assert fake_library.mats == {}

    def test_mat_symbols_configurable(self):
        library = FakeLibrary(mat_symbols={"release": "core_Mat_n_1release"})
        backend = SharedLibraryBackend(
            library=library, mat_symbols={"release": "core_Mat_n_1release"}
        )
        backend.mat_release(backend.mat_new())
        assert library.mats == {}

    def test_padded_rows(self, shared_backend, fake_library):
        # 2x2 view into rows of 4 doubles, as a native ROI would be
        address = fake_library._alloc(2, 2, CV_64F, step1=4)
        values = np.arange(8, dtype=np.float64)
        ctypes.memmove(ctypes.addressof(fake_library.mats[address][3]), values.ctypes.data, values.nbytes)

        np.testing.assert_array_equal(shared_backend.mat_to_array(address), [[0, 1], [4, 5]])

    def test_missing_mat_symbol(self):
        library = FakeLibrary()
        del library.exports[DEFAULT_MAT_SYMBOLS["share"]]
        with pytest.raises(NativeError, match="core_Mat_n_1Mat__J"):
            SharedLibraryBackend(library=library)


class TestSharedLibraryBinding:
    def test_bind_declares_signatures(self, shared_backend, fake_library):
        entry = ENTRY_POINTS.lookup("calibrateCamera")
        function = fake_library.export(entry.symbol, lambda *args: 0.0)
        shared_backend.bind([entry])
        assert function.argtypes == entry.argtypes()
        assert function.restype is ctypes.c_double

    def test_missing_symbol_fails_at_bind(self, shared_backend):
        with pytest.raises(NativeError, match="calib3d_Calib3d_Rodrigues_10"):
            shared_backend.bind([ENTRY_POINTS.lookup("Rodrigues")])

    def test_dispatch_through_library(self, shared_backend, fake_library):
        entry = ENTRY_POINTS.lookup("Rodrigues")

        def rodrigues(src, dst, jacobian):
            fake_library.mats[dst] = fake_library.mats[src]

        fake_library.export(entry.symbol, rodrigues)
        dispatcher = Dispatcher(shared_backend, EntryPointTable([entry]))

        dst = Mat(boundary=shared_backend)
        dispatcher.call("Rodrigues", np.array([[0.1], [0.2], [0.3]]), dst)
        np.testing.assert_allclose(dst.to_array(), [[0.1], [0.2], [0.3]])

    def test_structured_return_buffer(self, shared_backend, fake_library):
        entry = ENTRY_POINTS.lookup("RQDecomp3x3")

        def rq(*args):
            for i, v in enumerate((10.0, 20.0, 30.0)):
                args[-1][i] = v

        fake_library.export(entry.symbol, rq)
        dispatcher = Dispatcher(shared_backend, EntryPointTable([entry]))
        mtx_r, mtx_q = Mat(boundary=shared_backend), Mat(boundary=shared_backend)
        assert dispatcher.call("RQDecomp3x3", np.eye(3), mtx_r, mtx_q) == (10.0, 20.0, 30.0)

    def test_null_result(self, shared_backend, fake_library):
        entry = ENTRY_POINTS.lookup("findHomography")
        fake_library.export(entry.symbol, lambda *args: None)
        dispatcher = Dispatcher(shared_backend, EntryPointTable([entry]))
        points = np.zeros((4, 2), dtype=np.float32)
        with pytest.raises(NullResultError):
            dispatcher.call("findHomography", points, points)

    def test_os_error_becomes_native_error(self, shared_backend, fake_library):
        entry = ENTRY_POINTS.lookup("Rodrigues")

        def crash(*args):
            raise OSError("exception: access violation reading 0x0")

        fake_library.export(entry.symbol, crash)
        dispatcher = Dispatcher(shared_backend, EntryPointTable([entry]))
        with pytest.raises(NativeError) as exc_info:
            dispatcher.call("Rodrigues", np.eye(3), Mat(boundary=shared_backend))
        assert isinstance(exc_info.value.payload, OSError)
        assert exc_info.value.symbol == entry.symbol

    def test_debug_log_installed(self, shared_backend, fake_library):
        assert fake_library.debug_mode is True
        assert fake_library.log_func is not None

    def test_logged_native_error_raised(self, shared_backend, fake_library):
        entry = ENTRY_POINTS.lookup("Rodrigues")
        message = "OpenCV(4.9.0) calibration.cpp:336: error: (-201:Incorrect size of input array)"

        def failing(*args):
            fake_library.log_error(message)

        fake_library.export(entry.symbol, failing)
        dispatcher = Dispatcher(shared_backend, EntryPointTable([entry]))
        dst = Mat(boundary=shared_backend)
        before = len(fake_library.mats)
        with pytest.raises(NativeError) as exc_info:
            dispatcher.call("Rodrigues", np.eye(2), dst)
        assert exc_info.value.message == message
        assert exc_info.value.operation == "calib3d.Rodrigues"
        assert len(fake_library.mats) == before

    def test_logged_error_does_not_leak_into_next_call(self, shared_backend, fake_library):
        entry = ENTRY_POINTS.lookup("Rodrigues")
        outcomes = iter([True, False])

        def sometimes_failing(*args):
            if next(outcomes):
                fake_library.log_error("error: (-215:Assertion failed)")

        fake_library.export(entry.symbol, sometimes_failing)
        dispatcher = Dispatcher(shared_backend, EntryPointTable([entry]))
        with pytest.raises(NativeError):
            dispatcher.call("Rodrigues", np.eye(3), Mat(boundary=shared_backend))

        fake_library.log_error("error: logged outside any call")
        assert dispatcher.call("Rodrigues", np.eye(3), Mat(boundary=shared_backend)) is None


class TestOpenCVBackend:
    def test_resolve_function(self):
        assert resolve_function("fisheye_calibrate") is cv2.fisheye.calibrate
        assert resolve_function("findHomography") is cv2.findHomography
        assert resolve_function("noSuchFunction") is None

    def test_keyword_name(self):
        assert keyword_name("from") == "from_"
        assert keyword_name("_3dImage") == "_3dImage"

    def test_every_entry_resolves(self):
        missing = [e.native_name for e in ENTRY_POINTS.values() if resolve_function(e.native_name) is None]
        assert missing == []

    def test_unavailable_function_fails_on_invoke(self):
        entry = EntryPoint("noSuchFunction", (Param("src", MAT_IN), Param("flags", INT, 0)))
        backend = OpenCVBackend()
        dispatcher = Dispatcher(backend, EntryPointTable([entry]))
        with pytest.raises(NativeError, match="not available"):
            dispatcher.call("noSuchFunction", np.eye(2))

    def test_unbound_symbol(self):
        with pytest.raises(NativeError):
            OpenCVBackend().invoke("calib3d_Calib3d_Rodrigues_10", [])

    def test_invalid_address(self):
        with pytest.raises(NativeError):
            OpenCVBackend().mat_to_array(0)

    def test_outputs_written_back(self):
        backend = OpenCVBackend()
        entry = ENTRY_POINTS.lookup("Rodrigues")
        backend.bind([entry])
        src = backend.mat_from_array(np.array([[0.0], [0.0], [np.pi / 2]]))
        dst = backend.mat_new()
        jacobian = backend.mat_new()
        assert backend.invoke(entry.symbol, [src, dst, jacobian]) is None
        np.testing.assert_allclose(
            backend.mat_to_array(dst), [[0, -1, 0], [1, 0, 0], [0, 0, 1]], atol=1e-12
        )
        assert backend.mat_to_array(jacobian).shape == (3, 9)

    def test_shared_header_sees_output(self):
        backend = OpenCVBackend()
        dispatcher = Dispatcher(backend, EntryPointTable([ENTRY_POINTS.lookup("Rodrigues")]))
        dst = Mat.from_array(np.zeros((3, 3)), backend)
        shared = dst.share()

        dispatcher.call("Rodrigues", np.array([[0.0], [0.0], [np.pi / 2]]), dst)
        np.testing.assert_allclose(
            shared.to_array(), [[0, -1, 0], [1, 0, 0], [0, 0, 1]], atol=1e-12
        )
