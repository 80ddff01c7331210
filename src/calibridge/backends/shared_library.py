"""
ctypes boundary over the opencvforunity shared library.

Usage:
    from calibridge.backends.shared_library import SharedLibraryBackend
    from calibridge.dispatch import Dispatcher

    boundary = SharedLibraryBackend(library_path="/opt/lib/libopencvforunity.so")
    dispatcher = Dispatcher(boundary)
"""

from __future__ import annotations

import ctypes
import ctypes.util
import sys
import threading
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from .. import logger
from ..errors import NativeError
from ..native import NativeBoundary
from ..table import EntryPoint
from ..types import depth_to_dtype, dtype_to_depth, make_type, type_channels, type_depth

log = logger.get(__name__)

# ============================================================================
# Matrix exports of the native core module
# ============================================================================

DEFAULT_MAT_SYMBOLS = {
    "new": "core_Mat_n_1Mat__",
    "create": "core_Mat_n_1Mat__III",
    "share": "core_Mat_n_1Mat__J",
    "release": "core_Mat_n_1delete",
    "data": "core_Mat_n_1dataAddr",
    "rows": "core_Mat_n_1rows",
    "cols": "core_Mat_n_1cols",
    "type": "core_Mat_n_1type",
    "step1": "core_Mat_n_1step1__J",
}

_MAT_SIGNATURES = {
    "new": ([], ctypes.c_void_p),
    "create": ([ctypes.c_int, ctypes.c_int, ctypes.c_int], ctypes.c_void_p),
    "share": ([ctypes.c_void_p], ctypes.c_void_p),
    "release": ([ctypes.c_void_p], None),
    "data": ([ctypes.c_void_p], ctypes.c_void_p),
    "rows": ([ctypes.c_void_p], ctypes.c_int),
    "cols": ([ctypes.c_void_p], ctypes.c_int),
    "type": ([ctypes.c_void_p], ctypes.c_int),
    "step1": ([ctypes.c_void_p], ctypes.c_size_t),
}

# Native failures (cv::Exception) are reported through a log callback
DEFAULT_DEBUG_SYMBOLS = {
    "debug_mode": "OpenCVForUnity_SetDebugMode",
    "debug_log": "OpenCVForUnity_SetDebugLogFunc",
}

DebugLogFunc = ctypes.CFUNCTYPE(None, ctypes.c_char_p)


# ============================================================================
# Load Library
# ============================================================================


def _library_filename(name: str) -> str:
    if sys.platform == "darwin":
        return f"lib{name}.dylib"
    if sys.platform == "win32":
        return f"{name}.dll"
    return f"lib{name}.so"


def _find_library(library_name: str, library_path: str | Path | None = None) -> Path:
    """Find the native shared library."""
    if library_path is not None:
        path = Path(library_path)
        if path.exists():
            return path
        raise FileNotFoundError(f"Native library not found at {path}")

    # Look relative to this package
    module_dir = Path(__file__).parent.parent
    filename = _library_filename(library_name)

    candidates = [
        module_dir.parent.parent / "native" / filename,  # src/native/
        module_dir.parent / "native" / filename,
        module_dir / "native" / filename,
        Path("/usr/local/lib") / filename,
    ]

    for path in candidates:
        if path.exists():
            return path

    found = ctypes.util.find_library(library_name)
    if found:
        return Path(found)

    raise FileNotFoundError(
        f"Could not find {filename}. Searched: {[str(p) for p in candidates]}"
    )


def _array_geometry(array: np.ndarray) -> tuple[int, int, int]:
    """rows, cols, channels of an array laid out as a native matrix."""
    if array.ndim == 0:
        return 1, 1, 1
    if array.ndim == 1:
        return array.shape[0], 1, 1
    if array.ndim == 2:
        return array.shape[0], array.shape[1], 1
    if array.ndim == 3:
        return array.shape[0], array.shape[1], array.shape[2]
    raise ValueError(f"Cannot store a {array.ndim}-dimensional array in a native matrix")


class SharedLibraryBackend(NativeBoundary):
    """
    NativeBoundary over a loaded shared library.

    `library` may be any object exposing the exports as attributes (a
    ctypes.CDLL normally); when omitted the library is located and loaded.

    The library's debug mode is switched on at construction. Messages it
    logs while an entry point runs are raised from invoke() as NativeError.
    """

    def __init__(
        self,
        library_path: str | Path | None = None,
        library_name: str = "opencvforunity",
        mat_symbols: Mapping[str, str] | None = None,
        library: Any = None,
        debug_symbols: Mapping[str, str] | None = None,
    ):
        if library is None:
            path = _find_library(library_name, library_path)
            log.info(f"Loading native library {path}")
            library = ctypes.CDLL(str(path))
        self._lib = library
        self._functions: dict[str, Any] = {}
        self._mat = self._bind_mat_symbols({**DEFAULT_MAT_SYMBOLS, **(mat_symbols or {})})
        self._errors = threading.local()
        self._install_error_log({**DEFAULT_DEBUG_SYMBOLS, **(debug_symbols or {})})

    def _symbol(self, name: str) -> Any:
        try:
            return getattr(self._lib, name)
        except AttributeError:
            raise NativeError(f"Native library does not export {name}") from None

    def _bind_mat_symbols(self, names: Mapping[str, str]) -> dict[str, Any]:
        functions = {}
        for key, (argtypes, restype) in _MAT_SIGNATURES.items():
            function = self._symbol(names[key])
            function.argtypes = argtypes
            function.restype = restype
            functions[key] = function
        return functions

    def _install_error_log(self, names: Mapping[str, str]) -> None:
        set_mode = self._symbol(names["debug_mode"])
        set_mode.argtypes = [ctypes.c_bool]
        set_mode.restype = None
        set_log = self._symbol(names["debug_log"])
        set_log.argtypes = [DebugLogFunc]
        set_log.restype = None

        # Must stay referenced for as long as the library holds the pointer
        self._log_func = DebugLogFunc(self._record_error)
        set_mode(True)
        set_log(self._log_func)

    def _record_error(self, message: bytes | None) -> None:
        text = (message or b"").decode("utf-8", errors="replace").strip()
        log.debug(f"Native log: {text}")
        pending = getattr(self._errors, "pending", None)
        if pending is not None:
            pending.append(text)

    # ------------------------------------------------------------------
    # Binding and invocation
    # ------------------------------------------------------------------

    def bind(self, entry_points: Iterable[EntryPoint]) -> None:
        for entry in entry_points:
            function = self._symbol(entry.symbol)
            function.argtypes = entry.argtypes()
            function.restype = entry.returns.restype
            self._functions[entry.symbol] = function
        log.debug(f"Bound {len(self._functions)} native symbols")

    def invoke(self, symbol: str, args: Sequence[Any]) -> Any:
        try:
            function = self._functions[symbol]
        except KeyError:
            raise NativeError(f"Symbol {symbol} is not bound") from None
        self._errors.pending = []
        try:
            result = function(*args)
        except OSError as exc:
            raise NativeError(str(exc), payload=exc) from exc
        finally:
            pending, self._errors.pending = self._errors.pending, None
        if pending:
            raise NativeError("\n".join(pending))
        return result

    # ------------------------------------------------------------------
    # Matrix primitives
    # ------------------------------------------------------------------

    def mat_new(self) -> int:
        return self._mat["new"]() or 0

    def mat_from_array(self, array: np.ndarray) -> int:
        array = np.ascontiguousarray(array)
        if array.size == 0:
            return self.mat_new()

        rows, cols, channels = _array_geometry(array)
        mat_type = make_type(dtype_to_depth(array.dtype), channels)
        address = self._mat["create"](rows, cols, mat_type)
        if not address:
            raise NativeError(f"Failed to allocate a {rows}x{cols} native matrix")
        ctypes.memmove(self._mat["data"](address), array.ctypes.data, array.nbytes)
        return address

    def mat_to_array(self, address: int) -> np.ndarray:
        rows = self._mat["rows"](address)
        cols = self._mat["cols"](address)
        if rows * cols == 0:
            return np.empty((0, 0))

        mat_type = self._mat["type"](address)
        dtype = depth_to_dtype(type_depth(mat_type))
        channels = type_channels(mat_type)
        shape = (rows, cols, channels) if channels > 1 else (rows, cols)

        # Rows may be padded (ROIs); step1 counts single-channel elements per row
        row_bytes = self._mat["step1"](address) * dtype.itemsize
        width = cols * channels
        nbytes = row_bytes * (rows - 1) + width * dtype.itemsize
        buffer = (ctypes.c_char * nbytes).from_address(self._mat["data"](address))
        rows_view = np.ndarray(
            (rows, width), dtype=dtype, buffer=buffer, strides=(row_bytes, dtype.itemsize)
        )
        return rows_view.copy().reshape(shape)

    def mat_share(self, address: int) -> int:
        return self._mat["share"](address) or 0

    def mat_release(self, address: int) -> None:
        self._mat["release"](address)
