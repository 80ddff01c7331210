"""
In-process boundary backed by the opencv-python distribution.

Native matrices are numpy arrays kept in an address table; every entry
point resolves to its cv2 function once at bind time. Flat arguments are
regrouped per parameter, inputs are passed as keywords under the native
parameter names, and cv2's returned tuple (return value first, then every
output parameter in declaration order) is written back to the output
addresses.
"""

from __future__ import annotations

import itertools
import keyword
from types import ModuleType
from typing import Any, Callable, Iterable, Sequence

import cv2
import numpy as np

from .. import logger
from ..errors import NativeError
from ..handle import decode_addresses, encode_addresses
from ..marshal import Direction, Kind, split_flat
from ..native import NativeBoundary
from ..table import EntryPoint, Returns

log = logger.get(__name__)

_MAT_KINDS = {"mat", "mat_out", "mat_inout", "points2f", "points3f", "points2f_out"}
_MATS_KINDS = {"mats", "mats_out"}
_BUFFER_KINDS = {"double_out", "point_out", "rect_out"}


def resolve_function(native_name: str) -> Callable | None:
    """
    Find the cv2 callable for a native operation name.

    A prefix naming a cv2 submodule selects it: "fisheye_calibrate" is
    cv2.fisheye.calibrate.
    """
    prefix, _, rest = native_name.partition("_")
    submodule = getattr(cv2, prefix, None)
    if rest and isinstance(submodule, ModuleType):
        return getattr(submodule, rest, None)
    return getattr(cv2, native_name, None)


def keyword_name(native_name: str) -> str:
    """cv2 appends an underscore to parameter names that are Python keywords."""
    return native_name + "_" if keyword.iskeyword(native_name) else native_name


def _result_tuple(result: Any, expected: int) -> tuple:
    if expected == 0:
        return ()
    if expected == 1:
        return (result,)
    return tuple(result)


def _is_null(value: Any) -> bool:
    return value is None or np.asarray(value).size == 0


class OpenCVBackend(NativeBoundary):
    """
    NativeBoundary over cv2.

    Entry points missing from the installed cv2 build are logged at bind
    time and fail with NativeError when invoked.
    """

    def __init__(self):
        self._mats: dict[int, np.ndarray] = {}
        self._next_address = itertools.count(0x10000, 0x10)
        self._bound: dict[str, tuple[EntryPoint, Callable | None]] = {}

    # ------------------------------------------------------------------
    # Binding and invocation
    # ------------------------------------------------------------------

    def bind(self, entry_points: Iterable[EntryPoint]) -> None:
        missing = []
        for entry in entry_points:
            function = resolve_function(entry.native_name)
            if function is None:
                missing.append(entry.native_name)
            self._bound[entry.symbol] = (entry, function)
        if missing:
            log.warning(f"cv2 {cv2.__version__} lacks: {', '.join(sorted(set(missing)))}")
        log.debug(f"Resolved {len(self._bound) - len(missing)} cv2 functions")

    def invoke(self, symbol: str, args: Sequence[Any]) -> Any:
        try:
            entry, function = self._bound[symbol]
        except KeyError:
            raise NativeError(f"Symbol {symbol} is not bound") from None
        if function is None:
            raise NativeError(f"{entry.native_name} is not available in cv2 {cv2.__version__}")

        args = list(args)
        result_buffer = args.pop() if entry.returns.buffer_size else None
        groups = split_flat(entry.kinds(), args)

        kwargs = {}
        outputs = []
        for param, group in zip(entry.params, groups):
            if param.kind.direction is not Direction.OUT:
                kwargs[keyword_name(param.native_name)] = self._read_input(param.kind, group)
            if param.kind.is_output:
                outputs.append((param.kind, group))

        try:
            result = function(**kwargs)
        except cv2.error as exc:
            raise NativeError(str(exc).strip(), payload=exc) from exc

        has_retval = entry.returns is not Returns.VOID
        results = _result_tuple(result, int(has_retval) + len(outputs))
        retval = results[0] if has_retval else None
        for (kind, group), value in zip(outputs, results[int(has_retval):]):
            self._write_output(kind, group, value)

        return self._return_value(entry.returns, retval, result_buffer)

    def _read_input(self, kind: Kind, group: list) -> Any:
        name = kind.name
        if name in _MAT_KINDS:
            array = self.mat_to_array(group[0])
            return None if array.size == 0 else array
        if name in _MATS_KINDS:
            return [self.mat_to_array(a) for a in decode_addresses(self.mat_to_array(group[0]))]
        if name == "size":
            return tuple(int(round(v)) for v in group)
        if name == "rect":
            return tuple(int(v) for v in group)
        if name == "point":
            return tuple(float(v) for v in group)
        if name == "term_criteria":
            return int(group[0]), int(group[1]), float(group[2])
        if name == "bool":
            return bool(group[0])
        if name == "int":
            return int(group[0])
        return float(group[0])

    def _write_output(self, kind: Kind, group: list, value: Any) -> None:
        name = kind.name
        if name in _BUFFER_KINDS:
            buffer = group[0]
            for i, v in enumerate(np.ravel(np.asarray(value, dtype=np.float64))[: len(buffer)]):
                buffer[i] = v
        elif name in _MATS_KINDS:
            address = group[0]
            for old in decode_addresses(self._mats.get(address, np.empty(0, np.int32))):
                self.mat_release(old)
            elements = [self._store(np.asarray(v)) for v in (() if value is None else value)]
            self._mats[address] = encode_addresses(elements)
        else:
            self._assign(group[0], np.empty((0, 0)) if value is None else np.asarray(value))

    def _assign(self, address: int, value: np.ndarray) -> None:
        # Same geometry: fill in place so headers from mat_share() see the result
        current = self._mats.get(address)
        if current is not None and current.shape == value.shape and current.dtype == value.dtype:
            np.copyto(current, value)
        else:
            self._mats[address] = value

    def _return_value(self, returns: Returns, retval: Any, buffer: Any) -> Any:
        if returns is Returns.MAT:
            return 0 if _is_null(retval) else self._store(np.asarray(retval))
        if returns.buffer_size:
            for i, v in enumerate(np.ravel(np.asarray(retval, dtype=np.float64))[: returns.buffer_size]):
                buffer[i] = v
            return None
        return retval

    # ------------------------------------------------------------------
    # Matrix primitives
    # ------------------------------------------------------------------

    def _store(self, array: np.ndarray) -> int:
        address = next(self._next_address)
        self._mats[address] = array
        return address

    def mat_new(self) -> int:
        return self._store(np.empty((0, 0)))

    def mat_from_array(self, array: np.ndarray) -> int:
        return self._store(np.array(array, copy=True))

    def mat_to_array(self, address: int) -> np.ndarray:
        try:
            return self._mats[address].copy()
        except KeyError:
            raise NativeError(f"No native matrix at 0x{address or 0:x}") from None

    def mat_share(self, address: int) -> int:
        if address not in self._mats:
            raise NativeError(f"No native matrix at 0x{address or 0:x}")
        return self._store(self._mats[address])

    def mat_release(self, address: int) -> None:
        self._mats.pop(address, None)

    @property
    def allocated(self) -> int:
        """Number of live native matrices."""
        return len(self._mats)
