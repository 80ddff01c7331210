"""
Marshaling between Python values and the native calling convention.

Each parameter kind knows its flat primitive layout and how to turn a
Python value into raw arguments. Temporaries created while marshaling one
call belong to that call's CallArena and are released when it exits.
"""

from __future__ import annotations

import ctypes
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

import numpy as np

from .handle import FlatMats, Mat, NativeHandle, encode_addresses
from .native import NativeBoundary, get_default_boundary
from .types import Point, Point3, Rect, Size, TermCriteria

Finisher = Callable[[], None]


# ============================================================================
# Primitive helpers for fixed-size numeric outputs
# ============================================================================


def double_buffer(count: int) -> ctypes.Array:
    """Zeroed double[count] output buffer."""
    return (ctypes.c_double * count)()


def read_doubles(buffer: ctypes.Array) -> list[float]:
    return [float(v) for v in buffer]


def _pair(value: Any, cls: type) -> tuple[float, float]:
    if isinstance(value, cls):
        value = value.to_tuple()
    first, second = value
    return float(first), float(second)


# ============================================================================
# Call arena
# ============================================================================


class CallArena:
    """
    Owns every temporary handle of one native call.

    Used as a context manager; temporaries are released on exit, whether
    the call succeeded or not.
    """

    def __init__(self, boundary: NativeBoundary):
        self.boundary = boundary
        self._handles: list[NativeHandle] = []

    def adopt(self, handle: NativeHandle) -> NativeHandle:
        self._handles.append(handle)
        return handle

    def empty_mat(self) -> Mat:
        return self.adopt(Mat(boundary=self.boundary))

    def empty_flat(self) -> FlatMats:
        return self.adopt(FlatMats(self.boundary.mat_from_array(encode_addresses([])), self.boundary))

    def mat_from_array(self, array: Any) -> Mat:
        return self.adopt(Mat.from_array(array, self.boundary))

    def release(self) -> None:
        handles, self._handles = self._handles, []
        for handle in reversed(handles):
            handle.dispose()

    def __len__(self) -> int:
        return len(self._handles)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False


# ============================================================================
# Parameter kinds
# ============================================================================


class Direction(Enum):
    IN = "in"
    OUT = "out"
    INOUT = "inout"


@dataclass(frozen=True)
class Kind:
    """
    How one logical parameter is laid out in the flat native argument list.

    `layout` lists the ctypes type of each flat slot; `handles` marks
    kinds whose value is forwarded as native handles (and so goes through
    the disposal guard). A list-of-matrices output only receives results,
    so its previous contents are never checked.
    """

    name: str
    layout: tuple = field(repr=False)
    direction: Direction = Direction.IN
    handles: bool = False
    channels: int = 0

    @property
    def width(self) -> int:
        return len(self.layout)

    @property
    def is_output(self) -> bool:
        return self.direction is not Direction.IN

    def marshal(self, value: Any, arena: CallArena) -> tuple[list, Finisher | None]:
        return _MARSHALERS[self.name](self, value, arena)

    def __str__(self) -> str:
        return self.name


_PTR = ctypes.c_void_p
_DOUBLES = ctypes.POINTER(ctypes.c_double)

INT = Kind("int", (ctypes.c_int,))
FLOAT = Kind("float", (ctypes.c_float,))
DOUBLE = Kind("double", (ctypes.c_double,))
BOOL = Kind("bool", (ctypes.c_bool,))
SIZE = Kind("size", (ctypes.c_double, ctypes.c_double))
POINT = Kind("point", (ctypes.c_double, ctypes.c_double))
RECT = Kind("rect", (ctypes.c_int,) * 4)
TERM_CRITERIA = Kind("term_criteria", (ctypes.c_int, ctypes.c_int, ctypes.c_double))

MAT_IN = Kind("mat", (_PTR,), Direction.IN, handles=True)
MAT_OUT = Kind("mat_out", (_PTR,), Direction.OUT, handles=True)
MAT_INOUT = Kind("mat_inout", (_PTR,), Direction.INOUT, handles=True)

POINTS2F = Kind("points2f", (_PTR,), Direction.IN, handles=True, channels=2)
POINTS3F = Kind("points3f", (_PTR,), Direction.IN, handles=True, channels=3)
POINTS2F_OUT = Kind("points2f_out", (_PTR,), Direction.OUT, handles=True, channels=2)

MATS_IN = Kind("mats", (_PTR,), Direction.IN, handles=True)
MATS_OUT = Kind("mats_out", (_PTR,), Direction.OUT)

DOUBLE_OUT = Kind("double_out", (_DOUBLES,), Direction.OUT)
POINT_OUT = Kind("point_out", (_DOUBLES,), Direction.OUT)
RECT_OUT = Kind("rect_out", (_DOUBLES,), Direction.OUT)

KINDS = {
    kind.name: kind
    for kind in (
        INT, FLOAT, DOUBLE, BOOL, SIZE, POINT, RECT, TERM_CRITERIA,
        MAT_IN, MAT_OUT, MAT_INOUT, POINTS2F, POINTS3F, POINTS2F_OUT,
        MATS_IN, MATS_OUT, DOUBLE_OUT, POINT_OUT, RECT_OUT,
    )
}


# ============================================================================
# Container conversion
# ============================================================================


def _point_rows(sequence: Any, channels: int) -> np.ndarray:
    """Normalise a point sequence to an (n, 1, channels) float32 array."""
    if sequence is None:
        return np.empty((0, 1, channels), dtype=np.float32)
    if isinstance(sequence, np.ndarray):
        return np.ascontiguousarray(sequence, dtype=np.float32).reshape(-1, 1, channels)

    rows = [
        item.to_tuple() if isinstance(item, (Point, Point3)) else tuple(item)
        for item in sequence
    ]
    if not rows:
        return np.empty((0, 1, channels), dtype=np.float32)
    return np.asarray(rows, dtype=np.float32).reshape(-1, 1, channels)


def _element_array(item: Any) -> np.ndarray:
    # Lists of Point/Point3 become point matrices; anything else is taken as-is
    if not isinstance(item, np.ndarray):
        items = list(item)
        if items and isinstance(items[0], Point3):
            return _point_rows(items, 3)
        if items and isinstance(items[0], Point):
            return _point_rows(items, 2)
        return np.asarray(items)
    return item


def to_native(
    sequence: Iterable | None,
    kind: Kind = POINTS2F,
    boundary: NativeBoundary | None = None,
) -> Mat:
    """
    Flatten a sequence into one native buffer.

    Point kinds give an (n, 1, channels) float32 matrix. Matrix kinds give a
    FlatMats whose elements are new headers over the sequence's matrices
    (arrays are copied in). None or an empty sequence gives an empty buffer.
    """
    boundary = boundary or get_default_boundary()

    if kind in (MATS_IN, MATS_OUT):
        addresses = []
        try:
            for item in () if sequence is None else sequence:
                if isinstance(item, Mat):
                    addresses.append(boundary.mat_share(item.address))
                else:
                    addresses.append(boundary.mat_from_array(_element_array(item)))
            flat = boundary.mat_from_array(encode_addresses(addresses))
        except Exception:
            for address in addresses:
                boundary.mat_release(address)
            raise
        return FlatMats(flat, boundary)

    if not kind.channels:
        raise TypeError(f"{kind} is not a sequence kind")
    return Mat.from_array(_point_rows(sequence, kind.channels), boundary)


def from_native(flat: Mat, out: list, kind: Kind = POINTS2F) -> list:
    """
    Read a flat buffer back into `out` (replacing its contents in order),
    then release the buffer.
    """
    try:
        if isinstance(flat, FlatMats):
            boundary = flat.boundary
            out[:] = [Mat(address, boundary) for address in flat.take_elements()]
        else:
            channels = kind.channels or 2
            rows = flat.to_array().reshape(-1, channels)
            point_cls = Point3 if channels == 3 else Point
            out[:] = [point_cls(*(float(v) for v in row)) for row in rows]
    finally:
        flat.dispose()
    return out


# ============================================================================
# Per-kind marshalers
# ============================================================================


def _scalar(convert):
    def marshal(kind, value, arena):
        return [convert(value)], None
    return marshal


def _marshal_size(kind, value, arena):
    return list(_pair(value, Size)), None


def _marshal_point(kind, value, arena):
    return list(_pair(value, Point)), None


def _marshal_rect(kind, value, arena):
    values = value.to_tuple() if isinstance(value, Rect) else tuple(value)
    return [int(v) for v in values], None


def _marshal_criteria(kind, value, arena):
    if isinstance(value, TermCriteria):
        value = value.to_tuple()
    type_, max_count, epsilon = value
    return [int(type_), int(max_count), float(epsilon)], None


def _marshal_mat(kind, value, arena):
    if value is None:
        return [arena.empty_mat().address], None
    if isinstance(value, Mat):
        return [value.address], None
    if kind.direction is Direction.IN:
        return [arena.mat_from_array(value).address], None
    raise TypeError(f"Expected a Mat for {kind} argument, got {type(value).__name__}")


def _marshal_points_in(kind, value, arena):
    if isinstance(value, Mat):
        return [value.address], None
    return [arena.adopt(to_native(value, kind, arena.boundary)).address], None


def _marshal_points_out(kind, value, arena):
    if isinstance(value, Mat):
        return [value.address], None
    scratch = arena.empty_mat()
    if value is None:
        return [scratch.address], None
    return [scratch.address], lambda: from_native(scratch, value, kind)


def _marshal_mats_in(kind, value, arena):
    if isinstance(value, FlatMats):
        return [value.address], None
    return [arena.adopt(to_native(value, kind, arena.boundary)).address], None


def _marshal_mats_out(kind, value, arena):
    scratch = arena.empty_flat()
    if value is None:
        return [scratch.address], None
    return [scratch.address], lambda: from_native(scratch, value, kind)


def _buffer_out(count, store):
    def marshal(kind, value, arena):
        buffer = double_buffer(count)
        if value is None:
            return [buffer], None
        return [buffer], lambda: store(value, read_doubles(buffer))
    return marshal


def _store_list(target: list, values: list[float]) -> None:
    target[:] = values


def _store_set(target: Any, values: list[float]) -> None:
    target.set(values)


_MARSHALERS = {
    "int": _scalar(int),
    "float": _scalar(float),
    "double": _scalar(float),
    "bool": _scalar(bool),
    "size": _marshal_size,
    "point": _marshal_point,
    "rect": _marshal_rect,
    "term_criteria": _marshal_criteria,
    "mat": _marshal_mat,
    "mat_out": _marshal_mat,
    "mat_inout": _marshal_mat,
    "points2f": _marshal_points_in,
    "points3f": _marshal_points_in,
    "points2f_out": _marshal_points_out,
    "mats": _marshal_mats_in,
    "mats_out": _marshal_mats_out,
    "double_out": _buffer_out(1, _store_list),
    "point_out": _buffer_out(2, _store_set),
    "rect_out": _buffer_out(4, _store_set),
}


def split_flat(kinds: Sequence[Kind], args: Sequence[Any]) -> list[list[Any]]:
    """Group flat native arguments back per parameter."""
    groups = []
    offset = 0
    for kind in kinds:
        groups.append(list(args[offset:offset + kind.width]))
        offset += kind.width
    if offset != len(args):
        raise ValueError(f"Expected {offset} flat arguments, got {len(args)}")
    return groups
