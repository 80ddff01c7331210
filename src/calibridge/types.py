"""
Value types passed by value across the native boundary.

Plain slotted dataclasses - no invariants beyond field types. They are
mutable because output parameters of these kinds are populated in place.
Matrix type codes live here too since every backend needs them.
"""

from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import Sequence

import numpy as np


# ============================================================================
# Geometry
# ============================================================================


@dataclass(slots=True)
class Point:
    """2D point (x, y)."""

    x: float = 0.0
    y: float = 0.0

    def set(self, values: Sequence[float]) -> None:
        self.x = float(values[0]) if len(values) > 0 else 0.0
        self.y = float(values[1]) if len(values) > 1 else 0.0

    def to_tuple(self) -> tuple[float, float]:
        return astuple(self)


@dataclass(slots=True)
class Point3:
    """3D point (x, y, z)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def set(self, values: Sequence[float]) -> None:
        self.x = float(values[0]) if len(values) > 0 else 0.0
        self.y = float(values[1]) if len(values) > 1 else 0.0
        self.z = float(values[2]) if len(values) > 2 else 0.0

    def to_tuple(self) -> tuple[float, float, float]:
        return astuple(self)


@dataclass(slots=True)
class Size:
    """Size (width, height). Size() is the native "unspecified" size."""

    width: float = 0.0
    height: float = 0.0

    def set(self, values: Sequence[float]) -> None:
        self.width = float(values[0]) if len(values) > 0 else 0.0
        self.height = float(values[1]) if len(values) > 1 else 0.0

    def to_tuple(self) -> tuple[float, float]:
        return astuple(self)

    def empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(slots=True)
class Rect:
    """Integer rectangle (x, y, width, height)."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def set(self, values: Sequence[float]) -> None:
        padded = list(values[:4]) + [0] * (4 - min(len(values), 4))
        self.x, self.y, self.width, self.height = (int(v) for v in padded)

    def to_tuple(self) -> tuple[int, int, int, int]:
        return astuple(self)

    def area(self) -> int:
        return self.width * self.height

    def empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(slots=True)
class Scalar:
    """Up to four numeric channels."""

    v0: float = 0.0
    v1: float = 0.0
    v2: float = 0.0
    v3: float = 0.0

    def set(self, values: Sequence[float]) -> None:
        padded = list(values[:4]) + [0.0] * (4 - min(len(values), 4))
        self.v0, self.v1, self.v2, self.v3 = (float(v) for v in padded)

    def to_tuple(self) -> tuple[float, float, float, float]:
        return astuple(self)


@dataclass(slots=True)
class TermCriteria:
    """
    Termination criteria for iterative solvers.

    `type` is a combination of TERM_CRITERIA_COUNT and TERM_CRITERIA_EPS.
    """

    type: int = 0
    max_count: int = 0
    epsilon: float = 0.0

    def set(self, values: Sequence[float]) -> None:
        self.type = int(values[0]) if len(values) > 0 else 0
        self.max_count = int(values[1]) if len(values) > 1 else 0
        self.epsilon = float(values[2]) if len(values) > 2 else 0.0

    def to_tuple(self) -> tuple[int, int, float]:
        return astuple(self)


# ============================================================================
# Matrix element types (must match the native core module)
# ============================================================================

CV_8U = 0
CV_8S = 1
CV_16U = 2
CV_16S = 3
CV_32S = 4
CV_32F = 5
CV_64F = 6

CV_CN_SHIFT = 3
CV_DEPTH_MASK = (1 << CV_CN_SHIFT) - 1

_DEPTH_DTYPES = {
    CV_8U: np.dtype(np.uint8),
    CV_8S: np.dtype(np.int8),
    CV_16U: np.dtype(np.uint16),
    CV_16S: np.dtype(np.int16),
    CV_32S: np.dtype(np.int32),
    CV_32F: np.dtype(np.float32),
    CV_64F: np.dtype(np.float64),
}

_DTYPE_DEPTHS = {dtype: depth for depth, dtype in _DEPTH_DTYPES.items()}


def make_type(depth: int, channels: int = 1) -> int:
    """Combine a depth code and a channel count into a matrix type code."""
    if not 1 <= channels <= 512:
        raise ValueError(f"Invalid channel count: {channels}")
    return (depth & CV_DEPTH_MASK) + ((channels - 1) << CV_CN_SHIFT)


def type_depth(mat_type: int) -> int:
    return mat_type & CV_DEPTH_MASK


def type_channels(mat_type: int) -> int:
    return (mat_type >> CV_CN_SHIFT) + 1


def dtype_to_depth(dtype: np.dtype) -> int:
    """
    Map a numpy dtype to a native depth code.

    Raises:
        ValueError: If the dtype has no native counterpart (e.g. int64)
    """
    try:
        return _DTYPE_DEPTHS[np.dtype(dtype)]
    except KeyError:
        raise ValueError(f"Unsupported matrix element type: {np.dtype(dtype)}") from None


def depth_to_dtype(depth: int) -> np.dtype:
    return _DEPTH_DTYPES[depth & CV_DEPTH_MASK]
