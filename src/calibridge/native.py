"""
The native call boundary.

Everything the binding layer needs from the native library goes through a
NativeBoundary: one synchronous call per operation plus a handful of
matrix-management primitives. Backends live in calibridge.backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Sequence

import numpy as np

if TYPE_CHECKING:
    from .table import EntryPoint


class NativeBoundary(ABC):
    """Abstract native boundary. Calls are blocking; no locking is done."""

    @abstractmethod
    def bind(self, entry_points: Iterable[EntryPoint]) -> None:
        """Resolve every entry point's native symbol. Called once at startup."""

    @abstractmethod
    def invoke(self, symbol: str, args: Sequence[Any]) -> Any:
        """
        Call one native symbol with flat primitive arguments.

        Returns the raw native return value (number, bool, address or None).
        Native failures are raised as NativeError.
        """

    @abstractmethod
    def mat_new(self) -> int:
        """Allocate an empty native matrix and return its address."""

    @abstractmethod
    def mat_from_array(self, array: np.ndarray) -> int:
        """Allocate a native matrix holding a copy of `array`."""

    @abstractmethod
    def mat_to_array(self, address: int) -> np.ndarray:
        """Copy a native matrix into a new numpy array."""

    @abstractmethod
    def mat_share(self, address: int) -> int:
        """Allocate a new matrix header sharing the data of `address`."""

    @abstractmethod
    def mat_release(self, address: int) -> None:
        """Release a native matrix header."""


# ============================================================================
# Default boundary
# ============================================================================

_default_boundary: NativeBoundary | None = None


def get_default_boundary() -> NativeBoundary:
    """
    Return the process-wide boundary, creating it from the default
    configuration on first use.
    """
    global _default_boundary
    if _default_boundary is None:
        from .config import create_boundary, create_default_binding_config

        _default_boundary = create_boundary(create_default_binding_config())
    return _default_boundary


def set_default_boundary(boundary: NativeBoundary | None) -> None:
    """Replace (or with None, reset) the process-wide boundary."""
    global _default_boundary
    _default_boundary = boundary
