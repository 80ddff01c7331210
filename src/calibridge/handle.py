"""
Opaque native handles and the disposal guard.

A handle wraps a raw native address plus a disposed flag. Owned handles
release their native object on dispose() or, failing that, from a
finalizer. Borrowed handles never release.
"""

from __future__ import annotations

import weakref
from typing import Any

import numpy as np

from .errors import NullResultError, UseAfterDisposeError
from .native import NativeBoundary, get_default_boundary


# ============================================================================
# Address encoding for matrix-of-matrices buffers
# ============================================================================


def encode_addresses(addresses: list[int]) -> np.ndarray:
    """
    Pack 64-bit addresses into an (n, 1, 2) int32 array.

    Each pointer is stored as (high word, low word), the order the native
    converters read back with `(a[0] << 32) | (a[1] & 0xffffffff)`.
    """
    words = []
    for address in addresses:
        address = int(address)
        words += [(address >> 32) & 0xFFFFFFFF, address & 0xFFFFFFFF]
    return np.array(words, dtype=np.uint32).view(np.int32).reshape(-1, 1, 2)


def decode_addresses(array: np.ndarray) -> list[int]:
    """Inverse of encode_addresses."""
    if array.size == 0:
        return []
    words = np.ascontiguousarray(array, dtype=np.int32).reshape(-1, 2).view(np.uint32)
    return [(int(high) << 32) | int(low) for high, low in words]


# ============================================================================
# Handles
# ============================================================================


class NativeHandle:
    """
    Raw native address with disposal tracking.

    The address must not be dereferenced once `disposed` is set; the
    `address` property enforces that.
    """

    def __init__(self, address: int, boundary: NativeBoundary, owned: bool = True):
        self._address = int(address or 0)
        self._boundary = boundary
        self._owned = owned
        self._disposed = False
        self._finalizer = None
        if owned and self._address:
            self._finalizer = self._make_finalizer()

    def _make_finalizer(self) -> weakref.finalize:
        return weakref.finalize(self, self._boundary.mat_release, self._address)

    @property
    def address(self) -> int:
        self.throw_if_disposed()
        return self._address

    @property
    def boundary(self) -> NativeBoundary:
        return self._boundary

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def owned(self) -> bool:
        return self._owned

    def throw_if_disposed(self) -> None:
        if self._disposed:
            raise UseAfterDisposeError(self)

    def dispose(self) -> None:
        """Release the native object. Safe to call more than once."""
        if self._disposed:
            return
        try:
            if self._finalizer is not None:
                self._finalizer()
        finally:
            self._finalizer = None
            self._address = 0
            self._disposed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"0x{self._address:x}"
        return f"<{type(self).__name__} {state}>"


class Mat(NativeHandle):
    """Handle to a dense native matrix."""

    def __init__(
        self,
        address: int | None = None,
        boundary: NativeBoundary | None = None,
        owned: bool = True,
    ):
        boundary = boundary or get_default_boundary()
        if address is None:
            address = boundary.mat_new()
            owned = True
        super().__init__(address, boundary, owned)

    @classmethod
    def from_array(cls, array: Any, boundary: NativeBoundary | None = None) -> Mat:
        """Copy a numpy array (or anything array-like) into a new native matrix."""
        boundary = boundary or get_default_boundary()
        return cls(boundary.mat_from_array(np.asarray(array)), boundary)

    def to_array(self) -> np.ndarray:
        """Copy the native matrix into a new numpy array."""
        return self._boundary.mat_to_array(self.address)

    def empty(self) -> bool:
        return self.to_array().size == 0

    @property
    def shape(self) -> tuple[int, ...]:
        return self.to_array().shape

    def share(self) -> Mat:
        """New owned header over the same native data."""
        return Mat(self._boundary.mat_share(self.address), self._boundary)


def _release_flat(boundary: NativeBoundary, address: int, state: dict) -> None:
    if not state["taken"]:
        for element in decode_addresses(boundary.mat_to_array(address)):
            if element:
                boundary.mat_release(element)
    boundary.mat_release(address)


class FlatMats(Mat):
    """
    Matrix-of-matrices buffer: one native matrix holding element addresses.

    The buffer owns the element headers it lists until take_elements()
    moves them out.
    """

    def __init__(
        self,
        address: int | None = None,
        boundary: NativeBoundary | None = None,
        owned: bool = True,
    ):
        self._state = {"taken": False}
        super().__init__(address, boundary, owned)

    def _make_finalizer(self) -> weakref.finalize:
        return weakref.finalize(self, _release_flat, self._boundary, self._address, self._state)

    def element_addresses(self) -> list[int]:
        return decode_addresses(self.to_array())

    def take_elements(self) -> list[int]:
        """Transfer ownership of the element headers to the caller."""
        addresses = self.element_addresses()
        self._state["taken"] = True
        return addresses

    def __len__(self) -> int:
        return len(self.element_addresses())


# ============================================================================
# Guards
# ============================================================================


def check_not_disposed(
    value: Any,
    operation: str | None = None,
    parameter: str | None = None,
) -> None:
    """
    Raise UseAfterDisposeError if `value` (or any handle inside a list or
    tuple `value`) is disposed. None means "omitted" and passes.
    """
    if value is None:
        return
    if isinstance(value, NativeHandle):
        if value.disposed:
            raise UseAfterDisposeError(value, operation, parameter)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            check_not_disposed(item, operation, parameter)


def throw_if_null(address: Any, operation: str) -> int:
    """Return `address` as an int, or raise NullResultError if it is null."""
    if not address:
        raise NullResultError(operation)
    return int(address)
