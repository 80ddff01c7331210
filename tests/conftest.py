"""
Pytest configuration and shared fixtures.
"""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pytest

from calibridge.backends.opencv import OpenCVBackend
from calibridge.calib3d import Calib3d, Core
from calibridge.dispatch import Dispatcher
from calibridge.handle import decode_addresses
from calibridge.marshal import split_flat
from calibridge.native import set_default_boundary
from calibridge.table import EntryPoint, Returns


@dataclass
class Invocation:
    """One recorded native call."""

    entry: EntryPoint
    args: list
    arrays: dict = field(default_factory=dict)

    @property
    def symbol(self) -> str:
        return self.entry.symbol

    def group(self, name: str) -> list:
        """Flat primitives forwarded for one parameter."""
        return self.args[self.entry.layout()[name]]


class RecordingBoundary(OpenCVBackend):
    """
    OpenCVBackend that records every invocation.

    Matrices passed to a call are snapshotted at invoke time. With
    `passthrough=False` the call never reaches cv2 and a canned result is
    returned instead (from `results`, keyed by symbol; callables receive the
    flat arguments).
    """

    def __init__(self, passthrough: bool = True):
        super().__init__()
        self.passthrough = passthrough
        self.calls: list[Invocation] = []
        self.results: dict = {}

    def invoke(self, symbol, args):
        entry, _ = self._bound[symbol]
        self.calls.append(Invocation(entry, list(args), self._snapshot(entry, args)))

        if symbol in self.results:
            result = self.results[symbol]
            return result(args) if callable(result) else result
        if not self.passthrough:
            return self._canned(entry.returns)
        return super().invoke(symbol, args)

    def _snapshot(self, entry, args):
        flat = list(args[:-1]) if entry.returns.buffer_size else list(args)
        arrays = {}
        for param, group in zip(entry.params, split_flat(entry.kinds(), flat)):
            if param.kind.name in ("mats", "mats_out"):
                arrays[param.name] = [
                    self.mat_to_array(a) for a in decode_addresses(self.mat_to_array(group[0]))
                ]
            elif param.kind.handles:
                arrays[param.name] = self.mat_to_array(group[0])
        return arrays

    def _canned(self, returns):
        if returns is Returns.MAT:
            return self.mat_new()
        if returns is Returns.BOOL:
            return True
        if returns is Returns.INT:
            return 1
        if returns in (Returns.DOUBLE, Returns.FLOAT):
            return 0.5
        return None

    def count(self, symbol: str) -> int:
        return sum(1 for call in self.calls if call.symbol == symbol)

    @property
    def last(self) -> Invocation:
        return self.calls[-1]


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after test."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def boundary():
    """Recording boundary that forwards to cv2; also the process default."""
    recording = RecordingBoundary()
    set_default_boundary(recording)
    yield recording
    set_default_boundary(None)


@pytest.fixture
def canned_boundary():
    """Recording boundary that never calls cv2."""
    recording = RecordingBoundary(passthrough=False)
    set_default_boundary(recording)
    yield recording
    set_default_boundary(None)


@pytest.fixture
def dispatcher(boundary):
    return Dispatcher(boundary)


@pytest.fixture
def calib3d(dispatcher):
    return Calib3d(dispatcher)


@pytest.fixture
def core(dispatcher):
    return Core(dispatcher)


@pytest.fixture
def canned_dispatcher(canned_boundary):
    return Dispatcher(canned_boundary)


@pytest.fixture
def sample_intrinsics_matrix():
    """Typical camera intrinsics matrix."""
    return np.array([
        [800.0, 0.0, 320.0],
        [0.0, 800.0, 240.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


@pytest.fixture
def sample_distortion():
    """Typical distortion coefficients (k1, k2, p1, p2, k3)."""
    return np.array([0.1, -0.25, 0.001, -0.001, 0.1], dtype=np.float64)


@pytest.fixture
def square_points():
    """Four non-collinear points of a 10x10 square."""
    return np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=np.float64)
