"""
Generic forwarding dispatch.

A single routine serves every row of the entry-point table: resolve the
row, bind arguments (documented defaults filled in), guard handles,
marshal into a per-call arena, invoke the native symbol and convert the
results back.
"""

from __future__ import annotations

from typing import Any, Mapping

from . import logger
from .entries import ENTRY_POINTS
from .errors import NativeError
from .handle import Mat, check_not_disposed, throw_if_null
from .marshal import CallArena, double_buffer, read_doubles
from .native import NativeBoundary, get_default_boundary
from .table import CallOptions, EntryPoint, EntryPointTable, Returns
from .types import Rect, Scalar

log = logger.get(__name__)


class Dispatcher:
    """
    Forwards logical operations to their native entry points.

    The table is bound to the boundary once, on construction. Calls are
    synchronous and share no state beyond the boundary itself.
    """

    def __init__(
        self,
        boundary: NativeBoundary | None = None,
        entry_points: EntryPointTable = ENTRY_POINTS,
    ):
        self.boundary = boundary or get_default_boundary()
        self.entry_points = entry_points
        self.boundary.bind(entry_points.values())
        log.debug(f"Bound {len(entry_points)} entry points to {type(self.boundary).__name__}")

    def entry(self, operation: str, module: str = "calib3d") -> EntryPoint:
        return self.entry_points.lookup(operation, module)

    def options(self, operation: str, module: str = "calib3d", **values: Any) -> CallOptions:
        return self.entry(operation, module).options(**values)

    def call(
        self,
        operation: str,
        *args: Any,
        options: CallOptions | None = None,
        module: str = "calib3d",
        **kwargs: Any,
    ) -> Any:
        """
        Invoke one operation.

        Args:
            operation: Operation name, optionally qualified ("core.perspectiveTransform")
            *args: Positional arguments in declaration order
            options: Options record built with `options()`
            module: Module used to resolve an unqualified operation name
            **kwargs: Arguments by (snake_case) name

        Returns:
            The converted native return value; None for void operations.

        Raises:
            UnknownOperationError: No row for `operation`
            TypeError: Arguments do not match the row
            UseAfterDisposeError: A handle argument was already disposed
            NullResultError: A handle-returning operation returned null
            NativeError: The native library signalled a failure
        """
        entry = self.entry_points.lookup(operation, module)
        return self.forward(entry, entry.bind_arguments(args, kwargs, options))

    def forward(self, entry: EntryPoint, values: Mapping[str, Any]) -> Any:
        """Forward a fully bound argument mapping to the row's native symbol."""
        for param in entry.params:
            if param.kind.handles:
                check_not_disposed(values[param.name], entry.qualified_name, param.name)

        with CallArena(self.boundary) as arena:
            flat: list[Any] = []
            finishers = []
            for param in entry.params:
                raw, finish = param.kind.marshal(values[param.name], arena)
                flat.extend(raw)
                if finish is not None:
                    finishers.append(finish)

            result_buffer = None
            if entry.returns.buffer_size:
                result_buffer = double_buffer(entry.returns.buffer_size)
                flat.append(result_buffer)

            log.debug(f"{entry.qualified_name} -> {entry.symbol} ({len(flat)} args)")
            try:
                raw_result = self.boundary.invoke(entry.symbol, flat)
            except NativeError as exc:
                exc.attach(entry.qualified_name, entry.symbol, list(values))
                log.debug(f"{entry.symbol} failed: {exc.message}")
                raise

            for finish in finishers:
                finish()

        return self._convert_result(entry, raw_result, result_buffer)

    def _convert_result(self, entry: EntryPoint, raw: Any, buffer: Any) -> Any:
        returns = entry.returns
        if returns is Returns.VOID:
            return None
        if returns is Returns.MAT:
            return Mat(throw_if_null(raw, entry.qualified_name), self.boundary)
        if returns is Returns.BOOL:
            return bool(raw)
        if returns is Returns.INT:
            return int(raw)
        if returns in (Returns.DOUBLE, Returns.FLOAT):
            return float(raw)

        values = read_doubles(buffer)
        if returns is Returns.SCALAR:
            return Scalar(*values)
        if returns is Returns.RECT:
            return Rect(*(int(v) for v in values))
        return tuple(values)
