"""
Error taxonomy of the binding layer.

Use-after-dispose and null-result are detected locally; native failures are
passed through with the native payload preserved.
"""

from __future__ import annotations

from typing import Any, Sequence


class BindingError(Exception):
    """Base class for recoverable binding errors."""


class UseAfterDisposeError(BindingError):
    """A handle was used after its native resource was released."""

    def __init__(
        self,
        handle: Any,
        operation: str | None = None,
        parameter: str | None = None,
    ):
        self.handle = handle
        self.operation = operation
        self.parameter = parameter
        where = ""
        if operation is not None:
            where = f" (argument '{parameter}' of {operation})"
        super().__init__(f"{type(handle).__name__} has already been disposed{where}")


class NullResultError(BindingError):
    """A native call documented to return a handle returned a null pointer."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} returned a null native object")


class NativeError(BindingError):
    """
    Failure signalled by the native library.

    The original native exception is kept as `payload` (and `__cause__`).
    The dispatcher fills in `operation`, `symbol` and `arguments` before the
    error reaches the caller.
    """

    def __init__(self, message: str, payload: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.payload = payload
        self.operation: str | None = None
        self.symbol: str | None = None
        self.arguments: tuple[str, ...] = ()

    def attach(self, operation: str, symbol: str, arguments: Sequence[str]) -> NativeError:
        self.operation = operation
        self.symbol = symbol
        self.arguments = tuple(arguments)
        return self

    def __str__(self) -> str:
        if self.operation is None:
            return self.message
        args = ", ".join(self.arguments)
        return f"{self.operation}({args}) failed in {self.symbol}: {self.message}"


class UnknownOperationError(LookupError):
    """No entry point is registered under the requested name."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Unknown native operation: {operation!r}")
