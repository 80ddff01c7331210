"""
Declarative entry-point table.

One EntryPoint row per wrapped native operation: ordered parameters (kind,
default if optional) and a return kind. The dispatcher is the only
consumer; wrapping a new native operation means adding a row.
"""

from __future__ import annotations

import ctypes
import keyword
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator

from .errors import UnknownOperationError
from .marshal import Kind


class _Marker:
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


REQUIRED = _Marker("REQUIRED")
EMPTY = _Marker("EMPTY")  # native empty matrix, i.e. "no array"


def python_name(native_name: str) -> str:
    """srcPoints -> src_points; Python keywords get a trailing underscore."""
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", native_name).lower()
    if keyword.iskeyword(snake):
        snake += "_"
    return snake


# ============================================================================
# Rows
# ============================================================================


@dataclass(frozen=True)
class Param:
    native_name: str
    kind: Kind
    default: Any = REQUIRED
    name: str = ""

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", python_name(self.native_name))

    @property
    def optional(self) -> bool:
        return self.default is not REQUIRED

    def default_value(self) -> Any:
        return None if self.default is EMPTY else self.default


class Returns(Enum):
    """Return kinds. Structured returns come back through a trailing double[] buffer."""

    VOID = ("void", None, 0)
    INT = ("int", ctypes.c_int, 0)
    FLOAT = ("float", ctypes.c_float, 0)
    DOUBLE = ("double", ctypes.c_double, 0)
    BOOL = ("bool", ctypes.c_bool, 0)
    MAT = ("mat", ctypes.c_void_p, 0)
    SCALAR = ("scalar", None, 4)
    VEC3D = ("vec3d", None, 3)
    RECT = ("rect", None, 4)

    def __init__(self, label: str, restype: Any, buffer_size: int):
        self.label = label
        self.restype = restype
        self.buffer_size = buffer_size


@dataclass(frozen=True)
class EntryPoint:
    name: str
    params: tuple[Param, ...]
    returns: Returns = Returns.VOID
    module: str = "calib3d"
    class_name: str = "Calib3d"
    native_name: str = ""
    ordinal: int = 10
    doc: str = ""
    _by_name: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.native_name:
            object.__setattr__(self, "native_name", self.name)
        object.__setattr__(self, "_by_name", {p.name: p for p in self.params})
        if len(self._by_name) != len(self.params):
            raise ValueError(f"Duplicate parameter names in {self.name}")

    @property
    def symbol(self) -> str:
        """Exported native symbol: <module>_<Class>_<name>_<ordinal>, '_' escaped as '_1'."""
        escaped = self.native_name.replace("_", "_1")
        return f"{self.module}_{self.class_name}_{escaped}_{self.ordinal}"

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"

    @property
    def required(self) -> list[Param]:
        return [p for p in self.params if not p.optional]

    @property
    def optional(self) -> list[Param]:
        return [p for p in self.params if p.optional]

    def param(self, name: str) -> Param:
        return self._by_name[name]

    def kinds(self) -> list[Kind]:
        return [p.kind for p in self.params]

    def argtypes(self) -> list:
        """Flat ctypes argument list, including a structured-return buffer."""
        types = [t for p in self.params for t in p.kind.layout]
        if self.returns.buffer_size:
            types.append(ctypes.POINTER(ctypes.c_double))
        return types

    def layout(self) -> dict[str, slice]:
        """Slice of the flat argument list occupied by each parameter."""
        slices = {}
        offset = 0
        for p in self.params:
            slices[p.name] = slice(offset, offset + p.kind.width)
            offset += p.kind.width
        return slices

    def options(self, **values: Any) -> CallOptions:
        return CallOptions(self, values)

    def bind_arguments(
        self,
        args: tuple = (),
        kwargs: Mapping[str, Any] | None = None,
        options: CallOptions | None = None,
    ) -> dict[str, Any]:
        """
        Resolve one call into a value for every parameter, in order.

        Positional arguments bind in declaration order; keywords and an
        options record may set any parameter not already bound. Unset
        optional parameters get their documented defaults.

        Raises:
            TypeError: On too many arguments, unknown or duplicate names,
                or missing required parameters.
        """
        if len(args) > len(self.params):
            raise TypeError(
                f"{self.name}() takes at most {len(self.params)} arguments ({len(args)} given)"
            )
        values = {p.name: value for p, value in zip(self.params, args)}

        explicit: list[tuple[str, Any]] = []
        if options is not None:
            if options.entry is not self:
                raise TypeError(f"Options for {options.entry.name}() passed to {self.name}()")
            explicit.extend(options.explicit_items())
        explicit.extend((kwargs or {}).items())

        for name, value in explicit:
            if name not in self._by_name:
                raise TypeError(f"{self.name}() got an unexpected keyword argument '{name}'")
            if name in values:
                raise TypeError(f"{self.name}() got multiple values for argument '{name}'")
            values[name] = value

        missing = [p.name for p in self.required if p.name not in values]
        if missing:
            raise TypeError(f"{self.name}() missing required arguments: {', '.join(missing)}")

        return {
            p.name: values[p.name] if p.name in values else p.default_value()
            for p in self.params
        }


class CallOptions(Mapping):
    """
    Options record for one operation: every optional parameter with its
    default pre-populated, plus the set the caller supplied explicitly.
    """

    def __init__(self, entry: EntryPoint, values: Mapping[str, Any]):
        allowed = {p.name for p in entry.optional}
        unknown = set(values) - allowed
        if unknown:
            raise TypeError(f"{entry.name}() has no optional parameters {sorted(unknown)}")
        self.entry = entry
        self._explicit = dict(values)
        self._values = {p.name: p.default_value() for p in entry.optional}
        self._values.update(self._explicit)

    @property
    def explicit(self) -> frozenset[str]:
        return frozenset(self._explicit)

    def explicit_items(self) -> list[tuple[str, Any]]:
        return list(self._explicit.items())

    def replace(self, **values: Any) -> CallOptions:
        return CallOptions(self.entry, {**self._explicit, **values})

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v!r}" for k, v in self._explicit.items())
        return f"<{self.entry.name} options {items}>"


# ============================================================================
# Registry
# ============================================================================


class EntryPointTable(Mapping):
    """Rows keyed by qualified name (module.operation)."""

    def __init__(self, entries: Iterable[EntryPoint]):
        self._entries: dict[str, EntryPoint] = {}
        for entry in entries:
            if entry.qualified_name in self._entries:
                raise ValueError(f"Duplicate entry point {entry.qualified_name}")
            self._entries[entry.qualified_name] = entry

    def lookup(self, operation: str, module: str = "calib3d") -> EntryPoint:
        key = operation if "." in operation else f"{module}.{operation}"
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownOperationError(operation) from None

    def in_module(self, module: str) -> list[EntryPoint]:
        return [e for e in self._entries.values() if e.module == module]

    def by_symbol(self) -> dict[str, EntryPoint]:
        return {e.symbol: e for e in self._entries.values()}

    def __getitem__(self, key: str) -> EntryPoint:
        return self._entries[key]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
