"""
Enclosing namespaces for the wrapped operations.

Usage:
    from calibridge import open_bindings

    calib3d, core = open_bindings()
    H = calib3d.findHomography(src, dst)
    core.perspectiveTransform(points, out, H)

    opts = calib3d.findHomography.options(method=RANSAC)
    H = calib3d.findHomography(src, dst, options=opts)
"""

from __future__ import annotations

from typing import Any

from .config import BindingConfig, create_boundary
from .dispatch import Dispatcher
from .logger import setup_logging
from .table import CallOptions, EntryPoint


class Operation:
    """One table row bound to a dispatcher."""

    def __init__(self, dispatcher: Dispatcher, entry: EntryPoint):
        self._dispatcher = dispatcher
        self.entry = entry
        self.__name__ = entry.name
        self.__qualname__ = f"{entry.class_name}.{entry.name}"
        self.__doc__ = entry.doc or None

    def __call__(self, *args: Any, options: CallOptions | None = None, **kwargs: Any) -> Any:
        return self._dispatcher.forward(
            self.entry, self.entry.bind_arguments(args, kwargs, options)
        )

    def options(self, **values: Any) -> CallOptions:
        """Options record with every optional parameter at its default."""
        return self.entry.options(**values)

    @property
    def signature(self) -> str:
        params = ", ".join(
            p.name if not p.optional else f"{p.name}={p.default!r}" for p in self.entry.params
        )
        return f"{self.entry.name}({params}) -> {self.entry.returns.label}"

    def __repr__(self) -> str:
        return f"<Operation {self.entry.qualified_name}>"


class Namespace:
    """Attribute access to every operation of one native module."""

    module = ""

    def __init__(self, dispatcher: Dispatcher, module: str | None = None):
        self._dispatcher = dispatcher
        self._module = module or self.module
        self._operations = {
            entry.name: Operation(dispatcher, entry)
            for entry in dispatcher.entry_points.in_module(self._module)
        }

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def __getattr__(self, name: str) -> Operation:
        operations = self.__dict__.get("_operations", {})
        try:
            return operations[name]
        except KeyError:
            module = self.__dict__.get("_module", self.module)
            raise AttributeError(f"{module} has no operation {name!r}") from None

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self._operations))

    def __iter__(self):
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {len(self)} operations>"


class Calib3d(Namespace):
    module = "calib3d"


class Core(Namespace):
    module = "core"


def open_bindings(config: BindingConfig | None = None) -> tuple[Calib3d, Core]:
    """
    Build both namespaces over one dispatcher.

    With no config the process-wide default boundary is used; otherwise a
    boundary is created from `config` and its logging settings applied.
    """
    if config is None:
        dispatcher = Dispatcher()
    else:
        setup_logging(config.log_level.upper(), config.log_file)
        dispatcher = Dispatcher(create_boundary(config))
    return Calib3d(dispatcher), Core(dispatcher)
