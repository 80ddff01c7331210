# calibridge - Table-driven bindings to the native calib3d module

__version__ = "0.1.0"

# Value types
from calibridge.types import (
    Point,
    Point3,
    Size,
    Rect,
    Scalar,
    TermCriteria,
)

# Errors
from calibridge.errors import (
    BindingError,
    UseAfterDisposeError,
    NullResultError,
    NativeError,
    UnknownOperationError,
)

# Handles and marshaling
from calibridge.handle import (
    NativeHandle,
    Mat,
    FlatMats,
    check_not_disposed,
)
from calibridge.marshal import (
    CallArena,
    to_native,
    from_native,
)

# Native boundary
from calibridge.native import (
    NativeBoundary,
    get_default_boundary,
    set_default_boundary,
)

# Table and dispatch
from calibridge.table import (
    EMPTY,
    EntryPoint,
    Param,
    Returns,
    CallOptions,
)
from calibridge.entries import ENTRY_POINTS
from calibridge.dispatch import Dispatcher

# Namespaces
from calibridge.calib3d import (
    Calib3d,
    Core,
    open_bindings,
)

# Configuration
from calibridge.config import (
    BindingConfig,
    load_binding_config,
    save_binding_config,
    create_default_binding_config,
    create_boundary,
)

__all__ = [
    # Value types
    "Point",
    "Point3",
    "Size",
    "Rect",
    "Scalar",
    "TermCriteria",
    # Errors
    "BindingError",
    "UseAfterDisposeError",
    "NullResultError",
    "NativeError",
    "UnknownOperationError",
    # Handles and marshaling
    "NativeHandle",
    "Mat",
    "FlatMats",
    "check_not_disposed",
    "CallArena",
    "to_native",
    "from_native",
    # Native boundary
    "NativeBoundary",
    "get_default_boundary",
    "set_default_boundary",
    # Table and dispatch
    "EMPTY",
    "EntryPoint",
    "Param",
    "Returns",
    "CallOptions",
    "ENTRY_POINTS",
    "Dispatcher",
    # Namespaces
    "Calib3d",
    "Core",
    "open_bindings",
    # Configuration
    "BindingConfig",
    "load_binding_config",
    "save_binding_config",
    "create_default_binding_config",
    "create_boundary",
]
