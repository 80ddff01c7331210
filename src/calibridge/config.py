"""
Configuration loading/saving.

Pure functions operating on a frozen dataclass, stored as TOML. Nothing is
read from the environment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import rtoml

from .native import NativeBoundary

BACKENDS = ("opencv", "shared-library")


@dataclass(frozen=True)
class BindingConfig:
    """Which native boundary to use and how to reach it."""

    backend: str = "opencv"
    library_path: str | None = None
    library_name: str = "opencvforunity"
    mat_symbols: Mapping[str, str] = field(default_factory=dict, hash=False)
    log_level: str = "INFO"
    log_file: str | None = None

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend {self.backend!r}; expected one of {BACKENDS}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level {self.log_level!r}")
        object.__setattr__(self, "mat_symbols", MappingProxyType(dict(self.mat_symbols)))


def create_default_binding_config() -> BindingConfig:
    """In-process cv2 backend, INFO logging to the console."""
    return BindingConfig()


# ============================================================================
# TOML Configuration
# ============================================================================


def load_binding_config(path: Path) -> BindingConfig:
    """
    Load binding configuration from TOML file.

    Missing keys fall back to the defaults; the native library settings live
    under a [library] table.

    Args:
        path: Path to the TOML file

    Returns:
        BindingConfig dataclass
    """
    data = rtoml.load(Path(path))

    library = data.get("library", {})
    logging_data = data.get("logging", {})

    return BindingConfig(
        backend=data.get("backend", "opencv"),
        library_path=library.get("path") or None,
        library_name=library.get("name", "opencvforunity"),
        mat_symbols=dict(library.get("mat_symbols", {})),
        log_level=logging_data.get("level", "INFO"),
        log_file=logging_data.get("file") or None,
    )


def save_binding_config(config: BindingConfig, path: Path) -> None:
    """
    Save binding configuration to TOML file.

    Args:
        config: BindingConfig dataclass
        path: Path to save the file
    """
    library = {"name": config.library_name}
    if config.library_path:
        library["path"] = config.library_path
    if config.mat_symbols:
        library["mat_symbols"] = dict(config.mat_symbols)

    logging_data = {"level": config.log_level}
    if config.log_file:
        logging_data["file"] = config.log_file

    data = {
        "backend": config.backend,
        "library": library,
        "logging": logging_data,
    }

    # Ensure parent directory exists
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)


def create_boundary(config: BindingConfig) -> NativeBoundary:
    """Instantiate the native boundary a configuration selects."""
    if config.backend == "shared-library":
        from .backends.shared_library import SharedLibraryBackend

        return SharedLibraryBackend(
            library_path=config.library_path,
            library_name=config.library_name,
            mat_symbols=config.mat_symbols,
        )

    from .backends.opencv import OpenCVBackend

    return OpenCVBackend()
