"""Native boundary implementations."""

from .opencv import OpenCVBackend
from .shared_library import SharedLibraryBackend

__all__ = ["OpenCVBackend", "SharedLibraryBackend"]
