"""
Shared configuration and error types
"""

from .config import Settings, settings
from .exceptions import (
    StitchError,
    TileCountMismatch,
    TileSizeMismatch,
    DimensionError,
    InvalidScanMode
)

__all__ = [
    "Settings",
    "settings",
    "StitchError",
    "TileCountMismatch",
    "TileSizeMismatch",
    "DimensionError",
    "InvalidScanMode"
]
