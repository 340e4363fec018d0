"""
POD 1: Tile Source Module
Finds tile images, decodes them to 16-bit grayscale and downsamples them
"""

from .loader import TileSource, discover_paths, read_list_file, sort_paths, to_gray16, downsample
from .schemas import TileSourceConfig, TileRecord

__all__ = [
    "TileSource",
    "TileSourceConfig",
    "TileRecord",
    "discover_paths",
    "read_list_file",
    "sort_paths",
    "to_gray16",
    "downsample"
]
